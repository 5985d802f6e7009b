"""Tests for the state marker and its exclusive initialization claim."""

import pytest

from playout_bootstrap.infra.exceptions import InitializationError, InitializationLockedError
from playout_bootstrap.runtime.state_marker import StateMarker


def test_marker_absent_then_present(tmp_path):
    marker = StateMarker(tmp_path / "db" / "ffplayout.db")
    assert not marker.exists()

    marker.path.parent.mkdir()
    marker.path.write_bytes(b"")
    assert marker.exists()


def test_claim_is_exclusive(tmp_path):
    first = StateMarker(tmp_path / "ffplayout.db")
    second = StateMarker(tmp_path / "ffplayout.db")

    first.claim()
    with pytest.raises(InitializationLockedError, match="init-lock"):
        second.claim()

    first.release()
    second.claim()
    assert second.claimed
    second.release()


def test_claim_creates_db_dir_and_release_removes_lock(tmp_path):
    marker = StateMarker(tmp_path / "db" / "ffplayout.db")

    with marker.claimed_for_init():
        assert marker.lock_path.exists()
        assert "pid=" in marker.lock_path.read_text()

    assert not marker.lock_path.exists()
    assert not marker.claimed


def test_claim_released_when_block_raises(tmp_path):
    marker = StateMarker(tmp_path / "ffplayout.db")

    with pytest.raises(RuntimeError):
        with marker.claimed_for_init():
            raise RuntimeError("init blew up")

    assert not marker.lock_path.exists()


def test_release_without_claim_leaves_foreign_lock(tmp_path):
    owner = StateMarker(tmp_path / "ffplayout.db")
    owner.claim()

    StateMarker(tmp_path / "ffplayout.db").release()

    assert owner.lock_path.exists()


def test_finalize_keeps_server_created_marker(tmp_path):
    marker = StateMarker(tmp_path / "ffplayout.db")
    marker.path.write_bytes(b"SQLite format 3\x00")

    assert marker.finalize() is False
    assert marker.path.read_bytes() == b"SQLite format 3\x00"


def test_finalize_writes_missing_marker(tmp_path):
    marker = StateMarker(tmp_path / "ffplayout.db")

    assert marker.finalize() is True
    assert marker.exists()


def test_discard_removes_partial_marker(tmp_path):
    marker = StateMarker(tmp_path / "ffplayout.db")
    marker.path.write_bytes(b"partial")

    marker.discard()

    assert not marker.exists()


def test_marker_with_leftover_lock_is_not_initialized(tmp_path):
    marker = StateMarker(tmp_path / "ffplayout.db")
    marker.path.write_bytes(b"SQLite format 3\x00")
    assert marker.initialized()

    marker.lock_path.write_text("pid=1\n")

    assert marker.locked()
    assert not marker.initialized()
    with pytest.raises(InitializationLockedError, match="remove the lock file and"):
        marker.claim()


def test_claim_under_a_regular_file_is_initialization_error(tmp_path):
    blocker = tmp_path / "notadir"
    blocker.write_text("")
    marker = StateMarker(blocker / "db" / "ffplayout.db")

    with pytest.raises(InitializationError, match="not usable") as excinfo:
        marker.claim()

    assert not isinstance(excinfo.value, InitializationLockedError)
    assert not marker.claimed
