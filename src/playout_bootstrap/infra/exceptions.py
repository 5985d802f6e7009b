"""
Custom exceptions for playout-bootstrap operations.

Each exception carries the process exit code the CLI reports when the
error aborts a phase, so build logs and container status show which
phase failed.
"""


class PlayoutBootstrapError(Exception):
    """Base exception for all playout-bootstrap errors."""

    exit_code = 1


class ConfigurationError(PlayoutBootstrapError):
    """Raised when settings fail validation."""

    exit_code = 2


class ProvisioningError(PlayoutBootstrapError):
    """Raised when the build-time provisioning step fails."""

    exit_code = 3


class ProvisioningConfigError(ProvisioningError):
    """Raised when the release version or platform is not acceptable."""

    exit_code = 2


class ProvisioningFetchError(ProvisioningError):
    """Raised when the release archive is neither staged locally nor fetchable."""

    pass


class ProvisioningIntegrityError(ProvisioningError):
    """Raised when an archive does not match its expected checksum."""

    pass


class ProvisioningArchiveError(ProvisioningError):
    """Raised when the release archive cannot be extracted safely."""

    exit_code = 4


class ProvisioningAssetError(ProvisioningError):
    """Raised when an expected file is missing from the release archive."""

    exit_code = 4


class InitializationError(PlayoutBootstrapError):
    """Raised when the one-time server initialization fails."""

    exit_code = 5


class InitializationLockedError(InitializationError):
    """Raised when another bootstrap holds the initialization claim."""

    exit_code = 6
