"""Command-line interface for playout-bootstrap."""
