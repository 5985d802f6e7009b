"""
playout-bootstrap: container bootstrap for a media-broadcast playout server.

Provisions the pinned server release at image build time and, on every
container start, initializes persistent state once before starting the
server in the foreground.
"""

__version__ = "0.1.0"
