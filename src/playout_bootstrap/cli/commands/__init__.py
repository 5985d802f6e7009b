"""
CLI command groups.

- release: build-time provisioning of the pinned release
- server: first-run initialization and server start
- config: effective settings inspection
"""
