"""
Infrastructure layer - settings, logging, and error types.

These concerns are shared by the build-time provisioner and the run-time
orchestrator.
"""
