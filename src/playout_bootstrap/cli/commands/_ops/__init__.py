"""
Shared helpers for CLI commands.

Modules:
- output: settings loading, JSON/human formatting, error-to-exit-code mapping
"""

from .output import emit, exit_with_error, format_json_output, load_settings

__all__ = [
    "emit",
    "exit_with_error",
    "format_json_output",
    "load_settings",
]
