"""
Logging configuration for playout-bootstrap.

This module configures structlog for JSON logging. Bootstrap output ends
up in container build logs and `docker logs`, so every event is a single
line and credentials from the initialization profile are redacted.
"""

import logging
import os
import re
import sys
from typing import Any

import structlog

from .settings import get_settings


def redact_secrets(_, __, event_dict: dict[str, Any]) -> dict[str, Any]:
    """Redact sensitive information from log events."""
    # List of keys that contain secrets
    secret_keys = [
        "password",
        "passwd",
        "secret",
        "token",
        "api_key",
    ]

    # Patterns to redact in string values
    secret_patterns = [
        (r"(://)[^:/\s]+:[^@\s]+@", r"\1***:***@"),  # URLs with credentials
        (r"(password=)[^&\s]+", r"\1***"),  # Password parameters
    ]

    def redact_value(value: Any) -> Any:
        if isinstance(value, str):
            for pattern, replacement in secret_patterns:
                value = re.sub(pattern, replacement, value)
            return value
        elif isinstance(value, dict):
            return {k: redact_value(v) for k, v in value.items()}
        elif isinstance(value, list):
            return [redact_value(item) for item in value]
        return value

    # Redact based on key names
    for key in list(event_dict.keys()):
        if any(secret in key.lower() for secret in secret_keys):
            event_dict[key] = "***REDACTED***"
        else:
            event_dict[key] = redact_value(event_dict[key])

    return event_dict


def redact_argv(argv: list[str]) -> list[str]:
    """Mask the value following any password flag in a command line."""
    masked: list[str] = []
    hide_next = False
    for arg in argv:
        if hide_next:
            masked.append("***")
            hide_next = False
            continue
        masked.append(arg)
        if arg == "-p" or (arg.startswith("--") and "password" in arg):
            hide_next = True
    return masked


def configure_logging(level: str | None = None, fmt: str | None = None) -> None:
    """Configure structlog on top of stdlib logging, writing to stderr."""
    if level is None or fmt is None:
        settings = get_settings()
        level = level or settings.log_level
        fmt = fmt or settings.log_format
    level = level.upper()

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stderr,
        level=getattr(logging, level, logging.INFO),
        force=True,
    )

    renderer: Any
    if fmt == "console":
        renderer = structlog.dev.ConsoleRenderer(colors=False)
    else:
        renderer = structlog.processors.JSONRenderer()

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            redact_secrets,  # Redact secrets before rendering
            renderer,
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> structlog.BoundLogger:
    """Get a configured logger with service context."""
    logger = structlog.get_logger(name)
    return logger.bind(
        service="playout-bootstrap",
        env=os.getenv("ENV", "prod"),
    )
