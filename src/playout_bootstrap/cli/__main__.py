#!/usr/bin/env python3
"""
CLI entry point for playout_bootstrap.cli module.

This allows running: python -m playout_bootstrap.cli
"""

from .main import cli

if __name__ == "__main__":
    cli()
