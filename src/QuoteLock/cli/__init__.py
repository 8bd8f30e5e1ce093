"""CLI package for QuoteLock command orchestration.

This package contains the modular CLI components, factored into separate
modules for better maintainability and testability.
"""

from __future__ import annotations

__all__ = ["CommandRunner", "main"]

from QuoteLock.cli.runner import CommandRunner
from QuoteLock.cli.ui import cli


def main() -> None:
    """Run QuoteLock CLI.

    Entry point referenced by console script in pyproject.toml.
    """
    cli()
