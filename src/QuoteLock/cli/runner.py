"""Command runner for coordinating CLI execution.

Manages component lifecycle, resource cleanup, logging configuration,
and error handling for command execution.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

import click

from QuoteLock.cli.factories import AppComponents, ComponentFactory
from QuoteLock.config import AppConfig
from QuoteLock.utils.log import configure_logging, log

CommandBuilder = Callable[[AppComponents], Any]


class CommandRunner:
    """Orchestrates command execution with proper resource management.

    Handles logging configuration, component creation, cleanup and error
    handling for CLI commands.
    """

    def __init__(self, config: AppConfig) -> None:
        """Initialize command runner.

        Args:
            config: Application configuration.
        """
        self.config = config

    def run(self, action: str, build_command: CommandBuilder) -> Any:
        """Execute one command with full resource management.

        Args:
            action: The CLI command name (e.g., 'refresh').
            build_command: Callable building the command from the components.

        Returns:
            Whatever the command's ``execute`` returns.

        Raises:
            click.Abort: When the command fails.
        """
        configure_logging(
            level=self.config.runtime.level,
            action=action,
            provider=self.config.provider.name,
            log_to_file=self.config.runtime.to_file,
            log_dir=self.config.runtime.dir,
        )
        try:
            components = ComponentFactory.create_components(self.config)
        except Exception as e:  # noqa: BLE001 - cli boundary
            log.error("Startup failed: %s", e)
            raise click.Abort from e

        try:
            command = build_command(components)
            return command.execute()
        except Exception as e:  # noqa: BLE001 - cli boundary
            log.error("%s failed: %s", action.capitalize(), e)
            raise click.Abort from e
        finally:
            components.close()
