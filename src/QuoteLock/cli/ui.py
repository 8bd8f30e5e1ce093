"""Click CLI interface definitions.

Defines the command-line interface structure and routes commands
to their respective runners.
"""

from __future__ import annotations

from pathlib import Path

import click
from dotenv import load_dotenv

from QuoteLock.cli.commands import (
    CollectCommand,
    CollectionsCommand,
    ProvidersCommand,
    RefreshCommand,
    ShowCommand,
    StatusCommand,
    WatchCommand,
)
from QuoteLock.cli.runner import CommandRunner
from QuoteLock.config import load_config


@click.group(help="QuoteLock: fetch a quote of the day and keep it on display.")
@click.option(
    "--config",
    "config_path",
    type=click.Path(path_type=Path, dir_okay=False),
    default=Path("config/default.yml"),
    show_default=True,
    help="Path to YAML config file.",
)
@click.pass_context
def cli(ctx: click.Context, config_path: Path) -> None:
    """CLI entry group.

    Loads environment variables from .env file before processing config.

    Args:
        ctx: Click context.
        config_path: Path to YAML config file.
    """
    load_dotenv()

    cfg = load_config(config_path)
    ctx.obj = cfg


@cli.command("refresh")
@click.option("--force", is_flag=True, help="Ignore the provider's minimum refresh interval.")
@click.pass_context
def refresh_cmd(ctx: click.Context, force: bool) -> None:
    """Fetch a new quote from the configured provider."""
    CommandRunner(ctx.obj).run(ctx.command.name, lambda c: RefreshCommand(c, force=force))


@cli.command("show")
@click.pass_context
def show_cmd(ctx: click.Context) -> None:
    """Print the stored quote (or the placeholder prompt)."""
    CommandRunner(ctx.obj).run(ctx.command.name, ShowCommand)


@cli.command("collect")
@click.pass_context
def collect_cmd(ctx: click.Context) -> None:
    """Collect the quote currently displayed."""
    CommandRunner(ctx.obj).run(ctx.command.name, lambda c: CollectCommand(c, collected=True))


@cli.command("uncollect")
@click.pass_context
def uncollect_cmd(ctx: click.Context) -> None:
    """Remove the quote currently displayed from the collection."""
    CommandRunner(ctx.obj).run(ctx.command.name, lambda c: CollectCommand(c, collected=False))


@cli.command("collections")
@click.pass_context
def collections_cmd(ctx: click.Context) -> None:
    """List collected quotes."""
    CommandRunner(ctx.obj).run(ctx.command.name, CollectionsCommand)


@cli.command("providers")
@click.pass_context
def providers_cmd(ctx: click.Context) -> None:
    """List available quote providers."""
    CommandRunner(ctx.obj).run(ctx.command.name, ProvidersCommand)


@cli.command("status")
@click.pass_context
def status_cmd(ctx: click.Context) -> None:
    """Show provider, last update and collection state."""
    CommandRunner(ctx.obj).run(ctx.command.name, StatusCommand)


@cli.command("watch")
@click.option(
    "--duration",
    type=click.FloatRange(min=0, min_open=True),
    default=None,
    help="Stop after this many seconds instead of waiting for Ctrl+C.",
)
@click.pass_context
def watch_cmd(ctx: click.Context, duration: float | None) -> None:
    """Refresh on a schedule and re-render whenever the store changes."""
    CommandRunner(ctx.obj).run(ctx.command.name, lambda c: WatchCommand(c, duration=duration))
