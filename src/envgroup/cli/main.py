"""CLI entry point for envgroup.

Lists the environment groups stored in the settings document, shows the
active one and switches between them.
"""

import asyncio
from typing import Optional

import typer
from rich.console import Console
from rich.markup import escape

from .. import __version__
from ..core.config import ConfigError, ConfigManager
from ..groups import EnvGroupManager, NotReady
from ..runtime.logging import bootstrap_logging
from ..store import JsonSettingsStore

app = typer.Typer(
    name="envgroup",
    help="Switch between groups of environment variables",
    no_args_is_help=True,
    add_completion=False,
)

console = Console()
err_console = Console(stderr=True)

SettingsOption = typer.Option(
    None,
    "--settings",
    "-s",
    help="Settings document path (default: ~/.claude/settings.json)",
)
LogLevelOption = typer.Option(None, "--log-level", help="Log level: debug, info, warn, error")


def _plural(count: int, word: str) -> str:
    return f"{count} {word}" if count == 1 else f"{count} {word}s"


def version_callback(value: bool):
    """Print version and exit."""
    if value:
        console.print(f"envgroup {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(
        None,
        "--version",
        "-v",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit",
    ),
):
    """envgroup - switch between groups of environment variables."""


async def _open(settings: Optional[str]) -> EnvGroupManager:
    path = settings or await ConfigManager.settings_path()
    manager = EnvGroupManager(JsonSettingsStore(path))
    result = await manager.initialize()
    if isinstance(result, NotReady):
        err_console.print(f"[red]Error:[/red] cannot load {escape(str(path))}: {escape(str(result.error))}")
        raise typer.Exit(1)
    return manager


def _setup(log_level: Optional[str]) -> None:
    try:
        bootstrap_logging(mode="cli", level=log_level)
    except (ValueError, ConfigError) as e:
        err_console.print(f"[red]Error:[/red] {escape(str(e))}")
        raise typer.Exit(1)


@app.command("list")
def list_groups(
    settings: Optional[str] = SettingsOption,
    log_level: Optional[str] = LogLevelOption,
):
    """List environment groups."""
    _setup(log_level)

    async def _run() -> None:
        manager = await _open(settings)
        active_id = manager.active_group_id
        for group_id, group in manager.groups.items():
            marker = "*" if group_id == active_id else " "
            count = _plural(manager.variable_count(group_id), "variable")
            console.print(f"{marker} {escape(group_id)}  {escape(group.name)}  ({count})")

    asyncio.run(_run())


@app.command("current")
def current(
    settings: Optional[str] = SettingsOption,
    log_level: Optional[str] = LogLevelOption,
):
    """Show the active environment group."""
    _setup(log_level)

    async def _run() -> None:
        manager = await _open(settings)
        console.print(f"Environment: {escape(manager.display_name())}")
        console.print(
            f"{_plural(manager.variable_count(), 'variable')} • "
            f"{_plural(manager.group_count(), 'group')}"
        )

    asyncio.run(_run())


@app.command("use")
def use(
    group_id: str = typer.Argument(..., help="Identifier of the group to activate"),
    settings: Optional[str] = SettingsOption,
    log_level: Optional[str] = LogLevelOption,
):
    """Activate an environment group."""
    _setup(log_level)

    async def _run() -> None:
        manager = await _open(settings)
        if group_id not in manager.groups:
            known = ", ".join(manager.groups) or "none"
            err_console.print(f"[red]Error:[/red] unknown group '{escape(group_id)}' (known: {escape(known)})")
            raise typer.Exit(1)

        manager.select_group(group_id)
        await manager.flush()
        if manager.last_error is not None:
            err_console.print(f"[red]Error:[/red] failed to save selection: {escape(str(manager.last_error))}")
            raise typer.Exit(1)

        name = manager.display_name()
        count = _plural(manager.variable_count(), "variable")
        console.print(f"[green]Switched to[/green] {escape(name)} ({count})")

    asyncio.run(_run())


if __name__ == "__main__":
    app()
