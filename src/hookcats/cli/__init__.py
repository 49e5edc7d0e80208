"""HookCats CLI: modular command package."""

import asyncio
from contextlib import asynccontextmanager
from typing import Optional

import typer
from dotenv import load_dotenv
from rich.console import Console

from .. import __version__
from ..config import load_settings
from ..errors import ConfigError, HookCatsError
from ..logging_config import setup_logging
from ..sdk import HookCats

# ── Shared state ────────────────────────────────────────────────────────────

app = typer.Typer(help="HookCats - scope-aware webhook routing client")
console = Console()

# Sub-command groups
scope_app = typer.Typer()
teams_app = typer.Typer()
sources_app = typer.Typer()
targets_app = typer.Typer()
routes_app = typer.Typer()
events_app = typer.Typer()
deliveries_app = typer.Typer()

app.add_typer(scope_app, name="scope", help="Show or change the current scope selection")
app.add_typer(teams_app, name="teams", help="Inspect team memberships")
app.add_typer(sources_app, name="sources", help="Manage webhook sources")
app.add_typer(targets_app, name="targets", help="Manage delivery targets")
app.add_typer(routes_app, name="routes", help="Manage source-to-target routes")
app.add_typer(events_app, name="events", help="Inspect received webhook events")
app.add_typer(deliveries_app, name="deliveries", help="Inspect and retry deliveries to targets")


# ── Shared helpers ──────────────────────────────────────────────────────────

@asynccontextmanager
async def open_session():
    try:
        settings = load_settings()
    except ConfigError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(1)
    async with HookCats.connect(settings) as hc:
        yield hc


def run(coro):
    """Drive one command coroutine; package errors and rejected values become a red message and exit 1."""
    try:
        return asyncio.run(coro)
    except (HookCatsError, ValueError) as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)


@app.callback()
def main(
    log_level: Optional[str] = typer.Option(None, "--log-level", help="Log level for logs on stderr"),
    log_format: Optional[str] = typer.Option(None, "--log-format", help="json or rich"),
):
    load_dotenv()
    try:
        settings = load_settings(log_level=log_level, log_format=log_format)
    except ConfigError as e:
        console.print(f"[yellow]{e}[/yellow]")
        setup_logging()
        return
    setup_logging(settings.log_level, settings.log_format)


@app.command("version")
def version():
    """Print the client version."""
    console.print(f"hookcats {__version__}")


# ── Register submodule commands (import triggers decorator registration) ────

from . import scope_cmds     # noqa: E402, F401
from . import resource_cmds  # noqa: E402, F401
from . import route_cmds     # noqa: E402, F401
from . import history_cmds   # noqa: E402, F401
