"""Login, scope selection, team listing and scope resolution commands."""

from __future__ import annotations

from typing import Optional

import typer
from rich.table import Table

from . import app, console, open_session, run, scope_app, teams_app
from ..config import profile_path
from ..scopes import PERSONAL, ResourceKind, team_scope
from ..sdk import HookCats


@app.command("login")
def login(
    api_key: str = typer.Option(..., "--api-key", prompt=True, hide_input=True, help="HookCats API key"),
    base_url: str = typer.Option(..., "--base-url", help="HookCats server URL, e.g. https://hooks.example.com"),
):
    """Store the API key and server URL in the local profile."""
    try:
        result = HookCats.login(api_key=api_key, base_url=base_url)
    except ValueError as e:
        raise typer.BadParameter(str(e))
    console.print(f"[green]Logged in to {result['base_url']}[/green]")
    console.print(f"Profile: {profile_path()}")


@app.command("resolve")
def resolve(
    kind: str = typer.Argument(..., help="sources, targets or routes"),
    resource_id: int = typer.Argument(..., help="Resource ID"),
):
    """Find which scope holds a resource."""
    try:
        resource_kind = ResourceKind.parse(kind)
    except ValueError as e:
        raise typer.BadParameter(str(e))

    async def _resolve():
        async with open_session() as hc:
            return await hc.resolve_scope(resource_kind, resource_id)

    scope = run(_resolve())
    console.print(f"{resource_kind.label} {resource_id}: [bold]{scope}[/bold]")


@scope_app.command("show")
def show_scope():
    """Show the current scope selection."""

    async def _show():
        async with open_session() as hc:
            selection = await hc.context.reconcile()
            team = await hc.context.get_active_team()
            return selection, team

    selection, team = run(_show())
    if team is not None:
        label = f" ({team.name})" if team.name else ""
        console.print(f"Current scope: [bold]{selection.scope}[/bold]{label}")
    else:
        console.print(f"Current scope: [bold]{selection.scope}[/bold]")


@scope_app.command("use")
def use_scope(
    scope: str = typer.Argument(..., help="'personal' or 'team'"),
    team_id: Optional[int] = typer.Argument(None, help="Team ID when scope is 'team'"),
):
    """Switch the current scope selection."""
    if scope == "personal":
        if team_id is not None:
            raise typer.BadParameter("team_id must not be given for the personal scope")
        target = PERSONAL
    elif scope == "team":
        if team_id is None:
            raise typer.BadParameter("team_id is required for the team scope")
        try:
            target = team_scope(team_id)
        except ValueError as e:
            raise typer.BadParameter(str(e), param_hint="team_id")
    else:
        raise typer.BadParameter("scope must be 'personal' or 'team'")

    async def _use():
        async with open_session() as hc:
            return await hc.context.use(target)

    selection = run(_use())
    console.print(f"[green]Switched to {selection.scope} scope.[/green]")


@teams_app.command("list")
def list_teams():
    """List the teams you are a member of."""

    async def _list():
        async with open_session() as hc:
            return await hc.context.get_user_teams(), hc.context.get_active_team_id()

    teams, active = run(_list())
    table = Table(title="HookCats Teams")
    table.add_column("Team ID")
    table.add_column("Name")
    table.add_column("Role")
    table.add_column("Active")
    for team in teams:
        table.add_row(str(team.id), team.name, team.role or "", "*" if team.id == active else "")
    console.print(table)
