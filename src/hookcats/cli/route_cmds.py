"""Route commands. Scope always comes from the route's endpoints."""

from __future__ import annotations

from typing import Optional

import typer
from rich.table import Table

from . import console, open_session, routes_app, run
from .resource_cmds import resolve_scope_flags


@routes_app.command("list")
def list_routes(
    team_id: Optional[int] = typer.Option(None, "--team", help="List a team's routes"),
    personal: bool = typer.Option(False, "--personal", help="List personal routes"),
):
    """List routes in the current (or given) scope."""
    scope = resolve_scope_flags(team_id, personal)

    async def _list():
        async with open_session() as hc:
            return await hc.routes.list_routes(scope or hc.context.get_current_scope())

    routes = run(_list())
    table = Table(title="HookCats Routes")
    table.add_column("ID")
    table.add_column("Source")
    table.add_column("Target")
    table.add_column("Template")
    table.add_column("Scope")
    for route in routes:
        table.add_row(str(route.id), str(route.source_id), str(route.target_id), route.template or "", str(route.scope))
    console.print(table)


@routes_app.command("create")
def create_route(
    source_id: int = typer.Option(..., "--source", help="Source ID to route from"),
    target_id: int = typer.Option(..., "--target", help="Target ID to route to"),
    template: Optional[str] = typer.Option(None, "--template", help="Message template ({{source}}, {{message}})"),
):
    """Link a source to a target. Both must live in the same scope."""

    async def _create():
        async with open_session() as hc:
            return await hc.create_route(source_id, target_id, template)

    route = run(_create())
    console.print(f"[green]Created route {route.id} in {route.scope} scope.[/green]")


@routes_app.command("update")
def update_route(
    route_id: int,
    source_id: Optional[int] = typer.Option(None, "--source", help="New source ID"),
    target_id: Optional[int] = typer.Option(None, "--target", help="New target ID"),
    template: Optional[str] = typer.Option(None, "--template", help="New message template"),
    clear_template: bool = typer.Option(False, "--clear-template", help="Remove the message template"),
):
    """Edit a route in place. New endpoints must share the route's scope."""
    if template is not None and clear_template:
        raise typer.BadParameter("use either --template or --clear-template, not both")
    kwargs = {"source_id": source_id, "target_id": target_id}
    if clear_template:
        kwargs["template"] = None
    elif template is not None:
        kwargs["template"] = template

    async def _update():
        async with open_session() as hc:
            return await hc.routes.update_route(route_id, **kwargs)

    route = run(_update())
    console.print(f"[green]Updated route {route.id} in {route.scope} scope.[/green]")


@routes_app.command("check")
def check_route(route_id: int):
    """Verify that a route and both its endpoints still share one scope."""

    async def _check():
        async with open_session() as hc:
            return await hc.routes.verify_route(route_id)

    route = run(_check())
    console.print(f"[green]Route {route.id} is consistent ({route.scope}).[/green]")


@routes_app.command("delete")
def delete_route(route_id: int):
    """Delete a route from the scope it lives in."""

    async def _delete():
        async with open_session() as hc:
            return await hc.routes.delete_route(route_id)

    route = run(_delete())
    console.print(f"[green]Deleted route {route.id} from {route.scope} scope.[/green]")
