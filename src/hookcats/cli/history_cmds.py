"""Event and delivery commands: scope-filtered listings and delivery retry."""

from __future__ import annotations

from typing import Optional

import typer
from rich.table import Table

from . import console, deliveries_app, events_app, open_session, run
from .resource_cmds import resolve_scope_flags

_STATUS_STYLE = {"sent": "green", "failed": "red", "pending": "yellow"}


@events_app.command("list")
def list_events(
    limit: int = typer.Option(50, "--limit", help="Maximum number of events (1-1000)"),
    source_id: Optional[int] = typer.Option(None, "--source", help="Only events received by this source"),
    event_type: Optional[str] = typer.Option(None, "--type", help="Only events of this type"),
    team_id: Optional[int] = typer.Option(None, "--team", help="List a team's events"),
    personal: bool = typer.Option(False, "--personal", help="List personal events"),
):
    """List received events in the current (or given) scope."""
    scope = resolve_scope_flags(team_id, personal)

    async def _list():
        async with open_session() as hc:
            return await hc.history.list_events(scope, limit=limit, source_id=source_id, event_type=event_type)

    events = run(_list())
    table = Table(title="HookCats Events")
    table.add_column("ID")
    table.add_column("Source")
    table.add_column("Type")
    table.add_column("Received")
    table.add_column("Scope")
    for event in events:
        table.add_row(
            str(event.id),
            str(event.get("source_name") or event.get("source_id") or ""),
            str(event.get("event_type") or ""),
            str(event.get("received_at") or event.get("created_at") or ""),
            str(event.scope),
        )
    console.print(table)


@deliveries_app.command("list")
def list_deliveries(
    limit: int = typer.Option(50, "--limit", help="Maximum number of deliveries (1-1000)"),
    status: Optional[str] = typer.Option(None, "--status", help="pending, sent or failed"),
    target_id: Optional[int] = typer.Option(None, "--target", help="Only deliveries to this target"),
    team_id: Optional[int] = typer.Option(None, "--team", help="List a team's deliveries"),
    personal: bool = typer.Option(False, "--personal", help="List personal deliveries"),
):
    """List delivery attempts in the current (or given) scope."""
    scope = resolve_scope_flags(team_id, personal)

    async def _list():
        async with open_session() as hc:
            return await hc.history.list_deliveries(scope, limit=limit, status=status, target_id=target_id)

    deliveries = run(_list())
    table = Table(title="HookCats Deliveries")
    table.add_column("ID")
    table.add_column("Event")
    table.add_column("Target")
    table.add_column("Status")
    table.add_column("Attempts")
    table.add_column("Last error")
    table.add_column("Scope")
    for delivery in deliveries:
        style = _STATUS_STYLE.get(delivery.status, "white")
        table.add_row(
            str(delivery.id),
            str(delivery.event_id or ""),
            str(delivery.target_id or ""),
            f"[{style}]{delivery.status}[/{style}]",
            str(delivery.attempts),
            delivery.last_error or "",
            str(delivery.scope),
        )
    console.print(table)


@deliveries_app.command("retry")
def retry_delivery(delivery_id: int):
    """Resend a pending or failed delivery from the scope it belongs to."""

    async def _retry():
        async with open_session() as hc:
            return await hc.history.retry_delivery(delivery_id)

    delivery = run(_retry())
    console.print(f"[green]Delivery {delivery.id} retried in {delivery.scope} scope: {delivery.status}.[/green]")
