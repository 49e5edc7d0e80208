"""Source and target commands: list, create, delete."""

from __future__ import annotations

from typing import Optional

import typer
from rich.table import Table

from . import console, open_session, run, sources_app, targets_app
from ..scopes import PERSONAL, ResourceKind, ScopedResource, team_scope


def resolve_scope_flags(team_id: Optional[int], personal: bool):
    if team_id is not None and personal:
        raise typer.BadParameter("use either --team or --personal, not both")
    if personal:
        return PERSONAL
    if team_id is not None:
        try:
            return team_scope(team_id)
        except ValueError as e:
            raise typer.BadParameter(str(e), param_hint="--team")
    return None


def _render(title: str, resources: list[ScopedResource], columns: tuple[str, ...]) -> None:
    table = Table(title=title)
    table.add_column("ID")
    table.add_column("Name")
    for column in columns:
        table.add_column(column.replace("_", " ").title())
    table.add_column("Scope")
    for resource in resources:
        table.add_row(
            str(resource.id),
            resource.name,
            *(str(resource.get(column) or "") for column in columns),
            str(resource.scope),
        )
    console.print(table)


def _list(kind: ResourceKind, team_id: Optional[int], personal: bool) -> list[ScopedResource]:
    scope = resolve_scope_flags(team_id, personal)

    async def _run():
        async with open_session() as hc:
            return await hc.resources.list_resources(kind, scope)

    return run(_run())


def _create(kind: ResourceKind, payload: dict, team_id: Optional[int], personal: bool) -> ScopedResource:
    scope = resolve_scope_flags(team_id, personal)

    async def _run():
        async with open_session() as hc:
            return await hc.resources.create(kind, payload, scope)

    created = run(_run())
    console.print(f"[green]Created {kind.label} {created.id} in {created.scope} scope.[/green]")
    return created


def _delete(kind: ResourceKind, resource_id: int) -> None:
    async def _run():
        async with open_session() as hc:
            return await hc.resources.delete(kind, resource_id)

    deleted = run(_run())
    console.print(f"[green]Deleted {kind.label} {deleted.id} from {deleted.scope} scope.[/green]")


# --- Sources ---

@sources_app.command("list")
def list_sources(
    team_id: Optional[int] = typer.Option(None, "--team", help="List a team's sources"),
    personal: bool = typer.Option(False, "--personal", help="List personal sources"),
):
    """List sources in the current (or given) scope."""
    _render("HookCats Sources", _list(ResourceKind.SOURCE, team_id, personal), ("type",))


@sources_app.command("create")
def create_source(
    name: str,
    source_type: str = typer.Option("generic", "--type", help="Source type, e.g. gitlab, synology, generic"),
    secret_key: Optional[str] = typer.Option(None, "--secret-key", help="Custom secret for the webhook URL"),
    webhook_secret: Optional[str] = typer.Option(None, "--webhook-secret", help="HMAC signature secret"),
    team_id: Optional[int] = typer.Option(None, "--team", help="Create in this team's scope"),
    personal: bool = typer.Option(False, "--personal", help="Create in the personal scope"),
):
    """Create a source. Its scope is fixed from then on."""
    payload = {"name": name, "type": source_type}
    if secret_key:
        payload["secret_key"] = secret_key
    if webhook_secret:
        payload["webhook_secret"] = webhook_secret
    _create(ResourceKind.SOURCE, payload, team_id, personal)


@sources_app.command("delete")
def delete_source(source_id: int):
    """Delete a source. Refused while routes still use it."""
    _delete(ResourceKind.SOURCE, source_id)


# --- Targets ---

@targets_app.command("list")
def list_targets(
    team_id: Optional[int] = typer.Option(None, "--team", help="List a team's targets"),
    personal: bool = typer.Option(False, "--personal", help="List personal targets"),
):
    """List targets in the current (or given) scope."""
    _render("HookCats Targets", _list(ResourceKind.TARGET, team_id, personal), ("type", "webhook_url"))


@targets_app.command("create")
def create_target(
    name: str,
    webhook_url: str = typer.Option(..., "--url", help="Delivery webhook URL"),
    target_type: str = typer.Option("webhook", "--type", help="Target type, e.g. mattermost, discord, webhook"),
    team_id: Optional[int] = typer.Option(None, "--team", help="Create in this team's scope"),
    personal: bool = typer.Option(False, "--personal", help="Create in the personal scope"),
):
    """Create a target. Its scope is fixed from then on."""
    _create(ResourceKind.TARGET, {"name": name, "type": target_type, "webhook_url": webhook_url}, team_id, personal)


@targets_app.command("delete")
def delete_target(target_id: int):
    """Delete a target."""
    _delete(ResourceKind.TARGET, target_id)


@targets_app.command("test")
def test_target(target_id: int):
    """Send a test notification through a target."""

    async def _run():
        async with open_session() as hc:
            return await hc.resources.test_target(target_id)

    result = run(_run())
    console.print(f"[green]{result.get('message') or 'Test delivery sent'} (target {target_id}).[/green]")
