"""Sources and targets: explicit scope on create, resolved scope on update and delete."""

from __future__ import annotations

from typing import Any

from ..context import TeamContext
from ..errors import InvalidScopeError, ResourceInUseError
from ..logging_config import StructuredLogger
from ..scopes import ResourceKind, Scope, ScopedResource
from .dispatcher import MutationDispatcher
from .prober import ScopeProber

logger = StructuredLogger(__name__)


def _endpoint_kind(kind: ResourceKind | str) -> ResourceKind:
    kind = ResourceKind.parse(kind)
    if kind is ResourceKind.ROUTE:
        raise InvalidScopeError("routes take their scope from their endpoints; use RouteService")
    if not kind.is_endpoint:
        raise InvalidScopeError(f"{kind.value} are recorded by the server and cannot be edited")
    return kind


class ResourceService:
    def __init__(self, api, context: TeamContext):
        self.api = api
        self.context = context
        self.prober = ScopeProber(api, context)
        self.dispatcher = MutationDispatcher(api)

    async def list_resources(self, kind: ResourceKind | str, scope: Scope | None = None) -> list[ScopedResource]:
        scope = scope or self.context.get_current_scope()
        return await self.api.list_scoped_resources(ResourceKind.parse(kind), scope)

    async def create(
        self, kind: ResourceKind | str, payload: dict[str, Any], scope: Scope | None = None
    ) -> ScopedResource:
        """Create in ``scope``, or in the current selection when none is given."""
        kind = _endpoint_kind(kind)
        scope = scope or self.context.get_current_scope()
        created = await self.dispatcher.create_in_scope(kind, scope, payload)
        logger.info("Resource created", kind=kind.value, id=created.id, scope=str(scope))
        return created

    async def update(self, kind: ResourceKind | str, resource_id: int, payload: dict[str, Any]) -> ScopedResource:
        resource = await self.prober.locate(_endpoint_kind(kind), resource_id)
        return await self.dispatcher.update_resource(resource, payload)

    async def delete(self, kind: ResourceKind | str, resource_id: int) -> ScopedResource:
        resource = await self.prober.locate(_endpoint_kind(kind), resource_id)
        if resource.kind is ResourceKind.SOURCE:
            check = await self.api.check_source_deletion(resource.scope, resource.id)
            connected = check.get("connectedRoutes") or []
            if check.get("canDelete") is False or check.get("hasActiveRoutes") or connected:
                route_ids = [int(r["id"]) for r in connected if isinstance(r, dict) and "id" in r]
                raise ResourceInUseError(resource.id, route_ids)
        await self.dispatcher.delete_resource(resource)
        logger.info("Resource deleted", kind=resource.kind.value, id=resource.id, scope=str(resource.scope))
        return resource

    async def test_target(self, target_id: int) -> dict:
        """Send a test notification through a target visible to the user."""
        target = await self.prober.locate(ResourceKind.TARGET, target_id)
        result = await self.api.send_test_delivery(target.id)
        logger.info("Test delivery sent", id=target.id, scope=str(target.scope))
        return result
