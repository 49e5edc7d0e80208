"""Route orchestration: resolve both endpoints, check they agree, then mutate."""

from __future__ import annotations

import asyncio
from dataclasses import replace

from ..context import TeamContext
from ..errors import RouteScopeConflictError, RouteValidationError
from ..logging_config import StructuredLogger
from ..scopes import ResourceKind, Route, Scope, route_payload
from .dispatcher import MutationDispatcher
from .prober import ScopeProber
from .validator import validate_route_endpoints

logger = StructuredLogger(__name__)

_UNSET = object()


class RouteService:
    def __init__(self, api, context: TeamContext, *, parallel_endpoint_resolution: bool = False):
        self.api = api
        self.prober = ScopeProber(api, context)
        self.dispatcher = MutationDispatcher(api)
        self.parallel_endpoint_resolution = parallel_endpoint_resolution

    async def resolve_endpoints(self, source_id: int, target_id: int) -> tuple[Scope, Scope]:
        if self.parallel_endpoint_resolution:
            source_scope, target_scope = await asyncio.gather(
                self.prober.resolve_scope(ResourceKind.SOURCE, source_id),
                self.prober.resolve_scope(ResourceKind.TARGET, target_id),
            )
            return source_scope, target_scope
        source_scope = await self.prober.resolve_scope(ResourceKind.SOURCE, source_id)
        target_scope = await self.prober.resolve_scope(ResourceKind.TARGET, target_id)
        return source_scope, target_scope

    async def endpoint_scope(self, source_id: int, target_id: int) -> Scope:
        """The scope a route between these endpoints would have to live in."""
        source_scope, target_scope = await self.resolve_endpoints(source_id, target_id)
        return validate_route_endpoints(source_scope, target_scope)

    @staticmethod
    def _check_route_scope(route: Route, endpoint_scope: Scope) -> None:
        if endpoint_scope != route.scope:
            raise RouteScopeConflictError(route.id, route.scope, endpoint_scope)

    async def create_route(self, source_id: int, target_id: int, template: str | None = None) -> Route:
        payload = route_payload(source_id, target_id, template)
        try:
            scope = await self.endpoint_scope(payload["source_id"], payload["target_id"])
        except RouteValidationError as exc:
            logger.info(
                "Route creation rejected",
                source_id=payload["source_id"],
                target_id=payload["target_id"],
                source_scope=str(exc.source_scope),
                target_scope=str(exc.target_scope),
                reason=str(exc),
            )
            raise
        created = await self.dispatcher.create_in_scope(ResourceKind.ROUTE, scope, payload)
        logger.info("Route created", id=created.id, scope=str(scope))
        return Route.from_resource(replace(created, data={**payload, **created.data}))

    async def get_route(self, route_id: int) -> Route:
        return Route.from_resource(await self.prober.locate(ResourceKind.ROUTE, route_id))

    async def update_route(
        self,
        route_id: int,
        *,
        source_id: int | None = None,
        target_id: int | None = None,
        template: str | None | object = _UNSET,
    ) -> Route:
        """Update a route in the scope it already lives in.

        New endpoints must resolve to that same scope; a route is never moved.
        Leaving ``template`` unset keeps the current one; ``None`` or ``""`` clears it.
        """
        route = await self.get_route(route_id)
        new_source = int(source_id) if source_id is not None else route.source_id
        new_target = int(target_id) if target_id is not None else route.target_id

        if (new_source, new_target) != (route.source_id, route.target_id):
            self._check_route_scope(route, await self.endpoint_scope(new_source, new_target))

        new_template = route.template if template is _UNSET else template
        payload = route_payload(new_source, new_target, new_template)
        if not new_template:
            payload["message_template"] = None
        updated = await self.dispatcher.update_in_scope(ResourceKind.ROUTE, route.scope, route.id, payload)
        return Route.from_resource(replace(updated, data={**payload, **updated.data}))

    async def delete_route(self, route_id: int) -> Route:
        route = await self.get_route(route_id)
        await self.dispatcher.delete_in_scope(ResourceKind.ROUTE, route.scope, route.id)
        logger.info("Route deleted", id=route.id, scope=str(route.scope))
        return route

    async def verify_route(self, route_id: int) -> Route:
        """Re-check a stored route against the current scopes of its endpoints."""
        route = await self.get_route(route_id)
        self._check_route_scope(route, await self.endpoint_scope(route.source_id, route.target_id))
        return route

    async def list_routes(self, scope: Scope) -> list[Route]:
        resources = await self.api.list_scoped_resources(ResourceKind.ROUTE, scope)
        return [Route.from_resource(resource) for resource in resources]
