"""Send create/update/delete calls to the collection that owns the resource."""

from __future__ import annotations

from typing import Any, Protocol

from ..errors import InvalidScopeError
from ..logging_config import StructuredLogger
from ..scopes import PersonalScope, ResourceKind, Scope, ScopedResource, TeamScope

logger = StructuredLogger(__name__)

# Server-side ownership is taken from the URL; these keys would be ignored or rejected.
_SCOPE_KEYS = ("scope", "team_id", "visibility")


class CollectionWriter(Protocol):
    async def create_scoped_resource(
        self, kind: ResourceKind, scope: Scope, payload: dict[str, Any]
    ) -> ScopedResource: ...

    async def update_scoped_resource(
        self, kind: ResourceKind, scope: Scope, resource_id: int, payload: dict[str, Any]
    ) -> ScopedResource: ...

    async def delete_scoped_resource(self, kind: ResourceKind, scope: Scope, resource_id: int) -> None: ...

    async def perform_scoped_action(
        self, kind: ResourceKind, scope: Scope, resource_id: int, action: str
    ) -> dict[str, Any]: ...


def _require_scope(scope: Any) -> Scope:
    if not isinstance(scope, (PersonalScope, TeamScope)):
        raise InvalidScopeError(f"Expected a personal or team scope, got {scope!r}")
    return scope


def _strip_scope_keys(payload: dict[str, Any] | None) -> dict[str, Any]:
    body = dict(payload or {})
    dropped = [key for key in _SCOPE_KEYS if key in body]
    for key in dropped:
        body.pop(key)
    if dropped:
        logger.debug("Dropped scope keys from payload", keys=dropped)
    return body


class MutationDispatcher:
    """Picks the personal or team call shape from a scope it is given.

    The scope always comes from the caller: an explicit user choice, the
    route validator, or an earlier prober resolution. Updates and deletes act
    in the resource's existing scope and never move it.
    """

    def __init__(self, api: CollectionWriter):
        self.api = api

    async def create_in_scope(
        self, kind: ResourceKind | str, scope: Scope, payload: dict[str, Any]
    ) -> ScopedResource:
        kind = ResourceKind.parse(kind)
        scope = _require_scope(scope)
        logger.debug("Creating resource", kind=kind.value, scope=str(scope))
        return await self.api.create_scoped_resource(kind, scope, _strip_scope_keys(payload))

    async def update_in_scope(
        self, kind: ResourceKind | str, scope: Scope, resource_id: int, payload: dict[str, Any]
    ) -> ScopedResource:
        kind = ResourceKind.parse(kind)
        scope = _require_scope(scope)
        logger.debug("Updating resource", kind=kind.value, scope=str(scope), id=int(resource_id))
        return await self.api.update_scoped_resource(kind, scope, int(resource_id), _strip_scope_keys(payload))

    async def delete_in_scope(self, kind: ResourceKind | str, scope: Scope, resource_id: int) -> None:
        kind = ResourceKind.parse(kind)
        scope = _require_scope(scope)
        logger.debug("Deleting resource", kind=kind.value, scope=str(scope), id=int(resource_id))
        await self.api.delete_scoped_resource(kind, scope, int(resource_id))

    async def act_in_scope(
        self, kind: ResourceKind | str, scope: Scope, resource_id: int, action: str
    ) -> dict[str, Any]:
        kind = ResourceKind.parse(kind)
        scope = _require_scope(scope)
        logger.debug("Resource action", kind=kind.value, scope=str(scope), id=int(resource_id), action=action)
        return await self.api.perform_scoped_action(kind, scope, int(resource_id), action)

    async def update_resource(self, resource: ScopedResource, payload: dict[str, Any]) -> ScopedResource:
        """Update a resource whose scope is already known, without probing again."""
        return await self.update_in_scope(resource.kind, resource.scope, resource.id, payload)

    async def delete_resource(self, resource: ScopedResource) -> None:
        await self.delete_in_scope(resource.kind, resource.scope, resource.id)
