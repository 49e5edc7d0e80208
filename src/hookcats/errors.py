"""Error taxonomy for scope resolution, route validation and transport."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .scopes import ResourceKind, Scope


class HookCatsError(Exception):
    """Base class for every error raised by this package."""


class ConfigError(HookCatsError):
    pass


class InvalidScopeError(HookCatsError):
    """A scope selection that cannot be honoured, e.g. a team the user is not in."""


class ApiError(HookCatsError):
    """Transport-level failure talking to the HookCats API."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        method: str | None = None,
        path: str | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.method = method
        self.path = path

    def __str__(self) -> str:
        where = " ".join(p for p in (self.method, self.path) if p)
        prefix = f"{where}: " if where else ""
        status = f" (HTTP {self.status_code})" if self.status_code is not None else ""
        return f"{prefix}{self.message}{status}"


class ScopeResolutionError(HookCatsError):
    pass


class TransientProbeError(ScopeResolutionError):
    """One team collection could not be fetched while probing."""

    def __init__(self, kind: "ResourceKind", resource_id: int, team_id: int, cause: Exception):
        super().__init__(f"could not list {kind.value} of team {team_id}: {cause}")
        self.kind = kind
        self.resource_id = resource_id
        self.team_id = team_id
        self.cause = cause


class NotFoundError(ScopeResolutionError):
    """The resource is not visible in any scope the current user can access."""

    def __init__(
        self,
        kind: "ResourceKind",
        resource_id: int,
        *,
        probed: "list[Scope] | None" = None,
        transient_failures: list[TransientProbeError] | None = None,
    ):
        super().__init__(f"{kind.label} {resource_id} not found in any accessible scope")
        self.kind = kind
        self.resource_id = resource_id
        self.probed = list(probed or [])
        self.transient_failures = list(transient_failures or [])

    @property
    def partial_visibility(self) -> bool:
        return bool(self.transient_failures)


class RouteValidationError(HookCatsError):
    def __init__(self, message: str, source_scope: "Scope", target_scope: "Scope"):
        super().__init__(message)
        self.source_scope = source_scope
        self.target_scope = target_scope


class ScopeMismatchError(RouteValidationError):
    def __init__(self, source_scope: "Scope", target_scope: "Scope"):
        super().__init__(
            "source and target belong to different ownership scopes; routes cannot cross them",
            source_scope,
            target_scope,
        )


class TeamMismatchError(RouteValidationError):
    def __init__(self, source_scope: "Scope", target_scope: "Scope"):
        super().__init__("source and target belong to different teams", source_scope, target_scope)


class RouteScopeConflictError(RouteValidationError):
    """The endpoints agree with each other but not with the scope the route lives in."""

    def __init__(self, route_id: int, route_scope: "Scope", endpoint_scope: "Scope"):
        super().__init__(
            f"route {route_id} lives in {route_scope} but its endpoints resolve to {endpoint_scope}; "
            "a route cannot move between scopes",
            endpoint_scope,
            endpoint_scope,
        )
        self.route_id = route_id
        self.route_scope = route_scope
        self.endpoint_scope = endpoint_scope


class DeliveryRetryError(HookCatsError):
    def __init__(self, delivery_id: int, reason: str):
        super().__init__(f"delivery {delivery_id} cannot be retried: {reason}")
        self.delivery_id = delivery_id
        self.reason = reason


class ResourceInUseError(HookCatsError):
    """A source cannot be deleted while active routes still reference it."""

    def __init__(self, resource_id: int, route_ids: list[int] | None = None):
        route_ids = list(route_ids or [])
        detail = f" (routes: {', '.join(str(r) for r in route_ids)})" if route_ids else ""
        super().__init__(f"source {resource_id} has active routes; delete them first{detail}")
        self.resource_id = resource_id
        self.route_ids = route_ids
