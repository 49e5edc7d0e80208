"""HookCats - scope-aware client for webhook sources, targets and routes."""

from .errors import (
    ApiError,
    DeliveryRetryError,
    HookCatsError,
    NotFoundError,
    RouteScopeConflictError,
    ScopeMismatchError,
    TeamMismatchError,
    TransientProbeError,
)
from .scopes import PERSONAL, Delivery, PersonalScope, ResourceKind, Route, ScopedResource, TeamScope, team_scope
from .core import validate_route_endpoints
from .sdk import HookCats

__version__ = "1.0.0"

__all__ = [
    "HookCats",
    "ResourceKind",
    "PersonalScope",
    "TeamScope",
    "PERSONAL",
    "team_scope",
    "ScopedResource",
    "Route",
    "Delivery",
    "validate_route_endpoints",
    "HookCatsError",
    "ApiError",
    "NotFoundError",
    "RouteScopeConflictError",
    "ScopeMismatchError",
    "DeliveryRetryError",
    "TeamMismatchError",
    "TransientProbeError",
    "__version__",
]
