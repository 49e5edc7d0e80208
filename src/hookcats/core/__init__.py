"""Scope resolution, route consistency and scope-aware mutation."""

from .dispatcher import MutationDispatcher
from .history import HistoryService
from .prober import ScopeProber
from .resources import ResourceService
from .routes import RouteService
from .validator import validate_route_endpoints

__all__ = [
    "MutationDispatcher",
    "HistoryService",
    "ScopeProber",
    "ResourceService",
    "RouteService",
    "validate_route_endpoints",
]
