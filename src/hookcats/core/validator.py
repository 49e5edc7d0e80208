"""Route endpoint consistency check. Pure: no I/O, never re-probes."""

from __future__ import annotations

from ..errors import ScopeMismatchError, TeamMismatchError
from ..scopes import Scope, TeamScope


def validate_route_endpoints(source_scope: Scope, target_scope: Scope) -> Scope:
    """Return the scope a route between the two endpoints must be created in.

    Raises ``ScopeMismatchError`` when one endpoint is personal and the other
    team-owned, and ``TeamMismatchError`` when they belong to different teams.
    """
    if source_scope.kind != target_scope.kind:
        raise ScopeMismatchError(source_scope, target_scope)
    if isinstance(source_scope, TeamScope) and source_scope.team_id != target_scope.team_id:
        raise TeamMismatchError(source_scope, target_scope)
    return source_scope
