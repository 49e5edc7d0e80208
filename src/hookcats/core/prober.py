"""Scope prober: find which ownership scope holds a resource known only by id."""

from __future__ import annotations

from dataclasses import replace
from typing import Protocol

from ..context import TeamContext
from ..errors import ApiError, NotFoundError, TransientProbeError
from ..logging_config import StructuredLogger
from ..scopes import PERSONAL, ResourceKind, Scope, ScopedResource, TeamScope

logger = StructuredLogger(__name__)


class CollectionReader(Protocol):
    async def list_scoped_resources(self, kind: ResourceKind, scope: Scope) -> list[ScopedResource]: ...


def _find(resources: list[ScopedResource], resource_id: int) -> ScopedResource | None:
    for resource in resources:
        if resource.id == resource_id:
            return resource
    return None


class ScopeProber:
    """Ordered, short-circuiting search over the scopes the user can see.

    1. the personal collection;
    2. the active team, when one is selected;
    3. every team in membership order. A transport failure listing one team
       only means "no match there"; the search goes on with the next team;
    4. otherwise ``NotFoundError``.

    Steps run one after another so the common case costs a single request.
    Nothing is cached: membership and collections are read fresh on each call.
    """

    def __init__(self, api: CollectionReader, context: TeamContext):
        self.api = api
        self.context = context

    async def _probe(
        self, kind: ResourceKind, scope: Scope, resource_id: int, log: StructuredLogger
    ) -> ScopedResource | None:
        log.debug("Probing scope", scope=str(scope))
        found = _find(await self.api.list_scoped_resources(kind, scope), resource_id)
        if found is not None and found.scope != scope:
            # the collection that listed it is what decides the scope
            found = replace(found, scope=scope)
        return found

    async def resolve_scope(self, kind: ResourceKind | str, resource_id: int) -> Scope:
        return (await self.locate(kind, resource_id)).scope

    async def locate(self, kind: ResourceKind | str, resource_id: int) -> ScopedResource:
        """Search the accessible scopes and return the listed resource, scope attached."""
        kind = ResourceKind.parse(kind)
        resource_id = int(resource_id)
        probed: list[Scope] = []
        log = logger.bind(kind=kind.value, id=resource_id)

        probed.append(PERSONAL)
        found = await self._probe(kind, PERSONAL, resource_id, log)
        if found is not None:
            return found

        active_team_id = self.context.get_active_team_id()
        if active_team_id is not None:
            active = TeamScope(team_id=int(active_team_id))
            probed.append(active)
            found = await self._probe(kind, active, resource_id, log)
            if found is not None:
                return found

        failures: list[TransientProbeError] = []
        for team in await self.context.get_user_teams():
            scope = team.scope
            if scope in probed:
                continue
            probed.append(scope)
            try:
                found = await self._probe(kind, scope, resource_id, log)
            except ApiError as exc:
                failure = TransientProbeError(kind, resource_id, team.id, exc)
                log.warning(
                    "Team probe failed, treating as no match",
                    team_id=team.id,
                    error=str(exc),
                )
                failures.append(failure)
                continue
            if found is not None:
                return found

        log.info(
            "Resource not found in any accessible scope",
            probed=[str(s) for s in probed],
            failed_teams=[f.team_id for f in failures],
        )
        raise NotFoundError(kind, resource_id, probed=probed, transient_failures=failures)

