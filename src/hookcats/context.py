"""Current scope selection and team membership, as consumed by the scope prober."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Protocol, Sequence

from .config import load_profile, save_profile
from .errors import InvalidScopeError
from .logging_config import StructuredLogger
from .scopes import PERSONAL, PersonalScope, Scope, TeamMembership, TeamScope, parse_scope

logger = StructuredLogger(__name__)


class TeamContext(Protocol):
    def get_current_scope(self) -> Scope: ...

    def get_active_team_id(self) -> int | None: ...

    async def get_user_teams(self) -> list[TeamMembership]: ...


@dataclass(frozen=True)
class ScopeSelection:
    scope: Scope = PERSONAL

    @property
    def active_team_id(self) -> int | None:
        if isinstance(self.scope, TeamScope):
            return self.scope.team_id
        return None

    def to_profile(self) -> dict[str, Any]:
        return self.scope.to_dict()

    @classmethod
    def from_profile(cls, data: dict[str, Any]) -> "ScopeSelection":
        try:
            return cls(scope=parse_scope(data.get("scope"), data.get("team_id")))
        except ValueError as exc:
            logger.warning("Ignoring invalid stored scope selection", error=str(exc))
            return cls()


class _SelectableTeamContext(ABC):
    """Shared scope switching; subclasses supply the membership lookup."""

    def __init__(self, selection: ScopeSelection | None = None):
        self.selection = selection or ScopeSelection()

    def get_current_scope(self) -> Scope:
        return self.selection.scope

    def get_active_team_id(self) -> int | None:
        return self.selection.active_team_id

    @abstractmethod
    async def get_user_teams(self) -> list[TeamMembership]: ...

    def _persist(self) -> None:
        pass

    def switch_to_personal(self) -> ScopeSelection:
        self.selection = ScopeSelection(scope=PERSONAL)
        self._persist()
        return self.selection

    async def switch_to_team(self, team_id: int) -> ScopeSelection:
        teams = await self.get_user_teams()
        if not any(team.id == int(team_id) for team in teams):
            raise InvalidScopeError(f"Invalid team {team_id} or user is not a member")
        self.selection = ScopeSelection(scope=TeamScope(team_id=int(team_id)))
        self._persist()
        return self.selection

    async def use(self, scope: Scope) -> ScopeSelection:
        if isinstance(scope, PersonalScope):
            return self.switch_to_personal()
        return await self.switch_to_team(scope.team_id)

    async def reconcile(self) -> ScopeSelection:
        """Fall back to the personal scope when the active team is no longer a membership."""
        active = self.get_active_team_id()
        if active is None:
            return self.selection
        teams = await self.get_user_teams()
        if not any(team.id == active for team in teams):
            logger.warning("Active team is no longer available, switching to personal scope", team_id=active)
            return self.switch_to_personal()
        return self.selection

    async def get_active_team(self) -> TeamMembership | None:
        active = self.get_active_team_id()
        if active is None:
            return None
        for team in await self.get_user_teams():
            if team.id == active:
                return team
        return None


class ApiTeamContext(_SelectableTeamContext):
    """Membership from ``GET /user/teams`` on every call; selection kept in the profile."""

    def __init__(self, client, selection: ScopeSelection | None = None, *, persist: bool = True):
        if selection is None:
            selection = ScopeSelection.from_profile(load_profile()) if persist else ScopeSelection()
        super().__init__(selection)
        self.client = client
        self.persist = persist

    async def get_user_teams(self) -> list[TeamMembership]:
        return await self.client.list_user_teams()

    def _persist(self) -> None:
        if self.persist:
            save_profile(self.selection.to_profile())


class StaticTeamContext(_SelectableTeamContext):
    """In-memory membership list, for embedding and tests."""

    def __init__(self, teams: Sequence[TeamMembership | int] = (), active_team_id: int | None = None):
        selection = ScopeSelection(scope=TeamScope(team_id=active_team_id)) if active_team_id else None
        super().__init__(selection)
        self.teams = [t if isinstance(t, TeamMembership) else TeamMembership(id=int(t)) for t in teams]
        self.membership_calls = 0

    async def get_user_teams(self) -> list[TeamMembership]:
        self.membership_calls += 1
        return list(self.teams)
