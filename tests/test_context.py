import asyncio
import tempfile
import unittest
from pathlib import Path
from unittest.mock import patch

from hookcats.config import load_profile, save_profile
from hookcats.context import ApiTeamContext, ScopeSelection, StaticTeamContext, _SelectableTeamContext
from hookcats.errors import InvalidScopeError
from hookcats.scopes import PERSONAL, TeamMembership, TeamScope


class _TeamsClient:
    def __init__(self, teams):
        self.teams = [TeamMembership(id=t) for t in teams]

    async def list_user_teams(self):
        return list(self.teams)


class StaticTeamContextTests(unittest.TestCase):
    def test_membership_source_is_required(self):
        with self.assertRaises(TypeError):
            _SelectableTeamContext()

    def test_defaults_to_personal(self):
        context = StaticTeamContext(teams=[1])
        self.assertEqual(context.get_current_scope(), PERSONAL)
        self.assertIsNone(context.get_active_team_id())

    def test_switch_to_member_team(self):
        context = StaticTeamContext(teams=[1, 2])
        selection = asyncio.run(context.switch_to_team(2))
        self.assertEqual(selection.scope, TeamScope(2))
        self.assertEqual(context.get_active_team_id(), 2)

    def test_switch_to_non_member_team_is_rejected(self):
        context = StaticTeamContext(teams=[1], active_team_id=1)
        with self.assertRaises(InvalidScopeError):
            asyncio.run(context.switch_to_team(5))
        self.assertEqual(context.get_active_team_id(), 1)

    def test_reconcile_drops_lost_team(self):
        context = StaticTeamContext(teams=[1], active_team_id=3)
        selection = asyncio.run(context.reconcile())
        self.assertEqual(selection.scope, PERSONAL)

    def test_reconcile_keeps_valid_team(self):
        context = StaticTeamContext(teams=[TeamMembership(3, "ops")], active_team_id=3)
        self.assertEqual(asyncio.run(context.reconcile()).scope, TeamScope(3))
        self.assertEqual(asyncio.run(context.get_active_team()).name, "ops")


class ApiTeamContextTests(unittest.TestCase):
    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.addCleanup(self._tmp.cleanup)
        profile = str(Path(self._tmp.name) / "profile.json")
        patcher = patch.dict("os.environ", {"HOOKCATS_PROFILE_PATH": profile}, clear=True)
        patcher.start()
        self.addCleanup(patcher.stop)

    def test_selection_is_loaded_from_profile(self):
        save_profile({"scope": "team", "team_id": 7})
        context = ApiTeamContext(_TeamsClient([7]))
        self.assertEqual(context.get_current_scope(), TeamScope(7))

    def test_invalid_stored_selection_falls_back_to_personal(self):
        save_profile({"scope": "team"})
        context = ApiTeamContext(_TeamsClient([7]))
        self.assertEqual(context.get_current_scope(), PERSONAL)

    def test_switch_is_persisted(self):
        context = ApiTeamContext(_TeamsClient([7, 9]))
        asyncio.run(context.switch_to_team(9))
        self.assertEqual(load_profile(), {"scope": "team", "team_id": 9})

        context.switch_to_personal()
        self.assertEqual(load_profile(), {"scope": "personal"})

    def test_no_persistence_when_disabled(self):
        context = ApiTeamContext(_TeamsClient([7]), ScopeSelection(), persist=False)
        asyncio.run(context.use(TeamScope(7)))
        self.assertEqual(load_profile(), {})
        self.assertEqual(context.get_current_scope(), TeamScope(7))

    def test_membership_is_read_from_client(self):
        context = ApiTeamContext(_TeamsClient([4, 5]), persist=False)
        teams = asyncio.run(context.get_user_teams())
        self.assertEqual([t.id for t in teams], [4, 5])


if __name__ == "__main__":
    unittest.main()
