import unittest

from hookcats.core import validate_route_endpoints
from hookcats.errors import RouteValidationError, ScopeMismatchError, TeamMismatchError
from hookcats.scopes import PERSONAL, TeamScope


class ValidateRouteEndpointsTests(unittest.TestCase):
    def test_personal_pair_returns_personal(self):
        self.assertEqual(validate_route_endpoints(PERSONAL, PERSONAL), PERSONAL)

    def test_same_team_returns_that_team(self):
        self.assertEqual(validate_route_endpoints(TeamScope(1), TeamScope(1)), TeamScope(1))

    def test_personal_and_team_is_scope_mismatch(self):
        with self.assertRaises(ScopeMismatchError) as ctx:
            validate_route_endpoints(PERSONAL, TeamScope(1))
        self.assertEqual(ctx.exception.source_scope, PERSONAL)
        self.assertEqual(ctx.exception.target_scope, TeamScope(1))
        self.assertIn("different ownership scopes", str(ctx.exception))

    def test_team_and_personal_is_scope_mismatch(self):
        with self.assertRaises(ScopeMismatchError):
            validate_route_endpoints(TeamScope(1), PERSONAL)

    def test_different_teams_is_team_mismatch(self):
        with self.assertRaises(TeamMismatchError) as ctx:
            validate_route_endpoints(TeamScope(1), TeamScope(2))
        self.assertIn("different teams", str(ctx.exception))

    def test_mismatches_share_a_base_class(self):
        self.assertTrue(issubclass(ScopeMismatchError, RouteValidationError))
        self.assertTrue(issubclass(TeamMismatchError, RouteValidationError))
        self.assertFalse(issubclass(ScopeMismatchError, TeamMismatchError))


if __name__ == "__main__":
    unittest.main()
