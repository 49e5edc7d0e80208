import json
import logging
import tempfile
import unittest
from pathlib import Path
from unittest.mock import patch

import httpx
from typer.testing import CliRunner

from hookcats.cli import app
from hookcats.config import load_profile
from hookcats.sdk import HookCats

_connect = HookCats.connect


class _Server:
    """Minimal HookCats API: one team (7) holding source 42 and target 42, plus personal target 3."""

    def __init__(self):
        self.data = {
            "/api/user/teams": [{"id": 7, "name": "ops", "role": "member"}],
            "/api/personal/sources": [],
            "/api/personal/targets": [{"id": 3, "name": "private chat"}],
            "/api/personal/routes": [],
            "/api/team/7/sources": [{"id": 42, "name": "gitlab", "type": "gitlab"}],
            "/api/team/7/targets": [{"id": 42, "name": "mattermost"}],
            "/api/team/7/routes": [{"id": 8, "source_id": 42, "target_id": 42, "message_template": "old"}],
            "/api/personal/deliveries": [],
            "/api/team/7/deliveries": [{"id": 30, "status": "failed", "attempts": 1, "target_id": 42, "event_id": 11}],
            "/api/personal/events": [{"id": 11, "event_type": "push", "source_id": 1}],
        }
        self.posts: list[tuple[str, dict]] = []
        self.puts: list[tuple[str, dict]] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        path = request.url.path
        if request.method == "POST" and path.endswith("/retry"):
            self.posts.append((path, {}))
            return httpx.Response(200, json={"success": True, "data": {"id": 30, "status": "sent", "attempts": 2}})
        if request.method == "POST":
            body = json.loads(request.content)
            self.posts.append((path, body))
            return httpx.Response(201, json={"success": True, "data": {"id": 5, **body}})
        if request.method == "PUT":
            body = json.loads(request.content)
            self.puts.append((path, body))
            return httpx.Response(200, json={"success": True, "data": {"id": 8, **body}})
        if request.method == "GET" and path in self.data:
            return httpx.Response(200, json={"success": True, "data": self.data[path]})
        return httpx.Response(404, json={"success": False, "error": "Not found"})


class CliTests(unittest.TestCase):
    def setUp(self):
        self.runner = CliRunner()
        self.server = _Server()
        self._tmp = tempfile.TemporaryDirectory()
        self.addCleanup(self._tmp.cleanup)
        env = {
            "HOOKCATS_PROFILE_PATH": str(Path(self._tmp.name) / "profile.json"),
            "HOOKCATS_CONFIG_FILE": str(Path(self._tmp.name) / "config.yaml"),
            "HOOKCATS_BASE_URL": "http://hooks.test",
            "HOOKCATS_API_KEY": "key-1",
        }
        env_patch = patch.dict("os.environ", env, clear=True)
        env_patch.start()
        self.addCleanup(env_patch.stop)

        transport = httpx.MockTransport(self.server)
        connect_patch = patch.object(
            HookCats, "connect", side_effect=lambda settings=None, **kw: _connect(settings, transport=transport)
        )
        connect_patch.start()
        self.addCleanup(connect_patch.stop)
        self.addCleanup(setattr, logging.getLogger("hookcats"), "handlers", [])

    def test_version(self):
        result = self.runner.invoke(app, ["version"])
        self.assertEqual(result.exit_code, 0)
        self.assertIn("hookcats 1.0.0", result.output)

    def test_resolve_reports_team_scope(self):
        result = self.runner.invoke(app, ["resolve", "sources", "42"])
        self.assertEqual(result.exit_code, 0, result.output)
        self.assertIn("source 42: team:7", result.output)

    def test_resolve_unknown_resource_exits_1(self):
        result = self.runner.invoke(app, ["resolve", "targets", "404"])
        self.assertEqual(result.exit_code, 1)
        self.assertIn("not found in any accessible scope", result.output)

    def test_resolve_rejects_unknown_kind(self):
        result = self.runner.invoke(app, ["resolve", "teams", "1"])
        self.assertEqual(result.exit_code, 2)

    def test_create_route_in_resolved_team(self):
        result = self.runner.invoke(app, ["routes", "create", "--source", "42", "--target", "42"])
        self.assertEqual(result.exit_code, 0, result.output)
        self.assertIn("Created route 5 in team:7 scope.", result.output)
        self.assertEqual(self.server.posts, [("/api/team/7/routes", {"source_id": 42, "target_id": 42})])

    def test_cross_scope_route_is_refused(self):
        result = self.runner.invoke(app, ["routes", "create", "--source", "42", "--target", "3"])
        self.assertEqual(result.exit_code, 1)
        self.assertIn("different ownership", result.output)
        self.assertEqual(self.server.posts, [])

    def test_create_source_in_current_scope(self):
        result = self.runner.invoke(app, ["sources", "create", "ci", "--type", "gitlab"])
        self.assertEqual(result.exit_code, 0, result.output)
        self.assertEqual(self.server.posts, [("/api/personal/sources", {"name": "ci", "type": "gitlab"})])

    def test_scope_use_team_is_persisted(self):
        result = self.runner.invoke(app, ["scope", "use", "team", "7"])
        self.assertEqual(result.exit_code, 0, result.output)
        self.assertEqual(load_profile()["team_id"], 7)

        result = self.runner.invoke(app, ["targets", "create", "alerts", "--url", "https://chat.example.com/hook"])
        self.assertEqual(result.exit_code, 0, result.output)
        self.assertEqual(self.server.posts[0][0], "/api/team/7/targets")

    def test_scope_use_non_member_team_fails(self):
        result = self.runner.invoke(app, ["scope", "use", "team", "99"])
        self.assertEqual(result.exit_code, 1)
        self.assertNotIn("team_id", load_profile())

    def test_invalid_team_flag_is_a_usage_error(self):
        result = self.runner.invoke(app, ["sources", "list", "--team", "0"])
        self.assertEqual(result.exit_code, 2)
        self.assertIn("team_id must be >= 1", result.output)

    def test_invalid_route_endpoint_id_prints_error(self):
        result = self.runner.invoke(app, ["routes", "create", "--source", "0", "--target", "42"])
        self.assertEqual(result.exit_code, 1)
        self.assertIsInstance(result.exception, SystemExit)
        self.assertIn("source_id must be >= 1", result.output)
        self.assertEqual(self.server.posts, [])

    def test_retry_delivery_in_its_team(self):
        result = self.runner.invoke(app, ["deliveries", "retry", "30"])
        self.assertEqual(result.exit_code, 0, result.output)
        self.assertIn("Delivery 30 retried in team:7 scope: sent.", result.output)
        self.assertEqual(self.server.posts, [("/api/team/7/deliveries/30/retry", {})])

    def test_list_events_in_personal_scope(self):
        result = self.runner.invoke(app, ["events", "list", "--personal"])
        self.assertEqual(result.exit_code, 0, result.output)
        self.assertIn("push", result.output)

    def test_list_deliveries_rejects_unknown_status(self):
        result = self.runner.invoke(app, ["deliveries", "list", "--status", "lost"])
        self.assertEqual(result.exit_code, 1)
        self.assertIn("status must be one of", result.output)

    def test_empty_template_option_clears_template(self):
        result = self.runner.invoke(app, ["routes", "update", "8", "--template", ""])
        self.assertEqual(result.exit_code, 0, result.output)
        self.assertEqual(
            self.server.puts,
            [("/api/team/7/routes/8", {"source_id": 42, "target_id": 42, "message_template": None})],
        )

    def test_login_saves_profile(self):
        result = self.runner.invoke(
            app, ["login", "--api-key", "new-key", "--base-url", "https://hooks.example.com"]
        )
        self.assertEqual(result.exit_code, 0, result.output)
        profile = load_profile()
        self.assertEqual(profile["api_key"], "new-key")
        self.assertEqual(profile["base_url"], "https://hooks.example.com/api")


if __name__ == "__main__":
    unittest.main()
