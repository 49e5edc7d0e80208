import asyncio
import unittest

from fakes import FakeCollectionApi

from hookcats.core import MutationDispatcher
from hookcats.errors import InvalidScopeError
from hookcats.scopes import PERSONAL, ResourceKind, TeamScope


class MutationDispatcherTests(unittest.TestCase):
    def setUp(self):
        self.api = FakeCollectionApi()
        self.dispatcher = MutationDispatcher(self.api)

    def test_create_targets_given_scope(self):
        created = asyncio.run(
            self.dispatcher.create_in_scope("sources", TeamScope(3), {"name": "nas", "type": "synology"})
        )

        self.assertEqual(created.scope, TeamScope(3))
        self.assertEqual(created.kind, ResourceKind.SOURCE)
        self.assertEqual(self.api.mutation_calls("create")[0][2], TeamScope(3))

    def test_scope_keys_are_not_sent(self):
        asyncio.run(
            self.dispatcher.create_in_scope(
                ResourceKind.TARGET, PERSONAL, {"name": "chat", "scope": "team", "team_id": 9}
            )
        )

        self.assertEqual(self.api.mutation_calls("create")[0][3], {"name": "chat"})

    def test_update_and_delete_stay_in_scope(self):
        self.api.add(ResourceKind.TARGET, TeamScope(3), 5, name="old")

        updated = asyncio.run(self.dispatcher.update_in_scope("targets", TeamScope(3), 5, {"name": "new"}))
        asyncio.run(self.dispatcher.delete_in_scope("targets", TeamScope(3), 5))

        self.assertEqual(updated.scope, TeamScope(3))
        self.assertEqual(updated.name, "new")
        self.assertEqual(self.api.mutation_calls("delete"), [("delete", ResourceKind.TARGET, TeamScope(3), 5)])

    def test_known_resource_skips_probing(self):
        self.api.add(ResourceKind.SOURCE, PERSONAL, 8, name="a")
        resource = asyncio.run(self.api.list_scoped_resources(ResourceKind.SOURCE, PERSONAL))[0]
        self.api.calls.clear()

        asyncio.run(self.dispatcher.update_resource(resource, {"name": "b"}))

        self.assertEqual(self.api.list_calls(), [])
        self.assertEqual(len(self.api.mutation_calls("update")), 1)

    def test_rejects_non_scope(self):
        with self.assertRaises(InvalidScopeError):
            asyncio.run(self.dispatcher.create_in_scope("sources", "team", {"name": "x"}))
        self.assertEqual(self.api.calls, [])


if __name__ == "__main__":
    unittest.main()
