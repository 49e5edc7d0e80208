import io
import json
import logging
import unittest

from hookcats.logging_config import StructuredLogger, setup_logging


class LoggingTests(unittest.TestCase):
    def setUp(self):
        self.stream = io.StringIO()
        self.addCleanup(setattr, logging.getLogger("hookcats"), "handlers", [])

    def test_json_records_carry_fields(self):
        setup_logging("DEBUG", "json", stream=self.stream)

        StructuredLogger("core.prober").info("Probing scope", scope="team:7", team_id=None)

        entry = json.loads(self.stream.getvalue().strip())
        self.assertEqual(entry["logger"], "hookcats.core.prober")
        self.assertEqual(entry["level"], "INFO")
        self.assertEqual(entry["scope"], "team:7")
        self.assertNotIn("team_id", entry)

    def test_bound_fields_repeat_and_cannot_clobber_base_keys(self):
        setup_logging("DEBUG", "json", stream=self.stream)
        log = StructuredLogger("hookcats.core").bind(kind="sources", id=42)

        log.warning("first", message="shadow")
        log.debug("second", id=43)

        first, second = [json.loads(line) for line in self.stream.getvalue().splitlines()]
        self.assertEqual((first["kind"], first["id"]), ("sources", 42))
        self.assertEqual(first["message"], "first")
        self.assertEqual(first["field_message"], "shadow")
        self.assertEqual(second["id"], 43)

    def test_level_filters_records(self):
        setup_logging("WARNING", "json", stream=self.stream)
        StructuredLogger("core").info("hidden")
        self.assertEqual(self.stream.getvalue(), "")

    def test_rich_format_renders_key_values(self):
        setup_logging("INFO", "rich", stream=self.stream)

        StructuredLogger("core").info("Route created", id=5, scope="personal")

        output = self.stream.getvalue()
        self.assertIn("Route created", output)
        self.assertIn("id=5", output)
        self.assertIn("scope=personal", output)

    def test_unknown_format_is_rejected(self):
        with self.assertRaises(ValueError):
            setup_logging("INFO", "xml", stream=self.stream)


if __name__ == "__main__":
    unittest.main()
