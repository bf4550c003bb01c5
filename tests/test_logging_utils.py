"""
Tests for root logger setup
"""

import io
import json
import logging
import unittest

from postmark_client.utils.logging_utils import configure_logging, resolve_level
from postmark_client.utils.structured_logging import JSONFormatter


class TestConfigureLogging(unittest.TestCase):

    def setUp(self):
        self.root = logging.getLogger()
        self.previous_level = self.root.level
        self.stream = io.StringIO()

    def _install(self, *args, **kwargs):
        handler = configure_logging(*args, stream=self.stream, **kwargs)
        self.addCleanup(self.root.removeHandler, handler)
        self.addCleanup(self.root.setLevel, self.previous_level)
        return handler

    def test_plain_text_output(self):
        self._install("DEBUG")

        logging.getLogger("DeliveryClient").debug("Sending message to %s", "j***@example.com")

        line = self.stream.getvalue().strip()
        self.assertIn(" - DeliveryClient - DEBUG - Sending message to j***@example.com", line)
        self.assertEqual(self.root.level, logging.DEBUG)

    def test_json_output(self):
        handler = self._install("INFO", json_format=True)

        logging.getLogger("DeliveryClient").info(
            "Message accepted", extra={"extra_fields": {"server_token": "abc-123"}}
        )

        self.assertIsInstance(handler.formatter, JSONFormatter)
        data = json.loads(self.stream.getvalue().strip().splitlines()[-1])
        self.assertEqual(data["message"], "Message accepted")
        self.assertEqual(data["server_token"], "[REDACTED]")

    def test_level_name_is_case_insensitive(self):
        self._install("warning")
        self.assertEqual(self.root.level, logging.WARNING)

    def test_invalid_level_falls_back_to_info(self):
        self._install("LOUD")

        self.assertEqual(self.root.level, logging.INFO)
        self.assertIn("Invalid log level 'LOUD'; defaulting to INFO", self.stream.getvalue())


class TestResolveLevel(unittest.TestCase):

    def test_known_levels(self):
        self.assertEqual(resolve_level("error"), logging.ERROR)
        self.assertEqual(resolve_level("CRITICAL"), logging.CRITICAL)

    def test_unknown_level(self):
        self.assertIsNone(resolve_level("verbose"))


if __name__ == '__main__':
    unittest.main()
