from __future__ import annotations

import logging
import unittest

from observability.logging_config import _resolve_level


class TestLoggingConfig(unittest.TestCase):
    def test_resolves_level_names(self) -> None:
        self.assertEqual(logging.DEBUG, _resolve_level("debug"))
        self.assertEqual(logging.WARNING, _resolve_level("WARNING"))
        self.assertEqual(logging.ERROR, _resolve_level(logging.ERROR))
        self.assertEqual(logging.INFO, _resolve_level(None))

    def test_unknown_level_falls_back_to_info(self) -> None:
        self.assertEqual(logging.INFO, _resolve_level("chatty"))


if __name__ == "__main__":
    unittest.main()
