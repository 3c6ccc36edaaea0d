# tests/test_settings.py

"""Tests for the Settings configuration class."""

import json
import unittest
from pathlib import Path

from price_search.config.settings import Settings


class TestSettings(unittest.TestCase):
    """Verify Settings constants and the strategy registry."""

    def test_request_timeout_is_positive_int(self) -> None:
        """REQUEST_TIMEOUT must be a positive integer."""
        self.assertIsInstance(Settings.REQUEST_TIMEOUT, int)
        self.assertGreater(Settings.REQUEST_TIMEOUT, 0)

    def test_relay_templates_take_url(self) -> None:
        """Every relay template has exactly one {url} slot."""
        self.assertGreaterEqual(len(Settings.RELAY_TEMPLATES), 1)
        for template in Settings.RELAY_TEMPLATES:
            with self.subTest(template=template):
                self.assertEqual(template.count("{url}"), 1)
                self.assertTrue(template.startswith("https://"))

    def test_match_threshold_in_range(self) -> None:
        self.assertGreater(Settings.MATCH_THRESHOLD, 0)
        self.assertLess(Settings.MATCH_THRESHOLD, 1)

    def test_each_strategy_has_required_keys(self) -> None:
        """Every strategy must have id, label, and strategy keys."""
        for entry in Settings.EXTRACTION_STRATEGIES:
            with self.subTest(entry=entry.get("id", "?")):
                self.assertIn("id", entry)
                self.assertIn("label", entry)
                self.assertIn("strategy", entry)

    def test_strategy_ids_are_unique(self) -> None:
        ids = [s["id"] for s in Settings.EXTRACTION_STRATEGIES]
        self.assertEqual(len(ids), len(set(ids)))

    def test_default_strategy_registered(self) -> None:
        ids = {s["id"] for s in Settings.EXTRACTION_STRATEGIES}
        self.assertIn(Settings.DEFAULT_STRATEGY, ids)

    def test_every_strategy_has_selectors(self) -> None:
        """selectors.json carries an entry per registered strategy."""
        with open(Settings.SELECTORS_PATH, encoding="utf-8") as f:
            selectors = json.load(f)
        for entry in Settings.EXTRACTION_STRATEGIES:
            with self.subTest(entry=entry["id"]):
                self.assertIn(entry["id"], selectors)

    def test_sentinels_are_distinct(self) -> None:
        self.assertNotEqual(
            Settings.LOGIN_REQUIRED_PRICE, Settings.NETWORK_ERROR_PRICE
        )
        self.assertEqual(
            len(
                {
                    Settings.SKU_EXTERNAL,
                    Settings.SKU_AUTH_REQUIRED,
                    Settings.SKU_ERROR,
                }
            ),
            3,
        )

    def test_path_constants_are_paths(self) -> None:
        """Path-typed settings are Path instances."""
        self.assertIsInstance(Settings.BASE_DIR, Path)
        self.assertIsInstance(Settings.SELECTORS_PATH, Path)
        self.assertIsInstance(Settings.DATA_DIR, Path)
        self.assertIsInstance(Settings.LOGS_DIR, Path)
        self.assertIsInstance(Settings.SESSIONS_DIR, Path)

    def test_selectors_path_exists(self) -> None:
        """The selectors.json file must exist on disk."""
        self.assertTrue(Settings.SELECTORS_PATH.exists())

    def test_impersonate_browser_is_string(self) -> None:
        """IMPERSONATE_BROWSER must be a non-empty string."""
        self.assertIsInstance(Settings.IMPERSONATE_BROWSER, str)
        self.assertTrue(len(Settings.IMPERSONATE_BROWSER) > 0)

    def test_default_headers_has_accept_language(self) -> None:
        """DEFAULT_HEADERS must include Accept-Language."""
        self.assertIn("Accept-Language", Settings.DEFAULT_HEADERS)


if __name__ == "__main__":
    unittest.main()
