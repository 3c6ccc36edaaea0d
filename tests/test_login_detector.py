# tests/test_login_detector.py

"""Tests for the login-state detector."""

import unittest

from price_search.models.search_result import LoginReason
from price_search.scrapers.login_detector import login_reason, needs_login


class TestNeedsLogin(unittest.TestCase):
    """needs_login truth table."""

    def test_gated_source_without_credentials(self) -> None:
        """Declared login, no marker, no cookie: login even with a price."""
        self.assertTrue(
            needs_login(
                has_session_marker=False,
                requires_login=True,
                cookie_present=False,
                price_missing=False,
            )
        )

    def test_cookie_satisfies_gated_source(self) -> None:
        self.assertFalse(
            needs_login(
                has_session_marker=False,
                requires_login=True,
                cookie_present=True,
                price_missing=False,
            )
        )

    def test_session_marker_satisfies_gated_source(self) -> None:
        self.assertFalse(
            needs_login(
                has_session_marker=True,
                requires_login=True,
                cookie_present=False,
                price_missing=False,
            )
        )

    def test_missing_price_always_needs_login(self) -> None:
        """An unparseable price triggers login regardless of credentials."""
        for marker in (True, False):
            for cookie in (True, False):
                for declared in (True, False):
                    with self.subTest(
                        marker=marker, cookie=cookie, declared=declared
                    ):
                        self.assertTrue(
                            needs_login(marker, declared, cookie, True)
                        )

    def test_open_source_with_price(self) -> None:
        self.assertFalse(needs_login(False, False, False, False))


class TestLoginReason(unittest.TestCase):
    """The reason distinguishes missing credentials from missing prices."""

    def test_no_credentials_wins(self) -> None:
        self.assertEqual(
            login_reason(False, True, False, True),
            LoginReason.NO_CREDENTIALS,
        )

    def test_price_missing(self) -> None:
        self.assertEqual(
            login_reason(True, True, False, True),
            LoginReason.PRICE_MISSING,
        )

    def test_no_reason(self) -> None:
        self.assertIsNone(login_reason(False, False, False, False))


if __name__ == "__main__":
    unittest.main()
