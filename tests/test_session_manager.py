# tests/test_session_manager.py

"""Tests for the login session manager with a mocked browser."""

import asyncio
import json
import tempfile
import unittest
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock, patch

from playwright.async_api import Error as PlaywrightError

from price_search.models.external_source import ExternalSource
from price_search.services.session_manager import SessionManager

PW_PATH = "price_search.services.session_manager.async_playwright"
BROWSER_PATH = "price_search.services.session_manager.webbrowser.open"


def _source(**overrides: object) -> ExternalSource:
    fields: dict[str, object] = {
        "id": "mayorista",
        "name": "Mayorista",
        "url_template": "https://mayorista.test/buscar?q=[QUERY]",
        "requires_login": True,
    }
    fields.update(overrides)
    return ExternalSource(**fields)  # type: ignore[arg-type]


def _browser(
    mock_pw: MagicMock,
    cookies: list[dict[str, str]] | None = None,
    closed: list[bool] | None = None,
) -> tuple[MagicMock, MagicMock, MagicMock]:
    """Wire async_playwright() to a fake context with one page."""
    page = MagicMock()
    page.goto = AsyncMock()
    if closed is None:
        page.is_closed.side_effect = [False, True]
    else:
        page.is_closed.side_effect = closed

    context = MagicMock()
    context.pages = [page]
    context.cookies = AsyncMock(return_value=cookies or [])
    context.close = AsyncMock()

    pw = MagicMock()
    pw.chromium.launch_persistent_context = AsyncMock(return_value=context)

    manager_cm = MagicMock()
    manager_cm.__aenter__ = AsyncMock(return_value=pw)
    manager_cm.__aexit__ = AsyncMock(return_value=False)
    mock_pw.return_value = manager_cm
    return pw, context, page


class TestSessionManager(unittest.IsolatedAsyncioTestCase):
    """SessionManager.manage_session lifecycle."""

    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.sessions_dir = Path(self._tmp.name)
        self.on_cookies = MagicMock()
        self.manager = SessionManager(
            sessions_dir=self.sessions_dir, on_cookies=self.on_cookies
        )

    def tearDown(self) -> None:
        self._tmp.cleanup()

    @patch(PW_PATH)
    async def test_cookies_written_back_after_close(
        self, mock_pw: MagicMock,
    ) -> None:
        """Closing the window hands the origin's cookies to the callback."""
        pw, context, page = _browser(
            mock_pw,
            cookies=[
                {"name": "sid", "value": "abc", "domain": "mayorista.test"},
                {"name": "cart", "value": "7", "path": "/"},
            ],
        )
        source = _source()

        handle = self.manager.manage_session(source)
        assert handle is not None
        synced = await handle

        self.assertTrue(synced)
        self.assertTrue(handle.done())
        page.goto.assert_awaited_once_with("https://mayorista.test")
        context.cookies.assert_awaited_with("https://mayorista.test")
        context.close.assert_awaited_once()
        self.on_cookies.assert_called_once()
        called_source, payload = self.on_cookies.call_args.args
        self.assertIs(called_source, source)
        self.assertEqual(
            json.loads(payload),
            [
                {"name": "sid", "value": "abc"},
                {"name": "cart", "value": "7"},
            ],
        )

    @patch(PW_PATH)
    async def test_persistent_profile_per_source(
        self, mock_pw: MagicMock,
    ) -> None:
        pw, _, _ = _browser(mock_pw)

        handle = self.manager.manage_session(_source())
        assert handle is not None
        await handle

        profile = self.sessions_dir / "session_mayorista"
        self.assertTrue(profile.is_dir())
        args, kwargs = pw.chromium.launch_persistent_context.call_args
        self.assertEqual(args[0], str(profile))
        self.assertFalse(kwargs["headless"])

    @patch(PW_PATH)
    async def test_no_cookies_no_callback(
        self, mock_pw: MagicMock,
    ) -> None:
        _browser(mock_pw, cookies=[])

        handle = self.manager.manage_session(_source())
        assert handle is not None
        self.assertFalse(await handle)

        self.on_cookies.assert_not_called()

    @patch(BROWSER_PATH)
    @patch(PW_PATH)
    async def test_launch_failure_opens_default_browser(
        self, mock_pw: MagicMock, mock_open: MagicMock,
    ) -> None:
        """Without a usable browser the URL goes to the system browser."""
        pw, context, _ = _browser(mock_pw)
        pw.chromium.launch_persistent_context.side_effect = PlaywrightError(
            "Executable doesn't exist"
        )
        source = _source()

        handle = self.manager.manage_session(source)
        assert handle is not None
        self.assertFalse(await handle)

        mock_open.assert_called_once_with(source.url_template)
        self.on_cookies.assert_not_called()
        context.close.assert_not_awaited()

    @patch(BROWSER_PATH)
    @patch(PW_PATH)
    async def test_no_origin_opens_default_browser(
        self, mock_pw: MagicMock, mock_open: MagicMock,
    ) -> None:
        source = _source(url_template="buscar.php?q=[QUERY]")

        handle = self.manager.manage_session(source)
        assert handle is not None
        await handle

        mock_open.assert_called_once_with("buscar.php?q=[QUERY]")
        mock_pw.assert_not_called()

    async def test_no_url_returns_none(self) -> None:
        self.assertIsNone(
            self.manager.manage_session(_source(url_template=""))
        )

    @patch(PW_PATH)
    async def test_cancel_closes_browser(
        self, mock_pw: MagicMock,
    ) -> None:
        """Cancelling while the user is still logging in closes the window."""
        _, context, page = _browser(mock_pw)
        page.is_closed.side_effect = None
        page.is_closed.return_value = False

        handle = self.manager.manage_session(_source())
        assert handle is not None
        await asyncio.sleep(0)
        self.assertTrue(handle.cancel())

        with self.assertRaises(asyncio.CancelledError):
            await handle
        context.close.assert_awaited_once()
        self.on_cookies.assert_not_called()

    @patch(PW_PATH)
    async def test_browser_error_while_waiting_is_logged(
        self, mock_pw: MagicMock,
    ) -> None:
        """A browser crash ends the session quietly without write-back."""
        _, context, page = _browser(mock_pw)
        page.is_closed.side_effect = PlaywrightError("Target closed")

        handle = self.manager.manage_session(_source())
        assert handle is not None
        with self.assertLogs("price_search.session", level="WARNING"):
            self.assertFalse(await handle)

        context.close.assert_awaited_once()
        self.on_cookies.assert_not_called()

    @patch(PW_PATH)
    async def test_cookies_kept_when_context_closes_with_window(
        self, mock_pw: MagicMock,
    ) -> None:
        """Closing the last page tears down the context; the cookies read
        while it was open are still stored."""
        _, context, _ = _browser(mock_pw)
        context.cookies.side_effect = [
            [{"name": "sid", "value": "abc"}],
            PlaywrightError("Target page, context or browser has been closed"),
        ]
        context.close.side_effect = PlaywrightError("Browser has been closed")

        handle = self.manager.manage_session(_source())
        assert handle is not None
        synced = await handle

        self.assertTrue(synced)
        self.assertEqual(context.cookies.await_count, 2)
        self.on_cookies.assert_called_once()
        _, payload = self.on_cookies.call_args.args
        self.assertEqual(
            json.loads(payload), [{"name": "sid", "value": "abc"}]
        )

    @patch(PW_PATH)
    async def test_latest_cookies_win(
        self, mock_pw: MagicMock,
    ) -> None:
        """Cookies set just before closing replace the earlier snapshot."""
        _, context, _ = _browser(mock_pw, closed=[False, False, True])
        context.cookies.side_effect = [
            [],
            [{"name": "sid", "value": "old"}],
            [{"name": "sid", "value": "new"}],
        ]

        handle = self.manager.manage_session(_source())
        assert handle is not None
        self.assertTrue(await handle)

        _, payload = self.on_cookies.call_args.args
        self.assertEqual(
            json.loads(payload), [{"name": "sid", "value": "new"}]
        )

    @patch(BROWSER_PATH)
    @patch(PW_PATH)
    async def test_navigation_failure_closes_context(
        self, mock_pw: MagicMock, mock_open: MagicMock,
    ) -> None:
        """A failed first navigation closes the launched profile."""
        _, context, page = _browser(mock_pw)
        page.goto.side_effect = PlaywrightError("net::ERR_NAME_NOT_RESOLVED")
        source = _source()

        handle = self.manager.manage_session(source)
        assert handle is not None
        self.assertFalse(await handle)

        context.close.assert_awaited_once()
        mock_open.assert_called_once_with(source.url_template)
        self.on_cookies.assert_not_called()


if __name__ == "__main__":
    unittest.main()
