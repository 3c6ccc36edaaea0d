# price_search/services/session_manager.py

"""User-driven login sessions for sources that require authentication."""

import asyncio
import json
import logging
import webbrowser
from collections.abc import Callable, Generator
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from playwright.async_api import (
    BrowserContext,
    Error as PlaywrightError,
    Page,
    Playwright,
    async_playwright,
)

from price_search.config.settings import Settings
from price_search.models.external_source import ExternalSource

CookieCallback = Callable[[ExternalSource, str], None]
_Cookies = list[dict[str, Any]]


@dataclass
class SessionHandle:
    """Handle on a running login session; may be ignored or cancelled."""

    source_id: str
    task: "asyncio.Task[bool]"

    def cancel(self) -> bool:
        """Stop waiting for the login window and close the browser."""
        return self.task.cancel()

    def done(self) -> bool:
        return self.task.done()

    def __await__(self) -> Generator[Any, None, bool]:
        return self.task.__await__()


class SessionManager:
    """Open a login window for a source and wait for the user to close it.

    A persistent browser profile per source keeps the login between
    runs. The origin's cookies are read on every poll while the window
    is open and once more after a grace period, then handed to
    ``on_cookies`` as the JSON ``[{name, value}]`` array accepted by
    ``cookies_config``. Awaiting the handle gives ``True`` only when
    cookies were stored.
    """

    def __init__(
        self,
        sessions_dir: Path | None = None,
        on_cookies: CookieCallback | None = None,
    ) -> None:
        self.logger = logging.getLogger("price_search.session")
        self.settings = Settings()
        self.sessions_dir = Path(
            sessions_dir or self.settings.SESSIONS_DIR
        )
        self.on_cookies = on_cookies

    def manage_session(
        self, source: ExternalSource,
    ) -> SessionHandle | None:
        """Start a login session in the background.

        Must be called from a running event loop. Returns ``None`` when
        the source has no URL to open.
        """
        if not source.url_template:
            return None
        self.logger.info(
            "[%s] Starting login session for %s",
            source.id,
            source.name,
        )
        task = asyncio.create_task(
            self._run(source), name=f"session_{source.id}"
        )
        return SessionHandle(source_id=source.id, task=task)

    def _open_fallback(self, source: ExternalSource) -> None:
        self.logger.info(
            "[%s] Opening %s in the default browser",
            source.id,
            source.url_template,
        )
        webbrowser.open(source.url_template)

    async def _run(self, source: ExternalSource) -> bool:
        origin = source.origin
        if not origin:
            self.logger.warning(
                "[%s] Cannot derive an origin from %r",
                source.id,
                source.url_template,
            )
            self._open_fallback(source)
            return False
        try:
            async with async_playwright() as pw:
                return await self._run_browser(pw, source, origin)
        except PlaywrightError as exc:
            self.logger.warning(
                "[%s] Login session failed: %s",
                source.id,
                exc,
                exc_info=True,
            )
            return False

    async def _open_surface(
        self, pw: Playwright, source: ExternalSource, origin: str,
    ) -> tuple[BrowserContext, Page]:
        profile_dir = self.sessions_dir / f"session_{source.id}"
        profile_dir.mkdir(parents=True, exist_ok=True)
        context = await pw.chromium.launch_persistent_context(
            str(profile_dir),
            headless=False,
            viewport=self.settings.SESSION_WINDOW,
        )
        try:
            page = (
                context.pages[0] if context.pages else await context.new_page()
            )
            await page.goto(origin)
        except PlaywrightError:
            await self._close_quietly(source, context)
            raise
        return context, page

    async def _close_quietly(
        self, source: ExternalSource, context: BrowserContext,
    ) -> None:
        try:
            await context.close()
        except PlaywrightError as exc:
            self.logger.debug(
                "[%s] Browser context already closed: %s", source.id, exc
            )

    async def _snapshot(
        self,
        source: ExternalSource,
        context: BrowserContext,
        origin: str,
        previous: _Cookies,
    ) -> _Cookies:
        """Cookies for *origin*, or *previous* once the context is gone."""
        try:
            return list(await context.cookies(origin))
        except PlaywrightError as exc:
            self.logger.debug(
                "[%s] Keeping last cookie snapshot: %s", source.id, exc
            )
            return previous

    async def _run_browser(
        self, pw: Playwright, source: ExternalSource, origin: str,
    ) -> bool:
        try:
            context, page = await self._open_surface(pw, source, origin)
        except PlaywrightError as exc:
            self.logger.warning(
                "[%s] Could not open login window: %s",
                source.id,
                exc,
            )
            self._open_fallback(source)
            return False

        cookies: _Cookies = []
        try:
            # Closing the last page usually closes the context as well,
            # so cookies are captured on every poll while it is still open
            while not page.is_closed():
                cookies = await self._snapshot(
                    source, context, origin, cookies
                )
                await asyncio.sleep(self.settings.SESSION_POLL_INTERVAL)
            self.logger.info(
                "[%s] Login window closed, syncing cookies (%.0fs)",
                source.id,
                self.settings.SESSION_GRACE_PERIOD,
            )
            await asyncio.sleep(self.settings.SESSION_GRACE_PERIOD)
            cookies = await self._snapshot(source, context, origin, cookies)
        finally:
            await self._close_quietly(source, context)

        return self._write_back(source, cookies)

    def _write_back(
        self, source: ExternalSource, cookies: _Cookies,
    ) -> bool:
        if not cookies:
            self.logger.warning(
                "[%s] No cookies captured for %s", source.id, source.name
            )
            return False
        if self.on_cookies is None:
            return False
        payload = json.dumps(
            [
                {"name": c.get("name", ""), "value": c.get("value", "")}
                for c in cookies
            ]
        )
        self.on_cookies(source, payload)
        self.logger.info(
            "[%s] Stored %d cookies for %s",
            source.id,
            len(cookies),
            source.name,
        )
        return True
