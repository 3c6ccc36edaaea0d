# price_search/scrapers/relay_fetcher.py

"""Fetch retailer pages through an ordered list of public relays."""

import json
import logging
import urllib.parse
from typing import Any

from curl_cffi import requests as curl_requests

from price_search.config.settings import Settings


class FetchError(Exception):
    """Raised when every configured relay failed for one target URL."""


class RelayFetcher:
    """Try each relay endpoint in turn until one returns the page.

    Relays are attempted strictly one after another so a single scrape
    never fans out more than one outbound request at a time.
    """

    def __init__(self, relays: list[str] | None = None) -> None:
        self.logger = logging.getLogger("price_search.relay")
        self.settings = Settings()
        self.relays: list[str] = list(
            relays
            if relays is not None
            else self.settings.RELAY_TEMPLATES
        )
        self.session = curl_requests.AsyncSession(
            impersonate=self.settings.IMPERSONATE_BROWSER
        )
        self._request_timeout: int = self.settings.REQUEST_TIMEOUT

    def _build_headers(
        self, target_url: str, cookie_header: str,
    ) -> dict[str, str]:
        """Browser-like headers with the target origin as Referer."""
        parts = urllib.parse.urlsplit(target_url)
        headers: dict[str, str] = {
            **self.settings.DEFAULT_HEADERS,
            "User-Agent": self.settings.USER_AGENT,
            "Referer": f"{parts.scheme}://{parts.netloc}",
        }
        if cookie_header:
            headers["Cookie"] = cookie_header
        return headers

    @staticmethod
    def _unwrap(text: str) -> str:
        """Return the page body, unwrapping ``{"contents": ...}`` envelopes."""
        if not text.lstrip().startswith(("{", "[")):
            return text
        try:
            data: Any = json.loads(text)
        except ValueError:
            return text
        if isinstance(data, dict) and data.get("contents"):
            contents: Any = data["contents"]
            if isinstance(contents, str):
                return contents
            return json.dumps(contents)
        return json.dumps(data)

    async def fetch(
        self, target_url: str, cookie_header: str = "",
    ) -> str:
        """Return the raw document for *target_url*.

        Raises:
            FetchError: when all relays failed, chained from the last
                error observed.
        """
        headers = self._build_headers(target_url, cookie_header)
        encoded = urllib.parse.quote(target_url, safe="")
        last_error: Exception | None = None

        for attempt, template in enumerate(self.relays, 1):
            relay_url = template.format(url=encoded)
            try:
                resp = await self.session.get(
                    relay_url,
                    headers=headers,
                    timeout=self._request_timeout,
                )
                if 200 <= resp.status_code < 300:
                    self.logger.debug(
                        "[relay %d] %d bytes for %s",
                        attempt,
                        len(resp.text),
                        target_url,
                    )
                    return self._unwrap(resp.text)
                last_error = FetchError(
                    f"HTTP {resp.status_code} from {relay_url}"
                )
                self.logger.warning(
                    "[relay %d] HTTP %d for %s",
                    attempt,
                    resp.status_code,
                    target_url,
                )
            except Exception as exc:
                last_error = exc
                self.logger.warning(
                    "[relay %d] Request error for %s: %s",
                    attempt,
                    target_url,
                    exc,
                    exc_info=True,
                )

        if last_error is None:
            raise FetchError("Could not reach the provider")
        raise FetchError(
            f"All {len(self.relays)} relays failed for "
            f"{target_url}: {last_error}"
        ) from last_error

    async def close(self) -> None:
        """Release the underlying HTTP session."""
        await self.session.close()
