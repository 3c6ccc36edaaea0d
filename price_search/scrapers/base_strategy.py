# price_search/scrapers/base_strategy.py

"""Base class for per-site HTML extraction strategies."""

import json
import logging
from dataclasses import dataclass
from typing import Any

from bs4 import BeautifulSoup, Tag
from bs4.element import PreformattedString
from soupsieve import SelectorSyntaxError

from price_search.config.settings import Settings
from price_search.models.external_source import ExternalSource


@dataclass
class Extraction:
    """What a strategy managed to pull out of one retailer page."""

    title: str
    raw_price_text: str
    image_url: str
    has_session_marker: bool


class ExtractionStrategy:
    """Locate title, price text and image in a retailer search page.

    Subclasses only adjust selectors (``selectors.json``) and the two
    hooks ``pick_price_element`` and ``rewrite_legacy_image``; the lookup
    order and fallbacks live here.
    """

    _HEADING_FALLBACK: list[str] = ["h1", "h2", "h3"]
    _IMAGE_ATTRS: tuple[str, ...] = ("src", "data-src", "data-lazy-src")
    _SCAN_SKIP_TAGS: set[str] = {"script", "style", "noscript"}

    def __init__(self, strategy_id: str) -> None:
        self.strategy_id = strategy_id
        self.logger = logging.getLogger(
            f"price_search.extract.{strategy_id}"
        )
        self.settings = Settings()
        all_selectors = self._load_all_selectors()
        self.selectors: dict[str, list[str]] = all_selectors.get(
            strategy_id, {}
        )
        self.fallback_image_selectors: list[str] = all_selectors.get(
            self.settings.DEFAULT_STRATEGY, {}
        ).get("image", [])

    def _load_all_selectors(self) -> dict[str, Any]:
        """Load the CSS selector table from selectors.json."""
        with open(self.settings.SELECTORS_PATH, encoding="utf-8") as f:
            all_selectors: dict[str, Any] = json.load(f)
        return all_selectors

    # ── Hooks ────────────────────────────────────────────

    def pick_price_element(self, elements: list[Tag]) -> Tag:
        """Choose the price node among all selector matches."""
        return elements[-1]

    def rewrite_legacy_image(self, url: str) -> str | None:
        """Rewrite a site-specific relative image path, if recognised."""
        return None

    # ── Helpers ──────────────────────────────────────────

    def _select(self, soup: BeautifulSoup, selector: str) -> list[Tag]:
        """CSS select, treating blank or invalid selectors as no match."""
        if not selector or not selector.strip():
            return []
        try:
            return list(soup.select(selector))
        except SelectorSyntaxError as exc:
            self.logger.warning(
                "[%s] Invalid selector %r: %s",
                self.strategy_id,
                selector,
                exc,
            )
            return []

    @staticmethod
    def _text(element: Tag) -> str:
        return " ".join(element.get_text().split())

    # ── Title ────────────────────────────────────────────

    def _resolve_title(
        self,
        soup: BeautifulSoup,
        source: ExternalSource,
        query: str,
    ) -> str:
        title = ""
        candidates = [
            *self.selectors.get("title", []),
            *self._HEADING_FALLBACK,
        ]
        for selector in candidates:
            matches = self._select(soup, selector)
            if matches:
                title = self._text(matches[0])
                if title:
                    break

        if (
            len(title) < self.settings.MIN_TITLE_LENGTH
            or title.lower() == source.name.strip().lower()
        ):
            return query
        return title

    # ── Image ────────────────────────────────────────────

    def _normalize_image_url(self, url: str, origin: str) -> str:
        if url.startswith("//"):
            return f"https:{url}"
        legacy = self.rewrite_legacy_image(url)
        if legacy is not None:
            return legacy
        if url.startswith("/"):
            return f"{origin}{url}"
        if url.startswith(("http://", "https://")):
            return url
        return f"{origin}/{url}"

    def _resolve_image(self, soup: BeautifulSoup, origin: str) -> str:
        candidates = dict.fromkeys(
            [
                *self.selectors.get("image", []),
                *self.fallback_image_selectors,
            ]
        )
        for selector in candidates:
            matches = self._select(soup, selector)
            if not matches:
                continue
            node = matches[0]
            for attr in self._IMAGE_ATTRS:
                value = str(node.get(attr) or "").strip()
                # Inline placeholders stand in for lazy-loaded images
                if value and not value.startswith("data:"):
                    return self._normalize_image_url(value, origin)
        return ""

    # ── Price ────────────────────────────────────────────

    def _scan_price_text(self, soup: BeautifulSoup) -> str:
        """Last short text node holding a currency symbol and a digit."""
        found = ""
        for element in soup.find_all(True):
            if element.name in self._SCAN_SKIP_TAGS:
                continue
            text = element.get_text()
            if len(text) >= self.settings.PRICE_SCAN_MAX_LENGTH:
                continue
            if not any(s in text for s in self.settings.CURRENCY_SYMBOLS):
                continue
            if any(ch.isdigit() for ch in text):
                found = text
        return found.strip()

    def _resolve_price_text(
        self, soup: BeautifulSoup, source: ExternalSource,
    ) -> str:
        selectors = dict.fromkeys(
            s
            for s in [
                *self.selectors.get("price", []),
                source.price_selector,
            ]
            if s and s.strip()
        )
        for selector in selectors:
            elements = self._select(soup, selector)
            if elements:
                return self._text(self.pick_price_element(elements))
        self.logger.debug(
            "[%s] No price selector matched for %s, scanning text",
            self.strategy_id,
            source.id,
        )
        return self._scan_price_text(soup)

    # ── Session marker ───────────────────────────────────

    def _visible_text(self, soup: BeautifulSoup) -> str:
        """Lower-cased rendered text with whitespace collapsed."""
        parts = [
            str(node)
            for node in soup.find_all(string=True)
            if not isinstance(node, PreformattedString)
            and node.parent is not None
            and node.parent.name not in self._SCAN_SKIP_TAGS
        ]
        return " ".join(" ".join(parts).split()).lower()

    def _find_session_marker(self, soup: BeautifulSoup) -> bool:
        text = self._visible_text(soup)
        return any(
            marker in text for marker in self.settings.SESSION_MARKERS
        )

    def has_session_marker(self, html: str) -> bool:
        """Weak signal that the page was served to a logged-in user.

        Only rendered text counts: a ``user:`` key inside an inline
        script or a comment says nothing about the visitor.
        """
        return self._find_session_marker(BeautifulSoup(html, "lxml"))

    # ── Entry point ──────────────────────────────────────

    def extract(
        self,
        html: str,
        source: ExternalSource,
        query: str,
    ) -> Extraction:
        """Run every extraction step over one fetched page."""
        soup = BeautifulSoup(html, "lxml")
        extraction = Extraction(
            title=self._resolve_title(soup, source, query),
            raw_price_text=self._resolve_price_text(soup, source),
            image_url=self._resolve_image(soup, source.origin),
            has_session_marker=self._find_session_marker(soup),
        )
        self.logger.debug(
            "[%s] %s: title=%r price=%r image=%r session=%s",
            self.strategy_id,
            source.id,
            extraction.title,
            extraction.raw_price_text,
            extraction.image_url,
            extraction.has_session_marker,
        )
        return extraction
