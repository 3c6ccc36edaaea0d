# price_search/scrapers/disfren_strategy.py

"""Extraction strategy for Disfren (repuestosparafrenos.com.ar)."""

from bs4 import Tag

from price_search.scrapers.base_strategy import ExtractionStrategy


class DisfrenStrategy(ExtractionStrategy):
    """Disfren shows a list price followed by the discounted net price."""

    BASE_URL = "https://repuestosparafrenos.com.ar/"

    def __init__(self) -> None:
        super().__init__("disfren")

    def pick_price_element(self, elements: list[Tag]) -> Tag:
        """Take the net price (second occurrence) when both are shown."""
        if len(elements) >= 2:
            return elements[1]
        return elements[-1]

    def rewrite_legacy_image(self, url: str) -> str | None:
        """Resolve ``../img/...`` paths against the site root."""
        if url.startswith("../"):
            return self.BASE_URL + url[len("../"):]
        return None
