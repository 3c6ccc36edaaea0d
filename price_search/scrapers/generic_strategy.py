# price_search/scrapers/generic_strategy.py

"""Fallback extraction strategy for sites without bespoke rules."""

from price_search.scrapers.base_strategy import ExtractionStrategy


class GenericStrategy(ExtractionStrategy):
    """Headings for the title, the source's own price selector."""

    def __init__(self) -> None:
        super().__init__("generic")
