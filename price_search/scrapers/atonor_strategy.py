# price_search/scrapers/atonor_strategy.py

"""Extraction strategy for Atonor (WooCommerce on Elementor)."""

from price_search.scrapers.base_strategy import ExtractionStrategy


class AtonorStrategy(ExtractionStrategy):
    """Atonor renders titles in Elementor heading widgets.

    Images are usually lazy-loaded, so ``data-src`` is the common hit.
    """

    def __init__(self) -> None:
        super().__init__("atonor")
