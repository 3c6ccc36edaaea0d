# price_search/services/search_orchestrator.py

"""Orchestrates the local catalog search and live per-source scrapes."""

import asyncio
import logging
from enum import Enum

from price_search.config.settings import Settings
from price_search.models.external_source import ExternalSource
from price_search.models.product import Product
from price_search.models.search_result import UnifiedSearchResult
from price_search.scrapers.relay_fetcher import RelayFetcher
from price_search.scrapers.scrape_pipeline import ScrapePipeline
from price_search.scrapers.strategy_registry import StrategyRegistry
from price_search.services.local_matcher import LocalIndex

logger = logging.getLogger("price_search.orchestrator")


class SearchMode(Enum):
    """Whether a search also hits the external sources."""

    LOCAL = "local"
    GLOBAL = "global"


def _sort_key(result: UnifiedSearchResult) -> tuple[int, float]:
    if result.has_numeric_price:
        return (0, float(result.price))
    return (1, 0.0)


def sort_results(
    results: list[UnifiedSearchResult],
) -> list[UnifiedSearchResult]:
    """Numeric prices ascending, then every sentinel price, stable."""
    return sorted(results, key=_sort_key)


def mark_best_price(
    results: list[UnifiedSearchResult],
) -> list[UnifiedSearchResult]:
    """Flag the result(s) holding the lowest numeric price."""
    prices = [
        float(r.price) for r in results if r.has_numeric_price
    ]
    if not prices:
        return results
    lowest = min(prices)
    for r in results:
        r.is_best_price = r.has_numeric_price and float(r.price) == lowest
    return results


class SearchOrchestrator:
    """Coordinates the local matcher and one scrape pipeline per source."""

    def __init__(
        self,
        index: LocalIndex | None = None,
        registry: StrategyRegistry | None = None,
        local_color: str | None = None,
    ) -> None:
        self.settings = Settings()
        self.index = index or LocalIndex(color=local_color)
        self.registry = registry or StrategyRegistry()

    # ── Private helpers ──────────────────────────────────

    async def _search_local(
        self, query: str, catalog: list[Product],
    ) -> list[UnifiedSearchResult]:
        if self.index.is_stale(catalog):
            self.index.rebuild(catalog)
        results: list[UnifiedSearchResult] = await asyncio.to_thread(
            self.index.search, query
        )
        return results

    async def _run_scrapers(
        self, query: str, sources: list[ExternalSource],
    ) -> list[UnifiedSearchResult]:
        """Run every source pipeline concurrently and collect results."""
        if not sources:
            return []
        fetcher = RelayFetcher()
        pipeline = ScrapePipeline(fetcher, self.registry)
        try:
            batches = await asyncio.gather(
                *(pipeline.run(query, src) for src in sources),
                return_exceptions=True,
            )
        finally:
            await fetcher.close()

        results: list[UnifiedSearchResult] = []
        for source, outcome in zip(sources, batches):
            if isinstance(outcome, UnifiedSearchResult):
                results.append(outcome)
            elif isinstance(outcome, Exception):
                logger.error(
                    "Scraper error for source %s, query '%s': %s",
                    source.id,
                    query,
                    outcome,
                    exc_info=outcome,
                )
                results.append(
                    pipeline.error_result(
                        query, source, source.build_url(query)
                    )
                )
        return results

    # ── Entry point ──────────────────────────────────────

    async def search(
        self,
        query: str,
        catalog: list[Product],
        sources: list[ExternalSource],
        mode: SearchMode = SearchMode.GLOBAL,
    ) -> list[UnifiedSearchResult]:
        """Search the catalog and, in global mode, every active source.

        Local results come first, then external results in source
        order, and the merged list is sorted by price with sentinel
        prices last.
        """
        if not query or not query.strip():
            return []

        if mode is SearchMode.LOCAL:
            return await self._search_local(query, catalog)

        active = [s for s in sources if s.active]
        logger.info(
            "Searching '%s' locally and across %d active sources",
            query,
            len(active),
        )
        local_results, external_results = await asyncio.gather(
            self._search_local(query, catalog),
            self._run_scrapers(query, active),
        )
        return sort_results([*local_results, *external_results])
