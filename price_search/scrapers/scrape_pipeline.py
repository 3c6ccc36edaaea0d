# price_search/scrapers/scrape_pipeline.py

"""Per-source scrape: fetch, extract, normalise price, detect login."""

import asyncio
import logging

from price_search.config.settings import Settings
from price_search.models.external_source import ExternalSource
from price_search.models.search_result import (
    ResultKind,
    ResultStatus,
    UnifiedSearchResult,
)
from price_search.scrapers.login_detector import login_reason
from price_search.scrapers.price_normalizer import (
    is_price_missing,
    normalize_price,
)
from price_search.scrapers.relay_fetcher import RelayFetcher
from price_search.scrapers.strategy_registry import StrategyRegistry


class ScrapePipeline:
    """Turn one (query, source) pair into a single status-tagged result.

    ``run`` never raises: any failure becomes an ``error`` result so one
    broken source cannot take down the rest of a search.
    """

    def __init__(
        self,
        fetcher: RelayFetcher,
        registry: StrategyRegistry | None = None,
    ) -> None:
        self.logger = logging.getLogger("price_search.pipeline")
        self.settings = Settings()
        self.fetcher = fetcher
        self.registry = registry or StrategyRegistry()

    def error_result(
        self, query: str, source: ExternalSource, target_url: str,
    ) -> UnifiedSearchResult:
        """Result row reported when a scrape fails outright."""
        return UnifiedSearchResult(
            id=f"err_{source.id}_{query}",
            origin=source.name,
            name=query,
            sku=self.settings.SKU_ERROR,
            price=self.settings.NETWORK_ERROR_PRICE,
            link=target_url,
            kind=ResultKind.EXTERNAL,
            color=self.settings.ERROR_COLOR,
            status=ResultStatus.ERROR,
        )

    async def _scrape(
        self, query: str, source: ExternalSource, target_url: str,
    ) -> UnifiedSearchResult:
        cookie_header = source.cookie_header()
        await asyncio.sleep(self.settings.SCRAPE_DELAY)

        html = await self.fetcher.fetch(target_url, cookie_header)
        strategy = self.registry.resolve(source)
        extraction = strategy.extract(html, source, query)

        price = normalize_price(extraction.raw_price_text)
        reason = login_reason(
            has_session_marker=extraction.has_session_marker,
            requires_login=source.requires_login,
            cookie_present=bool(cookie_header),
            price_missing=is_price_missing(price),
        )

        result = UnifiedSearchResult(
            id=f"ext_{source.id}_{query}",
            origin=source.name,
            name=extraction.title,
            sku=self.settings.SKU_EXTERNAL,
            price=price,
            link=target_url,
            kind=ResultKind.EXTERNAL,
            color=source.color,
            logo=source.logo,
            image=extraction.image_url,
        )
        if reason is not None:
            self.logger.info(
                "[%s] Login required for '%s' (%s)",
                source.id,
                query,
                reason.value,
            )
            result.sku = self.settings.SKU_AUTH_REQUIRED
            result.price = self.settings.LOGIN_REQUIRED_PRICE
            result.status = ResultStatus.REQUIRES_LOGIN
            result.login_reason = reason
        return result

    async def run(
        self, query: str, source: ExternalSource,
    ) -> UnifiedSearchResult | None:
        """Scrape *source* for *query*.

        Returns ``None`` when the source's URL template has no query
        placeholder; such sources are skipped without an error row.
        """
        if not source.url_template or not source.has_placeholder:
            self.logger.debug(
                "[%s] Skipped: URL template has no %s placeholder",
                source.id,
                self.settings.QUERY_PLACEHOLDER,
            )
            return None

        target_url = source.build_url(query)
        try:
            return await self._scrape(query, source, target_url)
        except Exception as exc:
            self.logger.error(
                "[%s] Scrape failed for '%s': %s",
                source.id,
                query,
                exc,
                exc_info=True,
            )
            return self.error_result(query, source, target_url)
