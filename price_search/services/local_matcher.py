# price_search/services/local_matcher.py

"""Typo-tolerant search over the local product catalog."""

import logging

from rapidfuzz import fuzz, utils

from price_search.config.settings import Settings
from price_search.models.product import Product
from price_search.models.search_result import (
    ResultKind,
    ResultStatus,
    UnifiedSearchResult,
)

logger = logging.getLogger("price_search.local")

_SEARCH_KEYS: tuple[str, ...] = ("name", "code", "category")
_Entry = tuple[Product, tuple[str, ...]]


def _fingerprint(catalog: list[Product]) -> tuple[tuple[object, ...], ...]:
    return tuple(
        (
            p.id,
            p.code,
            p.name,
            p.category,
            p.price,
            p.stock,
            p.image,
        )
        for p in catalog
    )


class LocalIndex:
    """Explicitly owned fuzzy index over the catalog.

    The index is a snapshot: call :meth:`rebuild` whenever the catalog
    changes, or check :meth:`is_stale` first as the orchestrator does.

    Scoring mirrors a bitap-style matcher: a key's dissimilarity is the
    share of the query that did not align (from ``partial_ratio``) plus
    how far into the key the match starts, divided by ``MATCH_DISTANCE``.
    A key shorter than the query is compared whole with ``ratio``, so a
    short code or category cannot match just by occurring in the query.
    A product matches when its best key scores at or below
    ``MATCH_THRESHOLD``.
    """

    def __init__(
        self,
        catalog: list[Product] | None = None,
        color: str | None = None,
    ) -> None:
        self.settings = Settings()
        self.color = color or self.settings.LOCAL_RESULT_COLOR
        self._entries: tuple[_Entry, ...] = ()
        self._fingerprint: tuple[tuple[object, ...], ...] = ()
        if catalog is not None:
            self.rebuild(catalog)

    def __len__(self) -> int:
        return len(self._entries)

    def rebuild(self, catalog: list[Product]) -> None:
        """Re-snapshot *catalog*, preprocessing every searchable key."""
        # One assignment: a search in a worker thread sees a whole snapshot
        self._entries = tuple(
            (
                p,
                tuple(
                    utils.default_process(str(getattr(p, key) or ""))
                    for key in _SEARCH_KEYS
                ),
            )
            for p in catalog
        )
        self._fingerprint = _fingerprint(catalog)
        logger.debug("Local index rebuilt with %d products", len(self))

    def is_stale(self, catalog: list[Product]) -> bool:
        """True when *catalog* differs from the indexed snapshot."""
        return _fingerprint(catalog) != self._fingerprint

    def _dissimilarity(self, query: str, field: str) -> float | None:
        if not field:
            return None
        cutoff = (1.0 - self.settings.MATCH_THRESHOLD) * 100
        if len(field) < len(query):
            score = fuzz.ratio(query, field, score_cutoff=cutoff)
            return 1.0 - score / 100 if score else None
        alignment = fuzz.partial_ratio_alignment(
            query, field, score_cutoff=cutoff
        )
        if alignment is None:
            return None
        location_penalty = (
            alignment.dest_start / self.settings.MATCH_DISTANCE
        )
        return (1.0 - alignment.score / 100) + location_penalty

    def _to_result(self, product: Product) -> UnifiedSearchResult:
        return UnifiedSearchResult(
            id=product.id,
            origin=self.settings.LOCAL_SOURCE_LABEL,
            name=product.name,
            sku=product.code,
            price=product.price,
            link=self.settings.LOCAL_LINK,
            kind=ResultKind.LOCAL,
            color=self.color,
            status=ResultStatus.OK,
            image=product.image,
            stock=product.stock,
        )

    def search(self, query: str) -> list[UnifiedSearchResult]:
        """Return catalog matches for *query*, best match first."""
        processed = utils.default_process(query or "")
        if not processed:
            return []

        entries = self._entries
        scored: list[tuple[float, Product]] = []
        for product, fields in entries:
            best: float | None = None
            for field in fields:
                score = self._dissimilarity(processed, field)
                if score is not None and (best is None or score < best):
                    best = score
            if best is not None and best <= self.settings.MATCH_THRESHOLD:
                scored.append((best, product))

        # Stable on equal scores: catalog order breaks ties
        scored.sort(key=lambda item: item[0])
        logger.debug(
            "Local search '%s' matched %d of %d products",
            query,
            len(scored),
            len(entries),
        )
        return [self._to_result(product) for _, product in scored]
