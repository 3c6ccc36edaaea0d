# price_search/scrapers/strategy_registry.py

"""Map stable strategy ids to extraction strategy instances."""

import importlib
import logging
from typing import Any

from price_search.config.settings import Settings
from price_search.models.external_source import ExternalSource
from price_search.scrapers.base_strategy import ExtractionStrategy

logger = logging.getLogger("price_search.strategies")


def _load_strategy_class(dotted_path: str) -> type[Any]:
    """Dynamically import a strategy class from its dotted module path."""
    module_path, class_name = dotted_path.rsplit(".", 1)
    module = importlib.import_module(module_path)
    cls: type[Any] = getattr(module, class_name)
    return cls


class StrategyRegistry:
    """Resolve the extraction strategy for a source.

    Lookup goes ``source.strategy``, then ``source.id``, then the default
    strategy. Instances are created lazily and cached.
    """

    def __init__(
        self, entries: list[dict[str, str]] | None = None,
    ) -> None:
        self.settings = Settings()
        self._paths: dict[str, str] = {
            entry["id"]: entry["strategy"]
            for entry in (
                entries
                if entries is not None
                else self.settings.EXTRACTION_STRATEGIES
            )
        }
        self._instances: dict[str, ExtractionStrategy] = {}

    def register(self, key: str, strategy: ExtractionStrategy) -> None:
        """Plug in a ready-made strategy under *key*."""
        self._instances[key] = strategy

    def known_ids(self) -> list[str]:
        """All strategy ids that can be resolved."""
        return sorted({*self._paths, *self._instances})

    def get(self, key: str) -> ExtractionStrategy | None:
        """Return the strategy registered under *key*, if any."""
        if key in self._instances:
            return self._instances[key]
        dotted_path = self._paths.get(key)
        if dotted_path is None:
            return None
        strategy: ExtractionStrategy = _load_strategy_class(
            dotted_path
        )()
        self._instances[key] = strategy
        return strategy

    def resolve(self, source: ExternalSource) -> ExtractionStrategy:
        """Pick the strategy for *source*, falling back to the default."""
        for key in (source.strategy, source.id):
            if not key:
                continue
            strategy = self.get(key)
            if strategy is not None:
                return strategy
        if source.strategy:
            logger.warning(
                "Unknown strategy %r for source %s, using %s",
                source.strategy,
                source.id,
                self.settings.DEFAULT_STRATEGY,
            )
        default = self.get(self.settings.DEFAULT_STRATEGY)
        if default is None:
            msg = (
                "Default strategy "
                f"{self.settings.DEFAULT_STRATEGY!r} is not registered"
            )
            raise LookupError(msg)
        return default
