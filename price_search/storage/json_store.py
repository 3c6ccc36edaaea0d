# price_search/storage/json_store.py

"""JSON-file key-value store backing the catalog and source registry."""

import json
import logging
from pathlib import Path
from typing import Any

from price_search.config.settings import Settings
from price_search.models.external_source import ExternalSource
from price_search.models.product import Product

logger = logging.getLogger("price_search.storage")

PRODUCTS = "products"
SOURCES = "sources"


class StoreError(Exception):
    """Raised when an entity file exists but cannot be read."""


class JsonStore:
    """One ``<entity>.json`` file per entity, records keyed by ``id``."""

    def __init__(self, data_dir: Path | None = None) -> None:
        self.data_dir: Path = Path(data_dir or Settings.DATA_DIR)
        self.data_dir.mkdir(parents=True, exist_ok=True)
        logger.debug("JsonStore initialised, data_dir=%s", self.data_dir)

    def _path(self, entity: str) -> Path:
        return self.data_dir / f"{entity}.json"

    def all(self, entity: str) -> list[dict[str, Any]]:
        """Every record of *entity*, in insertion order."""
        path = self._path(entity)
        if not path.exists():
            return []
        try:
            with open(path, encoding="utf-8") as f:
                records: Any = json.load(f)
        except (OSError, ValueError) as exc:
            raise StoreError(f"Cannot read {path}: {exc}") from exc
        if not isinstance(records, list):
            raise StoreError(f"{path} must hold a JSON array")
        return [r for r in records if isinstance(r, dict)]

    def _write(self, entity: str, records: list[dict[str, Any]]) -> None:
        path = self._path(entity)
        with open(path, "w", encoding="utf-8") as f:
            json.dump(records, f, ensure_ascii=False, indent=2)

    def get(self, entity: str, key: str) -> dict[str, Any] | None:
        for record in self.all(entity):
            if str(record.get("id")) == key:
                return record
        return None

    def put(self, entity: str, record: dict[str, Any]) -> None:
        """Insert or replace the record with the same ``id``."""
        key = str(record["id"])
        records = self.all(entity)
        for idx, existing in enumerate(records):
            if str(existing.get("id")) == key:
                records[idx] = record
                break
        else:
            records.append(record)
        self._write(entity, records)
        logger.info("Stored %s/%s", entity, key)

    def delete(self, entity: str, key: str) -> bool:
        """Remove the record; returns False when it did not exist."""
        records = self.all(entity)
        kept = [r for r in records if str(r.get("id")) != key]
        if len(kept) == len(records):
            return False
        self._write(entity, kept)
        logger.info("Deleted %s/%s", entity, key)
        return True


class CatalogStore:
    """Read access to the local product catalog."""

    def __init__(self, store: JsonStore) -> None:
        self.store = store

    def all_products(self) -> list[Product]:
        return [Product.from_dict(r) for r in self.store.all(PRODUCTS)]


class SourceRegistry:
    """Configured external sources."""

    def __init__(self, store: JsonStore) -> None:
        self.store = store

    def all_sources(self) -> list[ExternalSource]:
        return [
            ExternalSource.from_dict(r) for r in self.store.all(SOURCES)
        ]

    def get(self, source_id: str) -> ExternalSource | None:
        record = self.store.get(SOURCES, source_id)
        return ExternalSource.from_dict(record) if record else None

    def save(self, source: ExternalSource) -> None:
        self.store.put(SOURCES, source.to_dict())

    def delete(self, source_id: str) -> bool:
        return self.store.delete(SOURCES, source_id)

    def save_cookies(self, source: ExternalSource, cookies_json: str) -> None:
        """Session manager write-back: persist captured cookies."""
        current = self.get(source.id) or source
        current.cookies_config = cookies_json
        self.save(current)
