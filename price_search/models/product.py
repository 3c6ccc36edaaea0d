# price_search/models/product.py

"""Catalog product model, read-only input to the local matcher."""

from dataclasses import dataclass
from typing import Any


@dataclass
class Product:
    """Represents a single entry of the local product catalog."""

    id: str
    code: str
    name: str
    price: float
    cost: float = 0.0
    stock: int = 0
    category: str = ""
    image: str = ""

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Product":
        """Build a Product from a catalog store record."""
        return cls(
            id=str(data["id"]),
            code=str(data.get("code", "") or ""),
            name=str(data.get("name", "") or ""),
            price=float(data.get("price", 0) or 0),
            cost=float(data.get("cost", 0) or 0),
            stock=int(data.get("stock", 0) or 0),
            category=str(data.get("category", "") or ""),
            image=str(data.get("image", "") or ""),
        )
