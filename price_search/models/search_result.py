# price_search/models/search_result.py

"""Unified search result returned to the presentation layer."""

from dataclasses import dataclass
from enum import Enum
from typing import Any


class ResultKind(Enum):
    """Where a result came from."""

    LOCAL = "local"
    EXTERNAL = "external"


class ResultStatus(Enum):
    """Outcome of producing a result; drives price/badge rendering."""

    OK = "ok"
    REQUIRES_LOGIN = "requires_login"
    ERROR = "error"


class LoginReason(Enum):
    """Why a result was reported as ``requires_login``."""

    NO_CREDENTIALS = "no_credentials"
    PRICE_MISSING = "price_missing"


@dataclass
class UnifiedSearchResult:
    """One row of a unified search, local or scraped.

    ``price`` holds a number only when ``status`` is ``OK``; otherwise it
    carries a text sentinel such as ``"Login Required"``.
    """

    id: str
    origin: str
    name: str
    sku: str
    price: float | str
    link: str
    kind: ResultKind
    color: str
    status: ResultStatus = ResultStatus.OK
    logo: str = ""
    image: str = ""
    stock: int | None = None
    is_best_price: bool = False
    login_reason: LoginReason | None = None

    @property
    def has_numeric_price(self) -> bool:
        """True when ``price`` is a real number."""
        return isinstance(self.price, (int, float)) and not isinstance(
            self.price, bool
        )

    def to_dict(self) -> dict[str, Any]:
        """Serialise for JSON output, flattening enums to their values."""
        return {
            "id": self.id,
            "origin": self.origin,
            "name": self.name,
            "sku": self.sku,
            "price": self.price,
            "link": self.link,
            "kind": self.kind.value,
            "color": self.color,
            "status": self.status.value,
            "logo": self.logo,
            "image": self.image,
            "stock": self.stock,
            "is_best_price": self.is_best_price,
            "login_reason": (
                self.login_reason.value if self.login_reason else None
            ),
        }
