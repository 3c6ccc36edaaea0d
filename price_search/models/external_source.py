# price_search/models/external_source.py

"""External retailer source as configured in the source registry."""

import json
import urllib.parse
from dataclasses import asdict, dataclass
from typing import Any

from price_search.config.settings import Settings


@dataclass
class ExternalSource:
    """A configured retailer endpoint with its own scraping rules.

    ``color`` and ``logo`` are display-only and passed through to results.
    ``strategy`` names the extraction strategy; when blank the registry
    tries the source id and then the generic strategy.
    """

    id: str
    name: str
    url_template: str
    price_selector: str = ""
    color: str = "#6366f1"
    logo: str = ""
    cookies_config: str = ""
    requires_login: bool = False
    active: bool = True
    strategy: str = ""

    @property
    def has_placeholder(self) -> bool:
        """True when the URL template contains the query token."""
        return Settings.QUERY_PLACEHOLDER in (self.url_template or "")

    @property
    def origin(self) -> str:
        """Return ``scheme://host`` of the URL template, or ``""``."""
        parts = urllib.parse.urlsplit(self.url_template or "")
        if not parts.scheme or not parts.netloc:
            return ""
        return f"{parts.scheme}://{parts.netloc}"

    def build_url(self, query: str) -> str:
        """Substitute the URL-encoded query into the template."""
        encoded = urllib.parse.quote(query, safe="")
        return self.url_template.replace(
            Settings.QUERY_PLACEHOLDER, encoded, 1
        )

    def cookie_header(self) -> str:
        """Turn ``cookies_config`` into a ``Cookie`` header value.

        A JSON array of ``{name, value}`` objects (the format browser
        cookie exporters produce) is joined as ``name=value; ...``.
        Anything else is assumed to already be a header string.
        """
        raw = self.cookies_config or ""
        if not raw.strip():
            return ""
        try:
            cookies: Any = json.loads(raw)
        except ValueError:
            return raw
        if isinstance(cookies, list):
            return "; ".join(
                f"{c.get('name', '')}={c.get('value', '')}"
                for c in cookies
                if isinstance(c, dict)
            )
        return raw

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ExternalSource":
        """Build a source from a registry record."""
        return cls(
            id=str(data["id"]),
            name=str(data.get("name", "") or ""),
            url_template=str(data.get("url_template", "") or ""),
            price_selector=str(data.get("price_selector", "") or ""),
            color=str(data.get("color", "") or "#6366f1"),
            logo=str(data.get("logo", "") or ""),
            cookies_config=str(data.get("cookies_config", "") or ""),
            requires_login=bool(data.get("requires_login", False)),
            active=bool(data.get("active", True)),
            strategy=str(data.get("strategy", "") or ""),
        )

    def to_dict(self) -> dict[str, Any]:
        """Serialise back to the registry record shape."""
        return asdict(self)
