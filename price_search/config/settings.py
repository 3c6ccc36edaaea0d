# price_search/config/settings.py

"""Central configuration for the price_search engine."""

import os
from pathlib import Path

from curl_cffi.requests import BrowserTypeLiteral
from dotenv import load_dotenv

load_dotenv()


class Settings:
    """Central configuration for the price_search engine."""

    # --- Scraping ---
    REQUEST_TIMEOUT: int = int(
        os.getenv("PRICE_SEARCH_TIMEOUT", "15")
    )                                   # Seconds per relay attempt
    SCRAPE_DELAY: float = 0.8           # Politeness delay per source scrape
    QUERY_PLACEHOLDER: str = "[QUERY]"  # Token substituted in URL templates

    # --- Relays (tried strictly in order) ---
    RELAY_TEMPLATES: list[str] = [
        "https://corsproxy.io/?{url}",
        "https://api.allorigins.win/get?url={url}",
    ]

    # --- Browser Impersonation ---
    IMPERSONATE_BROWSER: BrowserTypeLiteral = "chrome131"
    USER_AGENT: str = (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
        "AppleWebKit/537.36 (KHTML, like Gecko) "
        "Chrome/121.0.0.0 Safari/537.36"
    )
    DEFAULT_HEADERS: dict[str, str] = {
        "Accept": (
            "text/html,application/xhtml+xml,"
            "application/xml;q=0.9,image/avif,"
            "image/webp,image/apng,*/*;q=0.8"
        ),
        "Accept-Language": "es-AR,es;q=0.9,en;q=0.8",
    }

    # --- Extraction ---
    SESSION_MARKERS: list[str] = [
        "usuario :",
        "usuario:",
        "hola,",
        "user:",
        "hello,",
    ]
    CURRENCY_SYMBOLS: list[str] = ["$"]
    PRICE_SCAN_MAX_LENGTH: int = 35     # Max text length for fallback scan
    MIN_TITLE_LENGTH: int = 3
    PRICE_NOISE_TOKENS: list[str] = [
        "precio de lista",
        "iva incluido",
        "list price",
        "tax included",
        "neto",
        "final",
        "lista",
        "total",
        "oferta",
        "offer",
        "net",
    ]

    # --- Local matching ---
    MATCH_THRESHOLD: float = 0.3        # 0 = exact, 1 = anything
    MATCH_DISTANCE: int = 100           # Chars before location penalty hits 1.0

    # --- Session manager ---
    SESSION_POLL_INTERVAL: float = 1.0
    SESSION_GRACE_PERIOD: float = 5.0
    SESSION_WINDOW: dict[str, int] = {"width": 1200, "height": 900}

    # --- Result sentinels ---
    LOCAL_SOURCE_LABEL: str = "Local Inventory"
    LOCAL_LINK: str = "#"
    LOCAL_RESULT_COLOR: str = os.getenv(
        "PRICE_SEARCH_LOCAL_COLOR", "#4f46e5"
    )
    ERROR_COLOR: str = "#ef4444"
    LOGIN_REQUIRED_PRICE: str = "Login Required"
    NETWORK_ERROR_PRICE: str = "Network Error"
    SKU_EXTERNAL: str = "EXT-REF"
    SKU_AUTH_REQUIRED: str = "AUTH_REQUIRED"
    SKU_ERROR: str = "ERROR"

    # --- Logging ---
    CONSOLE_LOG_LEVEL: str = os.getenv(
        "PRICE_SEARCH_LOG_LEVEL", "WARNING"
    ).upper()                           # Stderr level; the run file gets DEBUG

    # --- Paths ---
    BASE_DIR: Path = Path(__file__).resolve().parent.parent.parent
    SELECTORS_PATH: Path = (
        BASE_DIR / "price_search" / "config" / "selectors.json"
    )
    DATA_DIR: Path = Path(
        os.getenv("PRICE_SEARCH_DATA_DIR", str(BASE_DIR / "data"))
    )
    LOGS_DIR: Path = BASE_DIR / "logs"
    SESSIONS_DIR: Path = BASE_DIR / "sessions"

    # --- Extraction strategies (registry for future extensibility) ---
    DEFAULT_STRATEGY: str = "generic"
    EXTRACTION_STRATEGIES: list[dict[str, str]] = [
        {
            "id": "generic",
            "label": "Generic",
            "strategy": (
                "price_search.scrapers.generic_strategy"
                ".GenericStrategy"
            ),
        },
        {
            "id": "atonor",
            "label": "Atonor",
            "strategy": (
                "price_search.scrapers.atonor_strategy"
                ".AtonorStrategy"
            ),
        },
        {
            "id": "disfren",
            "label": "Disfren",
            "strategy": (
                "price_search.scrapers.disfren_strategy"
                ".DisfrenStrategy"
            ),
        },
    ]
