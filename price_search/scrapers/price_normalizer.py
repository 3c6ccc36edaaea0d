# price_search/scrapers/price_normalizer.py

"""Turn scraped price text such as 'Precio de lista $1.250,50' into a number."""

import math
import re

from price_search.config.settings import Settings

_NOISE_RE = re.compile(
    "|".join(
        re.escape(token)
        for token in sorted(
            Settings.PRICE_NOISE_TOKENS, key=len, reverse=True
        )
    ),
    re.IGNORECASE,
)
_NON_NUMERIC_RE = re.compile(r"[^0-9,.]")
# 1.250 / 12.500.000: periods grouping thousands, no decimals
_GROUPED_THOUSANDS_RE = re.compile(r"^\d{1,3}(?:\.\d{3})+$")
_LEADING_NUMBER_RE = re.compile(r"\d+(?:\.\d+)?|\.\d+")


def normalize_price(text: str | None) -> float:
    """Parse a price fragment, returning ``math.nan`` when unparseable.

    A comma is always read as the decimal separator, so periods next to
    one are thousands separators. Without a comma, text made only of
    period-separated groups of three digits is a whole amount in
    thousands: ``"1.250"`` gives 1250, never 1.25, as retailers quoting
    in pesos write it. Any other period (``"1.25"``, ``"1250.50"``) is a
    decimal point. Only the leading number is parsed, which tolerates
    trailing punctuation left over from the page.
    """
    if not text:
        return math.nan
    cleaned = _NOISE_RE.sub("", text)
    cleaned = _NON_NUMERIC_RE.sub("", cleaned)

    if "," in cleaned:
        whole, _, decimals = cleaned.replace(".", "").rpartition(",")
        cleaned = f"{whole.replace(',', '')}.{decimals}"
    elif _GROUPED_THOUSANDS_RE.match(cleaned):
        cleaned = cleaned.replace(".", "")

    match = _LEADING_NUMBER_RE.match(cleaned)
    if not match:
        return math.nan
    return float(match.group())


def is_price_missing(value: float) -> bool:
    """True for NaN, infinities and non-positive prices."""
    return not math.isfinite(value) or value <= 0
