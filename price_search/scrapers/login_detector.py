# price_search/scrapers/login_detector.py

"""Decide whether a scraped result must be reported as requiring login."""

from price_search.models.search_result import LoginReason


def login_reason(
    has_session_marker: bool,
    requires_login: bool,
    cookie_present: bool,
    price_missing: bool,
) -> LoginReason | None:
    """Return why login is needed, or ``None`` when the result is usable.

    A login-gated source fetched without a session marker or cookie is
    ``NO_CREDENTIALS`` whether or not price-like text showed up.
    Otherwise an unparseable price is reported as ``PRICE_MISSING``.
    Both map to the ``requires_login`` status.
    """
    if requires_login and not has_session_marker and not cookie_present:
        return LoginReason.NO_CREDENTIALS
    if price_missing:
        return LoginReason.PRICE_MISSING
    return None


def needs_login(
    has_session_marker: bool,
    requires_login: bool,
    cookie_present: bool,
    price_missing: bool,
) -> bool:
    """True when the result should carry the ``requires_login`` status."""
    return (
        login_reason(
            has_session_marker,
            requires_login,
            cookie_present,
            price_missing,
        )
        is not None
    )
