"""
Input validators for link creation — framework-agnostic, pure functions.
"""

from __future__ import annotations

from datetime import datetime
from urllib.parse import urlsplit

import validators as _validators


def validate_url(url: str) -> bool:
    """Return True if *url* is a well-formed absolute HTTP/S URL.

    Args:
        url: The URL string to validate.

    Returns:
        True when the scheme is http or https and the ``validators`` library
        accepts the URL.
    """
    if not url or urlsplit(url).scheme.lower() not in ("http", "https"):
        return False
    return bool(_validators.url(url))


def validate_click_limit(click_limit: int) -> bool:
    """Return True if *click_limit* is a positive integer (bools rejected)."""
    return (
        isinstance(click_limit, int)
        and not isinstance(click_limit, bool)
        and click_limit > 0
    )


def validate_expiration(expires_at: datetime, now: datetime) -> bool:
    """Return True if *expires_at* lies strictly after *now*.

    Both values must be timezone-aware.
    """
    return expires_at > now
