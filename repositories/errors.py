"""Translate driver failures into the application's StoreError."""

from __future__ import annotations

from typing import Any

from errors import StoreError
from shared.logging import get_logger

log = get_logger(__name__)


def store_error(event: str, exc: Exception, **context: Any) -> StoreError:
    """Log *exc* under *event* and return a client-safe StoreError to raise."""
    log.error(event, error=str(exc), error_type=type(exc).__name__, **context)
    return StoreError("Internal server error")
