"""
Short code generator — pure, side-effect-free.

Codes are drawn from the base-36 alphabet (lower-case letters and digits),
so they stay URL-safe and case-insensitive when read aloud or retyped.
Uniqueness is not this module's concern: see services.code_allocator.
"""

from __future__ import annotations

import random
import string

BASE36_ALPHABET = string.ascii_lowercase + string.digits


def generate_short_code(length: int = 6) -> str:
    """Generate a random base-36 short code.

    Args:
        length: Number of characters (default 6).

    Returns:
        Random string of *length* characters from ``[a-z0-9]``.
    """
    return "".join(random.choice(BASE36_ALPHABET) for _ in range(length))
