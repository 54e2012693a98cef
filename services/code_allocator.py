"""
Short-code allocation by optimistic retry.

Random codes are drawn and checked against the store until a free one is
found or the attempt budget runs out. The existence check and the later
insert are separate store operations, so two concurrent creators can still
pick the same free code; the store's unique index catches that and
``UrlService.create_url`` retries with a fresh allocation.
"""

from __future__ import annotations

from typing import Callable

from errors import AllocationExhaustedError
from repositories.protocol import UrlRepository
from shared.generators import generate_short_code
from shared.logging import get_logger

log = get_logger(__name__)

DEFAULT_MAX_ATTEMPTS = 5
DEFAULT_CODE_LENGTH = 6


class CodeAllocator:
    def __init__(
        self,
        url_repo: UrlRepository,
        *,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
        length: int = DEFAULT_CODE_LENGTH,
        generator: Callable[[int], str] = generate_short_code,
    ) -> None:
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        self._url_repo = url_repo
        self.max_attempts = max_attempts
        self.length = length
        self._generate = generator

    async def allocate(self) -> str:
        """Return a short code that was free at the time of the check.

        Raises:
            AllocationExhaustedError: every candidate in the attempt budget
                was already taken.
            StoreError: the existence check failed.
        """
        for attempt in range(1, self.max_attempts + 1):
            candidate = self._generate(self.length)
            if not await self._url_repo.short_code_exists(candidate):
                return candidate
            log.info("short_code_collision", attempt=attempt, short_code=candidate)

        log.warning("short_code_allocation_exhausted", attempts=self.max_attempts)
        raise AllocationExhaustedError(
            "Could not allocate a unique short code, please retry",
            details={"attempts": self.max_attempts},
        )
