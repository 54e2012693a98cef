"""
Redirect orchestration, independent of HTTP.

A resolution goes Resolving → Evaluating → one of Redirecting,
ChallengePassword or Rejecting. ``resolve`` covers the first two steps and
returns the link together with its ``AccessOutcome``; the routes turn the
outcome into a response and hand allowed visits to the VisitRecorder.

The link is read through the optional Redis cache, but its click count is
always taken from the click store, so the click limit is checked against
live data.

Click-limit enforcement is the weak variant: evaluation and the click insert
are separate store operations. Concurrent visits at the limit boundary may
all pass evaluation, so the stored count can overshoot the limit by up to
(concurrency - 1) clicks before later evaluations start denying.
"""

from __future__ import annotations

from datetime import datetime
from typing import Callable, Optional

from infrastructure.cache.url_cache import UrlCache
from repositories.protocol import ClickRepository, UrlRepository
from schemas.models.url import UrlDoc
from services.access_evaluator import AccessOutcome, evaluate
from shared.datetime_utils import utcnow
from shared.logging import get_logger, should_sample

log = get_logger(__name__)


class RedirectService:
    def __init__(
        self,
        url_repo: UrlRepository,
        click_repo: ClickRepository,
        cache: Optional[UrlCache] = None,
        *,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self._url_repo = url_repo
        self._click_repo = click_repo
        self._cache = cache
        self._clock = clock

    async def load(self, short_code: str) -> Optional[UrlDoc]:
        """Load a link by short code with its live click count.

        Raises:
            StoreError: the link or its click count could not be read.
        """
        record = None
        if self._cache is not None:
            record = await self._cache.get(short_code)
        if record is None:
            version = None
            if self._cache is not None:
                version = await self._cache.version(short_code)
            record = await self._url_repo.find_by_short_code(short_code)
            if record is None:
                return None
            if self._cache is not None:
                await self._cache.fill(record, version)

        record.click_count = await self._click_repo.count_for_url(record.id)
        return record

    async def resolve(
        self,
        short_code: str,
        password: Optional[str] = None,
        *,
        now: Optional[datetime] = None,
    ) -> tuple[Optional[UrlDoc], AccessOutcome]:
        """Load *short_code* and evaluate access for it."""
        record = await self.load(short_code)
        outcome = evaluate(record, now or self._clock(), password)

        if should_sample("url_redirect"):
            log.info(
                "url_resolved",
                short_code=short_code,
                decision=outcome.decision.value,
                click_count=record.click_count if record else None,
            )
        return record, outcome
