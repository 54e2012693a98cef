"""Store contracts — services depend on these, not the concrete Mongo adapters.

Every method may raise StoreError when the backing store is unavailable.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Optional, Protocol

from bson import ObjectId

from schemas.models.click import ClickDoc
from schemas.models.url import UrlDoc


class UrlRepository(Protocol):
    async def find_by_short_code(self, short_code: str) -> Optional[UrlDoc]: ...

    async def find_by_id(self, url_id: ObjectId) -> Optional[UrlDoc]: ...

    async def short_code_exists(self, short_code: str) -> bool: ...

    async def insert(self, doc: UrlDoc) -> UrlDoc:
        """Persist *doc*; raises DuplicateShortCodeError if the code is taken."""
        ...

    async def update(
        self, url_id: ObjectId, fields: dict[str, Any]
    ) -> Optional[UrlDoc]: ...

    async def delete(self, url_id: ObjectId) -> bool: ...

    async def list_all(self) -> list[UrlDoc]:
        """Return every link, newest first."""
        ...

    async def find_by_ids(self, url_ids: list[ObjectId]) -> list[UrlDoc]: ...

    async def count(self, *, active_only: bool = False) -> int: ...

    async def ping(self) -> None: ...


class ClickRepository(Protocol):
    async def insert(self, click: ClickDoc) -> ClickDoc: ...

    async def count_for_url(
        self,
        url_id: ObjectId,
        since: Optional[datetime] = None,
        until: Optional[datetime] = None,
    ) -> int: ...

    async def recent_for_url(self, url_id: ObjectId, limit: int) -> list[ClickDoc]: ...

    async def breakdown(
        self, url_id: ObjectId, field: str, limit: int
    ) -> list[tuple[Optional[str], int]]:
        """Return ``(value, count)`` pairs for *field*, highest count first."""
        ...

    async def delete_for_url(self, url_id: ObjectId) -> int: ...

    async def counts_by_url(self, url_ids: list[ObjectId]) -> dict[ObjectId, int]:
        """Return click totals keyed by link id; links without clicks are absent."""
        ...

    async def bucket_counts(
        self, url_id: ObjectId, since: datetime, date_format: str
    ) -> dict[str, int]:
        """Count clicks since *since* grouped by ``strftime(date_format)``, in UTC."""
        ...

    # Store-wide queries for the analytics overview

    async def count_all(self, since: Optional[datetime] = None) -> int: ...

    async def recent_all(self, limit: int) -> list[ClickDoc]: ...

    async def breakdown_all(
        self, field: str, limit: int
    ) -> list[tuple[Optional[str], int]]: ...

    async def top_urls(self, limit: int) -> list[tuple[ObjectId, int]]:
        """Return ``(url_id, clicks)`` for the most clicked links."""
        ...
