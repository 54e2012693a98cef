"""
Link management: create, read, update and delete short links.

Creation validates the request, allocates a short code and inserts the
link. A unique-index violation on insert means another creator claimed the
same code between our existence check and the insert; that is retried with
a fresh allocation, within the same attempt budget as the allocator.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Callable, Optional

from errors import (
    AllocationExhaustedError,
    DuplicateShortCodeError,
    NotFoundError,
    ValidationError,
)
from infrastructure.cache.url_cache import UrlCache
from repositories.protocol import ClickRepository, UrlRepository
from schemas.dto.requests.url import CreateUrlRequest, UpdateUrlRequest
from schemas.models.base import parse_object_id
from schemas.models.url import UrlDoc
from services.code_allocator import CodeAllocator
from shared.datetime_utils import parse_datetime, utcnow
from shared.logging import get_logger
from shared.validators import validate_click_limit, validate_expiration, validate_url

log = get_logger(__name__)


def _clean_tags(tags: list[str]) -> list[str]:
    seen: list[str] = []
    for tag in tags:
        tag = tag.strip()
        if tag and tag not in seen:
            seen.append(tag)
    return seen


def _parse_expiry(raw: Any, now: datetime) -> Optional[datetime]:
    if raw is None:
        return None
    expires_at = parse_datetime(raw)
    if expires_at is None:
        raise ValidationError(
            "expiresAt must be an ISO 8601 timestamp or Unix epoch seconds",
            field="expiresAt",
        )
    if not validate_expiration(expires_at, now):
        raise ValidationError("expiresAt must be in the future", field="expiresAt")
    return expires_at


class UrlService:
    def __init__(
        self,
        url_repo: UrlRepository,
        click_repo: ClickRepository,
        allocator: CodeAllocator,
        cache: Optional[UrlCache] = None,
        *,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self._url_repo = url_repo
        self._click_repo = click_repo
        self._allocator = allocator
        self._cache = cache
        self._clock = clock

    async def create_url(self, request: CreateUrlRequest) -> UrlDoc:
        """Validate *request* and persist a new link under a fresh short code.

        Raises:
            ValidationError: the target URL, click limit or expiry is invalid.
            AllocationExhaustedError: no free code could be secured.
            StoreError: the store failed.
        """
        now = self._clock()
        original_url = request.original_url.strip()
        if not validate_url(original_url):
            raise ValidationError(
                "originalUrl must be a valid absolute http(s) URL",
                field="originalUrl",
            )
        if request.click_limit is not None and not validate_click_limit(
            request.click_limit
        ):
            raise ValidationError(
                "clickLimit must be a positive integer", field="clickLimit"
            )
        expires_at = _parse_expiry(request.expires_at, now)

        for attempt in range(1, self._allocator.max_attempts + 1):
            short_code = await self._allocator.allocate()
            doc = UrlDoc(
                short_code=short_code,
                original_url=original_url,
                title=request.title or None,
                description=request.description or None,
                tags=_clean_tags(request.tags),
                password=request.password or None,
                click_limit=request.click_limit,
                expires_at=expires_at,
                created_at=now,
                updated_at=now,
            )
            try:
                created = await self._url_repo.insert(doc)
            except DuplicateShortCodeError:
                log.warning(
                    "short_code_insert_race", attempt=attempt, short_code=short_code
                )
                continue
            log.info(
                "url_created",
                url_id=str(created.id),
                short_code=created.short_code,
                password_protected=created.password_protected,
                click_limit=created.click_limit,
            )
            return created

        raise AllocationExhaustedError(
            "Could not allocate a unique short code, please retry",
            details={"attempts": self._allocator.max_attempts},
        )

    async def get_url(self, url_id: str) -> UrlDoc:
        oid = parse_object_id(url_id)
        doc = await self._url_repo.find_by_id(oid) if oid is not None else None
        if doc is None:
            raise NotFoundError("URL not found")
        doc.click_count = await self._click_repo.count_for_url(doc.id)
        return doc

    async def list_urls(self) -> list[UrlDoc]:
        """Every link with its click count, newest first."""
        docs = await self._url_repo.list_all()
        totals = await self._click_repo.counts_by_url([doc.id for doc in docs])
        for doc in docs:
            doc.click_count = totals.get(doc.id, 0)
        return docs

    async def update_url(self, url_id: str, request: UpdateUrlRequest) -> UrlDoc:
        """Apply only the fields present in *request* to the link."""
        existing = await self.get_url(url_id)
        provided = request.model_fields_set
        fields: dict[str, Any] = {}

        if "is_active" in provided:
            if request.is_active is None:
                raise ValidationError("isActive cannot be null", field="isActive")
            fields["is_active"] = request.is_active
        if "title" in provided:
            fields["title"] = request.title or None
        if "description" in provided:
            fields["description"] = request.description or None
        if "tags" in provided:
            fields["tags"] = _clean_tags(request.tags or [])
        if "expires_at" in provided:
            fields["expires_at"] = _parse_expiry(request.expires_at, self._clock())

        if not fields:
            return existing

        fields["updated_at"] = self._clock()
        updated = await self._url_repo.update(existing.id, fields)
        if updated is None:
            raise NotFoundError("URL not found")
        if self._cache is not None:
            await self._cache.invalidate(updated.short_code)

        updated.click_count = existing.click_count
        log.info(
            "url_updated",
            url_id=str(updated.id),
            short_code=updated.short_code,
            fields=sorted(k for k in fields if k != "updated_at"),
        )
        return updated

    async def delete_url(self, url_id: str) -> None:
        """Delete a link and its click history.

        Clicks go first: if that fails the link is left intact and the delete
        can be retried, instead of succeeding with orphaned clicks behind it.
        """
        existing = await self.get_url(url_id)
        removed = await self._click_repo.delete_for_url(existing.id)
        if not await self._url_repo.delete(existing.id):
            raise NotFoundError("URL not found")
        if self._cache is not None:
            await self._cache.invalidate(existing.short_code)
        log.info(
            "url_deleted",
            url_id=str(existing.id),
            short_code=existing.short_code,
            clicks_removed=removed,
        )
