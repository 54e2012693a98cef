"""Read-through Redis cache for link documents.

Entries are JSON (not pickle) so they are debuggable and safe to
deserialise across versions. The derived click count is never cached:
it is read from the click store on every resolution, so click limits are
enforced against live data. Owner updates and deletes invalidate the entry.

Each invalidation also bumps a per-code version counter. A read-through fill
records the version before reading the store and drops its entry again if
the version moved, so a document read before an owner update can never
outlive that update in the cache.

Cache failures are logged and treated as misses; they never fail a request.
"""

import json
from typing import Optional

import redis.asyncio as aioredis
from pydantic import ValidationError as PydanticValidationError
from redis.exceptions import RedisError

from schemas.models.url import UrlDoc
from shared.logging import get_logger, should_sample

log = get_logger(__name__)


class UrlCache:
    def __init__(
        self, redis_client: Optional[aioredis.Redis], ttl_seconds: int = 300
    ) -> None:
        self._redis = redis_client
        self.ttl_seconds = ttl_seconds

    @property
    def enabled(self) -> bool:
        return self._redis is not None

    def _key(self, short_code: str) -> str:
        return f"link_cache:{short_code}"

    def _version_key(self, short_code: str) -> str:
        return f"link_cache_version:{short_code}"

    async def version(self, short_code: str) -> Optional[str]:
        """Return the invalidation counter for *short_code*.

        None means the counter could not be read; callers must not fill the
        cache in that case.
        """
        if self._redis is None:
            return None
        try:
            raw = await self._redis.get(self._version_key(short_code))
        except RedisError as e:
            log.warning("url_cache_version_error", short_code=short_code, error=str(e))
            return None
        return str(raw or 0)

    async def fill(self, doc: UrlDoc, version: Optional[str]) -> None:
        """Cache *doc*, read from the store after *version* was observed.

        If an invalidation ran since then the entry is removed again.
        """
        if self._redis is None or version is None:
            return
        await self.set(doc)
        if await self.version(doc.short_code) == version:
            return
        try:
            await self._redis.delete(self._key(doc.short_code))
        except RedisError as e:
            log.error("url_cache_discard_error", short_code=doc.short_code, error=str(e))
            return
        log.info("url_cache_fill_discarded", short_code=doc.short_code)

    async def get(self, short_code: str) -> Optional[UrlDoc]:
        if self._redis is None:
            return None
        try:
            raw = await self._redis.get(self._key(short_code))
        except RedisError as e:
            log.warning("url_cache_get_error", short_code=short_code, error=str(e))
            return None
        if raw is None:
            return None
        try:
            return UrlDoc.model_validate(json.loads(raw))
        except (ValueError, PydanticValidationError) as e:
            log.warning("url_cache_corrupt_entry", short_code=short_code, error=str(e))
            return None

    async def set(self, doc: UrlDoc) -> None:
        if self._redis is None:
            return
        payload = doc.model_dump(mode="json", by_alias=True)
        try:
            await self._redis.setex(
                self._key(doc.short_code), self.ttl_seconds, json.dumps(payload)
            )
        except RedisError as e:
            log.error("url_cache_set_error", short_code=doc.short_code, error=str(e))
            return
        if should_sample("cache_operation"):
            log.debug("url_cache_set", short_code=doc.short_code)

    async def invalidate(self, short_code: str) -> None:
        if self._redis is None:
            return
        try:
            # Bump the version before deleting so in-flight fills see the change
            version_key = self._version_key(short_code)
            await self._redis.incr(version_key)
            await self._redis.expire(version_key, self.ttl_seconds * 2)
            await self._redis.delete(self._key(short_code))
        except RedisError as e:
            log.error("url_cache_invalidate_error", short_code=short_code, error=str(e))
            return
        log.info("cache_invalidated", short_code=short_code)

    async def ping(self) -> None:
        if self._redis is not None:
            await self._redis.ping()
