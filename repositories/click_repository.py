"""MongoDB adapter for click events (`clicks` collection).

Clicks are append-only; the per-link count is computed with
``count_documents`` rather than kept as a counter on the link document.
Breakdowns and time series are ``$group`` aggregations; time buckets are
``$dateToString`` keys, which MongoDB renders in UTC.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Optional

from bson import ObjectId
from pymongo import ASCENDING, DESCENDING
from pymongo.asynchronous.database import AsyncDatabase
from pymongo.errors import PyMongoError

from repositories.errors import store_error
from schemas.models.click import ClickDoc

CLICKS_COLLECTION = "clicks"

BREAKDOWN_FIELDS = frozenset({"device", "browser", "os", "country", "city", "referer"})


def _scope(url_id: Optional[ObjectId]) -> dict[str, Any]:
    return {} if url_id is None else {"url_id": url_id}


def _window(
    since: Optional[datetime], until: Optional[datetime]
) -> dict[str, datetime]:
    window: dict[str, datetime] = {}
    if since is not None:
        window["$gte"] = since
    if until is not None:
        window["$lt"] = until
    return window


class MongoClickRepository:
    def __init__(self, db: AsyncDatabase) -> None:
        self._collection = db[CLICKS_COLLECTION]

    async def ensure_indexes(self) -> None:
        await self._collection.create_index(
            [("url_id", ASCENDING), ("clicked_at", DESCENDING)]
        )
        await self._collection.create_index([("clicked_at", DESCENDING)])

    async def insert(self, click: ClickDoc) -> ClickDoc:
        try:
            result = await self._collection.insert_one(click.to_mongo())
        except PyMongoError as e:
            raise store_error("click_insert_failed", e, url_id=str(click.url_id)) from e
        return click.model_copy(update={"id": result.inserted_id})

    async def _count(
        self,
        url_id: Optional[ObjectId],
        since: Optional[datetime],
        until: Optional[datetime],
    ) -> int:
        query = _scope(url_id)
        window = _window(since, until)
        if window:
            query["clicked_at"] = window
        try:
            return await self._collection.count_documents(query)
        except PyMongoError as e:
            raise store_error("click_count_failed", e, url_id=str(url_id)) from e

    async def count_for_url(
        self,
        url_id: ObjectId,
        since: Optional[datetime] = None,
        until: Optional[datetime] = None,
    ) -> int:
        return await self._count(url_id, since, until)

    async def count_all(self, since: Optional[datetime] = None) -> int:
        return await self._count(None, since, None)

    async def _recent(self, url_id: Optional[ObjectId], limit: int) -> list[ClickDoc]:
        try:
            cursor = (
                self._collection.find(_scope(url_id))
                .sort("clicked_at", DESCENDING)
                .limit(limit)
            )
            return [ClickDoc.from_mongo(raw) async for raw in cursor]
        except PyMongoError as e:
            raise store_error("click_recent_failed", e, url_id=str(url_id)) from e

    async def recent_for_url(self, url_id: ObjectId, limit: int) -> list[ClickDoc]:
        return await self._recent(url_id, limit)

    async def recent_all(self, limit: int) -> list[ClickDoc]:
        return await self._recent(None, limit)

    async def _aggregate(
        self, pipeline: list[dict[str, Any]], event: str, **context: Any
    ) -> list[dict[str, Any]]:
        try:
            cursor = await self._collection.aggregate(pipeline)
            return [row async for row in cursor]
        except PyMongoError as e:
            raise store_error(event, e, **context) from e

    async def _breakdown(
        self, url_id: Optional[ObjectId], field: str, limit: int
    ) -> list[tuple[Optional[str], int]]:
        if field not in BREAKDOWN_FIELDS:
            raise ValueError(f"Unsupported breakdown field: {field!r}")
        match = _scope(url_id)
        if field == "referer":
            match[field] = {"$nin": [None, ""]}
        pipeline = [
            {"$match": match},
            {"$group": {"_id": f"${field}", "count": {"$sum": 1}}},
            {"$sort": {"count": -1, "_id": 1}},
            {"$limit": limit},
        ]
        rows = await self._aggregate(
            pipeline, "click_breakdown_failed", url_id=str(url_id), field=field
        )
        return [(row["_id"], row["count"]) for row in rows]

    async def breakdown(
        self, url_id: ObjectId, field: str, limit: int
    ) -> list[tuple[Optional[str], int]]:
        return await self._breakdown(url_id, field, limit)

    async def breakdown_all(
        self, field: str, limit: int
    ) -> list[tuple[Optional[str], int]]:
        return await self._breakdown(None, field, limit)

    async def bucket_counts(
        self, url_id: ObjectId, since: datetime, date_format: str
    ) -> dict[str, int]:
        pipeline = [
            {"$match": {"url_id": url_id, "clicked_at": {"$gte": since}}},
            {
                "$group": {
                    "_id": {
                        "$dateToString": {"format": date_format, "date": "$clicked_at"}
                    },
                    "count": {"$sum": 1},
                }
            },
        ]
        rows = await self._aggregate(
            pipeline, "click_time_series_failed", url_id=str(url_id)
        )
        return {row["_id"]: row["count"] for row in rows}

    async def counts_by_url(self, url_ids: list[ObjectId]) -> dict[ObjectId, int]:
        if not url_ids:
            return {}
        pipeline = [
            {"$match": {"url_id": {"$in": url_ids}}},
            {"$group": {"_id": "$url_id", "count": {"$sum": 1}}},
        ]
        rows = await self._aggregate(pipeline, "click_totals_failed", count=len(url_ids))
        return {row["_id"]: row["count"] for row in rows}

    async def top_urls(self, limit: int) -> list[tuple[ObjectId, int]]:
        pipeline = [
            {"$group": {"_id": "$url_id", "count": {"$sum": 1}}},
            {"$sort": {"count": -1, "_id": 1}},
            {"$limit": limit},
        ]
        rows = await self._aggregate(pipeline, "click_top_urls_failed")
        return [(row["_id"], row["count"]) for row in rows]

    async def delete_for_url(self, url_id: ObjectId) -> int:
        try:
            result = await self._collection.delete_many({"url_id": url_id})
        except PyMongoError as e:
            raise store_error("click_delete_failed", e, url_id=str(url_id)) from e
        return result.deleted_count
