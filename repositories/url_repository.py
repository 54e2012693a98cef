"""MongoDB adapter for link documents (`urls` collection).

The unique index on `short_code` is the authoritative collision check for
code allocation: a DuplicateKeyError on insert surfaces as
DuplicateShortCodeError so the caller can retry with a fresh code.
"""

from __future__ import annotations

from typing import Any, Optional

from bson import ObjectId
from pymongo import ASCENDING, DESCENDING, ReturnDocument
from pymongo.asynchronous.database import AsyncDatabase
from pymongo.errors import DuplicateKeyError, PyMongoError

from errors import DuplicateShortCodeError
from repositories.errors import store_error
from schemas.models.url import UrlDoc

URLS_COLLECTION = "urls"


class MongoUrlRepository:
    def __init__(self, db: AsyncDatabase) -> None:
        self._db = db
        self._collection = db[URLS_COLLECTION]

    async def ensure_indexes(self) -> None:
        await self._collection.create_index(
            [("short_code", ASCENDING)], unique=True
        )
        await self._collection.create_index([("created_at", DESCENDING)])

    async def find_by_short_code(self, short_code: str) -> Optional[UrlDoc]:
        try:
            raw = await self._collection.find_one({"short_code": short_code})
        except PyMongoError as e:
            raise store_error("url_find_failed", e, short_code=short_code) from e
        return UrlDoc.from_mongo(raw)

    async def find_by_id(self, url_id: ObjectId) -> Optional[UrlDoc]:
        try:
            raw = await self._collection.find_one({"_id": url_id})
        except PyMongoError as e:
            raise store_error("url_find_failed", e, url_id=str(url_id)) from e
        return UrlDoc.from_mongo(raw)

    async def short_code_exists(self, short_code: str) -> bool:
        try:
            raw = await self._collection.find_one(
                {"short_code": short_code}, {"_id": 1}
            )
        except PyMongoError as e:
            raise store_error("url_exists_failed", e, short_code=short_code) from e
        return raw is not None

    async def insert(self, doc: UrlDoc) -> UrlDoc:
        try:
            result = await self._collection.insert_one(doc.to_mongo())
        except DuplicateKeyError as e:
            raise DuplicateShortCodeError(
                "Short code already taken", field="shortCode"
            ) from e
        except PyMongoError as e:
            raise store_error("url_insert_failed", e, short_code=doc.short_code) from e
        return doc.model_copy(update={"id": result.inserted_id})

    async def update(
        self, url_id: ObjectId, fields: dict[str, Any]
    ) -> Optional[UrlDoc]:
        try:
            raw = await self._collection.find_one_and_update(
                {"_id": url_id},
                {"$set": fields},
                return_document=ReturnDocument.AFTER,
            )
        except PyMongoError as e:
            raise store_error("url_update_failed", e, url_id=str(url_id)) from e
        return UrlDoc.from_mongo(raw)

    async def delete(self, url_id: ObjectId) -> bool:
        try:
            result = await self._collection.delete_one({"_id": url_id})
        except PyMongoError as e:
            raise store_error("url_delete_failed", e, url_id=str(url_id)) from e
        return result.deleted_count == 1

    async def list_all(self) -> list[UrlDoc]:
        try:
            cursor = self._collection.find().sort("created_at", DESCENDING)
            return [UrlDoc.from_mongo(raw) async for raw in cursor]
        except PyMongoError as e:
            raise store_error("url_list_failed", e) from e

    async def find_by_ids(self, url_ids: list[ObjectId]) -> list[UrlDoc]:
        if not url_ids:
            return []
        try:
            cursor = self._collection.find({"_id": {"$in": url_ids}})
            return [UrlDoc.from_mongo(raw) async for raw in cursor]
        except PyMongoError as e:
            raise store_error("url_find_many_failed", e, count=len(url_ids)) from e

    async def count(self, *, active_only: bool = False) -> int:
        query: dict[str, Any] = {"is_active": True} if active_only else {}
        try:
            return await self._collection.count_documents(query)
        except PyMongoError as e:
            raise store_error("url_count_failed", e) from e

    async def ping(self) -> None:
        try:
            await self._db.client.admin.command("ping")
        except PyMongoError as e:
            raise store_error("database_ping_failed", e) from e
