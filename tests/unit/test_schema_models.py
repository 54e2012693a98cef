"""Unit tests for the MongoDB document models."""

from datetime import datetime, timezone

import pytest
from bson import ObjectId

from schemas.models.base import PyObjectId, parse_object_id
from schemas.models.click import ClickDoc
from schemas.models.url import UrlDoc


# ── Helpers ───────────────────────────────────────────────────────────────────

def now():
    return datetime.now(timezone.utc)


def oid():
    return ObjectId()


# ── PyObjectId ────────────────────────────────────────────────────────────────

class TestPyObjectId:
    def test_accepts_objectid_instance(self):
        o = oid()
        assert PyObjectId._validate(o) == o

    def test_accepts_valid_string(self):
        s = str(oid())
        result = PyObjectId._validate(s)
        assert isinstance(result, ObjectId)
        assert str(result) == s

    def test_rejects_invalid_string(self):
        with pytest.raises(ValueError):
            PyObjectId._validate("not-an-id")


@pytest.mark.parametrize("value", ["nope", "", 123, None])
def test_parse_object_id_invalid(value):
    assert parse_object_id(value) is None


def test_parse_object_id_valid():
    o = oid()
    assert parse_object_id(str(o)) == o
    assert parse_object_id(o) is o


# ── UrlDoc ────────────────────────────────────────────────────────────────────

class TestUrlDoc:
    def _doc(self, **overrides):
        base = dict(
            short_code="abc123",
            original_url="https://example.com",
            created_at=now(),
            updated_at=now(),
        )
        base.update(overrides)
        return UrlDoc(**base)

    def test_defaults(self):
        doc = self._doc()
        assert doc.id is None
        assert doc.is_active is True
        assert doc.tags == []
        assert doc.click_count == 0
        assert doc.password_protected is False

    def test_password_protected(self):
        assert self._doc(password="pw").password_protected is True

    def test_to_mongo_drops_missing_id_and_click_count(self):
        data = self._doc(click_count=7).to_mongo()
        assert "_id" not in data
        assert "click_count" not in data
        assert data["short_code"] == "abc123"
        assert isinstance(data["created_at"], datetime)

    def test_to_mongo_keeps_objectid(self):
        o = oid()
        data = self._doc(id=o).to_mongo()
        assert data["_id"] == o
        assert isinstance(data["_id"], ObjectId)

    def test_from_mongo(self):
        o = oid()
        raw = {
            "_id": o,
            "short_code": "abc123",
            "original_url": "https://example.com",
            "is_active": False,
            "click_limit": 5,
            "created_at": now(),
            "updated_at": now(),
        }
        doc = UrlDoc.from_mongo(raw)
        assert doc.id == o
        assert doc.is_active is False
        assert doc.click_limit == 5

    def test_from_mongo_none(self):
        assert UrlDoc.from_mongo(None) is None

    def test_json_dump_stringifies_id(self):
        o = oid()
        dumped = self._doc(id=o).model_dump(mode="json", by_alias=True)
        assert dumped["_id"] == str(o)


# ── ClickDoc ──────────────────────────────────────────────────────────────────

class TestClickDoc:
    def test_round_trip_from_mongo(self):
        url_id = oid()
        raw = {
            "_id": oid(),
            "url_id": url_id,
            "clicked_at": now(),
            "ip_address": "127.0.0.1",
            "device": "Mobile",
            "browser": "Safari",
            "os": "iOS",
            "country": "Local",
        }
        click = ClickDoc.from_mongo(raw)
        assert click.url_id == url_id
        assert click.city is None
        assert click.to_mongo()["url_id"] == url_id

    def test_url_id_required(self):
        with pytest.raises(ValueError):
            ClickDoc(clicked_at=now())
