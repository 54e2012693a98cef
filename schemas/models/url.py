"""
Link document model.

Maps to the `urls` collection. `short_code` carries a unique index; the
store reports a violation of it as DuplicateShortCodeError.

`password` is the owner-supplied shared secret stored as given and compared
by exact match. `click_count` is derived from the `clicks` collection on load
and never written back.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import Field

from schemas.models.base import MongoBaseModel


class UrlDoc(MongoBaseModel):
    """Document model for the `urls` collection."""

    short_code: str
    original_url: str
    title: Optional[str] = None
    description: Optional[str] = None
    tags: list[str] = Field(default_factory=list)
    is_active: bool = True
    expires_at: Optional[datetime] = None
    password: Optional[str] = None
    click_limit: Optional[int] = None
    created_at: datetime
    updated_at: datetime

    # Derived from the click store; excluded from to_mongo()
    click_count: int = Field(default=0, exclude=True)

    @property
    def password_protected(self) -> bool:
        return bool(self.password)
