"""
Click document model.

Maps to the `clicks` collection: one append-only document per resolved
visit, indexed on (url_id, clicked_at). The classification fields come from
shared.user_agent and infrastructure.geoip; country and city are None when
unknown.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from schemas.models.base import MongoBaseModel, PyObjectId


class ClickDoc(MongoBaseModel):
    """Document model for the `clicks` collection."""

    url_id: PyObjectId
    clicked_at: datetime
    ip_address: Optional[str] = None
    user_agent: Optional[str] = None
    referer: Optional[str] = None
    device: Optional[str] = None
    browser: Optional[str] = None
    os: Optional[str] = None
    country: Optional[str] = None
    city: Optional[str] = None
