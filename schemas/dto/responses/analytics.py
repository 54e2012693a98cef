"""
Response DTOs for the analytics endpoints.

LinkAnalyticsResponse     — GET /api/analytics/{id}
AnalyticsOverviewResponse — GET /api/analytics

Breakdown lists are ``[{"value": ..., "count": n}, ...]`` sorted by count,
highest first. IPv4 addresses in ``recentClicks`` have their last octet masked.
"""

from __future__ import annotations

from typing import Optional

from schemas.dto.camel import CamelModel


class BreakdownEntry(CamelModel):
    value: Optional[str] = None
    count: int


class RecentClick(CamelModel):
    id: str
    clicked_at: str
    device: Optional[str] = None
    browser: Optional[str] = None
    os: Optional[str] = None
    country: Optional[str] = None
    city: Optional[str] = None
    referer: Optional[str] = None
    ip_address: Optional[str] = None


class HourlyBucket(CamelModel):
    """Clicks in one UTC hour; ``label`` is ``HH:00``."""

    hour: int
    clicks: int
    label: str


class DailyBucket(CamelModel):
    """Clicks on one UTC day; ``date`` is ``YYYY-MM-DD``, ``label`` like ``May 1``."""

    date: str
    clicks: int
    label: str


class LinkSummary(CamelModel):
    id: str
    short_code: str
    original_url: str
    title: Optional[str] = None
    description: Optional[str] = None
    is_active: bool
    created_at: str
    expires_at: Optional[str] = None


class LinkAnalyticsResponse(CamelModel):
    url_id: str
    short_code: str
    url: LinkSummary
    total_clicks: int
    clicks_today: int
    clicks_yesterday: int
    clicks_this_week: int
    clicks_this_month: int
    clicks_last_month: int
    recent_clicks: list[RecentClick]
    hourly_data: list[HourlyBucket]
    daily_data: list[DailyBucket]
    device_stats: list[BreakdownEntry]
    browser_stats: list[BreakdownEntry]
    os_stats: list[BreakdownEntry]
    country_stats: list[BreakdownEntry]
    city_stats: list[BreakdownEntry]
    referrer_stats: list[BreakdownEntry]


class TopUrl(CamelModel):
    id: str
    short_code: str
    title: Optional[str] = None
    original_url: str
    clicks: int


class OverviewClick(CamelModel):
    id: str
    short_code: Optional[str] = None
    country: Optional[str] = None
    device: Optional[str] = None
    browser: Optional[str] = None
    clicked_at: str


class AnalyticsOverviewResponse(CamelModel):
    total_urls: int
    active_urls: int
    total_clicks: int
    clicks_today: int
    clicks_this_week: int
    clicks_this_month: int
    top_urls: list[TopUrl]
    recent_clicks: list[OverviewClick]
    device_stats: list[BreakdownEntry]
    country_stats: list[BreakdownEntry]
