"""
Click analytics: per-link detail and a store-wide overview.

Periods are computed in UTC: "today" starts at 00:00 UTC, "this week" is the
trailing seven days from today's start, "this month" starts on the 1st and
"last month" is the whole previous calendar month. The per-link time series
cover the last 24 hours by hour and the last 30 days by day; hours and days
without clicks are reported as zero.
"""

from __future__ import annotations

import asyncio
import re
from datetime import datetime, timedelta
from typing import Callable, Optional

from repositories.protocol import ClickRepository, UrlRepository
from schemas.dto.responses.analytics import (
    AnalyticsOverviewResponse,
    BreakdownEntry,
    DailyBucket,
    HourlyBucket,
    LinkAnalyticsResponse,
    LinkSummary,
    OverviewClick,
    RecentClick,
    TopUrl,
)
from schemas.models.url import UrlDoc
from services.url_service import UrlService
from shared.datetime_utils import utcnow

RECENT_CLICKS_LIMIT = 50
BREAKDOWN_LIMIT = 10

OVERVIEW_TOP_URLS = 5
OVERVIEW_RECENT_CLICKS = 10
OVERVIEW_BREAKDOWN_LIMIT = 5

HOURS_IN_SERIES = 24
DAYS_IN_SERIES = 30

# $dateToString formats; strftime renders the same keys
HOURLY_FORMAT = "%Y-%m-%dT%H"
DAILY_FORMAT = "%Y-%m-%d"

_IPV4_LAST_OCTET = re.compile(r"\.\d+$")


def mask_ip(ip_address: Optional[str]) -> Optional[str]:
    """Mask the last octet of an IPv4 address (``203.0.113.7`` → ``203.0.113.***``)."""
    if not ip_address:
        return ip_address
    return _IPV4_LAST_OCTET.sub(".***", ip_address)


def _start_of_day(moment: datetime) -> datetime:
    return moment.replace(hour=0, minute=0, second=0, microsecond=0)


def _entries(rows: list[tuple[Optional[str], int]]) -> list[BreakdownEntry]:
    return [BreakdownEntry(value=value, count=count) for value, count in rows]


def hourly_series(now: datetime, counts: dict[str, int]) -> list[HourlyBucket]:
    """The last 24 UTC hours up to and including the current one, oldest first."""
    current = now.replace(minute=0, second=0, microsecond=0)
    buckets = []
    for offset in range(HOURS_IN_SERIES - 1, -1, -1):
        hour = current - timedelta(hours=offset)
        buckets.append(
            HourlyBucket(
                hour=hour.hour,
                clicks=counts.get(hour.strftime(HOURLY_FORMAT), 0),
                label=f"{hour:%H}:00",
            )
        )
    return buckets


def daily_series(now: datetime, counts: dict[str, int]) -> list[DailyBucket]:
    """The last 30 UTC days up to and including today, oldest first."""
    today = _start_of_day(now)
    buckets = []
    for offset in range(DAYS_IN_SERIES - 1, -1, -1):
        day = today - timedelta(days=offset)
        key = day.strftime(DAILY_FORMAT)
        buckets.append(
            DailyBucket(date=key, clicks=counts.get(key, 0), label=f"{day:%b} {day.day}")
        )
    return buckets


def _summary(doc: UrlDoc) -> LinkSummary:
    return LinkSummary(
        id=str(doc.id),
        short_code=doc.short_code,
        original_url=doc.original_url,
        title=doc.title,
        description=doc.description,
        is_active=doc.is_active,
        created_at=doc.created_at.isoformat(),
        expires_at=doc.expires_at.isoformat() if doc.expires_at else None,
    )


class AnalyticsService:
    def __init__(
        self,
        url_service: UrlService,
        url_repo: UrlRepository,
        click_repo: ClickRepository,
        *,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self._url_service = url_service
        self._url_repo = url_repo
        self._click_repo = click_repo
        self._clock = clock

    async def link_analytics(self, url_id: str) -> LinkAnalyticsResponse:
        doc = await self._url_service.get_url(url_id)
        oid = doc.id

        now = self._clock()
        today = _start_of_day(now)
        yesterday = today - timedelta(days=1)
        week_start = today - timedelta(days=7)
        month_start = today.replace(day=1)
        last_month_start = (month_start - timedelta(days=1)).replace(day=1)

        counts = await asyncio.gather(
            self._click_repo.count_for_url(oid, since=today),
            self._click_repo.count_for_url(oid, since=yesterday, until=today),
            self._click_repo.count_for_url(oid, since=week_start),
            self._click_repo.count_for_url(oid, since=month_start),
            self._click_repo.count_for_url(
                oid, since=last_month_start, until=month_start
            ),
        )
        hourly, daily = await asyncio.gather(
            self._click_repo.bucket_counts(
                oid, now - timedelta(hours=HOURS_IN_SERIES), HOURLY_FORMAT
            ),
            self._click_repo.bucket_counts(
                oid, now - timedelta(days=DAYS_IN_SERIES), DAILY_FORMAT
            ),
        )
        breakdowns = await asyncio.gather(
            *(
                self._click_repo.breakdown(oid, field, BREAKDOWN_LIMIT)
                for field in ("device", "browser", "os", "country", "city", "referer")
            )
        )
        recent = await self._click_repo.recent_for_url(oid, RECENT_CLICKS_LIMIT)

        device, browser, os_, country, city, referer = (
            _entries(rows) for rows in breakdowns
        )
        return LinkAnalyticsResponse(
            url_id=str(oid),
            short_code=doc.short_code,
            url=_summary(doc),
            total_clicks=doc.click_count,
            clicks_today=counts[0],
            clicks_yesterday=counts[1],
            clicks_this_week=counts[2],
            clicks_this_month=counts[3],
            clicks_last_month=counts[4],
            recent_clicks=[
                RecentClick(
                    id=str(click.id),
                    clicked_at=click.clicked_at.isoformat(),
                    device=click.device,
                    browser=click.browser,
                    os=click.os,
                    country=click.country,
                    city=click.city,
                    referer=click.referer,
                    ip_address=mask_ip(click.ip_address),
                )
                for click in recent
            ],
            hourly_data=hourly_series(now, hourly),
            daily_data=daily_series(now, daily),
            device_stats=device,
            browser_stats=browser,
            os_stats=os_,
            country_stats=country,
            city_stats=city,
            referrer_stats=referer,
        )

    async def overview(self) -> AnalyticsOverviewResponse:
        """Totals across all links, the most clicked links and the latest clicks."""
        now = self._clock()
        today = _start_of_day(now)
        week_start = today - timedelta(days=7)
        month_start = today.replace(day=1)

        (
            total_urls,
            active_urls,
            total_clicks,
            clicks_today,
            clicks_this_week,
            clicks_this_month,
        ) = await asyncio.gather(
            self._url_repo.count(),
            self._url_repo.count(active_only=True),
            self._click_repo.count_all(),
            self._click_repo.count_all(since=today),
            self._click_repo.count_all(since=week_start),
            self._click_repo.count_all(since=month_start),
        )
        top, recent, devices, countries = await asyncio.gather(
            self._click_repo.top_urls(OVERVIEW_TOP_URLS),
            self._click_repo.recent_all(OVERVIEW_RECENT_CLICKS),
            self._click_repo.breakdown_all("device", OVERVIEW_BREAKDOWN_LIMIT),
            self._click_repo.breakdown_all("country", OVERVIEW_BREAKDOWN_LIMIT),
        )

        wanted = list({url_id for url_id, _ in top} | {c.url_id for c in recent})
        links = {doc.id: doc for doc in await self._url_repo.find_by_ids(wanted)}

        return AnalyticsOverviewResponse(
            total_urls=total_urls,
            active_urls=active_urls,
            total_clicks=total_clicks,
            clicks_today=clicks_today,
            clicks_this_week=clicks_this_week,
            clicks_this_month=clicks_this_month,
            top_urls=[
                TopUrl(
                    id=str(url_id),
                    short_code=links[url_id].short_code,
                    title=links[url_id].title,
                    original_url=links[url_id].original_url,
                    clicks=clicks,
                )
                for url_id, clicks in top
                if url_id in links
            ],
            recent_clicks=[
                OverviewClick(
                    id=str(click.id),
                    short_code=(
                        links[click.url_id].short_code
                        if click.url_id in links
                        else None
                    ),
                    country=click.country,
                    device=click.device,
                    browser=click.browser,
                    clicked_at=click.clicked_at.isoformat(),
                )
                for click in recent
            ],
            device_stats=_entries(devices),
            country_stats=_entries(countries),
        )
