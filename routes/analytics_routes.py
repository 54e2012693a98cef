"""
Click analytics.

GET /api/analytics      — totals across all links, top links and latest clicks
GET /api/analytics/{id} — period counts, time series, recent clicks and
                          top-10 breakdowns for one link
"""

from __future__ import annotations

from fastapi import APIRouter, Depends

from dependencies import get_analytics_service
from schemas.dto.responses.analytics import (
    AnalyticsOverviewResponse,
    LinkAnalyticsResponse,
)
from services.analytics_service import AnalyticsService

router = APIRouter(prefix="/api/analytics", tags=["analytics"])


@router.get("", response_model=AnalyticsOverviewResponse)
async def analytics_overview(
    service: AnalyticsService = Depends(get_analytics_service),
) -> AnalyticsOverviewResponse:
    return await service.overview()


@router.get("/{url_id}", response_model=LinkAnalyticsResponse)
async def link_analytics(
    url_id: str,
    service: AnalyticsService = Depends(get_analytics_service),
) -> LinkAnalyticsResponse:
    return await service.link_analytics(url_id)
