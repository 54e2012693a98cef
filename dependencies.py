"""
FastAPI dependency providers.

All injectable dependencies are defined here as plain functions used with
FastAPI's Depends() system. Long-lived adapters (repositories, cache, geoip)
live on app.state and are created in the lifespan; services are cheap and
are built per request on top of them.
"""

from __future__ import annotations

from fastapi import Depends, Request

from config import AppSettings
from infrastructure.cache.url_cache import UrlCache
from infrastructure.geoip import GeoIPService
from repositories.protocol import ClickRepository, UrlRepository
from services.analytics_service import AnalyticsService
from services.code_allocator import CodeAllocator
from services.redirect_service import RedirectService
from services.url_service import UrlService
from services.visit_recorder import VisitRecorder


def get_settings(request: Request) -> AppSettings:
    """Return the AppSettings instance stored on app.state."""
    return request.app.state.settings


def get_url_repo(request: Request) -> UrlRepository:
    return request.app.state.url_repo


def get_click_repo(request: Request) -> ClickRepository:
    return request.app.state.click_repo


def get_url_cache(request: Request) -> UrlCache:
    """Return the link cache (disabled when Redis is not configured)."""
    return request.app.state.url_cache


def get_geoip(request: Request) -> GeoIPService:
    return request.app.state.geoip


def get_visit_recorder(
    click_repo: ClickRepository = Depends(get_click_repo),
    geoip: GeoIPService = Depends(get_geoip),
    settings: AppSettings = Depends(get_settings),
) -> VisitRecorder:
    return VisitRecorder(
        click_repo,
        geoip,
        timeout_seconds=settings.shortener.visit_record_timeout_seconds,
    )


def get_redirect_service(
    url_repo: UrlRepository = Depends(get_url_repo),
    click_repo: ClickRepository = Depends(get_click_repo),
    cache: UrlCache = Depends(get_url_cache),
) -> RedirectService:
    return RedirectService(url_repo, click_repo, cache)


def get_url_service(
    url_repo: UrlRepository = Depends(get_url_repo),
    click_repo: ClickRepository = Depends(get_click_repo),
    cache: UrlCache = Depends(get_url_cache),
    settings: AppSettings = Depends(get_settings),
) -> UrlService:
    allocator = CodeAllocator(
        url_repo,
        max_attempts=settings.shortener.max_allocation_attempts,
        length=settings.shortener.short_code_length,
    )
    return UrlService(url_repo, click_repo, allocator, cache)


def get_analytics_service(
    url_service: UrlService = Depends(get_url_service),
    url_repo: UrlRepository = Depends(get_url_repo),
    click_repo: ClickRepository = Depends(get_click_repo),
) -> AnalyticsService:
    return AnalyticsService(url_service, url_repo, click_repo)
