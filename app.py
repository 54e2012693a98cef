"""
FastAPI application factory.
create_app() is the single entry point for building the app.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

import sentry_sdk
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from pymongo.asynchronous.mongo_client import AsyncMongoClient

from config import AppSettings
from errors import register_error_handlers
from infrastructure.cache.redis_client import create_redis_client
from infrastructure.cache.url_cache import UrlCache
from infrastructure.geoip import GeoIPService
from repositories.click_repository import MongoClickRepository
from repositories.url_repository import MongoUrlRepository
from routes.analytics_routes import router as analytics_router
from routes.health_routes import router as health_router
from routes.redirect_routes import router as redirect_router
from routes.redirect_routes import verify_router
from routes.url_routes import router as url_router
from shared.logging import get_logger, setup_logging

log = get_logger(__name__)


def include_routers(app: FastAPI) -> None:
    """Mount every router on *app*; the short-code catch-all goes last."""
    app.include_router(health_router)
    app.include_router(url_router)
    app.include_router(analytics_router)
    app.include_router(verify_router)
    app.include_router(redirect_router)


def create_app(settings: Optional[AppSettings] = None) -> FastAPI:
    """Create and return a fully configured FastAPI application."""
    if settings is None:
        settings = AppSettings()

    setup_logging(settings.logging, production=settings.is_production)

    # Initialise Sentry before anything else so it captures startup errors
    if settings.sentry.sentry_dsn:
        sentry_sdk.init(
            dsn=settings.sentry.sentry_dsn,
            environment=settings.env,
            send_default_pii=settings.sentry.sentry_send_pii,
            traces_sample_rate=settings.sentry.sentry_traces_sample_rate,
            profiles_sample_rate=settings.sentry.sentry_profile_sample_rate,
        )

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        # ── Startup ──────────────────────────────────────────────────────────
        mongo_client: AsyncMongoClient = AsyncMongoClient(
            settings.db.mongodb_uri, tz_aware=True
        )
        db = mongo_client[settings.db.db_name]
        app.state.settings = settings
        app.state.mongo_client = mongo_client

        url_repo = MongoUrlRepository(db)
        click_repo = MongoClickRepository(db)
        await url_repo.ensure_indexes()
        await click_repo.ensure_indexes()
        app.state.url_repo = url_repo
        app.state.click_repo = click_repo

        # Redis is optional; without it every redirect reads the store
        redis_client = await create_redis_client(settings.redis.redis_uri)
        app.state.redis = redis_client
        app.state.url_cache = UrlCache(
            redis_client, ttl_seconds=settings.redis.redis_ttl_seconds
        )
        app.state.geoip = GeoIPService()

        log.info("app_started", env=settings.env, db_name=settings.db.db_name)
        yield

        # ── Shutdown ─────────────────────────────────────────────────────────
        await mongo_client.close()
        if redis_client is not None:
            await redis_client.aclose()
        log.info("app_stopped")

    app = FastAPI(
        title=settings.app_name,
        version="1.0.0",
        docs_url=settings.docs_url,
        redoc_url=None,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_error_handlers(app)
    include_routers(app)

    return app
