"""
Shared fixtures.

HTTP tests run the real routers and error handlers against the in-memory
repositories from tests/fakes.py, injected through a test lifespan so no
MongoDB or Redis connection is ever opened.
"""

import os
from contextlib import asynccontextmanager
from unittest.mock import AsyncMock

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from app import include_routers
from config import AppSettings
from errors import register_error_handlers
from infrastructure.cache.url_cache import UrlCache
from infrastructure.geoip import GeoIPService
from tests.fakes import InMemoryClickRepository, InMemoryUrlRepository

# Ensure a MONGODB_URI is present so AppSettings can be instantiated
os.environ.setdefault("MONGODB_URI", "mongodb://localhost:27017/")


@pytest.fixture
def url_repo():
    return InMemoryUrlRepository()


@pytest.fixture
def click_repo():
    return InMemoryClickRepository()


@pytest.fixture
def settings():
    return AppSettings(app_url="https://sho.rt/", env="test")


@pytest.fixture
def build_app(url_repo, click_repo, settings):
    """Return a factory for a test app wired to the in-memory stores."""

    def _build(redis_client=None) -> FastAPI:
        @asynccontextmanager
        async def lifespan(app: FastAPI):
            app.state.settings = settings
            app.state.url_repo = url_repo
            app.state.click_repo = click_repo
            app.state.url_cache = UrlCache(redis_client)
            app.state.geoip = GeoIPService()
            yield

        app = FastAPI(lifespan=lifespan)
        register_error_handlers(app)
        include_routers(app)
        return app

    return _build


@pytest.fixture
def client(build_app):
    with TestClient(build_app(), follow_redirects=False) as c:
        yield c


@pytest.fixture
def fake_redis():
    r = AsyncMock()
    r.get.return_value = None
    r.setex.return_value = True
    r.delete.return_value = 1
    r.ping.return_value = True
    return r
