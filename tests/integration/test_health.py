"""Integration tests for GET /health."""

import pytest
from fastapi.testclient import TestClient


def _get_health(build_app, redis_client=None):
    with TestClient(build_app(redis_client)) as client:
        return client.get("/health")


class TestHealthEndpoint:
    def test_healthy_when_both_ok(self, build_app, fake_redis):
        resp = _get_health(build_app, fake_redis)
        assert resp.status_code == 200
        body = resp.json()
        assert body["status"] == "healthy"
        assert body["checks"] == {"database": "ok", "redis": "ok"}

    def test_unhealthy_when_database_fails(self, build_app, url_repo, fake_redis):
        url_repo.fail_with = "Internal server error"
        resp = _get_health(build_app, fake_redis)
        assert resp.status_code == 503
        body = resp.json()
        assert body["status"] == "unhealthy"
        assert body["checks"]["database"] == "error"

    def test_degraded_when_redis_fails(self, build_app, fake_redis):
        fake_redis.ping.side_effect = Exception("redis down")
        resp = _get_health(build_app, fake_redis)
        assert resp.status_code == 200
        body = resp.json()
        assert body["status"] == "degraded"
        assert body["checks"]["redis"] == "error"

    def test_degraded_when_redis_not_configured(self, build_app):
        resp = _get_health(build_app)
        assert resp.status_code == 200
        body = resp.json()
        assert body["status"] == "degraded"
        assert body["checks"]["redis"] == "not_configured"

    @pytest.mark.parametrize("redis_ok", [True, False])
    def test_unhealthy_wins_over_degraded(self, build_app, url_repo, fake_redis, redis_ok):
        url_repo.fail_with = "Internal server error"
        if not redis_ok:
            fake_redis.ping.side_effect = Exception("redis down")
        resp = _get_health(build_app, fake_redis)
        assert resp.json()["status"] == "unhealthy"

    def test_health_is_not_treated_as_short_code(self, build_app, fake_redis):
        resp = _get_health(build_app, fake_redis)
        assert "location" not in resp.headers
