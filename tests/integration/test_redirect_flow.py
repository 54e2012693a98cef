"""End-to-end redirect scenarios over HTTP, backed by the in-memory stores."""

from datetime import datetime, timedelta, timezone

import pytest
from bson import ObjectId
from fastapi.testclient import TestClient

from errors import StoreError
from infrastructure.geoip import GeoIPService
from tests.fakes import make_url_doc

IPHONE_UA = "Mozilla/5.0 (iPhone; CPU iPhone OS) AppleWebKit Safari"
TARGET = "https://example.com/landing"


def _seed(url_repo, **fields):
    doc = make_url_doc(id=ObjectId(), **fields)
    url_repo.docs[doc.id] = doc
    return doc


def _create(client, **fields) -> dict:
    fields.setdefault("originalUrl", TARGET)
    resp = client.post("/api/urls", json=fields)
    assert resp.status_code == 201, resp.text
    return resp.json()


class TestScenarios:
    def test_unconstrained_link_redirects_and_records_one_click(
        self, client, click_repo
    ):
        link = _create(client)

        resp = client.get(
            f"/{link['shortCode']}",
            headers={
                "User-Agent": IPHONE_UA,
                "Referer": "https://news.example/",
                "X-Forwarded-For": "127.0.0.1",
            },
        )

        assert resp.status_code == 302
        assert resp.headers["location"] == TARGET
        assert len(click_repo.clicks) == 1
        click = click_repo.clicks[0]
        assert str(click.url_id) == link["id"]
        assert (click.device, click.browser, click.os) == ("Mobile", "Safari", "iOS")
        assert click.country == "Local"
        assert click.referer == "https://news.example/"

    def test_click_limit_of_one(self, client, click_repo):
        link = _create(client, clickLimit=1)

        first = client.get(f"/{link['shortCode']}")
        second = client.get(f"/{link['shortCode']}")

        assert first.status_code == 302
        assert second.status_code == 410
        assert second.json()["error"] == "URL has reached its click limit"
        assert len(click_repo.clicks) == 1

    def test_password_protected_link(self, client, click_repo):
        link = _create(client, password="abc")
        code = link["shortCode"]

        challenge = client.get(f"/{code}")
        assert challenge.status_code == 302
        assert challenge.headers["location"] == f"/{code}/password"
        assert click_repo.clicks == []

        wrong = client.post(
            "/api/verify-password", json={"shortCode": code, "password": "xyz"}
        )
        assert wrong.status_code == 401
        assert wrong.json()["error"] == "Invalid password"
        assert "originalUrl" not in wrong.json()
        assert click_repo.clicks == []

        right = client.post(
            "/api/verify-password", json={"shortCode": code, "password": "abc"}
        )
        assert right.status_code == 200
        assert right.json() == {"originalUrl": TARGET}
        assert len(click_repo.clicks) == 1

    def test_toggle_active_round_trip(self, client):
        link = _create(client)
        code = link["shortCode"]

        client.patch(f"/api/urls/{link['id']}", json={"isActive": False})
        assert client.get(f"/{code}").status_code == 410

        client.patch(f"/api/urls/{link['id']}", json={"isActive": True})
        assert client.get(f"/{code}").status_code == 302


class TestDenials:
    def test_unknown_code(self, client):
        resp = client.get("/zzzzzz")
        assert resp.status_code == 404
        assert resp.json()["error"] == "URL not found"

    def test_inactive(self, client, url_repo, click_repo):
        _seed(url_repo, is_active=False)
        resp = client.get("/abc123")
        assert resp.status_code == 410
        assert resp.json()["error"] == "URL is inactive"
        assert click_repo.clicks == []

    def test_expired_wins_over_password(self, client, url_repo):
        _seed(
            url_repo,
            password="abc",
            expires_at=datetime.now(timezone.utc) - timedelta(minutes=1),
        )
        resp = client.get("/abc123")
        assert resp.status_code == 410
        assert resp.json()["error"] == "URL has expired"
        assert "location" not in resp.headers

    def test_store_failure_is_500(self, build_app, url_repo):
        url_repo.fail_with = "Internal server error"
        with TestClient(build_app(), follow_redirects=False) as client:
            resp = client.get("/abc123")
        assert resp.status_code == 500
        assert resp.json()["error"] == "Internal server error"

    def test_click_store_failure_does_not_block_redirect(
        self, client, click_repo, mocker
    ):
        link = _create(client)
        mocker.patch.object(
            click_repo,
            "insert",
            side_effect=StoreError("Internal server error"),
        )

        resp = client.get(f"/{link['shortCode']}")
        assert resp.status_code == 302
        assert resp.headers["location"] == TARGET


class TestPasswordChallenge:
    def test_protected(self, client):
        link = _create(client, password="abc")
        resp = client.get(f"/{link['shortCode']}/password")
        assert resp.status_code == 200
        assert resp.json() == {"shortCode": link["shortCode"], "passwordRequired": True}

    def test_unprotected_does_not_leak_target(self, client):
        link = _create(client)
        resp = client.get(f"/{link['shortCode']}/password")
        assert resp.status_code == 200
        assert resp.json() == {
            "shortCode": link["shortCode"],
            "passwordRequired": False,
        }

    def test_unknown(self, client):
        assert client.get("/zzzzzz/password").status_code == 404


class TestVerifyPassword:
    @pytest.mark.parametrize(
        "body",
        [
            {},
            {"shortCode": "abc123"},
            {"password": "abc"},
            {"shortCode": "", "password": "abc"},
            {"shortCode": "abc123", "password": ""},
        ],
    )
    def test_missing_fields(self, client, body):
        resp = client.post("/api/verify-password", json=body)
        assert resp.status_code == 400
        assert resp.json()["error"] == "Short code and password are required"

    def test_unknown_code(self, client):
        resp = client.post(
            "/api/verify-password", json={"shortCode": "zzzzzz", "password": "abc"}
        )
        assert resp.status_code == 404

    def test_click_limit_reached_even_with_correct_password(self, client, click_repo):
        link = _create(client, password="abc", clickLimit=1)
        body = {"shortCode": link["shortCode"], "password": "abc"}

        assert client.post("/api/verify-password", json=body).status_code == 200
        resp = client.post("/api/verify-password", json=body)

        assert resp.status_code == 410
        assert resp.json()["error"] == "URL has reached its click limit"
        assert len(click_repo.clicks) == 1

    def test_unprotected_link_returns_target(self, client):
        link = _create(client)
        resp = client.post(
            "/api/verify-password",
            json={"shortCode": link["shortCode"], "password": "anything"},
        )
        assert resp.status_code == 200
        assert resp.json() == {"originalUrl": TARGET}

    def test_visit_recording_error_does_not_fail_verification(
        self, client, click_repo, mocker
    ):
        mocker.patch.object(
            GeoIPService, "get_country", side_effect=RuntimeError("geo backend down")
        )
        link = _create(client, password="abc")

        resp = client.post(
            "/api/verify-password",
            json={"shortCode": link["shortCode"], "password": "abc"},
        )

        assert resp.status_code == 200
        assert resp.json() == {"originalUrl": TARGET}
        assert click_repo.clicks == []
