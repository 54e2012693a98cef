"""
Unit tests for the shared/ utility modules.

Covers:
- shared.validators      (validate_url, validate_click_limit, validate_expiration)
- shared.generators      (generate_short_code)
- shared.datetime_utils  (parse_datetime, ensure_utc)
- shared.ip_utils        (get_client_ip, is_local_address)
- shared.logging         (redact_sensitive_fields, should_sample, hash_ip)
"""

from __future__ import annotations

import re
from datetime import datetime, timedelta, timezone
from unittest.mock import MagicMock

import pytest

import shared.logging as shared_logging
from shared.datetime_utils import ensure_utc, parse_datetime
from shared.generators import BASE36_ALPHABET, generate_short_code
from shared.ip_utils import get_client_ip, is_local_address
from shared.logging import hash_ip, redact_sensitive_fields, should_sample
from shared.validators import (
    validate_click_limit,
    validate_expiration,
    validate_url,
)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _make_request(headers: dict, client_host: str = "10.0.0.1") -> MagicMock:
    """Minimal mock of a FastAPI Request."""
    req = MagicMock()
    req.headers = headers
    req.client = MagicMock()
    req.client.host = client_host
    return req


# ---------------------------------------------------------------------------
# shared.validators
# ---------------------------------------------------------------------------


@pytest.mark.parametrize(
    "url, expected",
    [
        ("https://example.com", True),
        ("http://example.com/path?q=1#frag", True),
        ("https://sub.example.co.uk/a/b", True),
        ("ftp://example.com", False),
        ("example.com", False),
        ("javascript:alert(1)", False),
        ("https://", False),
        ("", False),
    ],
)
def test_validate_url(url, expected):
    assert validate_url(url) is expected


@pytest.mark.parametrize(
    "value, expected",
    [(1, True), (500, True), (0, False), (-3, False), (True, False), (2.5, False)],
)
def test_validate_click_limit(value, expected):
    assert validate_click_limit(value) is expected


def test_validate_expiration():
    now = datetime(2026, 1, 1, tzinfo=timezone.utc)
    assert validate_expiration(now + timedelta(seconds=1), now)
    assert not validate_expiration(now, now)
    assert not validate_expiration(now - timedelta(days=1), now)


# ---------------------------------------------------------------------------
# shared.generators
# ---------------------------------------------------------------------------


class TestGenerateShortCode:
    def test_length_is_6(self):
        assert len(generate_short_code()) == 6

    @pytest.mark.parametrize("length", [4, 8, 12])
    def test_custom_length(self, length):
        assert len(generate_short_code(length)) == length

    def test_only_base36(self):
        assert re.fullmatch(r"[a-z0-9]+", generate_short_code(64))
        assert set(BASE36_ALPHABET) == set("abcdefghijklmnopqrstuvwxyz0123456789")

    def test_produces_variety(self):
        assert len({generate_short_code() for _ in range(50)}) > 45


# ---------------------------------------------------------------------------
# shared.datetime_utils
# ---------------------------------------------------------------------------


@pytest.mark.parametrize(
    "value, expected",
    [
        (None, None),
        ("2026-06-01T00:00:00Z", datetime(2026, 6, 1, tzinfo=timezone.utc)),
        (
            "2026-06-01T02:00:00+02:00",
            datetime(2026, 6, 1, tzinfo=timezone.utc),
        ),
        (1780272000, datetime(2026, 6, 1, tzinfo=timezone.utc)),
        (1780272000.9, datetime(2026, 6, 1, tzinfo=timezone.utc)),
        ("not-a-date", None),
        (True, None),
    ],
)
def test_parse_datetime(value, expected):
    assert parse_datetime(value) == expected


def test_parse_datetime_naive_assumed_utc():
    result = parse_datetime("2026-06-01T00:00:00")
    assert result.tzinfo is not None
    assert result == datetime(2026, 6, 1, tzinfo=timezone.utc)


def test_ensure_utc():
    assert ensure_utc(None) is None
    naive = datetime(2026, 1, 1, 12)
    assert ensure_utc(naive) == datetime(2026, 1, 1, 12, tzinfo=timezone.utc)


# ---------------------------------------------------------------------------
# shared.ip_utils
# ---------------------------------------------------------------------------


@pytest.mark.parametrize(
    "headers, client_host, expected_ip",
    [
        ({"X-Forwarded-For": "11.22.33.44, 99.99.99.99"}, "10.0.0.1", "11.22.33.44"),
        ({"X-Real-IP": "55.66.77.88"}, "10.0.0.1", "55.66.77.88"),
        ({"CF-Connecting-IP": "1.2.3.4"}, "10.0.0.1", "1.2.3.4"),
        ({"True-Client-IP": "5.6.7.8"}, "10.0.0.1", "5.6.7.8"),
        ({}, "192.168.1.50", "192.168.1.50"),  # fallback to client.host
    ],
    ids=["x_forwarded_for_multi", "x_real_ip", "cloudflare", "true_client_ip", "fallback"],
)
def test_get_client_ip(headers, client_host, expected_ip):
    assert get_client_ip(_make_request(headers, client_host)) == expected_ip


def test_get_client_ip_no_client_returns_loopback():
    req = MagicMock()
    req.headers = {}
    req.client = None
    assert get_client_ip(req) == "127.0.0.1"


@pytest.mark.parametrize(
    "ip, expected",
    [
        ("127.0.0.1", True),
        ("::1", True),
        ("10.1.2.3", True),
        ("192.168.0.10", True),
        ("8.8.8.8", False),
        ("2001:4860:4860::8888", False),
        ("localhost", False),
        ("", False),
    ],
)
def test_is_local_address(ip, expected):
    assert is_local_address(ip) is expected


# ---------------------------------------------------------------------------
# shared.logging
# ---------------------------------------------------------------------------


def test_redact_sensitive_fields():
    event = {"event": "url_created", "password": "hunter2", "short_code": "abc123"}
    result = redact_sensitive_fields(None, "info", event)
    assert result["password"] == "***REDACTED***"
    assert result["short_code"] == "abc123"


def test_should_sample_always_for_unknown_event():
    assert should_sample("something_else") is True


def test_should_sample_respects_zero_rate(monkeypatch):
    monkeypatch.setitem(shared_logging.SAMPLING_RATES, "url_redirect", 0.0)
    assert should_sample("url_redirect") is False


def test_hash_ip_only_in_production(monkeypatch):
    monkeypatch.setattr(shared_logging, "_hash_ips", False)
    assert hash_ip("203.0.113.7") == "203.0.113.7"

    monkeypatch.setattr(shared_logging, "_hash_ips", True)
    hashed = hash_ip("203.0.113.7")
    assert hashed != "203.0.113.7"
    assert hashed == hash_ip("203.0.113.7")
    assert hash_ip(None) is None
