"""
Client IP helpers for FastAPI requests.

``get_client_ip`` takes an explicit ``Request`` parameter so it is testable
without a running app.
"""

from __future__ import annotations

import ipaddress

from fastapi import Request

# Checked in order; the first non-empty value wins
PROXY_IP_HEADERS: tuple[str, ...] = (
    "X-Forwarded-For",
    "X-Real-IP",
    "CF-Connecting-IP",
    "True-Client-IP",
)

FALLBACK_CLIENT_IP = "127.0.0.1"


def get_client_ip(request: Request) -> str:
    """Extract the real client IP from a FastAPI ``Request``.

    Proxy headers are consulted first; ``X-Forwarded-For`` may carry a chain,
    in which case the first (client-most) address is used. Falls back to the
    socket peer address and finally to loopback.
    """
    for header in PROXY_IP_HEADERS:
        ip_value = request.headers.get(header)
        if ip_value:
            client_ip = ip_value.split(",")[0].strip()
            if client_ip:
                return client_ip

    if request.client and request.client.host:
        return request.client.host
    return FALLBACK_CLIENT_IP


def is_local_address(ip_address: str) -> bool:
    """Return True for loopback and private-range addresses.

    Unparsable input (including hostnames) is not considered local.
    """
    try:
        addr = ipaddress.ip_address(ip_address.strip())
    except ValueError:
        return False
    return addr.is_loopback or addr.is_private
