"""
User-Agent classification — pure substring heuristics.

Each attribute is decided by the first matching rule in a fixed priority
order over the lower-cased header value. The order matters: Chrome UAs also
contain "safari", Android UAs also contain "linux", and so on.
"""

from __future__ import annotations

from typing import NamedTuple

UNKNOWN = "Unknown"


class UserAgentInfo(NamedTuple):
    device: str
    browser: str
    os: str


def _classify_device(ua: str) -> str:
    if "mobile" in ua or "android" in ua or "iphone" in ua:
        return "Mobile"
    if "tablet" in ua or "ipad" in ua:
        return "Tablet"
    return "Desktop"


def _classify_browser(ua: str) -> str:
    if "chrome" in ua and "edge" not in ua:
        return "Chrome"
    if "firefox" in ua:
        return "Firefox"
    if "safari" in ua and "chrome" not in ua:
        return "Safari"
    if "edge" in ua:
        return "Edge"
    if "opera" in ua:
        return "Opera"
    return UNKNOWN


def _classify_os(ua: str) -> str:
    if "windows" in ua:
        return "Windows"
    if "mac" in ua:
        return "macOS"
    if "linux" in ua:
        return "Linux"
    if "android" in ua:
        return "Android"
    if "ios" in ua or "iphone" in ua or "ipad" in ua:
        return "iOS"
    return UNKNOWN


def classify_user_agent(user_agent: str) -> UserAgentInfo:
    """Classify a ``User-Agent`` header into device, browser and OS.

    Args:
        user_agent: Raw header value; empty string when the header is absent.

    Returns:
        ``UserAgentInfo(device, browser, os)``. An empty header classifies as
        ``("Desktop", "Unknown", "Unknown")``.
    """
    ua = (user_agent or "").lower()
    return UserAgentInfo(
        device=_classify_device(ua),
        browser=_classify_browser(ua),
        os=_classify_os(ua),
    )
