"""
Visit recording: classify the inbound request and append one click event.

``record`` is the strict form and raises StoreError when the insert fails.
``record_best_effort`` is what the redirect paths use: it bounds the write
with a timeout, never retries, and logs failures instead of raising, so a
broken click store never changes a redirect decision that was already made.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Optional

from bson import ObjectId
from fastapi import Request

from errors import StoreError
from infrastructure.geoip import GeoIPService
from repositories.protocol import ClickRepository
from schemas.models.click import ClickDoc
from shared.datetime_utils import utcnow
from shared.ip_utils import get_client_ip
from shared.logging import get_logger, hash_ip
from shared.user_agent import classify_user_agent

log = get_logger(__name__)


@dataclass(frozen=True)
class VisitMetadata:
    """What the recorder needs to know about the inbound request."""

    ip_address: str
    user_agent: str = ""
    referer: str = ""

    @classmethod
    def from_request(cls, request: Request) -> "VisitMetadata":
        return cls(
            ip_address=get_client_ip(request),
            user_agent=request.headers.get("user-agent", ""),
            referer=request.headers.get("referer", ""),
        )


class VisitRecorder:
    def __init__(
        self,
        click_repo: ClickRepository,
        geoip: GeoIPService,
        *,
        timeout_seconds: float = 5.0,
    ) -> None:
        self._click_repo = click_repo
        self._geoip = geoip
        self.timeout_seconds = timeout_seconds

    async def record(self, url_id: ObjectId, visit: VisitMetadata) -> ClickDoc:
        """Persist one click event for *url_id*.

        Raises:
            StoreError: the click could not be written.
        """
        ua = classify_user_agent(visit.user_agent)
        click = ClickDoc(
            url_id=url_id,
            clicked_at=utcnow(),
            ip_address=visit.ip_address,
            user_agent=visit.user_agent,
            referer=visit.referer or None,
            device=ua.device,
            browser=ua.browser,
            os=ua.os,
            country=await self._geoip.get_country(visit.ip_address),
            city=await self._geoip.get_city(visit.ip_address),
        )
        return await self._click_repo.insert(click)

    async def record_best_effort(
        self, url_id: ObjectId, visit: VisitMetadata
    ) -> Optional[ClickDoc]:
        """Like ``record`` but returns None instead of raising on failure."""
        try:
            return await asyncio.wait_for(
                self.record(url_id, visit), timeout=self.timeout_seconds
            )
        except StoreError as e:
            log.error(
                "visit_record_failed",
                url_id=str(url_id),
                ip=hash_ip(visit.ip_address),
                error=e.message,
            )
        except asyncio.TimeoutError:
            log.error(
                "visit_record_timeout",
                url_id=str(url_id),
                timeout_seconds=self.timeout_seconds,
            )
        except Exception as e:
            log.error(
                "visit_record_failed",
                url_id=str(url_id),
                ip=hash_ip(visit.ip_address),
                error=str(e),
                error_type=type(e).__name__,
            )
        return None
