"""Visitor geolocation.

Only the local/remote distinction is resolved: loopback and private-range
addresses report ``"Local"``; every other address reports no location.
The methods are async so a real lookup backend can slot in behind the
same interface without touching callers.
"""

from typing import Optional

from shared.ip_utils import is_local_address

LOCAL_COUNTRY = "Local"


class GeoIPService:
    async def get_country(self, ip_address: Optional[str]) -> Optional[str]:
        if not ip_address:
            return None
        if is_local_address(ip_address):
            return LOCAL_COUNTRY
        return None

    async def get_city(self, ip_address: Optional[str]) -> Optional[str]:
        return None
