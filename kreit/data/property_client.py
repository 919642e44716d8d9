import logging
from typing import Any, Dict

import httpx

from .base import PropertyDataClient
from ..core.config import Settings
from ..core.errors import ConfigurationError, UpstreamError
from ..core.metrics import UPSTREAM_FAILURES
from ..core.utils import normalize_address, rolling_hash_32

logger = logging.getLogger(__name__)

class MockPropertyData(PropertyDataClient):
    """
    Synthetic property record keyed off the address. Plausible shape, fake values,
    no network.
    """
    async def fetch(self, raw_address: str) -> Dict[str, Any]:
        seed = abs(rolling_hash_32(normalize_address(raw_address)))
        beds = 1 + seed % 5
        return {
            "status": {"code": 0, "msg": "SuccessWithResult", "total": 1},
            "property": [{
                "address": {"oneLine": raw_address.strip()},
                "summary": {
                    "propclass": "Single Family Residence" if seed % 3 else "Condominium",
                    "yearbuilt": 1950 + seed % 70,
                },
                "building": {
                    "rooms": {"beds": beds, "bathstotal": max(1, beds - 1)},
                    "size": {"livingsize": 700 + seed % 2600},
                },
                "assessment": {"market": {"mktttlvalue": 180_000 + (seed % 900) * 1_000}},
            }],
        }

class AttomPropertyData(PropertyDataClient):
    """
    ATTOM-style property API: GET <base_url>?address=<raw address> with an
    `apikey` header.
    """
    def __init__(self, base_url: str, api_key: str, timeout: float = 15, transport: httpx.AsyncBaseTransport | None = None):
        self.base_url = base_url
        self.api_key = api_key
        self.timeout = timeout
        self.transport = transport

    async def fetch(self, raw_address: str) -> Dict[str, Any]:
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                r = await client.get(
                    self.base_url,
                    params={"address": raw_address},
                    headers={"apikey": self.api_key, "accept": "application/json"},
                )
        except httpx.HTTPError as exc:
            UPSTREAM_FAILURES.labels(upstream="property").inc()
            raise UpstreamError(detail=f"ATTOM request failed: {exc!r}") from exc

        if r.is_error:
            UPSTREAM_FAILURES.labels(upstream="property").inc()
            raise UpstreamError(detail=f"ATTOM API error ({r.status_code}): {r.text[:500]}")
        try:
            return r.json()
        except ValueError as exc:
            UPSTREAM_FAILURES.labels(upstream="property").inc()
            raise UpstreamError(detail="ATTOM API returned a non-JSON body") from exc

class UnconfiguredPropertyData(PropertyDataClient):
    def __init__(self, missing: list[str]):
        self.missing = missing

    async def fetch(self, raw_address: str) -> Dict[str, Any]:
        raise ConfigurationError(detail=f"Missing required environment variable(s): {', '.join(self.missing)}")

def property_client(settings: Settings) -> PropertyDataClient:
    """
    Factory picks mock or ATTOM based on env flags.
    """
    if settings.PROPERTY_PROVIDER == "mock":
        return MockPropertyData()
    missing = settings.missing_credentials("property")
    if missing:
        return UnconfiguredPropertyData(missing)
    return AttomPropertyData(settings.ATTOM_BASE_URL, settings.ATTOM_API_KEY, timeout=settings.HTTP_TIMEOUT_SECONDS)
