import logging
from datetime import timedelta
from typing import Any, Dict

from ..core.errors import InvalidRequest, StoreError
from ..core.metrics import SCORE_CACHE
from ..core.security import Caller
from ..core.utils import clamp_score, is_fresh, normalize_address, utcnow
from ..data.base import PropertyCacheRecord, PropertyDataClient, PropertyStore
from ..models.base import InsightsModel

logger = logging.getLogger(__name__)

ADDRESS_REQUIRED = "Address is required."
SUMMARY_FALLBACK = "We could not generate a summary for this property."
PRO_SUMMARY_FALLBACK = "We could not generate a professional summary for this property."

def has_premium_data(record: PropertyCacheRecord) -> bool:
    return isinstance(record.premium_data, dict) and len(record.premium_data) > 0

def shape_response(record: PropertyCacheRecord, premium: bool) -> Dict[str, Any]:
    """
    Public view of a cache record. Premium data is only exposed when the caller
    is entitled AND the record actually carries some.
    """
    has_premium = has_premium_data(record)
    return {
        "kreit_score": clamp_score(record.kreit_score, default=0),
        "simple_summary": record.simple_summary if record.simple_summary is not None else SUMMARY_FALLBACK,
        "pro_summary": record.pro_summary if record.pro_summary is not None else PRO_SUMMARY_FALLBACK,
        "has_premium_data": has_premium,
        "premium_data": record.premium_data if premium and has_premium else None,
    }

class ScoreService:
    """
    Orchestrates:
      address → normalize → cache lookup → (stale? provider fetch → insights → upsert)
      → response shaped by the caller's entitlement
    Cache reads and writes are best-effort; provider and insights failures are fatal.
    """
    def __init__(
        self,
        store: PropertyStore,
        properties: PropertyDataClient,
        insights: InsightsModel,
        freshness: timedelta = timedelta(days=90),
    ):
        self.store = store
        self.properties = properties
        self.insights = insights
        self.freshness = freshness

    async def lookup(self, normalized_address: str) -> PropertyCacheRecord | None:
        try:
            return await self.store.get(normalized_address)
        except StoreError as exc:
            logger.warning("Cache lookup error for %r: %s", normalized_address, exc)
            return None

    async def refresh(self, raw_address: str, normalized_address: str) -> PropertyCacheRecord:
        # 1) Provider data, keyed by what the user typed
        property_data = await self.properties.fetch(raw_address)

        # 2) Score + summaries
        insights = await self.insights.generate(property_data)

        record = PropertyCacheRecord(
            normalized_address=normalized_address,
            raw_address=raw_address,
            attom_data=property_data,
            kreit_score=insights.kreit_score,
            simple_summary=insights.simple_summary,
            pro_summary=insights.pro_summary,
            premium_data=insights.premium_data,
            last_fetched_at=utcnow().isoformat(),
        )

        # 3) Advisory write: the fresh result is returned either way
        if not await self.store.upsert(record):
            logger.warning("Cache upsert skipped for %r; returning uncached result", normalized_address)
        return record

    async def kreit_score(self, raw_address: Any, caller: Caller) -> Dict[str, Any]:
        if not isinstance(raw_address, str) or not raw_address.strip():
            raise InvalidRequest(ADDRESS_REQUIRED)

        raw_address = raw_address.strip()
        normalized = normalize_address(raw_address)

        record = await self.lookup(normalized)
        if record is not None and is_fresh(record.last_fetched_at, self.freshness):
            SCORE_CACHE.labels(outcome="hit").inc()
        else:
            SCORE_CACHE.labels(outcome="stale" if record is not None else "miss").inc()
            record = await self.refresh(raw_address, normalized)

        return shape_response(record, caller.premium)
