"""
Persistent store for the property cache, profile entitlements and session
tokens. Supabase in production; an in-memory backend for local development
and tests.
"""

import copy
import logging
from typing import Any, Dict, Optional

from starlette.concurrency import run_in_threadpool

from .base import CallerIdentity, PropertyCacheRecord, PropertyStore
from ..core.config import Settings
from ..core.errors import ConfigurationError, StoreError
from ..core.metrics import UPSTREAM_FAILURES

logger = logging.getLogger(__name__)

PROPERTY_CACHE_TABLE = "property_cache"
PROFILES_TABLE = "profiles"

# PostgREST code for "zero rows" on a single-row request
NO_ROWS_CODE = "PGRST116"


class MemoryStore(PropertyStore):
    """
    Dict-backed store. Rows are deep-copied in and out so callers never share
    state with the store.
    """
    def __init__(self):
        self.rows: Dict[str, Dict[str, Any]] = {}
        self.premium_users: set[str] = set()
        self.sessions: Dict[str, CallerIdentity] = {}

    async def get(self, normalized_address: str) -> Optional[PropertyCacheRecord]:
        row = self.rows.get(normalized_address)
        return PropertyCacheRecord.from_row(copy.deepcopy(row)) if row else None

    async def upsert(self, record: PropertyCacheRecord) -> bool:
        self.rows[record.normalized_address] = copy.deepcopy(record.to_row())
        return True

    async def is_premium(self, user_id: str) -> bool:
        return user_id in self.premium_users

    async def user_for_token(self, access_token: str) -> Optional[CallerIdentity]:
        return self.sessions.get(access_token)


class SupabaseStore(PropertyStore):
    """
    supabase-py is synchronous, so every call is pushed to the threadpool.
    """
    def __init__(self, client):
        self.client = client

    @classmethod
    def from_settings(cls, settings: Settings) -> "SupabaseStore":
        from supabase import create_client

        return cls(create_client(settings.SUPABASE_URL, settings.SUPABASE_SERVICE_ROLE_KEY))

    def _single(self, table: str, columns: str, column: str, value: str) -> Optional[Dict[str, Any]]:
        try:
            res = (
                self.client.table(table)
                .select(columns)
                .eq(column, value)
                .maybe_single()
                .execute()
            )
        except Exception as exc:
            if getattr(exc, "code", None) == NO_ROWS_CODE:
                return None
            UPSTREAM_FAILURES.labels(upstream="store").inc()
            raise StoreError(detail=f"{table} lookup failed: {exc!r}") from exc
        if res is None:
            return None
        return res.data or None

    async def get(self, normalized_address: str) -> Optional[PropertyCacheRecord]:
        row = await run_in_threadpool(
            self._single, PROPERTY_CACHE_TABLE, "*", "normalized_address", normalized_address
        )
        return PropertyCacheRecord.from_row(row) if row else None

    def _upsert(self, row: Dict[str, Any]) -> None:
        self.client.table(PROPERTY_CACHE_TABLE).upsert(row, on_conflict="normalized_address").execute()

    async def upsert(self, record: PropertyCacheRecord) -> bool:
        try:
            await run_in_threadpool(self._upsert, record.to_row())
        except Exception:
            UPSTREAM_FAILURES.labels(upstream="store").inc()
            logger.exception("Cache upsert error for %r", record.normalized_address)
            return False
        return True

    async def is_premium(self, user_id: str) -> bool:
        try:
            row = await run_in_threadpool(self._single, PROFILES_TABLE, "is_premium", "id", user_id)
        except StoreError as exc:
            logger.warning("Profile lookup failed for %s: %s", user_id, exc)
            return False
        return bool(row and row.get("is_premium"))

    def _get_user(self, access_token: str):
        return self.client.auth.get_user(access_token)

    async def user_for_token(self, access_token: str) -> Optional[CallerIdentity]:
        try:
            res = await run_in_threadpool(self._get_user, access_token)
        except Exception as exc:
            logger.info("Access token rejected: %s", exc)
            return None
        user = getattr(res, "user", None)
        if user is None:
            return None
        return CallerIdentity(user_id=str(user.id), email=getattr(user, "email", None))


class UnconfiguredStore(PropertyStore):
    """
    Stands in when Supabase credentials are missing: the cache degrades to
    misses and every caller is anonymous.
    """
    def __init__(self, missing: list[str]):
        self.missing = missing

    async def get(self, normalized_address: str) -> Optional[PropertyCacheRecord]:
        raise StoreError(detail=f"Store not configured; missing {', '.join(self.missing)}")

    async def upsert(self, record: PropertyCacheRecord) -> bool:
        logger.warning("Skipping cache upsert; store not configured")
        return False

    async def is_premium(self, user_id: str) -> bool:
        return False

    async def user_for_token(self, access_token: str) -> Optional[CallerIdentity]:
        return None


def property_store(settings: Settings) -> PropertyStore:
    """
    Factory picks the in-memory or Supabase backend based on env flags.
    """
    if settings.STORE_PROVIDER == "memory":
        return MemoryStore()
    if settings.STORE_PROVIDER != "supabase":
        raise ConfigurationError(detail=f"Unknown STORE_PROVIDER {settings.STORE_PROVIDER!r}")
    missing = settings.missing_credentials("store")
    if missing:
        return UnconfiguredStore(missing)
    return SupabaseStore.from_settings(settings)
