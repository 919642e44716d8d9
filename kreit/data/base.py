from typing import Protocol, Optional, Dict, Any
from dataclasses import dataclass, asdict, field
from datetime import datetime

# ----- Data shapes (thin & explicit) -----

@dataclass
class PropertyCacheRecord:
    normalized_address: str
    raw_address: Optional[str] = None
    attom_data: Optional[Dict[str, Any]] = None
    kreit_score: Optional[int] = None
    simple_summary: Optional[str] = None
    pro_summary: Optional[str] = None
    premium_data: Optional[Dict[str, Any]] = None
    last_fetched_at: Optional[str] = None   # ISO-8601, UTC

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "PropertyCacheRecord":
        """Build from a store row, ignoring columns this service does not own."""
        ts = row.get("last_fetched_at")
        if isinstance(ts, datetime):
            ts = ts.isoformat()
        return cls(
            normalized_address=row["normalized_address"],
            raw_address=row.get("raw_address"),
            attom_data=row.get("attom_data"),
            kreit_score=row.get("kreit_score"),
            simple_summary=row.get("simple_summary"),
            pro_summary=row.get("pro_summary"),
            premium_data=row.get("premium_data"),
            last_fetched_at=ts,
        )

    def to_row(self) -> Dict[str, Any]:
        return asdict(self)

@dataclass
class CallerIdentity:
    user_id: str
    email: Optional[str] = None
    metadata: Dict[str, Any] = field(default_factory=dict)

# ----- Protocols (interfaces) -----

class PropertyDataClient(Protocol):
    async def fetch(self, raw_address: str) -> Dict[str, Any]: ...

class PropertyStore(Protocol):
    async def get(self, normalized_address: str) -> Optional[PropertyCacheRecord]:
        """Point lookup. None means "no row"; any other failure raises StoreError."""
        ...

    async def upsert(self, record: PropertyCacheRecord) -> bool:
        """Replace the record for its key. Advisory: False on failure, never raises."""
        ...

    async def is_premium(self, user_id: str) -> bool: ...

    async def user_for_token(self, access_token: str) -> Optional[CallerIdentity]: ...
