import json
import math
from datetime import datetime, timedelta, timezone
from typing import Any

from dateutil.parser import isoparse

DEFAULT_SCORE = 60

def normalize_address(addr: str) -> str:
    """
    Cache-key normalization: trim surrounding whitespace and lowercase.
    Internal spacing is left untouched.
    """
    return addr.strip().lower()

def rolling_hash_32(s: str) -> int:
    """
    31-multiplier rolling hash wrapped to a signed 32-bit integer each step.
    Characters outside the BMP contribute their leading UTF-16 surrogate,
    so results match UTF-16 based implementations of the same hash.
    """
    h = 0
    for ch in s:
        unit = ord(ch)
        if unit > 0xFFFF:
            unit = 0xD800 + ((unit - 0x10000) >> 10)
        h = ((h << 5) - h + unit) & 0xFFFFFFFF
        if h >= 0x80000000:
            h -= 0x100000000
    return h

def clamp(value: int, low: int, high: int) -> int:
    return min(max(value, low), high)

def clamp_score(value: Any, default: int = DEFAULT_SCORE) -> int:
    """
    Coerce an externally supplied score into [0, 100].
    Numbers are rounded half-up; anything else (bools, strings, NaN) gives `default`.
    """
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return default
    if isinstance(value, int):
        return clamp(value, 0, 100)
    if not math.isfinite(value):
        return default
    return clamp(math.floor(value + 0.5), 0, 100)

def truncate_payload(data: Any, max_chars: int) -> str:
    """Serialize `data` to compact JSON and cut it to at most `max_chars` characters."""
    return json.dumps(data, separators=(",", ":"), ensure_ascii=False, default=str)[:max_chars]

def utcnow() -> datetime:
    return datetime.now(timezone.utc)

def parse_timestamp(value: Any) -> datetime | None:
    """Parse an ISO-8601 string (or pass a datetime through); naive values are read as UTC."""
    if isinstance(value, datetime):
        ts = value
    elif isinstance(value, str) and value.strip():
        try:
            ts = isoparse(value.strip())
        except (ValueError, OverflowError):
            return None
    else:
        return None
    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=timezone.utc)
    return ts

def is_fresh(last_fetched_at: Any, window: timedelta, now: datetime | None = None) -> bool:
    """True iff the timestamp parses and is no older than `window` (boundary inclusive)."""
    ts = parse_timestamp(last_fetched_at)
    if ts is None:
        return False
    now = now or utcnow()
    return now - ts <= window
