from dataclasses import dataclass
from typing import Protocol, Dict, Any, Optional

from ..core.utils import DEFAULT_SCORE, clamp_score

SIMPLE_SUMMARY_FALLBACK = "We could not generate a simple summary for this property."
PRO_SUMMARY_FALLBACK = "We could not generate a pro summary for this property."

@dataclass
class Insights:
    kreit_score: int
    simple_summary: str
    pro_summary: str
    premium_data: Optional[Dict[str, Any]]

class InsightsModel(Protocol):
    async def generate(self, property_data: Any) -> Insights:
        """
        Turns a raw property payload into a score, two summaries and an
        optional premium-data object.
        """
        ...

def _summary(value: Any, fallback: str) -> str:
    if isinstance(value, str) and value.strip():
        return value.strip()
    return fallback

def coerce_insights(parsed: Dict[str, Any]) -> Insights:
    """
    Per-field fallback policy for model output. A bad field is replaced by its
    default, never fatal:
      kreit_score    -> rounded + clamped to 0..100, else 60
      *_summary      -> trimmed non-empty string, else the apology text
      premium_data   -> non-empty object, else None
    """
    premium = parsed.get("premium_data")
    return Insights(
        kreit_score=clamp_score(parsed.get("kreit_score"), DEFAULT_SCORE),
        simple_summary=_summary(parsed.get("simple_summary"), SIMPLE_SUMMARY_FALLBACK),
        pro_summary=_summary(parsed.get("pro_summary"), PRO_SUMMARY_FALLBACK),
        premium_data=premium if isinstance(premium, dict) and premium else None,
    )
