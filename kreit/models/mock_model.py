from typing import Any, Literal

from .base import Insights, InsightsModel
from ..core.utils import clamp, normalize_address, rolling_hash_32

PlanId = Literal["simple", "pro"]

SIMPLE_BASE = 520
PRO_BONUS = 60
VARIABILITY_RANGE = 320
MIN_SCORE = 300
MAX_SCORE = 900

def mock_base(plan: PlanId) -> int:
    return SIMPLE_BASE + (PRO_BONUS if plan == "pro" else 0)

def mock_variability(address: str) -> int:
    return abs(rolling_hash_32(address.lower())) % VARIABILITY_RANGE

def generate_mock_score(address: str, plan: PlanId) -> int:
    """
    Deterministic demo score in [300, 900]. No I/O; same address and plan
    always give the same number.
    """
    return clamp(mock_base(plan) + mock_variability(address), MIN_SCORE, MAX_SCORE)

class MockInsightsModel(InsightsModel):
    """
    Deterministic placeholder for the AI insights call. Reads the address out of
    the payload when present so repeated queries agree.
    """
    async def generate(self, property_data: Any) -> Insights:
        address = _one_line(property_data) or "unknown"
        seed = abs(rolling_hash_32(normalize_address(address)))
        score = 40 + seed % 56  # 40..95
        outlook = "steady" if score < 70 else "strong"
        return Insights(
            kreit_score=score,
            simple_summary=f"{address} scores {score} out of 100. Demand in the area looks {outlook}.",
            pro_summary=f"Indicative KREIT score of {score}/100 with a {outlook} demand outlook. Figures are synthetic.",
            premium_data={
                "score_breakdown": {"location": seed % 10, "condition": (seed // 10) % 10, "yield": (seed // 100) % 10},
                "rental_potential": {"estimated_monthly_rent": 1200 + seed % 2400},
            },
        )

def _one_line(property_data: Any) -> str | None:
    try:
        return property_data["property"][0]["address"]["oneLine"]
    except (KeyError, IndexError, TypeError):
        return None
