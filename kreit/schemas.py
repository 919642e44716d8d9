from typing import Any, Literal
from pydantic import BaseModel, ConfigDict, Field

class KreitScoreRequest(BaseModel):
    # Any JSON type accepted here; ScoreService validates it
    model_config = ConfigDict(extra="ignore")
    address: Any = None

class KreitScoreResponse(BaseModel):
    kreit_score: int = Field(ge=0, le=100)
    simple_summary: str
    pro_summary: str
    has_premium_data: bool
    premium_data: dict | None = None

class ScoreRequest(BaseModel):
    model_config = ConfigDict(extra="ignore")
    address: Any = None
    plan: Any = None

class ScoreResponse(BaseModel):
    address: str
    plan: Literal["simple", "pro"]
    score: int = Field(ge=300, le=900)
    generatedAt: str

class CheckoutResponse(BaseModel):
    url: str

class ErrorResponse(BaseModel):
    error: str
