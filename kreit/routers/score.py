import logging
from typing import Any, Dict

from fastapi import APIRouter, Depends, Request
from pydantic import ValidationError

from ..core.errors import InvalidRequest, KreitError, UpstreamError
from ..core.security import resolve_caller
from ..core.utils import utcnow
from ..models.mock_model import generate_mock_score
from ..schemas import ErrorResponse, KreitScoreRequest, KreitScoreResponse, ScoreRequest, ScoreResponse
from ..services.registry import Services
from ..services.score_service import ADDRESS_REQUIRED

logger = logging.getLogger(__name__)

router = APIRouter()

SCORE_UNAVAILABLE = "Unable to generate KREIT Score at this time."
MOCK_ADDRESS_REQUIRED = "Address is required to calculate a KREIT Score."

ERROR_RESPONSES = {400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}, 502: {"model": ErrorResponse}}

def services_dep(request: Request) -> Services:
    # Built once in create_app
    return request.app.state.services

async def read_json(request: Request) -> Dict[str, Any]:
    """Request body as a JSON object; anything unparseable becomes {}."""
    try:
        body = await request.json()
    except ValueError:
        return {}
    return body if isinstance(body, dict) else {}

@router.post("/score", response_model=ScoreResponse, responses=ERROR_RESPONSES)
async def post_score(request: Request):
    try:
        body = ScoreRequest.model_validate(await read_json(request))
    except ValidationError:
        body = ScoreRequest()
    address = body.address.strip() if isinstance(body.address, str) else ""
    plan = "pro" if body.plan == "pro" else "simple"
    if not address:
        raise InvalidRequest(MOCK_ADDRESS_REQUIRED)

    return {
        "address": address,
        "plan": plan,
        "score": generate_mock_score(address, plan),
        "generatedAt": utcnow().isoformat().replace("+00:00", "Z"),
    }

@router.post("/kreit-score", response_model=KreitScoreResponse, responses=ERROR_RESPONSES)
async def post_kreit_score(
    request: Request,
    services: Services = Depends(services_dep),
):
    try:
        body = KreitScoreRequest.model_validate(await read_json(request))
    except ValidationError:
        body = KreitScoreRequest()
    if not isinstance(body.address, str) or not body.address.strip():
        raise InvalidRequest(ADDRESS_REQUIRED)

    try:
        caller = await resolve_caller(request, services.store)
        return await services.scores.kreit_score(body.address, caller)
    except InvalidRequest:
        raise
    except Exception as exc:
        logger.exception("KREIT score error for %r", body.address)
        status = exc.status_code if isinstance(exc, UpstreamError) else 500
        raise KreitError(SCORE_UNAVAILABLE, status_code=status) from exc
