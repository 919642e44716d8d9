import logging

from fastapi import APIRouter, Depends, Request

from ..core.errors import KreitError
from ..core.security import resolve_caller
from ..schemas import CheckoutResponse, ErrorResponse
from ..services.checkout_service import CHECKOUT_FAILED
from ..services.registry import Services
from .score import services_dep

logger = logging.getLogger(__name__)

router = APIRouter()

@router.post(
    "/checkout",
    response_model=CheckoutResponse,
    responses={code: {"model": ErrorResponse} for code in (401, 500, 502)},
)
async def post_checkout(request: Request, services: Services = Depends(services_dep)):
    origin = request.headers.get("origin") or str(request.base_url)
    try:
        caller = await resolve_caller(request, services.store)
        url = await services.checkout.create_checkout(caller, origin)
    except KreitError:
        raise
    except Exception as exc:
        logger.exception("Stripe checkout error")
        raise KreitError(CHECKOUT_FAILED) from exc
    return {"url": url}
