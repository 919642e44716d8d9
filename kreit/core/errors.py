"""
Error taxonomy and the FastAPI handlers that render it.

Every error carries a public message that is safe to return to the caller;
diagnostic detail travels in the exception chain and only reaches the logs.
"""

import logging

from fastapi import Request
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)

GENERIC_ERROR = "Unexpected server error."


class KreitError(Exception):
    """Base error; maps to a status code and a caller-safe message."""
    status_code: int = 500

    def __init__(self, public_message: str = GENERIC_ERROR, *, status_code: int | None = None, detail: str | None = None):
        super().__init__(detail or public_message)
        self.public_message = public_message
        if status_code is not None:
            self.status_code = status_code


class InvalidRequest(KreitError):
    status_code = 400


class AuthenticationRequired(KreitError):
    status_code = 401


class ConfigurationError(KreitError):
    """A required external-service credential is missing. Never retried."""
    status_code = 500


class UpstreamError(KreitError):
    """An external provider failed or returned nothing usable."""
    status_code = 502


class StoreError(KreitError):
    status_code = 500


async def kreit_error_handler(request: Request, exc: KreitError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("%s on %s %s: %s", type(exc).__name__, request.method, request.url.path, exc)
    return JSONResponse({"error": exc.public_message}, status_code=exc.status_code)


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path, exc_info=exc)
    return JSONResponse({"error": GENERIC_ERROR}, status_code=500)
