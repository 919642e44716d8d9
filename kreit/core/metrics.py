"""
Prometheus instrumentation: per-route traffic plus the two signals that
matter for spend, cache outcomes and failed outbound calls.
"""

import time
from prometheus_client import Counter, Histogram, generate_latest, CONTENT_TYPE_LATEST
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

HTTP_REQUESTS = Counter("kreit_http_requests_total", "API requests by route and status", ["route", "method", "status"])
HTTP_LATENCY = Histogram("kreit_http_request_seconds", "API request latency by route", ["route", "method"])

SCORE_CACHE = Counter("kreit_score_cache_total", "Property cache lookups by outcome", ["outcome"])  # hit | miss | stale
UPSTREAM_FAILURES = Counter("kreit_upstream_failures_total", "Failed calls to external collaborators", ["upstream"])

def route_label(request: Request) -> str:
    """Route template (e.g. /api/kreit-score) when matched, raw path otherwise."""
    route = request.scope.get("route")
    return getattr(route, "path", None) or request.url.path

class PromMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        started = time.perf_counter()
        response: Response = await call_next(request)
        route = route_label(request)
        HTTP_REQUESTS.labels(route=route, method=request.method, status=str(response.status_code)).inc()
        HTTP_LATENCY.labels(route=route, method=request.method).observe(time.perf_counter() - started)
        return response

async def metrics_endpoint(request: Request):
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)
