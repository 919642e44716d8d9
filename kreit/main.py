from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

# Routers
from .routers.score import router as score_router
from .routers.checkout import router as checkout_router

# Core modules
from .core.config import Settings, settings as default_settings
from .core.errors import KreitError, kreit_error_handler, unhandled_error_handler
from .core.logging import configure_logging, CorrelationIdMiddleware
from .core.metrics import PromMiddleware, metrics_endpoint
from .services.registry import Services, build_services

def create_app(settings: Settings | None = None, services: Services | None = None) -> FastAPI:
    """
    App factory so tests and ASGI servers can instantiate cleanly.
    Collaborators are built here, once, unless the caller supplies them.
    """
    settings = settings or default_settings
    configure_logging(settings.LOG_LEVEL)  # Set up JSON logs + request-id filter

    app = FastAPI(
        title="KREIT Score API",
        version="1.0.0",
        description="Property scoring with cached provider data, AI summaries and premium gating.",
    )
    app.state.settings = settings
    app.state.services = services or build_services(settings)

    # CORS: allow the web front end to call the API.
    allow_origins = [o.strip() for o in settings.ALLOW_ORIGINS.split(",")] if settings.ALLOW_ORIGINS else ["*"]
    app.add_middleware(
        CORSMiddleware,
        allow_origins=allow_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-Id"],
    )

    # Observability middlewares
    app.add_middleware(CorrelationIdMiddleware)  # Adds/propagates X-Request-Id
    if settings.PROMETHEUS_ENABLED:
        app.add_middleware(PromMiddleware)       # Records req/latency metrics

    # Errors render as {"error": "..."}
    app.add_exception_handler(KreitError, kreit_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)

    # Meta routes
    @app.get("/api/health", tags=["meta"])
    def health():
        return {"status": "ok"}

    @app.get("/api/ping", tags=["meta"])
    def ping():
        return {"pong": True}

    if settings.PROMETHEUS_ENABLED:
        # Standard Prometheus scrape endpoint
        app.add_route("/api/metrics", metrics_endpoint, methods=["GET"])

    # Business routes
    app.include_router(score_router, prefix="/api", tags=["score"])
    app.include_router(checkout_router, prefix="/api", tags=["checkout"])

    return app

app = create_app()
