from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

# Routers
from .routers.properties import router as properties_router

# Core modules
from .core.config import Settings, settings as default_settings
from .core.errors import GatewayError
from .core.logging import configure_logging, CorrelationIdMiddleware
from .core.metrics import PromMiddleware, metrics_endpoint
from .services.lookup_service import PropertyLookupService

async def gateway_error_handler(request: Request, exc: GatewayError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content=exc.payload())

def create_app(settings: Settings | None = None, service: PropertyLookupService | None = None) -> FastAPI:
    """
    App factory so tests and ASGI servers can instantiate cleanly.
    Pass `service` to inject a gateway with its own client, cache and clock.
    """
    settings = settings or default_settings
    configure_logging(settings.LOG_LEVEL)  # Set up JSON logs + request-id filter

    app = FastAPI(
        title="PropIndex Property Lookup API",
        version=settings.API_VERSION,
        description="Sold-property lookups proxied from PropertyData with validation, caching, rate limiting and market insights.",
    )
    app.state.settings = settings
    app.state.lookup_service = service or PropertyLookupService.from_settings(settings)

    # CORS: allow the front-end to call the API.
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

    app.add_exception_handler(GatewayError, gateway_error_handler)

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
    app.include_router(properties_router, prefix="/api", tags=["properties"])

    return app

app = create_app()
