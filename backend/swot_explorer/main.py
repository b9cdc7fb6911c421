"""
SWOT Explorer Backend — FastAPI Application Factory

App creation, middleware (CORS, flood guard, request ID logging), gateway wiring, router registration.
Run with: uvicorn swot_explorer.main:app --reload
"""

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request

from swot_explorer.api import catalog, insights
from swot_explorer.config import log, rate_limit_config, settings
from swot_explorer.gateway import InsightGateway
from swot_explorer.rate_limit import RateLimiter, flood_guard

VERSION = "0.1.0"


class RequestIdMiddleware(BaseHTTPMiddleware):
    """Log the X-Request-Id header from every incoming request.

    Clients include X-Request-Id on every fetch call so REST errors can be
    correlated with backend logs.
    """

    async def dispatch(self, request: Request, call_next):
        request_id = request.headers.get("X-Request-Id", "none")
        log(
            "INFO",
            "request received",
            method=request.method,
            path=request.url.path,
            request_id=request_id,
        )
        response = await call_next(request)
        return response


def build_gateway(demo_mode: bool | None = None) -> InsightGateway:
    """Build the gateway and its rate limiter from settings."""
    if demo_mode is None:
        demo_mode = settings.demo_mode
    options = rate_limit_config(demo_mode)
    limiter = RateLimiter(limit=options["limit"], window_ms=options["window_ms"])
    return InsightGateway(limiter=limiter, demo_mode=demo_mode)


def create_app(gateway: InsightGateway | None = None) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Steps:
        1. Create FastAPI instance with title, version, description
        2. Add CORS middleware (origins from settings.cors_origins)
        3. Add request ID logging middleware
        4. Add the slowapi flood guard and the malformed-body handler
        5. Attach the insight gateway (one limiter table per app)
        6. Register routers (insights, catalog)
    """
    app = FastAPI(
        title="SWOT Explorer API",
        version=VERSION,
        description="Rate-limited marketing insight generation per customer segment and prompt type.",
    )

    # CORS
    origins = [origin.strip() for origin in settings.cors_origins.split(",")]
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=[insights.RESET_HEADER],
    )

    # Request ID logging
    app.add_middleware(RequestIdMiddleware)

    # Flood guard (applied per-endpoint via decorator, not globally)
    app.state.limiter = flood_guard
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

    # Unparseable generate bodies answer 400 after the quota check, not 422
    app.add_exception_handler(RequestValidationError, insights.malformed_request_handler)

    app.state.gateway = gateway or build_gateway()
    log(
        "INFO",
        "gateway configured",
        demo_mode=app.state.gateway.demo_mode,
        limit=app.state.gateway.limiter.limit,
        window_ms=app.state.gateway.limiter.window_ms,
    )

    # Routers
    app.include_router(insights.router)
    app.include_router(catalog.router)

    @app.get("/api/health")
    async def health_check():
        """
        GET /api/health

        Returns: { "status": "ok", "version": "0.1.0" }
        """
        return {"status": "ok", "version": VERSION}

    return app


app = create_app()
