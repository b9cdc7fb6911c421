"""
SWOT Explorer Backend — Catalog API (GET /api/catalog, GET /api/config)

Read-only reference data and client-visible settings for the UI.
"""

from fastapi import APIRouter, Request

from swot_explorer import catalog
from swot_explorer.config import settings
from swot_explorer.models import CatalogResponse, PublicConfigResponse, RateLimitInfo

router = APIRouter(prefix="/api", tags=["catalog"])


@router.get("/catalog", response_model=CatalogResponse)
async def get_catalog() -> CatalogResponse:
    """Products, objectives, segments and prompt types, in display order."""
    return CatalogResponse(
        products=list(catalog.PRODUCTS),
        objectives=list(catalog.BUSINESS_OBJECTIVES),
        segments=list(catalog.SEGMENTS),
        prompt_types=list(catalog.PROMPT_TYPES),
    )


@router.get("/config", response_model=PublicConfigResponse)
async def get_public_config(request: Request) -> PublicConfigResponse:
    """
    GET /api/config

    demo_mode is the client-visible flag (PUBLIC_DEMO_MODE), used for UI
    messaging only. rate_limit reflects the limiter actually in use.
    """
    limiter = request.app.state.gateway.limiter
    return PublicConfigResponse(
        demo_mode=settings.public_demo_mode,
        rate_limit=RateLimitInfo(limit=limiter.limit, window_ms=limiter.window_ms),
    )
