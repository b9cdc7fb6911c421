"""
SWOT Explorer Backend — Insight API (POST /api/generate)

Thin HTTP boundary over InsightGateway: resolves the client identifier,
runs the gateway and converts every outcome into a JSON response.
"""

from fastapi import APIRouter, Request
from fastapi.exception_handlers import request_validation_exception_handler
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from swot_explorer.config import generate_error_code, log, settings
from swot_explorer.gateway import GatewayError, InsightGateway, RateLimitError
from swot_explorer.models import ErrorResponse, GenerateInsightRequest, GenerateInsightResponse
from swot_explorer.rate_limit import flood_guard, get_client_ip

router = APIRouter(prefix="/api", tags=["insights"])

RESET_HEADER = "X-RateLimit-Reset"
GENERATE_PATH = "/api/generate"


def get_gateway(request: Request) -> InsightGateway:
    return request.app.state.gateway


def _error_response(status_code: int, message: str, error_code: str | None = None, headers: dict | None = None):
    body = ErrorResponse(error=message, error_code=error_code).model_dump(exclude_none=True)
    return JSONResponse(status_code=status_code, content=body, headers=headers)


def _gateway_error_response(e: GatewayError, client_id: str, prompt_type: str | None = None):
    if isinstance(e, RateLimitError):
        return _error_response(e.status_code, e.message, headers={RESET_HEADER: str(e.reset_at)})
    if e.status_code >= 500:
        log(
            "ERROR",
            "insight generation failed",
            client_id=client_id,
            prompt_type=prompt_type,
            error_code=e.error_code,
            cause=str(e.__cause__) if e.__cause__ else None,
        )
    return _error_response(e.status_code, e.message, error_code=e.error_code)


async def malformed_request_handler(request: Request, exc: RequestValidationError):
    """Answer an unparseable generate body the way a missing field is answered: quota first, then 400."""
    if request.url.path != GENERATE_PATH:
        return await request_validation_exception_handler(request, exc)
    client_id = get_client_ip(request)
    try:
        get_gateway(request).reject_malformed(client_id)
    except GatewayError as e:
        return _gateway_error_response(e, client_id)


@router.post(
    "/generate",
    response_model=GenerateInsightResponse,
    responses={400: {"model": ErrorResponse}, 429: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
@flood_guard.limit(settings.global_rate_limit)
async def generate_insight(request: Request, payload: GenerateInsightRequest):
    """
    POST /api/generate

    Body: { prompt, segment, product, objective, promptType }
    200: { insight, usage }
    400: { error: "Missing required fields" }
    429: { error } + X-RateLimit-Reset header (epoch ms)
    500: { error, error_code }
    """
    client_id = get_client_ip(request)
    gateway = get_gateway(request)

    try:
        result = await gateway.generate(payload, client_id)
    except GatewayError as e:
        return _gateway_error_response(e, client_id, payload.prompt_type)
    except Exception as e:
        code = generate_error_code()
        log("ERROR", "unexpected error in generate", client_id=client_id, error=str(e), error_code=code)
        return _error_response(500, "An unexpected error occurred", error_code=code)

    return GenerateInsightResponse(insight=result.insight, usage=result.usage or None)
