"""
SWOT Explorer Backend — Insight Gateway

Server-side handling of one generation request:
    1. rate check (per client identifier)
    2. required-field validation
    3. demo short-circuit (canned content, no provider call)
    4. provider call
    5. normalization into {insight, usage}

Failures are raised as GatewayError subclasses carrying the HTTP status the
router should answer with. Nothing here retries.
"""

import asyncio
from dataclasses import dataclass, field
from typing import Awaitable, Callable, Optional

from swot_explorer import llm, prompts
from swot_explorer.config import LLM_CONFIG, log, settings
from swot_explorer.llm import Completion, ProviderError as LLMProviderError
from swot_explorer.models import GenerateInsightRequest
from swot_explorer.rate_limit import RateLimiter

REQUIRED_FIELDS = ("prompt", "segment", "product", "objective", "prompt_type")

PROVIDER_ERROR_MESSAGE = "Failed to generate insight. Check configuration and retry."
RATE_LIMIT_ERROR_MESSAGE = "Rate limit exceeded. Try again later."
MISSING_FIELDS_MESSAGE = "Missing required fields"


# -----------------------------------------------------------------------------
# Errors
# -----------------------------------------------------------------------------


class GatewayError(Exception):
    status_code = 500

    def __init__(self, message: str, error_code: str | None = None):
        self.message = message
        self.error_code = error_code
        super().__init__(message)


class InsightValidationError(GatewayError):
    """A required request field is missing or empty, or the body is malformed."""

    status_code = 400

    def __init__(self, missing: list[str]):
        self.missing = missing
        super().__init__(MISSING_FIELDS_MESSAGE)


class RateLimitError(GatewayError):
    """The client's quota for the current window is used up."""

    status_code = 429

    def __init__(self, reset_at: int):
        self.reset_at = reset_at
        super().__init__(RATE_LIMIT_ERROR_MESSAGE)


class ProviderError(GatewayError):
    """The completion provider failed. The original error is chained as __cause__."""

    status_code = 500

    def __init__(self, error_code: str | None = None):
        super().__init__(PROVIDER_ERROR_MESSAGE, error_code=error_code)


@dataclass
class InsightResult:
    insight: str
    usage: dict = field(default_factory=dict)


CompleteFn = Callable[..., Awaitable[Completion]]


# -----------------------------------------------------------------------------
# Gateway
# -----------------------------------------------------------------------------


class InsightGateway:
    """
    Args:
        limiter: Quota check applied before anything else.
        demo_mode: Return canned content instead of calling the provider.
        complete: Provider call, defaults to llm.complete.
        demo_latency_seconds: Artificial delay before a demo response.
        sleep: Awaitable sleep, injectable so tests don't wait.
    """

    def __init__(
        self,
        limiter: RateLimiter,
        demo_mode: bool = False,
        complete: Optional[CompleteFn] = None,
        demo_latency_seconds: float | None = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.limiter = limiter
        self.demo_mode = demo_mode
        self._complete = complete or llm.complete
        self.demo_latency_seconds = (
            settings.demo_latency_seconds if demo_latency_seconds is None else demo_latency_seconds
        )
        self._sleep = sleep

    async def generate(self, request: GenerateInsightRequest, client_id: str) -> InsightResult:
        """
        Generate one insight.

        The rate check runs before validation, so malformed requests still
        consume quota.

        Raises:
            RateLimitError: Quota exhausted (429).
            InsightValidationError: A required field is missing (400).
            ProviderError: The provider call failed (500).
        """
        self._check_quota(client_id)

        missing = _missing_fields(request)
        if missing:
            log("WARN", "generate request rejected", client_id=client_id, missing=",".join(missing))
            raise InsightValidationError(missing)

        if self.demo_mode:
            return await self._generate_demo(request, client_id)

        try:
            completion = await self._complete(
                request.prompt,
                system_instruction=LLM_CONFIG["system_prompt"],
                model=settings.llm_model,
                temperature=LLM_CONFIG["temperature"],
                max_tokens=LLM_CONFIG["max_tokens"],
                client_id=client_id,
            )
        except LLMProviderError as e:
            raise ProviderError(error_code=e.error_code) from e

        log(
            "INFO",
            "insight generated",
            client_id=client_id,
            prompt_type=request.prompt_type,
            segment=request.segment,
            tokens_used=completion.usage.get("total_tokens"),
        )
        return InsightResult(insight=completion.text, usage=completion.usage)

    def reject_malformed(self, client_id: str) -> None:
        """
        Reject a body that could not be parsed at all (invalid JSON, wrongly
        typed fields). It is charged against the quota like any other request.

        Raises:
            RateLimitError: Quota exhausted (429).
            InsightValidationError: Otherwise (400).
        """
        self._check_quota(client_id)
        log("WARN", "generate request rejected", client_id=client_id, malformed=True)
        raise InsightValidationError([])

    def _check_quota(self, client_id: str) -> None:
        verdict = self.limiter.check(client_id)
        if not verdict.allowed:
            raise RateLimitError(reset_at=verdict.reset_at)

    async def _generate_demo(self, request: GenerateInsightRequest, client_id: str) -> InsightResult:
        if self.demo_latency_seconds > 0:
            await self._sleep(self.demo_latency_seconds)
        log("INFO", "demo insight served", client_id=client_id, prompt_type=request.prompt_type)
        return InsightResult(
            insight=prompts.get_demo_response(request.prompt_type),
            usage=dict(prompts.DEMO_USAGE),
        )


def _missing_fields(request: GenerateInsightRequest) -> list[str]:
    missing = []
    for name in REQUIRED_FIELDS:
        value = getattr(request, name)
        if not value:
            missing.append(name)
    return missing
