"""
SWOT Explorer Backend — LLM Interactions

The single outbound completion call, via litellm.
Given a user prompt and a system instruction, returns the generated text
and token usage, or raises ProviderError.
"""

import time
import warnings
from dataclasses import dataclass, field

import litellm

from swot_explorer.config import LLM_CONFIG, generate_error_code, log, settings

# ── Suppress noisy litellm warnings ──────────────────────────────────────────
warnings.filterwarnings(
    "ignore",
    message="coroutine '.*' was never awaited",
)
litellm.suppress_debug_info = True
litellm.drop_params = True  # Prevent unsupported-param errors across providers

LLM_CALL_TIMEOUT_SECONDS = 30  # Explicit upper bound; the provider may otherwise hang indefinitely
EMPTY_COMPLETION_TEXT = "No response generated."
USAGE_FIELDS = ("prompt_tokens", "completion_tokens", "total_tokens")


# ─────────────────────────────────────────────────────────────────────────────
# Custom Exceptions
# ─────────────────────────────────────────────────────────────────────────────


class ProviderError(Exception):
    """The completion provider failed (bad credential, outage, timeout, malformed response)."""

    def __init__(self, message: str, error_code: str | None = None):
        self.error_code = error_code
        super().__init__(message)


@dataclass
class Completion:
    text: str
    usage: dict = field(default_factory=dict)


# ─────────────────────────────────────────────────────────────────────────────
# Core Functions
# ─────────────────────────────────────────────────────────────────────────────


async def complete(
    user_prompt: str,
    system_instruction: str | None = None,
    model: str | None = None,
    temperature: float | None = None,
    max_tokens: int | None = None,
    client_id: str | None = None,
) -> Completion:
    """
    Run one chat completion. No retries, no fallback: a failure is reported
    to the caller, which decides whether to try again.

    Args:
        user_prompt: The insight question.
        system_instruction: Defaults to the analyst persona in LLM_CONFIG.
        model: Defaults to settings.llm_model.
        temperature: Defaults to LLM_CONFIG["temperature"] (0.7).
        max_tokens: Defaults to LLM_CONFIG["max_tokens"] (500).
        client_id: Optional client identifier for logging correlation.

    Returns:
        Completion with the generated text and token usage.

    Raises:
        ProviderError: On any provider-side failure.
    """
    model = model or settings.llm_model
    messages = _build_messages(user_prompt, system_instruction)

    log("INFO", "llm call started", client_id=client_id, model=model)
    start = time.perf_counter()

    try:
        completion_kwargs = {
            "model": model,
            "messages": messages,
            "temperature": LLM_CONFIG["temperature"] if temperature is None else temperature,
            "max_tokens": LLM_CONFIG["max_tokens"] if max_tokens is None else max_tokens,
            "timeout": LLM_CALL_TIMEOUT_SECONDS,
        }
        if settings.openai_api_key:
            completion_kwargs["api_key"] = settings.openai_api_key

        response = await litellm.acompletion(**completion_kwargs)
        text = _extract_content(response)
        usage = _extract_usage(response)
    except Exception as e:
        code = generate_error_code()
        log(
            "ERROR",
            "llm call failed",
            client_id=client_id,
            model=model,
            error=str(e),
            error_code=code,
            duration_ms=int((time.perf_counter() - start) * 1000),
        )
        raise ProviderError(str(e), error_code=code) from e

    log(
        "INFO",
        "llm call succeeded",
        client_id=client_id,
        model=model,
        duration_ms=int((time.perf_counter() - start) * 1000),
        tokens_used=usage.get("total_tokens"),
    )
    return Completion(text=text or EMPTY_COMPLETION_TEXT, usage=usage)


# ─────────────────────────────────────────────────────────────────────────────
# Helper Functions
# ─────────────────────────────────────────────────────────────────────────────


def _build_messages(user_prompt: str, system_instruction: str | None = None) -> list[dict]:
    """Return [system, user] messages. The system instruction defaults to the analyst persona."""
    return [
        {"role": "system", "content": system_instruction or LLM_CONFIG["system_prompt"]},
        {"role": "user", "content": user_prompt},
    ]


def _extract_content(response) -> str:
    """First choice's message content, or "" when the provider returned nothing usable."""
    if not getattr(response, "choices", None):
        return ""
    msg = response.choices[0].message
    return (getattr(msg, "content", None) or "").strip()


def _extract_usage(response) -> dict:
    usage = getattr(response, "usage", None)
    if not usage:
        return {}
    return {
        name: getattr(usage, name)
        for name in USAGE_FIELDS
        if getattr(usage, name, None) is not None
    }
