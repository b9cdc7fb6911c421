"""
SWOT Explorer Backend — Central Configuration

All environment variables, LLM settings and rate-limit settings live here.
Import `settings`, `LLM_CONFIG`, `rate_limit_config`, `log`, and
`generate_error_code` from this module.
Do not read `os.environ` anywhere else.
"""

import uuid
from datetime import datetime, timezone

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """All environment variables. Loaded from .env or host env vars."""

    # LLM Provider
    openai_api_key: str = ""          # Not needed in demo mode
    llm_model: str = "openai/gpt-4o-mini"

    # Restricted / demo mode
    demo_mode: bool = False           # Server-side: canned content + tighter limit
    public_demo_mode: bool = False    # Client-visible: UI messaging only
    demo_latency_seconds: float = 1.0

    # Rate limiting (fixed window, per client IP)
    rate_limit_requests: int = 10
    demo_rate_limit_requests: int = 5
    rate_limit_window_ms: int = 60_000
    global_rate_limit: str = "60/minute"  # slowapi flood guard on /api/generate

    # App
    environment: str = "development"  # "development" | "production" | "test"
    cors_origins: str = "http://localhost:3000"  # Comma-separated for multiple origins

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}


# Singleton — import this everywhere
settings = Settings()


# ──────────────────────────────────────────────────────
# Logging Utilities (structured print)
# ──────────────────────────────────────────────────────

def generate_error_code() -> str:
    """Generate a short, user-friendly error reference code.

    Format: 'SW-' followed by 6 uppercase hex characters.
    Example: 'SW-3F8A2C'

    The same code is logged on the backend and returned to the caller, so a
    user can quote it and the team can grep logs for it.
    """
    return f"SW-{uuid.uuid4().hex[:6].upper()}"


def log(level: str, message: str, **context) -> None:
    """Structured print-based logger.

    Every log line follows the format:
        [ISO_TIMESTAMP] [LEVEL] message | key1=value1 key2=value2

    Args:
        level: One of "INFO", "WARN", "ERROR".
        message: Human-readable description of what happened.
        **context: Arbitrary key-value pairs. Include client_id and
            prompt_type when available.

    Usage:
        log("INFO", "insight generated", client_id="1.2.3.4", prompt_type="strengths")
        log("ERROR", "llm call failed", model="openai/gpt-4o-mini",
            error_code="SW-3F8A2C", error=str(e))
    """
    ts = datetime.now(timezone.utc).isoformat()
    ctx = " ".join(f"{k}={v}" for k, v in context.items())
    print(f"[{ts}] [{level}] {message} | {ctx}", flush=True)


# ──────────────────────────────────────────────────────
# LLM Configuration
# ──────────────────────────────────────────────────────

LLM_CONFIG = {
    "system_prompt": (
        "You are a strategic marketing analyst. Provide clear, actionable insights for SWOT analysis.\n"
        "Format your response with bullet points or numbered lists when appropriate.\n"
        "Be specific and practical in your recommendations.\n"
        "Keep responses concise but comprehensive (3-5 key points)."
    ),
    "temperature": 0.7,
    "max_tokens": 500,
}


# ──────────────────────────────────────────────────────
# Rate Limit Configuration
# ──────────────────────────────────────────────────────

def rate_limit_config(demo_mode: bool | None = None) -> dict:
    """Return the fixed-window options for the current operating mode.

    Demo mode applies the tighter request limit; the window is shared.
    """
    if demo_mode is None:
        demo_mode = settings.demo_mode
    limit = settings.demo_rate_limit_requests if demo_mode else settings.rate_limit_requests
    return {"limit": limit, "window_ms": settings.rate_limit_window_ms}


# ──────────────────────────────────────────────────────
# Client Store Configuration
# ──────────────────────────────────────────────────────

STORE_CONFIG = {
    "initial_remaining_requests": 10,  # Mirrors the normal server limit; display only
    "cost_per_request": 0.0002,        # ~100 tokens at $0.002 / 1K tokens
    "bulk_delay_seconds": 0.1,         # Pause between bulk calls to avoid bursting the limiter
    "default_reset_seconds": 60,       # Countdown used when the 429 carries no reset header
}
