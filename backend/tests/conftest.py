"""
SWOT Explorer Backend — Shared Test Fixtures

Provides mocked versions of external services (LLM, clock, HTTP transport)
for deterministic, fast unit tests.
"""

import os
import sys
from dataclasses import dataclass
from typing import Optional
from unittest.mock import AsyncMock

import pytest
from httpx import ASGITransport, AsyncClient

# Ensure the package is importable when running from backend/
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))


# -----------------------------------------------------------------------------
# Environment Setup (before importing package modules)
# -----------------------------------------------------------------------------

os.environ.setdefault("OPENAI_API_KEY", "test-openai-key")
os.environ.setdefault("DEMO_MODE", "false")
os.environ.setdefault("PUBLIC_DEMO_MODE", "false")
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("CORS_ORIGINS", "http://localhost:3000")


# -----------------------------------------------------------------------------
# Mock Response Classes
# -----------------------------------------------------------------------------


@dataclass
class MockLLMMessage:
    """Mock message from LLM response."""
    content: Optional[str]


@dataclass
class MockLLMChoice:
    """Mock choice from LLM response."""
    message: MockLLMMessage


@dataclass
class MockLLMUsage:
    """Mock usage stats from LLM response."""
    total_tokens: int = 100
    prompt_tokens: int = 50
    completion_tokens: int = 50


@dataclass
class MockLLMResponse:
    """Mock LLM completion response."""
    choices: list[MockLLMChoice]
    usage: MockLLMUsage = None

    def __post_init__(self):
        if self.usage is None:
            self.usage = MockLLMUsage()


def create_mock_llm_response(content: Optional[str]) -> MockLLMResponse:
    """Create a mock LLM response with given content."""
    return MockLLMResponse(
        choices=[MockLLMChoice(message=MockLLMMessage(content=content))]
    )


SAMPLE_INSIGHT = "• Long battery life\n• Low running costs\n• Strong creator community"


# -----------------------------------------------------------------------------
# Clock
# -----------------------------------------------------------------------------


class FakeClock:
    """Callable epoch-ms clock that only moves when told to."""

    def __init__(self, start_ms: int = 1_700_000_000_000):
        self.now = start_ms

    def __call__(self) -> int:
        return self.now

    def advance(self, ms: int) -> None:
        self.now += ms


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


async def no_sleep(_seconds: float) -> None:
    return None


# -----------------------------------------------------------------------------
# Request Fixtures
# -----------------------------------------------------------------------------


def make_payload(**overrides) -> dict:
    """A valid POST /api/generate body; override or drop (value None) fields as needed."""
    body = {
        "prompt": "What Electric Cars strengths matter most to Gen Z Creators when trying to increase sales?",
        "segment": "Gen Z Creators",
        "product": "Electric Cars",
        "objective": "Increase Sales",
        "promptType": "strengths",
    }
    body.update(overrides)
    return {k: v for k, v in body.items() if v is not None}


@pytest.fixture
def payload() -> dict:
    return make_payload()


# -----------------------------------------------------------------------------
# LLM Mocking Fixtures
# -----------------------------------------------------------------------------


@pytest.fixture
def mock_llm(monkeypatch):
    """
    Mock litellm.acompletion to return a predictable insight.

    Returns the mock so tests can inspect call kwargs or override responses.
    """
    async def mock_acompletion(*args, **kwargs) -> MockLLMResponse:
        return create_mock_llm_response(SAMPLE_INSIGHT)

    mock = AsyncMock(side_effect=mock_acompletion)
    monkeypatch.setattr("litellm.acompletion", mock)
    return mock


@pytest.fixture
def mock_llm_failure(monkeypatch):
    """Mock litellm.acompletion to simulate a provider outage."""
    async def mock_acompletion(*args, **kwargs):
        raise Exception("AuthenticationError: Incorrect API key provided")

    mock = AsyncMock(side_effect=mock_acompletion)
    monkeypatch.setattr("litellm.acompletion", mock)
    return mock


# -----------------------------------------------------------------------------
# App / HTTP Client Fixtures
# -----------------------------------------------------------------------------


@pytest.fixture
def make_app(clock):
    """
    Factory for an app with its own limiter table and no demo latency.

    Usage:
        app = make_app(limit=3, demo_mode=True)
    """
    from swot_explorer.gateway import InsightGateway
    from swot_explorer.main import create_app
    from swot_explorer.rate_limit import RateLimiter

    def _make(limit: int = 10, window_ms: int = 60_000, demo_mode: bool = False):
        limiter = RateLimiter(limit=limit, window_ms=window_ms, clock=clock)
        gateway = InsightGateway(limiter=limiter, demo_mode=demo_mode, demo_latency_seconds=0, sleep=no_sleep)
        return create_app(gateway=gateway)

    return _make


def create_test_client(app) -> AsyncClient:
    """Create an async client bound in-process to the given app."""
    transport = ASGITransport(app=app)
    return AsyncClient(transport=transport, base_url="http://test")


@pytest.fixture
async def client(make_app):
    """Async HTTP client against a fresh app (normal mode, limit 10)."""
    async with create_test_client(make_app()) as ac:
        yield ac


# -----------------------------------------------------------------------------
# Flood Guard Reset Fixture
# -----------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def reset_flood_guard():
    """Reset the slowapi storage so its per-IP counts don't leak across tests."""
    from swot_explorer.rate_limit import flood_guard
    flood_guard.reset()
    yield
    flood_guard.reset()
