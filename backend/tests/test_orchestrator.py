"""
SWOT Explorer — Orchestrator Unit Tests

Tests for orchestrator.py: selection handling, single generation, bulk
generation ordering, pacing and partial-failure resilience.
"""

import json
from unittest.mock import AsyncMock

import httpx
import pytest

from swot_explorer import catalog
from swot_explorer.orchestrator import BulkProgress, Orchestrator, Selection
from swot_explorer.store import InsightStore
from tests.conftest import create_test_client

SEGMENTS = [catalog.get_segment(s) for s in ("gen-z-creators", "urban-climate-advocates", "retired-diyers")]
TWO_TYPES = [catalog.get_prompt_type("strengths"), catalog.get_prompt_type("threats")]


def _mock_client(handler) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(handler), base_url="http://test")


def _select(orchestrator: Orchestrator, segments=SEGMENTS) -> None:
    orchestrator.selection.product = catalog.get_product("coffee")
    orchestrator.selection.objective = catalog.get_objective("increase-awareness")
    for segment in segments:
        orchestrator.selection.toggle_segment(segment)


# -----------------------------------------------------------------------------
# Selection
# -----------------------------------------------------------------------------


class TestSelection:

    def test_incomplete_selection_cannot_generate(self):
        selection = Selection(product=catalog.get_product("coffee"))
        assert selection.can_generate is False
        selection.objective = catalog.get_objective("increase-sales")
        assert selection.can_generate is False
        selection.toggle_segment(SEGMENTS[0])
        assert selection.can_generate is True

    def test_toggle_segment_adds_and_removes(self):
        selection = Selection()
        selection.toggle_segment(SEGMENTS[0])
        selection.toggle_segment(SEGMENTS[1])
        selection.toggle_segment(SEGMENTS[0])
        assert [s.id for s in selection.segments] == ["urban-climate-advocates"]


# -----------------------------------------------------------------------------
# Single Generation
# -----------------------------------------------------------------------------


class TestGenerateOne:

    @pytest.mark.asyncio
    async def test_builds_prompt_from_catalog(self, clock):
        prompts_sent = []

        def handler(request):
            prompts_sent.append(json.loads(request.content)["prompt"])
            return httpx.Response(200, json={"insight": "• ok"})

        async with _mock_client(handler) as client:
            orchestrator = Orchestrator(InsightStore(client, clock=clock), sleep=AsyncMock())
            _select(orchestrator)
            await orchestrator.generate_one(SEGMENTS[0], catalog.get_prompt_type("market-positioning"))

        assert prompts_sent == [
            "How should we position Coffee to resonate with Gen Z Creators to increase awareness?"
        ]

    @pytest.mark.asyncio
    async def test_noop_without_product_or_objective(self, clock):
        handler = AsyncMock()
        async with _mock_client(handler) as client:
            orchestrator = Orchestrator(InsightStore(client, clock=clock), sleep=AsyncMock())
            await orchestrator.generate_one(SEGMENTS[0], TWO_TYPES[0])
        handler.assert_not_called()


# -----------------------------------------------------------------------------
# Bulk Generation
# -----------------------------------------------------------------------------


class TestGenerateAll:

    @pytest.mark.asyncio
    async def test_generates_every_pair_in_order(self, clock):
        order = []

        def handler(request):
            body = json.loads(request.content)
            order.append((body["segment"], body["promptType"]))
            return httpx.Response(200, json={"insight": "• ok"})

        sleep = AsyncMock()
        async with _mock_client(handler) as client:
            orchestrator = Orchestrator(InsightStore(client, clock=clock), prompt_types=TWO_TYPES, sleep=sleep)
            _select(orchestrator)
            progress = await orchestrator.generate_all()

        assert order == [(s.name, p.id) for s in SEGMENTS for p in TWO_TYPES]
        assert progress == BulkProgress(completed=6, total=6)
        assert progress.ratio == 1.0
        assert sleep.await_count == 6
        sleep.assert_awaited_with(0.1)
        assert orchestrator.is_generating_all is False

    @pytest.mark.asyncio
    async def test_one_failure_does_not_abort_batch(self, clock):
        calls = []

        def handler(request):
            body = json.loads(request.content)
            calls.append(body["promptType"])
            if body["segment"] == "Urban Climate Advocates" and body["promptType"] == "threats":
                return httpx.Response(500, json={"error": "Failed to generate insight. Check configuration and retry."})
            return httpx.Response(200, json={"insight": "• ok"})

        async with _mock_client(handler) as client:
            store = InsightStore(client, clock=clock)
            orchestrator = Orchestrator(store, prompt_types=TWO_TYPES, sleep=AsyncMock())
            _select(orchestrator)
            progress = await orchestrator.generate_all()

        assert len(calls) == 6
        assert len(store) == 5
        assert store.lookup("urban-climate-advocates", "threats") is None
        assert progress == BulkProgress(completed=5, total=6)

    @pytest.mark.asyncio
    async def test_crashing_item_is_logged_and_skipped(self, clock):
        async with _mock_client(lambda request: httpx.Response(200, json={"insight": "• ok"})) as client:
            store = InsightStore(client, clock=clock)
            orchestrator = Orchestrator(store, prompt_types=TWO_TYPES, sleep=AsyncMock())
            _select(orchestrator)

            real_generate = store.generate
            calls = 0

            async def flaky_generate(*args, **kwargs):
                nonlocal calls
                calls += 1
                if calls == 2:
                    raise RuntimeError("renderer exploded")
                await real_generate(*args, **kwargs)

            store.generate = flaky_generate
            progress = await orchestrator.generate_all()

        assert calls == 6
        assert progress.completed == 5

    @pytest.mark.asyncio
    async def test_incomplete_selection_does_nothing(self, clock):
        handler = AsyncMock()
        async with _mock_client(handler) as client:
            orchestrator = Orchestrator(InsightStore(client, clock=clock), sleep=AsyncMock())
            progress = await orchestrator.generate_all()

        handler.assert_not_called()
        assert progress == BulkProgress(completed=0, total=0)
        assert progress.ratio == 0.0

    @pytest.mark.asyncio
    async def test_bulk_against_rate_limited_server(self, make_app, mock_llm, clock):
        # 3 segments x 2 types = 6 calls against a limit of 4: the rest are denied, not fatal.
        async with create_test_client(make_app(limit=4)) as client:
            store = InsightStore(client, clock=clock)
            orchestrator = Orchestrator(store, prompt_types=TWO_TYPES, sleep=AsyncMock())
            _select(orchestrator)
            progress = await orchestrator.generate_all()

        assert progress == BulkProgress(completed=4, total=6)
        assert store.total_requests == 4
        assert store.error.startswith("Rate limit exceeded. Please wait")


# -----------------------------------------------------------------------------
# Progress and Reset
# -----------------------------------------------------------------------------


class TestProgressAndReset:

    @pytest.mark.asyncio
    async def test_progress_ignores_deselected_segments(self, clock):
        async with _mock_client(lambda request: httpx.Response(200, json={"insight": "• ok"})) as client:
            store = InsightStore(client, clock=clock)
            orchestrator = Orchestrator(store, prompt_types=TWO_TYPES, sleep=AsyncMock())
            _select(orchestrator)
            await orchestrator.generate_all()

        orchestrator.selection.toggle_segment(SEGMENTS[0])
        assert orchestrator.progress() == BulkProgress(completed=4, total=4)

    @pytest.mark.asyncio
    async def test_reset_clears_selection_and_store(self, clock):
        async with _mock_client(lambda request: httpx.Response(200, json={"insight": "• ok"})) as client:
            store = InsightStore(client, clock=clock)
            orchestrator = Orchestrator(store, prompt_types=TWO_TYPES, sleep=AsyncMock())
            _select(orchestrator)
            await orchestrator.generate_all()

        orchestrator.reset()

        assert orchestrator.selection.can_generate is False
        assert len(store) == 0
        assert store.total_requests == 6
