"""
SWOT Explorer — Generation Orchestrator

Turns the user's selection (product, objective, segments) plus the prompt
catalog into concrete prompts and drives the InsightStore, one pair at a time
or in bulk over every segment x prompt type.
"""

import asyncio
from dataclasses import dataclass, field
from typing import Awaitable, Callable, Optional, Sequence

from swot_explorer import catalog
from swot_explorer.config import STORE_CONFIG, log
from swot_explorer.models import BusinessObjective, Product, PromptType, Segment
from swot_explorer.store import InsightStore


@dataclass
class Selection:
    product: Optional[Product] = None
    objective: Optional[BusinessObjective] = None
    segments: list[Segment] = field(default_factory=list)

    @property
    def can_generate(self) -> bool:
        return self.product is not None and self.objective is not None and len(self.segments) > 0

    def toggle_segment(self, segment: Segment) -> None:
        """Add the segment if absent, remove it (by id) if present."""
        if any(s.id == segment.id for s in self.segments):
            self.segments = [s for s in self.segments if s.id != segment.id]
        else:
            self.segments = [*self.segments, segment]


@dataclass(frozen=True)
class BulkProgress:
    completed: int
    total: int

    @property
    def ratio(self) -> float:
        return self.completed / self.total if self.total else 0.0


class Orchestrator:
    """
    Args:
        store: The session's InsightStore.
        prompt_types: Prompt types used for bulk generation (defaults to the full catalog).
        delay_seconds: Pause between bulk calls so the server limiter isn't hit in a burst.
        sleep: Awaitable sleep, injectable so tests don't wait.
    """

    def __init__(
        self,
        store: InsightStore,
        prompt_types: Sequence[PromptType] = catalog.PROMPT_TYPES,
        delay_seconds: float = STORE_CONFIG["bulk_delay_seconds"],
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.store = store
        self.prompt_types = tuple(prompt_types)
        self.delay_seconds = delay_seconds
        self._sleep = sleep
        self.selection = Selection()
        self.is_generating_all = False

    async def generate_one(self, segment: Segment, prompt_type: PromptType) -> None:
        """Generate the insight for one pair. No-op without a product and objective."""
        product, objective = self.selection.product, self.selection.objective
        if product is None or objective is None:
            return
        prompt = catalog.render_prompt(prompt_type, segment, product, objective)
        await self.store.generate(product, objective, segment, prompt_type.id, prompt)

    async def generate_all(self) -> BulkProgress:
        """
        Generate every selected segment x prompt type, sequentially.

        A failing pair is logged and skipped; the batch always runs to the
        end. Returns the progress for the current selection afterwards.
        """
        if not self.selection.can_generate:
            return self.progress()

        self.is_generating_all = True
        try:
            for segment in list(self.selection.segments):
                for prompt_type in self.prompt_types:
                    try:
                        await self.generate_one(segment, prompt_type)
                        if self.store.error:
                            log(
                                "WARN",
                                "bulk item failed, continuing",
                                segment=segment.id,
                                prompt_type=prompt_type.id,
                                error=self.store.error,
                            )
                    except Exception as e:
                        log(
                            "ERROR",
                            "bulk item crashed, continuing",
                            segment=segment.id,
                            prompt_type=prompt_type.id,
                            error=str(e),
                        )
                    await self._sleep(self.delay_seconds)
        finally:
            self.is_generating_all = False

        progress = self.progress()
        log("INFO", "bulk generation finished", completed=progress.completed, total=progress.total)
        return progress

    def progress(self) -> BulkProgress:
        """Insights held for the selected segments out of segments x prompt types."""
        segment_ids = {s.id for s in self.selection.segments}
        type_ids = {p.id for p in self.prompt_types}
        completed = sum(
            1
            for r in self.store.responses
            if r.segment_id in segment_ids and r.prompt_type_id in type_ids
        )
        return BulkProgress(completed=completed, total=len(segment_ids) * len(type_ids))

    def reset(self) -> None:
        """Clear the selection and every stored insight."""
        self.selection = Selection()
        self.store.clear()
