"""
Single source of truth for all Pydantic models (reference data, requests, responses, store entries).
Wire names follow the frontend (camelCase); Python attributes are snake_case.
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


# -----------------------------------------------------------------------------
# Reference Data
# -----------------------------------------------------------------------------


class Product(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    description: str = ""


class BusinessObjective(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    description: str = ""


class Segment(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    description: str = ""


class PromptType(BaseModel):
    """A prompt category. The template itself lives in prompts.PROMPT_TEMPLATES, keyed by id."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    description: str
    icon: str


# -----------------------------------------------------------------------------
# Request / Response Models
# -----------------------------------------------------------------------------


class GenerateInsightRequest(BaseModel):
    """POST /api/generate body.

    Every field is optional at the schema level so that missing fields reach
    the gateway (rate check first, then a 400) instead of failing with a 422.
    """

    model_config = ConfigDict(populate_by_name=True)

    prompt: Optional[str] = None
    segment: Optional[str] = None
    product: Optional[str] = None
    objective: Optional[str] = None
    prompt_type: Optional[str] = Field(None, alias="promptType")


class GenerateInsightResponse(BaseModel):
    insight: str
    usage: Optional[dict] = None


class ErrorResponse(BaseModel):
    error: str
    error_code: Optional[str] = None


class CatalogResponse(BaseModel):
    products: list[Product]
    objectives: list[BusinessObjective]
    segments: list[Segment]
    prompt_types: list[PromptType]


class RateLimitInfo(BaseModel):
    limit: int
    window_ms: int


class PublicConfigResponse(BaseModel):
    demo_mode: bool
    rate_limit: RateLimitInfo


# -----------------------------------------------------------------------------
# Client Store Models
# -----------------------------------------------------------------------------


class InsightResponse(BaseModel):
    """One generated insight held by the client store, unique per (segment_id, prompt_type_id)."""

    model_config = ConfigDict(populate_by_name=True)

    id: str
    segment_id: str = Field(..., alias="segmentId")
    prompt_type_id: str = Field(..., alias="promptTypeId")
    content: str
    timestamp: str
    product: str
    objective: str
