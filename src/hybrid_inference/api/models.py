"""
API request and response models for the fallback server.

The request model is deliberately loose: field presence and types are
checked in the route so the endpoint can answer with its own 400 messages.
"""

from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, Field


SUPPORTED_FALLBACK_TYPES = ["summarise", "draft"]


class FallbackRequest(BaseModel):
    """POST /api/fallback body."""

    type: Optional[str] = Field(
        default=None,
        description="Operation to run",
        examples=SUPPORTED_FALLBACK_TYPES,
    )
    text: Any = Field(
        default=None,
        description="Extracted plain text; raw files are never accepted",
    )
    options: dict[str, Any] = Field(
        default_factory=dict,
        description="ProcessingOptions fields (tone, guidance, summary_length, summary_format)",
    )


class SummaryResponse(BaseModel):
    tldr: str
    keyPoints: list[str]


class DraftResponse(BaseModel):
    drafts: list[dict[str, str]]


class FallbackInfoResponse(BaseModel):
    """GET /api/fallback response."""

    message: str
    supportedTypes: list[str] = Field(default_factory=lambda: list(SUPPORTED_FALLBACK_TYPES))
    configured: bool = Field(description="Whether a server-side credential is configured")


class HealthResponse(BaseModel):
    """Response for health check endpoint."""

    status: str = Field(
        description="Overall health status",
        examples=["healthy", "degraded"]
    )
    version: str = Field(
        description="Service version",
        examples=["0.1.0"]
    )
    services: dict[str, str] = Field(
        description="Dependency status",
        examples=[{"local_engine": "ok", "fallback_credential": "configured"}]
    )
    capabilities: dict[str, str] = Field(
        description="On-device readiness per operation",
        examples=[{"summarise": "ready", "draft": "ready", "multimodal": "needs_download"}]
    )
    timestamp: datetime = Field(
        default_factory=datetime.utcnow,
        description="Health check timestamp (UTC)"
    )


class ErrorResponse(BaseModel):
    """Error body; `error` is what clients surface verbatim."""

    error: str = Field(description="Human-readable error message")
    code: Optional[str] = Field(
        default=None,
        description="ErrorCode when the failure was classified",
        examples=["RATE_LIMIT", "INVALID_KEY"],
    )
