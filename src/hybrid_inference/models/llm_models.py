"""
LLM-specific data models for the request/response cycle.

These models are internal to the execution adapters and describe the raw
communication with inference backends (local engine, cloud providers).
They are separate from the payload models so adapters can change without
touching validation.
"""

from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field


class SessionOptions(BaseModel):
    """
    Configuration of one scoped local-model session.

    Built per operation: system instructions from tone and guidance for
    drafts, summary type/length/format for summaries.
    """
    model_config = ConfigDict(frozen=True)

    model: str = Field(..., description="Local model name (e.g. 'qwen2.5:3b')")
    system_prompt: str = Field(default="", description="System instructions for the session")
    temperature: float = Field(default=0.3, ge=0.0, le=2.0)
    top_k: Optional[int] = Field(default=None, ge=1)
    max_tokens: int = Field(default=1024, ge=1, le=8192)


class LLMGenerationResponse(BaseModel):
    """
    Raw text produced by a backend plus metadata for logging.

    Validation of the content happens in the validation layer.
    """
    model_config = ConfigDict(frozen=True)

    content: str = Field(..., description="Generated text")
    model_version: str = Field(..., description="Model that produced the text")
    finish_reason: str = Field(default="stop")
    prompt_tokens: Optional[int] = None
    completion_tokens: Optional[int] = None
    latency_ms: int = Field(default=0, ge=0)
    raw_metadata: Dict[str, Any] = Field(default_factory=dict)
