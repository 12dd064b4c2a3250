"""
Pydantic data models for the Hybrid Inference Layer.

Includes:
- Enums (OperationType, ProcessingMode, CapabilityState, ProviderName, ErrorCode, ...)
- Input models (ProcessingRequest, ProcessingOptions, ImageInput, ProviderCredential)
- Decision (admission outcome)
- Output models (SummaryResult, Draft, DraftSet and routed outcomes)
- LLM models (SessionOptions, LLMGenerationResponse)
"""

from hybrid_inference.models.enums import (
    CapabilityState,
    DraftTone,
    ErrorCode,
    ExecutionPath,
    OperationType,
    ProcessingMode,
    ProviderName,
    SummaryFormat,
    SummaryLength,
    SummaryType,
)
from hybrid_inference.models.input_models import (
    ImageInput,
    ProcessingOptions,
    ProcessingRequest,
    ProviderCredential,
)
from hybrid_inference.models.decision import Decision
from hybrid_inference.models.output_models import (
    Draft,
    DraftOutcome,
    DraftSet,
    ImageAnswer,
    SummaryOutcome,
    SummaryResult,
)
from hybrid_inference.models.llm_models import LLMGenerationResponse, SessionOptions

__all__ = [
    # Enums
    "CapabilityState",
    "DraftTone",
    "ErrorCode",
    "ExecutionPath",
    "OperationType",
    "ProcessingMode",
    "ProviderName",
    "SummaryFormat",
    "SummaryLength",
    "SummaryType",
    # Input models
    "ImageInput",
    "ProcessingOptions",
    "ProcessingRequest",
    "ProviderCredential",
    # Decision
    "Decision",
    # Output models
    "Draft",
    "DraftOutcome",
    "DraftSet",
    "ImageAnswer",
    "SummaryOutcome",
    "SummaryResult",
    # LLM models
    "LLMGenerationResponse",
    "SessionOptions",
]
