"""
Enumerations for Hybrid Inference Layer data models.

All enums are closed taxonomies - no values outside these sets are permitted.
"""

from enum import Enum


class OperationType(str, Enum):
    """
    Kind of AI processing requested.

    Each operation has its own on-device capability query and its own
    admission ceiling.
    """

    SUMMARISE = "summarise"
    DRAFT = "draft"
    MULTIMODAL = "multimodal"


class ProcessingMode(str, Enum):
    """
    User preference for where processing may happen.

    ON_DEVICE never leaves the host; HYBRID allows cloud fallback when
    local execution is unavailable or inadmissible.
    """

    ON_DEVICE = "on-device"
    HYBRID = "hybrid"


class CapabilityState(str, Enum):
    """Readiness of the on-device engine for one operation."""

    READY = "ready"
    NEEDS_DOWNLOAD = "needs_download"
    UNAVAILABLE = "unavailable"


class ProviderName(str, Enum):
    """Cloud providers with a protocol adapter."""

    GEMINI = "gemini"
    OPENAI = "openai"
    ANTHROPIC = "anthropic"

    @property
    def display_name(self) -> str:
        """Human-readable provider name for user-facing messages."""
        return {
            ProviderName.GEMINI: "Gemini",
            ProviderName.OPENAI: "OpenAI",
            ProviderName.ANTHROPIC: "Anthropic",
        }[self]


class DraftTone(str, Enum):
    """Tone style for generated reply drafts."""

    NEUTRAL = "neutral"
    FRIENDLY = "friendly"
    ASSERTIVE = "assertive"
    FORMAL = "formal"


class SummaryType(str, Enum):
    """Summary flavours supported by the local summariser session."""

    TLDR = "tl;dr"
    KEY_POINTS = "key-points"
    TEASER = "teaser"
    HEADLINE = "headline"


class SummaryLength(str, Enum):
    SHORT = "short"
    MEDIUM = "medium"
    LONG = "long"


class SummaryFormat(str, Enum):
    PLAIN_TEXT = "plain-text"
    MARKDOWN = "markdown"


class ExecutionPath(str, Enum):
    """Which downstream branch served a request."""

    LOCAL = "local"
    CUSTOM_KEY = "custom_key"
    SHARED_FALLBACK = "shared_fallback"


class ErrorCode(str, Enum):
    """
    Flat, exhaustive taxonomy of processing failures.

    Every failure surfaced to a caller carries exactly one of these codes.
    """

    UNAVAILABLE = "UNAVAILABLE"
    TOKEN_LIMIT = "TOKEN_LIMIT"
    NETWORK_ERROR = "NETWORK_ERROR"
    INVALID_JSON = "INVALID_JSON"
    INVALID_KEY = "INVALID_KEY"
    RATE_LIMIT = "RATE_LIMIT"
    UNSUPPORTED_PROVIDER = "UNSUPPORTED_PROVIDER"
    HYBRID_FALLBACK = "HYBRID_FALLBACK"
    UNKNOWN = "UNKNOWN"
