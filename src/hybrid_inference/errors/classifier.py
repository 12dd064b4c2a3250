"""
Error Classifier: any failure -> ProcessingError.

Typed errors raised inside this package are mapped directly. Errors that
arrive untyped (third-party libraries, engine internals) fall through to a
message-pattern heuristic. The original error is kept as `cause`; it is
never re-raised to the caller.
"""

from typing import Optional

import httpx
import structlog

from hybrid_inference.models.enums import ErrorCode, OperationType, ProviderName
from hybrid_inference.monitoring.metrics import processing_errors_total
from hybrid_inference.validation.exceptions import ValidationError
from .exceptions import (
    ContentTooLargeError,
    EmptyResponseError,
    FallbackEndpointError,
    InvalidInputError,
    LocalModelUnavailableError,
    MissingCredentialError,
    ProcessingError,
    ProviderConnectionError,
    ProviderHTTPError,
    UnsupportedProviderError,
)

logger = structlog.get_logger(__name__)


_ACTIONS = {
    OperationType.SUMMARISE: "summarise this thread",
    OperationType.DRAFT: "generate reply drafts",
    OperationType.MULTIMODAL: "answer questions about this image",
}

_FEATURES = {
    OperationType.SUMMARISE: "Summarisation",
    OperationType.DRAFT: "Draft generation",
    OperationType.MULTIMODAL: "Image question answering",
}

_OUTPUTS = {
    OperationType.SUMMARISE: "summary",
    OperationType.DRAFT: "drafts",
    OperationType.MULTIMODAL: "answer",
}

# One template per code. {provider}, {action}, {feature}, {output} are interpolated.
MESSAGE_TEMPLATES: dict[ErrorCode, str] = {
    ErrorCode.UNAVAILABLE: (
        "{feature} is currently unavailable on this device; "
        "download the local model or enable hybrid mode in settings"
    ),
    ErrorCode.TOKEN_LIMIT: (
        "This content is too long to {action}; "
        "please shorten the text and try again"
    ),
    ErrorCode.NETWORK_ERROR: (
        "Network error connecting to {provider}. "
        "Please check your connection and try again"
    ),
    ErrorCode.INVALID_JSON: (
        "Unable to produce structured {output}. Please try again"
    ),
    ErrorCode.INVALID_KEY: (
        "Invalid API key for {provider}. Please check your key in settings"
    ),
    ErrorCode.RATE_LIMIT: (
        "Rate limit exceeded for {provider}. Please wait a moment and try again"
    ),
    ErrorCode.UNSUPPORTED_PROVIDER: (
        "{provider} cannot be used to {action}. "
        "Choose Gemini, OpenAI or Anthropic in settings, or use on-device processing"
    ),
    ErrorCode.HYBRID_FALLBACK: (
        "Cloud processing failed. Please try again or check your connection"
    ),
    ErrorCode.UNKNOWN: (
        "Unable to {action} using {provider}. "
        "Please try again or enable hybrid mode"
    ),
}

# Variants used when the failure carries text meant for the user:
# the fallback server's `error` field, or the remedy of an input error.
DETAIL_TEMPLATES: dict[ErrorCode, str] = {
    ErrorCode.HYBRID_FALLBACK: (
        "Cloud processing failed: {detail}. Please try again or check your connection"
    ),
    ErrorCode.UNKNOWN: "Unable to {action}: {detail}",
}


def render_message(
    code: ErrorCode,
    operation: OperationType,
    provider: Optional[ProviderName] = None,
    detail: Optional[str] = None,
) -> str:
    """Render the fixed user message for a code.

    `detail` is inserted verbatim by codes that have a detail variant and
    ignored by the others.
    """
    provider_label = provider.display_name if provider else "the AI service"
    template = MESSAGE_TEMPLATES[code]
    if detail and code in DETAIL_TEMPLATES:
        template = DETAIL_TEMPLATES[code]
    return template.format(
        provider=provider_label,
        action=_ACTIONS[operation],
        feature=_FEATURES[operation],
        output=_OUTPUTS[operation],
        detail=detail,
    )


def _user_detail(error: object) -> Optional[str]:
    """Text from the failure that is meant to reach the user, if any."""
    if isinstance(error, FallbackEndpointError):
        return error.server_error
    if isinstance(error, InvalidInputError):
        return f"{error.message}. {error.hint}"
    return None


def _code_for_http_status(error: ProviderHTTPError) -> Optional[ErrorCode]:
    status = error.status_code
    if status in (401, 403):
        return ErrorCode.INVALID_KEY
    if status == 429:
        return ErrorCode.RATE_LIMIT
    if status == 413:
        return ErrorCode.TOKEN_LIMIT
    if status == 400 and "api key" in error.provider_message.lower():
        # Gemini reports a bad key as 400 "API key not valid"
        return ErrorCode.INVALID_KEY
    return None


def _code_for_typed(error: BaseException) -> Optional[ErrorCode]:
    """Map errors raised by this package (and httpx) to a code."""
    if isinstance(error, ValidationError):
        return ErrorCode.INVALID_JSON
    if isinstance(error, ProviderHTTPError):
        return _code_for_http_status(error)
    if isinstance(error, (ProviderConnectionError, httpx.TransportError)):
        return ErrorCode.NETWORK_ERROR
    if isinstance(error, MissingCredentialError):
        return ErrorCode.INVALID_KEY
    if isinstance(error, UnsupportedProviderError):
        return ErrorCode.UNSUPPORTED_PROVIDER
    if isinstance(error, FallbackEndpointError):
        return ErrorCode.HYBRID_FALLBACK
    if isinstance(error, LocalModelUnavailableError):
        return ErrorCode.UNAVAILABLE
    if isinstance(error, ContentTooLargeError):
        return ErrorCode.TOKEN_LIMIT
    if isinstance(error, EmptyResponseError):
        return ErrorCode.INVALID_JSON
    if isinstance(error, InvalidInputError):
        return ErrorCode.UNKNOWN
    return None


_TOKEN_PATTERNS = ("token", "length", "too long", "too large")


def _code_for_message(message: str, provider: Optional[ProviderName]) -> ErrorCode:
    """Last-resort heuristic on the lower-cased error message."""
    text = message.lower()

    # The local engine reports context overflow in messages that often also
    # mention parsing the prompt; size wins there
    if provider is None and any(p in text for p in _TOKEN_PATTERNS):
        return ErrorCode.TOKEN_LIMIT
    if any(p in text for p in ("json", "parse", "invalid response structure", "invalid draft structure")):
        return ErrorCode.INVALID_JSON
    if "cloud processing failed" in text or "hybrid" in text:
        return ErrorCode.HYBRID_FALLBACK
    if any(p in text for p in ("429", "rate limit", "quota")):
        return ErrorCode.RATE_LIMIT
    if provider is not None and any(p in text for p in ("401", "403", "unauthorized", "invalid")):
        return ErrorCode.INVALID_KEY
    if any(p in text for p in _TOKEN_PATTERNS):
        return ErrorCode.TOKEN_LIMIT
    if any(p in text for p in ("network", "connection", "timeout", "timed out")):
        return ErrorCode.NETWORK_ERROR
    if "unsupported provider" in text:
        return ErrorCode.UNSUPPORTED_PROVIDER
    if "unavailable" in text or "not available" in text:
        return ErrorCode.UNAVAILABLE
    return ErrorCode.UNKNOWN


class ErrorClassifier:
    """
    Pure mapping from a caught failure to a ProcessingError.

    Usage:
        try:
            ...
        except Exception as e:
            raise classifier.classify(e, OperationType.DRAFT) from e
    """

    def classify(
        self,
        error: object,
        operation: OperationType,
        provider: Optional[ProviderName] = None,
    ) -> ProcessingError:
        """
        Classify error into a ProcessingError.

        Args:
            error: Anything caught by an adapter boundary
            operation: Operation being attempted
            provider: Cloud provider involved, if any (overrides the one
                carried by a ProviderError)

        Returns:
            ProcessingError with code, fixed user message and cause
        """
        if isinstance(error, ProcessingError):
            return error

        if provider is None:
            provider = getattr(error, "provider", None)

        if isinstance(error, BaseException):
            code = _code_for_typed(error)
            if code is None:
                code = _code_for_message(str(error), provider)
        else:
            # Non-exception values thrown across an engine boundary
            code = ErrorCode.UNAVAILABLE

        processing_errors_total.labels(code=code.value, operation=operation.value).inc()
        logger.warning(
            "Classified processing error",
            code=code.value,
            operation=operation.value,
            provider=provider.value if provider else None,
            error_type=type(error).__name__,
            error=str(error),
        )

        return ProcessingError(
            code=code,
            user_message=render_message(code, operation, provider, _user_detail(error)),
            cause=error,
            operation=operation,
            provider=provider,
        )
