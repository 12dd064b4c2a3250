"""
Exceptions for the execution adapters and the public error type.

Adapters raise the typed errors below; the ErrorClassifier turns them into
a ProcessingError, the only exception that crosses the public boundary.
Each typed error carries the same message/details pair so logs stay
uniform across local and remote paths.
"""

from typing import Any, Optional

from hybrid_inference.models.enums import ErrorCode, OperationType, ProviderName


class InferenceError(Exception):
    """
    Base exception for all adapter-level errors.

    All typed errors inherit from this to allow catching any routing
    failure with a single except clause.
    """
    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class InvalidInputError(InferenceError):
    """
    Raised when a request cannot be processed as given.

    Examples: blank text, blank image question, empty or non-image blob.
    `hint` is the remedy shown to the user.
    """

    hint = "Please check your input and try again"

    def __init__(self, message: str, hint: Optional[str] = None, details: dict | None = None):
        super().__init__(message, details=details)
        if hint is not None:
            self.hint = hint


class EmptyInputError(InvalidInputError):
    """Raised when there is no text (or question) to process."""

    hint = "Please enter some text and try again"


# === Local engine ===

class LocalEngineError(InferenceError):
    """Base for failures of the on-device engine."""
    pass


class LocalModelUnavailableError(LocalEngineError):
    """
    Raised when the on-device engine cannot serve the operation.

    Covers admission rejections for capability and a model that
    disappears between probe and call.
    """
    pass


class ContentTooLargeError(LocalEngineError):
    """
    Raised when content exceeds the local ceiling for the operation.
    """
    pass


class LocalGenerationError(LocalEngineError):
    """
    Raised when the local engine returns an error or nothing usable.
    """
    pass


# === Cloud providers ===

class ProviderError(InferenceError):
    """Base for failures of a cloud provider call."""

    def __init__(
        self,
        message: str,
        provider: Optional[ProviderName] = None,
        details: dict | None = None,
    ):
        super().__init__(message, details)
        self.provider = provider


class ProviderHTTPError(ProviderError):
    """
    Raised on a non-2xx provider response.

    The message embeds the provider's own error text when the body carried
    one, else the transport reason phrase.
    """

    def __init__(
        self,
        provider: ProviderName,
        status_code: int,
        provider_message: str,
    ):
        super().__init__(
            f"{provider.display_name} API error ({status_code}): {provider_message}",
            provider=provider,
            details={"status": status_code, "provider_message": provider_message},
        )
        self.status_code = status_code
        self.provider_message = provider_message


class ProviderConnectionError(ProviderError):
    """
    Raised when the provider could not be reached.

    Includes network errors, timeouts, DNS failures, etc.
    """
    pass


class MissingCredentialError(ProviderError):
    """Raised when the credential has an empty API key."""
    pass


class EmptyResponseError(ProviderError):
    """Raised when a provider response has no generated text."""
    pass


class UnsupportedProviderError(ProviderError):
    """
    Raised when no adapter is registered for the provider, or the
    operation has no remote path.
    """
    pass


# === Shared cloud fallback ===

class FallbackEndpointError(InferenceError):
    """
    Raised when the shared cloud fallback endpoint fails.

    The message always starts with "Cloud processing failed" and carries
    the server's error text verbatim when present.

    Attributes:
        server_message: Server `error` text, else a transport/status summary
        server_error: Server `error` text only; None when the server sent none
    """

    def __init__(
        self,
        server_message: str,
        status_code: Optional[int] = None,
        server_error: Optional[str] = None,
    ):
        super().__init__(
            f"Cloud processing failed: {server_message}",
            details={"status": status_code, "server_message": server_message},
        )
        self.status_code = status_code
        self.server_message = server_message
        self.server_error = server_error


# === Public error ===

class ProcessingError(Exception):
    """
    Classified failure returned to callers.

    Attributes:
        code: One ErrorCode
        user_message: Fixed, actionable text for the end user
        cause: Original exception, for diagnostics only
        operation: Operation that failed
        provider: Provider involved, if any
    """

    def __init__(
        self,
        code: ErrorCode,
        user_message: str,
        cause: Any = None,
        operation: Optional[OperationType] = None,
        provider: Optional[ProviderName] = None,
    ):
        super().__init__(user_message)
        self.code = code
        self.user_message = user_message
        self.cause = cause
        self.operation = operation
        self.provider = provider

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}("
            f"code={self.code.value}, "
            f"operation={self.operation.value if self.operation else None}, "
            f"provider={self.provider.value if self.provider else None})"
        )
