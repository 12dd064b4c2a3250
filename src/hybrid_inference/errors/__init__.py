"""
Error taxonomy and classification.

Components:
- exceptions: typed adapter errors and the public ProcessingError
- classifier: ErrorClassifier (typed mapping + message heuristic)
"""

from hybrid_inference.errors.exceptions import (
    ContentTooLargeError,
    EmptyInputError,
    EmptyResponseError,
    FallbackEndpointError,
    InferenceError,
    InvalidInputError,
    LocalEngineError,
    LocalGenerationError,
    LocalModelUnavailableError,
    MissingCredentialError,
    ProcessingError,
    ProviderConnectionError,
    ProviderError,
    ProviderHTTPError,
    UnsupportedProviderError,
)
from hybrid_inference.errors.classifier import (
    MESSAGE_TEMPLATES,
    ErrorClassifier,
    render_message,
)

__all__ = [
    "ErrorClassifier",
    "MESSAGE_TEMPLATES",
    "render_message",
    "ProcessingError",
    "InferenceError",
    "InvalidInputError",
    "EmptyInputError",
    "LocalEngineError",
    "LocalModelUnavailableError",
    "ContentTooLargeError",
    "LocalGenerationError",
    "ProviderError",
    "ProviderHTTPError",
    "ProviderConnectionError",
    "MissingCredentialError",
    "EmptyResponseError",
    "UnsupportedProviderError",
    "FallbackEndpointError",
]
