"""
Abstract provider adapter.

Each cloud provider speaks its own request/response envelope. An adapter
translates the canonical prompt into that envelope and extracts the first
generated text fragment from the response. Adapters are pure: they build
and parse payloads, the ProviderClient does the I/O.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional

from hybrid_inference.errors.exceptions import UnsupportedProviderError
from hybrid_inference.models.enums import OperationType, ProviderName


class AuthStrategy(str, Enum):
    """Where the API key goes on the outbound request."""

    QUERY_PARAM = "query_param"
    BEARER = "bearer"
    HEADER = "header"


@dataclass(frozen=True)
class GenerationParams:
    temperature: float
    max_tokens: int


# Drafts get a larger output budget and more sampling freedom
GENERATION_PARAMS: dict[OperationType, GenerationParams] = {
    OperationType.SUMMARISE: GenerationParams(temperature=0.3, max_tokens=1024),
    OperationType.DRAFT: GenerationParams(temperature=0.7, max_tokens=2048),
}


def dig(body: Any, *path: Any) -> Any:
    """
    Follow keys/indices through nested dicts and lists.

    Returns None as soon as a step is missing or has the wrong type.

    Examples:
        >>> dig({"a": [{"b": "x"}]}, "a", 0, "b")
        'x'
        >>> dig({"a": []}, "a", 0, "b") is None
        True
    """
    current = body
    for step in path:
        if isinstance(step, int):
            if not isinstance(current, list) or not -len(current) <= step < len(current):
                return None
        elif not isinstance(current, dict) or step not in current:
            return None
        current = current[step]
    return current


class ProviderAdapter(ABC):
    """
    Protocol translator for one cloud provider.

    Subclasses declare name, auth_strategy with its auth_field and
    per-operation models, and implement build_request / extract_text.
    Key placement follows auth_strategy; subclasses only add extra headers.
    """

    name: ProviderName
    auth_strategy: AuthStrategy
    # Query parameter or header name the key is placed under
    auth_field: str
    models: dict[OperationType, str]

    def __init__(self, endpoint: str):
        """
        Args:
            endpoint: Provider endpoint URL (per-model URLs are derived from it)
        """
        self.endpoint = endpoint.rstrip("/")

    def params_for(self, operation: OperationType) -> GenerationParams:
        try:
            return GENERATION_PARAMS[operation]
        except KeyError:
            raise UnsupportedProviderError(
                f"Unsupported provider operation: {self.name.value} cannot {operation.value}",
                provider=self.name,
            ) from None

    def model_for(self, operation: OperationType) -> str:
        """Cheaper/faster model for summarise, larger one for draft."""
        try:
            return self.models[operation]
        except KeyError:
            raise UnsupportedProviderError(
                f"Unsupported provider operation: {self.name.value} cannot {operation.value}",
                provider=self.name,
            ) from None

    def build_url(self, operation: OperationType) -> str:
        return self.endpoint

    def build_params(self, api_key: str) -> Dict[str, str]:
        """Query parameters carrying the key (QUERY_PARAM auth only)."""
        if self.auth_strategy == AuthStrategy.QUERY_PARAM:
            return {self.auth_field: api_key}
        return {}

    def build_headers(self, api_key: str) -> Dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self.auth_strategy == AuthStrategy.BEARER:
            headers[self.auth_field] = f"Bearer {api_key}"
        elif self.auth_strategy == AuthStrategy.HEADER:
            headers[self.auth_field] = api_key
        return headers

    @abstractmethod
    def build_request(self, prompt: str, operation: OperationType) -> Dict[str, Any]:
        """
        Build the provider-specific JSON body.

        Args:
            prompt: Canonical prompt text
            operation: summarise or draft

        Returns:
            JSON-serialisable request body
        """
        pass

    @abstractmethod
    def extract_text(self, body: Any) -> str:
        """
        Return the first generated text fragment, or "" when absent.
        """
        pass

    def extract_error_message(self, body: Any) -> Optional[str]:
        """
        Structured error message from an error body.

        All three providers nest it at error.message.
        """
        message = dig(body, "error", "message")
        if isinstance(message, str) and message:
            return message
        return None

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(endpoint={self.endpoint})"
