"""Cloud provider adapters, registry and outbound clients."""

from hybrid_inference.providers.anthropic import AnthropicAdapter
from hybrid_inference.providers.base import (
    GENERATION_PARAMS,
    AuthStrategy,
    GenerationParams,
    ProviderAdapter,
    dig,
)
from hybrid_inference.providers.client import CREDENTIAL_TEST_MESSAGE, ProviderClient
from hybrid_inference.providers.fallback import SharedFallbackClient
from hybrid_inference.providers.gemini import GeminiAdapter
from hybrid_inference.providers.openai import OpenAIAdapter
from hybrid_inference.providers.registry import (
    PROVIDER_REGISTRY,
    ProviderRegistry,
    build_registry,
    resolve_adapter,
)

__all__ = [
    "AnthropicAdapter",
    "AuthStrategy",
    "CREDENTIAL_TEST_MESSAGE",
    "GENERATION_PARAMS",
    "GeminiAdapter",
    "GenerationParams",
    "OpenAIAdapter",
    "PROVIDER_REGISTRY",
    "ProviderAdapter",
    "ProviderClient",
    "ProviderRegistry",
    "SharedFallbackClient",
    "build_registry",
    "dig",
    "resolve_adapter",
]
