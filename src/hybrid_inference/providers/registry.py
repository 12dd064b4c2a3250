"""
Provider registry: ProviderName -> adapter.

A single dispatch table replaces per-provider branching at call sites.
"""

from typing import Optional, Union

from hybrid_inference.config import Settings
from hybrid_inference.errors.exceptions import UnsupportedProviderError
from hybrid_inference.models.enums import ProviderName
from .anthropic import AnthropicAdapter
from .base import ProviderAdapter
from .gemini import GeminiAdapter
from .openai import OpenAIAdapter


ProviderRegistry = dict[ProviderName, ProviderAdapter]


def build_registry(settings: Optional[Settings] = None) -> ProviderRegistry:
    """
    Build adapters with endpoints from settings.

    Args:
        settings: Application settings (default: Settings() from env)
    """
    settings = settings or Settings()
    return {
        ProviderName.GEMINI: GeminiAdapter(settings.GEMINI_BASE_URL),
        ProviderName.OPENAI: OpenAIAdapter(settings.OPENAI_BASE_URL),
        ProviderName.ANTHROPIC: AnthropicAdapter(
            settings.ANTHROPIC_BASE_URL,
            api_version=settings.ANTHROPIC_API_VERSION,
        ),
    }


PROVIDER_REGISTRY: ProviderRegistry = {
    ProviderName.GEMINI: GeminiAdapter(
        "https://generativelanguage.googleapis.com/v1beta/models"
    ),
    ProviderName.OPENAI: OpenAIAdapter("https://api.openai.com/v1/chat/completions"),
    ProviderName.ANTHROPIC: AnthropicAdapter("https://api.anthropic.com/v1/messages"),
}


def resolve_adapter(
    provider: Union[ProviderName, str],
    registry: Optional[ProviderRegistry] = None,
) -> ProviderAdapter:
    """
    Look up the adapter for a provider key.

    Raises:
        UnsupportedProviderError: Unknown key or no adapter registered
    """
    registry = PROVIDER_REGISTRY if registry is None else registry
    try:
        name = ProviderName(provider)
    except ValueError:
        raise UnsupportedProviderError(f"Unsupported provider: {provider}") from None

    adapter = registry.get(name)
    if adapter is None:
        raise UnsupportedProviderError(f"Unsupported provider: {name.value}", provider=name)
    return adapter
