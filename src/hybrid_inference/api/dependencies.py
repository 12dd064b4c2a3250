"""
FastAPI dependency injection for the fallback server.

Expensive, stateless collaborators (provider client, capability prober)
are process singletons; the server credential is read per request.
"""

from functools import lru_cache
from typing import Optional

import structlog
from fastapi import Depends

from hybrid_inference.capability.ollama import OllamaCapabilityProvider
from hybrid_inference.capability.prober import CapabilityProber
from hybrid_inference.config import Settings, get_settings
from hybrid_inference.local.engine import LocalEngineClient
from hybrid_inference.models.enums import ProviderName
from hybrid_inference.models.input_models import ProviderCredential
from hybrid_inference.providers.client import ProviderClient
from hybrid_inference.providers.registry import build_registry

logger = structlog.get_logger(__name__)


@lru_cache()
def get_provider_client() -> ProviderClient:
    """
    Get singleton provider client.

    Returns:
        ProviderClient with adapters configured from settings
    """
    settings = get_settings()
    return ProviderClient(
        registry=build_registry(settings),
        timeout=settings.PROVIDER_TIMEOUT,
    )


@lru_cache()
def get_capability_prober() -> CapabilityProber:
    """
    Get singleton capability prober for /health.

    Returns:
        CapabilityProber over the configured local engine
    """
    settings = get_settings()
    engine = LocalEngineClient(
        base_url=settings.LOCAL_ENGINE_URL,
        timeout=settings.LOCAL_ENGINE_TIMEOUT,
        probe_timeout=settings.LOCAL_PROBE_TIMEOUT,
    )
    return CapabilityProber(
        OllamaCapabilityProvider(
            engine,
            text_model=settings.LOCAL_TEXT_MODEL,
            vision_model=settings.LOCAL_VISION_MODEL,
        )
    )


def get_fallback_credential(
    settings: Settings = Depends(get_settings),
) -> Optional[ProviderCredential]:
    """
    Server-side credential used to serve /api/fallback.

    Returns:
        ProviderCredential, or None when FALLBACK_PROVIDER / FALLBACK_API_KEY
        are missing or the provider name is not recognised
    """
    if not settings.FALLBACK_PROVIDER or settings.FALLBACK_API_KEY is None:
        return None

    try:
        provider = ProviderName(settings.FALLBACK_PROVIDER.strip().lower())
    except ValueError:
        logger.error("Unknown fallback provider configured", provider=settings.FALLBACK_PROVIDER)
        return None

    credential = ProviderCredential(
        provider=provider,
        api_key=settings.FALLBACK_API_KEY,
        name="server",
    )
    return credential if credential.has_key else None
