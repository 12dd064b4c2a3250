"""
On-device capability probing.

Components:
- CapabilityProvider: protocol implemented by inference backends
- CapabilityProber: never-raising probe used by admission control
- OllamaCapabilityProvider: local Ollama server backend
- StaticCapabilityProvider: fixed capability map
"""

from hybrid_inference.capability.prober import (
    CapabilityProber,
    CapabilityProvider,
    StaticCapabilityProvider,
)
from hybrid_inference.capability.ollama import OllamaCapabilityProvider

__all__ = [
    "CapabilityProber",
    "CapabilityProvider",
    "StaticCapabilityProvider",
    "OllamaCapabilityProvider",
]
