"""Unit test fixtures.

Wires a LocalEngineClient to the in-process FakeOllama so engine,
capability and executor tests run without external services.
"""

import httpx
import pytest

from hybrid_inference.local.engine import LocalEngineClient


@pytest.fixture
def engine(fake_ollama) -> LocalEngineClient:
    """LocalEngineClient wired to the fake server."""
    return LocalEngineClient(
        base_url="http://localhost:11434",
        timeout=5,
        probe_timeout=1.0,
        transport=httpx.MockTransport(fake_ollama),
    )
