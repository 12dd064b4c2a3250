"""Integration test fixtures.

Two kinds of integration test live here:
- In-process flows: every outbound call of the routing layer (local
  engine, cloud providers, shared fallback server) is answered inside the
  test process, with the fallback server being the real FastAPI app.
- Live checks against a running Ollama server, skipped when it is absent.
"""

from typing import Callable

import httpx
import pytest

from hybrid_inference.api.dependencies import get_fallback_credential, get_provider_client
from hybrid_inference.config import get_settings
from hybrid_inference.local.engine import LocalEngineClient
from hybrid_inference.main import app
from hybrid_inference.models.enums import ProviderName
from hybrid_inference.providers.client import ProviderClient
from hybrid_inference.service import HybridProcessor


LOCAL_ENGINE_HOST = "localhost"
FALLBACK_HOST = "fallback.test"


class FakeNetwork:
    """Dispatch outbound requests by host.

    - localhost -> FakeOllama
    - fallback.test -> the fallback server app (ASGI, in process)
    - provider hosts -> per-provider handlers set by the test
    """

    def __init__(self, ollama, fallback_app) -> None:
        self.ollama = ollama
        self.fallback = httpx.ASGITransport(app=fallback_app)
        self.providers: dict[str, Callable[[httpx.Request], httpx.Response]] = {}
        self.hosts: list[str] = []

    def provider(self, host: str, status: int = 200, body=None) -> None:
        self.providers[host] = lambda request: httpx.Response(status, json=body)

    async def __call__(self, request: httpx.Request) -> httpx.Response:
        host = request.url.host
        self.hosts.append(host)
        if host == LOCAL_ENGINE_HOST:
            return self.ollama(request)
        if host == FALLBACK_HOST:
            return await self.fallback.handle_async_request(request)
        if host in self.providers:
            return self.providers[host](request)
        raise httpx.ConnectError(f"Unknown host {host}", request=request)


@pytest.fixture
def network(fake_ollama) -> FakeNetwork:
    return FakeNetwork(fake_ollama, app)


@pytest.fixture
def processor(test_settings, network) -> HybridProcessor:
    """HybridProcessor whose every client goes through the fake network."""
    return HybridProcessor.from_settings(test_settings, transport=httpx.MockTransport(network))


@pytest.fixture
def fallback_server(test_settings, make_credential, network):
    """Configure the in-process fallback server with a Gemini credential.

    Yields a setter for the server credential (None = not configured).
    """
    state = {"credential": make_credential(ProviderName.GEMINI, api_key="server-key")}
    app.dependency_overrides[get_settings] = lambda: test_settings
    app.dependency_overrides[get_fallback_credential] = lambda: state["credential"]
    app.dependency_overrides[get_provider_client] = lambda: ProviderClient(
        transport=httpx.MockTransport(network)
    )

    def set_credential(credential) -> None:
        state["credential"] = credential

    yield set_credential
    app.dependency_overrides.clear()


# === Live Ollama ===

@pytest.fixture(scope="session")
def check_ollama():
    """Check if Ollama is available at localhost:11434.

    Skips tests if Ollama is not reachable.
    """
    try:
        response = httpx.get("http://localhost:11434/api/tags", timeout=5)
        if response.status_code != 200:
            pytest.skip("Ollama not available (non-200 status)")
    except httpx.HTTPError as e:
        pytest.skip(f"Ollama not available: {e}")


@pytest.fixture
def real_engine(check_ollama) -> LocalEngineClient:
    """Real LocalEngineClient for integration tests.

    Requires Ollama to be running (checked by check_ollama fixture).
    """
    return LocalEngineClient(base_url="http://localhost:11434", timeout=120)
