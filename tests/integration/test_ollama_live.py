"""Integration tests against a live local Ollama server.

These tests require a running Ollama server:
Run: ollama serve
Pull: ollama pull qwen2.5:3b

Tests are skipped if Ollama is not reachable or the model is missing.
"""

import pytest
import pytest_asyncio

from hybrid_inference.capability.ollama import OllamaCapabilityProvider
from hybrid_inference.capability.prober import CapabilityProber
from hybrid_inference.local.executor import LocalExecutor
from hybrid_inference.models.enums import CapabilityState, OperationType

TEXT_MODEL = "qwen2.5:3b"

pytestmark = pytest.mark.integration


@pytest_asyncio.fixture
async def text_model_ready(real_engine):
    models = await real_engine.list_models()
    if TEXT_MODEL not in models:
        pytest.skip(f"{TEXT_MODEL} not pulled")
    return True


@pytest.mark.asyncio
async def test_list_models(real_engine):
    models = await real_engine.list_models()

    assert isinstance(models, list)


@pytest.mark.asyncio
async def test_probe_never_raises(real_engine):
    prober = CapabilityProber(
        OllamaCapabilityProvider(real_engine, text_model=TEXT_MODEL, vision_model="llava:7b")
    )

    for operation in OperationType:
        assert isinstance(await prober.probe(operation), CapabilityState)


@pytest.mark.asyncio
async def test_local_summary(real_engine, text_model_ready):
    executor = LocalExecutor(real_engine, text_model=TEXT_MODEL)

    summary = await executor.summarise(
        "Hi team, the budget review moves from Tuesday to Thursday at 10. "
        "Please bring the Q3 figures. Anna"
    )

    assert summary.tldr
    assert len(summary.key_points) <= 5
