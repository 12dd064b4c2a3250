"""
Unit tests for LocalEngineClient and scoped LocalSession.
"""

import base64

import httpx
import pytest

from hybrid_inference.errors.exceptions import LocalGenerationError, LocalModelUnavailableError
from hybrid_inference.models.llm_models import SessionOptions
from prometheus_client import REGISTRY


def gauge_value() -> float:
    return REGISTRY.get_sample_value("local_sessions_active")


class TestLocalEngineClient:
    """Model listing and introspection."""

    @pytest.mark.asyncio
    async def test_list_models(self, engine):
        assert await engine.list_models() == ["qwen2.5:3b", "llava:7b"]

    @pytest.mark.asyncio
    async def test_list_models_server_down(self, engine, fake_ollama):
        fake_ollama.down = True

        with pytest.raises(LocalModelUnavailableError):
            await engine.list_models()

    @pytest.mark.asyncio
    async def test_get_model_info(self, engine):
        info = await engine.get_model_info("llava:7b")

        assert "vision" in info["capabilities"]

    @pytest.mark.asyncio
    async def test_get_model_info_unknown_model(self, engine):
        with pytest.raises(LocalModelUnavailableError) as exc_info:
            await engine.get_model_info("missing:1b")

        assert "missing:1b" in str(exc_info.value)


class TestLocalSession:
    """Prompting and release on every exit path."""

    options = SessionOptions(
        model="qwen2.5:3b",
        system_prompt="Be brief.",
        temperature=0.7,
        top_k=40,
        max_tokens=2048,
    )

    @pytest.mark.asyncio
    async def test_prompt_payload(self, engine, fake_ollama):
        fake_ollama.reply("Hello!")
        schema = {"type": "object"}

        async with engine.session(self.options) as session:
            response = await session.prompt("Say hi", response_schema=schema)

        payload = fake_ollama.generate_payloads[0]
        assert payload["model"] == "qwen2.5:3b"
        assert payload["system"] == "Be brief."
        assert payload["prompt"] == "Say hi"
        assert payload["stream"] is False
        assert payload["format"] == schema
        assert payload["options"] == {"temperature": 0.7, "num_predict": 2048, "top_k": 40}
        assert response.content == "Hello!"
        assert response.prompt_tokens == 12
        assert response.completion_tokens == 34

    @pytest.mark.asyncio
    async def test_prompt_system_override_and_images(self, engine, fake_ollama):
        fake_ollama.reply("A cat")

        async with engine.session(self.options) as session:
            await session.prompt("What is this?", images=[b"\x89PNG"], system_prompt="Describe images.")

        payload = fake_ollama.generate_payloads[0]
        assert payload["system"] == "Describe images."
        assert payload["images"] == [base64.b64encode(b"\x89PNG").decode("ascii")]
        assert "format" not in payload

    @pytest.mark.asyncio
    async def test_session_destroyed_after_block(self, engine):
        async with engine.session(self.options) as session:
            assert not session.destroyed

        assert session.destroyed

    @pytest.mark.asyncio
    async def test_session_destroyed_when_block_raises(self, engine):
        before = gauge_value()

        with pytest.raises(ValueError):
            async with engine.session(self.options) as session:
                assert gauge_value() == before + 1
                raise ValueError("validation failed")

        assert session.destroyed
        assert gauge_value() == before

    @pytest.mark.asyncio
    async def test_destroy_is_idempotent(self, engine):
        async with engine.session(self.options) as session:
            await session.destroy()
            await session.destroy()

        assert session.destroyed

    @pytest.mark.asyncio
    async def test_prompt_after_destroy_fails(self, engine):
        async with engine.session(self.options) as session:
            pass

        with pytest.raises(LocalGenerationError):
            await session.prompt("too late")

    @pytest.mark.asyncio
    async def test_missing_model_is_unavailable(self, engine, fake_ollama):
        fake_ollama.reply(httpx.Response(404, json={"error": "model 'qwen2.5:3b' not found"}))

        with pytest.raises(LocalModelUnavailableError):
            async with engine.session(self.options) as session:
                await session.prompt("hi")

    @pytest.mark.asyncio
    async def test_engine_error_carries_message(self, engine, fake_ollama):
        fake_ollama.reply(httpx.Response(500, json={"error": "input exceeds context token window"}))

        with pytest.raises(LocalGenerationError) as exc_info:
            async with engine.session(self.options) as session:
                await session.prompt("hi")

        assert "(500)" in str(exc_info.value)
        assert "token" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_empty_output_is_an_error(self, engine, fake_ollama):
        fake_ollama.reply("   ")

        with pytest.raises(LocalGenerationError) as exc_info:
            async with engine.session(self.options) as session:
                await session.prompt("hi")

        assert "Empty response" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_server_down_is_unavailable(self, engine, fake_ollama):
        fake_ollama.down = True

        with pytest.raises(LocalModelUnavailableError):
            async with engine.session(self.options) as session:
                await session.prompt("hi")

    @pytest.mark.asyncio
    async def test_timeout(self, engine, fake_ollama):
        def slow(payload):
            raise httpx.ReadTimeout("timed out")

        fake_ollama.reply(slow)

        with pytest.raises(LocalGenerationError) as exc_info:
            async with engine.session(self.options) as session:
                await session.prompt("hi")

        assert "timed out" in str(exc_info.value)
