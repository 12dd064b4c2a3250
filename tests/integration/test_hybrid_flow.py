"""
End-to-end routing flows.

HybridProcessor is wired with from_settings(); the local engine, the
provider APIs and the shared fallback server all answer in process.
"""

import json

import pytest

from hybrid_inference.errors.exceptions import ProcessingError
from hybrid_inference.models.enums import (
    CapabilityState,
    ErrorCode,
    ExecutionPath,
    OperationType,
    ProcessingMode,
    ProviderName,
)
from hybrid_inference.models.input_models import ImageInput, ProcessingRequest

LOCAL_ENGINE_HOST = "localhost"
FALLBACK_HOST = "fallback.test"
GEMINI_HOST = "generativelanguage.googleapis.com"
OPENAI_HOST = "api.openai.com"


def gemini_reply(payload: dict) -> dict:
    return {"candidates": [{"content": {"parts": [{"text": json.dumps(payload)}]}}]}


class TestLocalFlows:

    @pytest.mark.asyncio
    async def test_drafts_on_device(self, processor, fake_ollama, network, valid_drafts_payload):
        fake_ollama.reply(json.dumps(valid_drafts_payload))

        outcome = await processor.generate_drafts("Can we meet Thursday?", ProcessingMode.ON_DEVICE)

        assert outcome.path == ExecutionPath.LOCAL
        assert outcome.draft_set.to_wire() == valid_drafts_payload
        assert set(network.hosts) == {LOCAL_ENGINE_HOST}

    @pytest.mark.asyncio
    async def test_summary_on_device(self, processor, fake_ollama):
        fake_ollama.reply("Budget review moves to Thursday.", "- Moved to Thursday\n- Bring figures")

        outcome = await processor.summarise("Long thread", ProcessingMode.ON_DEVICE)

        assert outcome.summary.tldr == "Budget review moves to Thursday."
        assert outcome.summary.key_points == ["Moved to Thursday", "Bring figures"]

    @pytest.mark.asyncio
    async def test_image_question_on_device(self, processor, fake_ollama):
        fake_ollama.reply("A whiteboard with a sprint plan.")
        image = ImageInput(data=b"\x89PNG" + b"0" * 32, mime_type="image/png")

        answer = await processor.ask_image_question(image, "What is on the whiteboard?")

        assert answer.answer == "A whiteboard with a sprint plan."
        assert fake_ollama.generate_payloads[0]["model"] == "llava:7b"

    @pytest.mark.asyncio
    async def test_local_validation_failure_then_explicit_remote_retry(
        self, processor, fake_ollama, network, make_credential, valid_drafts_payload
    ):
        fake_ollama.reply('{"drafts": []}')
        network.provider(OPENAI_HOST, body={
            "choices": [{"message": {"content": json.dumps(valid_drafts_payload)}}]
        })

        with pytest.raises(ProcessingError) as exc_info:
            await processor.generate_drafts("Thread")
        assert exc_info.value.code == ErrorCode.INVALID_JSON

        outcome = await processor.process_remote(
            ProcessingRequest(text="Thread", operation_type=OperationType.DRAFT),
            credentials=[make_credential(ProviderName.OPENAI)],
        )

        assert outcome.path == ExecutionPath.CUSTOM_KEY
        assert outcome.provider == ProviderName.OPENAI


class TestCloudFlows:

    @pytest.mark.asyncio
    async def test_oversized_summary_goes_through_shared_fallback(
        self, processor, network, fallback_server, valid_summary_payload
    ):
        network.provider(GEMINI_HOST, body=gemini_reply(valid_summary_payload))

        outcome = await processor.summarise("x" * 5000)

        assert outcome.path == ExecutionPath.SHARED_FALLBACK
        assert outcome.summary.to_wire() == valid_summary_payload
        assert FALLBACK_HOST in network.hosts
        assert GEMINI_HOST in network.hosts

    @pytest.mark.asyncio
    async def test_engine_down_uses_custom_key(
        self, processor, fake_ollama, network, make_credential, valid_drafts_payload
    ):
        fake_ollama.down = True
        network.provider(GEMINI_HOST, body=gemini_reply(valid_drafts_payload))

        outcome = await processor.generate_drafts("Thread", credentials=[make_credential()])

        assert outcome.path == ExecutionPath.CUSTOM_KEY
        assert "not available" in outcome.reason
        assert FALLBACK_HOST not in network.hosts

    @pytest.mark.asyncio
    async def test_model_not_pulled_is_needs_download(self, processor, fake_ollama):
        fake_ollama.models = ["llava:7b"]

        state = await processor.admission.prober.probe(OperationType.SUMMARISE)

        assert state == CapabilityState.NEEDS_DOWNLOAD

    @pytest.mark.asyncio
    async def test_custom_key_rejected(self, processor, fake_ollama, network, make_credential):
        fake_ollama.down = True
        network.provider(GEMINI_HOST, status=401, body={"error": {"message": "API key not valid."}})

        with pytest.raises(ProcessingError) as exc_info:
            await processor.summarise("Thread", credentials=[make_credential()])

        assert exc_info.value.code == ErrorCode.INVALID_KEY
        assert exc_info.value.user_message == (
            "Invalid API key for Gemini. Please check your key in settings"
        )

    @pytest.mark.asyncio
    async def test_fallback_server_not_configured(self, processor, fake_ollama, fallback_server):
        fake_ollama.down = True
        fallback_server(None)

        with pytest.raises(ProcessingError) as exc_info:
            await processor.generate_drafts("Thread")

        error = exc_info.value
        assert error.code == ErrorCode.HYBRID_FALLBACK
        assert "not configured" in str(error.cause)

    @pytest.mark.asyncio
    async def test_fallback_server_relays_provider_rate_limit(
        self, processor, fake_ollama, network, fallback_server
    ):
        fake_ollama.down = True
        network.provider(GEMINI_HOST, status=429, body={"error": {"message": "Quota exceeded"}})

        with pytest.raises(ProcessingError) as exc_info:
            await processor.summarise("Thread")

        error = exc_info.value
        assert error.code == ErrorCode.HYBRID_FALLBACK
        assert error.cause.status_code == 429
        assert "Rate limit exceeded for Gemini" in error.cause.server_message
        assert "Rate limit exceeded for Gemini" in error.user_message

    @pytest.mark.asyncio
    async def test_on_device_never_touches_network_beyond_engine(self, processor, fake_ollama, network):
        fake_ollama.down = True

        with pytest.raises(ProcessingError) as exc_info:
            await processor.summarise("Thread", ProcessingMode.ON_DEVICE)

        assert exc_info.value.code == ErrorCode.UNAVAILABLE
        assert set(network.hosts) == {LOCAL_ENGINE_HOST}
