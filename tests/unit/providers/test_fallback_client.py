"""
Unit tests for SharedFallbackClient.
"""

import json

import httpx
import pytest

from hybrid_inference.errors.exceptions import FallbackEndpointError, ProcessingError
from hybrid_inference.models.enums import DraftTone, ErrorCode, OperationType, SummaryLength
from hybrid_inference.models.input_models import ProcessingOptions
from hybrid_inference.providers import SharedFallbackClient


ENDPOINT = "http://fallback.test/api/fallback"


def json_reply(status: int, body) -> httpx.Response:
    return httpx.Response(status, json=body)


class TestCall:

    @pytest.mark.asyncio
    async def test_request_shape_for_drafts(self, recording_transport, valid_drafts_payload):
        transport = recording_transport(lambda request: json_reply(200, valid_drafts_payload))
        client = SharedFallbackClient(ENDPOINT, transport=transport)

        await client.call(
            OperationType.DRAFT,
            "Thread",
            ProcessingOptions(tone=DraftTone.ASSERTIVE, guidance="Be brief"),
        )

        assert str(transport.requests[0].url) == ENDPOINT
        assert transport.last_json == {
            "type": "draft",
            "text": "Thread",
            "options": {"tone": "assertive", "guidance": "Be brief"},
        }

    @pytest.mark.asyncio
    async def test_request_shape_for_summary(self, recording_transport, valid_summary_payload):
        transport = recording_transport(lambda request: json_reply(200, valid_summary_payload))
        client = SharedFallbackClient(ENDPOINT, transport=transport)

        body = await client.call(
            OperationType.SUMMARISE, "Thread", ProcessingOptions(summary_length=SummaryLength.LONG)
        )

        assert body == valid_summary_payload
        assert transport.last_json["options"] == {
            "summary_length": "long",
            "summary_format": "plain-text",
        }

    @pytest.mark.asyncio
    async def test_server_error_text_carried_verbatim(self, recording_transport):
        transport = recording_transport(
            lambda request: json_reply(503, {"error": "Cloud processing is not configured on this server"})
        )
        client = SharedFallbackClient(ENDPOINT, transport=transport)

        with pytest.raises(FallbackEndpointError) as exc_info:
            await client.call(OperationType.SUMMARISE, "Thread")

        assert exc_info.value.status_code == 503
        assert str(exc_info.value) == (
            "Cloud processing failed: Cloud processing is not configured on this server"
        )

    @pytest.mark.asyncio
    async def test_status_only_error(self, recording_transport):
        transport = recording_transport(lambda request: httpx.Response(502, text="Bad gateway"))
        client = SharedFallbackClient(ENDPOINT, transport=transport)

        with pytest.raises(FallbackEndpointError) as exc_info:
            await client.call(OperationType.DRAFT, "Thread")

        assert exc_info.value.server_message == "Server returned 502"

    @pytest.mark.asyncio
    async def test_unreachable(self):
        def handler(request):
            raise httpx.ConnectError("Connection refused", request=request)

        client = SharedFallbackClient(ENDPOINT, transport=httpx.MockTransport(handler))

        with pytest.raises(FallbackEndpointError) as exc_info:
            await client.call(OperationType.DRAFT, "Thread")

        assert "could not reach server" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_non_json_success_returned_as_text(self, recording_transport):
        transport = recording_transport(lambda request: httpx.Response(200, text="plain words"))
        client = SharedFallbackClient(ENDPOINT, transport=transport)

        assert await client.call(OperationType.SUMMARISE, "Thread") == "plain words"


class TestValidatedCalls:

    @pytest.mark.asyncio
    async def test_summarise(self, recording_transport, valid_summary_payload):
        transport = recording_transport(lambda request: json_reply(200, valid_summary_payload))
        client = SharedFallbackClient(ENDPOINT, transport=transport)

        summary = await client.summarise("Thread")

        assert summary.to_wire() == valid_summary_payload

    @pytest.mark.asyncio
    async def test_generate_drafts(self, recording_transport, valid_drafts_payload):
        transport = recording_transport(lambda request: json_reply(200, valid_drafts_payload))
        client = SharedFallbackClient(ENDPOINT, transport=transport)

        draft_set = await client.generate_drafts("Thread")

        assert len(draft_set.drafts) == 3

    @pytest.mark.asyncio
    async def test_bad_payload_is_invalid_json(self, recording_transport):
        transport = recording_transport(lambda request: json_reply(200, {"drafts": []}))
        client = SharedFallbackClient(ENDPOINT, transport=transport)

        with pytest.raises(ProcessingError) as exc_info:
            await client.generate_drafts("Thread")

        assert exc_info.value.code == ErrorCode.INVALID_JSON
        assert exc_info.value.provider is None

    @pytest.mark.asyncio
    async def test_summary_as_json_text(self, recording_transport, valid_summary_payload):
        transport = recording_transport(
            lambda request: httpx.Response(200, text="Result: " + json.dumps(valid_summary_payload))
        )
        client = SharedFallbackClient(ENDPOINT, transport=transport)

        summary = await client.summarise("Thread")

        assert summary.tldr == valid_summary_payload["tldr"]

    @pytest.mark.asyncio
    async def test_endpoint_failure_is_hybrid_fallback(self, recording_transport):
        transport = recording_transport(lambda request: json_reply(500, {"error": "Gemini API error"}))
        client = SharedFallbackClient(ENDPOINT, transport=transport)

        with pytest.raises(ProcessingError) as exc_info:
            await client.summarise("Thread")

        assert exc_info.value.code == ErrorCode.HYBRID_FALLBACK
        assert exc_info.value.cause.server_error == "Gemini API error"

    @pytest.mark.asyncio
    async def test_endpoint_failure_surfaces_server_error(self, recording_transport):
        transport = recording_transport(
            lambda request: json_reply(429, {"error": "Daily cloud quota exhausted for this workspace"})
        )
        client = SharedFallbackClient(ENDPOINT, transport=transport)

        with pytest.raises(ProcessingError) as exc_info:
            await client.summarise("hello there")

        error = exc_info.value
        assert error.code == ErrorCode.HYBRID_FALLBACK
        assert error.user_message == (
            "Cloud processing failed: Daily cloud quota exhausted for this workspace. "
            "Please try again or check your connection"
        )

    @pytest.mark.asyncio
    async def test_endpoint_failure_without_server_error_is_generic(self, recording_transport):
        transport = recording_transport(lambda request: httpx.Response(502, text="Bad gateway"))
        client = SharedFallbackClient(ENDPOINT, transport=transport)

        with pytest.raises(ProcessingError) as exc_info:
            await client.generate_drafts("Thread")

        assert exc_info.value.code == ErrorCode.HYBRID_FALLBACK
        assert exc_info.value.user_message == (
            "Cloud processing failed. Please try again or check your connection"
        )

    @pytest.mark.asyncio
    async def test_unreachable_is_generic(self):
        def handler(request):
            raise httpx.ConnectError("Connection refused", request=request)

        client = SharedFallbackClient(ENDPOINT, transport=httpx.MockTransport(handler))

        with pytest.raises(ProcessingError) as exc_info:
            await client.summarise("Thread")

        assert exc_info.value.user_message.startswith("Cloud processing failed. ")
        assert "ConnectError" not in exc_info.value.user_message

    @pytest.mark.asyncio
    async def test_blank_text_not_sent(self, recording_transport):
        transport = recording_transport(lambda request: json_reply(200, {}))
        client = SharedFallbackClient(ENDPOINT, transport=transport)

        with pytest.raises(ProcessingError) as exc_info:
            await client.summarise("   ")

        assert transport.requests == []
        assert exc_info.value.user_message == (
            "Unable to summarise this thread: Thread text is empty. "
            "Please enter some text and try again"
        )
