"""Shared test fixtures and configuration for all tests.

This conftest.py provides common fixtures used across unit and integration tests.
"""

import json
from typing import Any, Callable, Optional, Union

import httpx
import pytest
from pydantic import SecretStr

from hybrid_inference.config import Settings
from hybrid_inference.models.enums import ProviderName
from hybrid_inference.models.input_models import ProviderCredential


@pytest.fixture
def test_settings() -> Settings:
    """Test settings with safe defaults for local testing.

    Override specific settings in individual tests as needed:
        def test_something(test_settings):
            settings = test_settings.model_copy(update={"DRAFT_CHAR_LIMIT": 100})
    """
    return Settings(
        _env_file=None,
        # === Application ===
        APP_NAME="Hybrid Inference Layer (Test)",
        APP_VERSION="0.1.0",
        DEBUG=True,
        LOG_LEVEL="DEBUG",
        ENVIRONMENT="development",

        # === On-device Engine ===
        LOCAL_ENGINE_URL="http://localhost:11434",
        LOCAL_TEXT_MODEL="qwen2.5:3b",
        LOCAL_VISION_MODEL="llava:7b",

        # === Shared Cloud Fallback ===
        FALLBACK_ENDPOINT_URL="http://fallback.test/api/fallback",
        FALLBACK_PROVIDER=None,
        FALLBACK_API_KEY=None,

        PROMETHEUS_ENABLED=False,  # Disable metrics in tests unless explicitly needed
    )


@pytest.fixture
def valid_drafts_payload() -> dict:
    """Three well-formed drafts ordered short -> medium -> comprehensive."""
    return {
        "drafts": [
            {"subject": "Re: Meeting", "body": "Thanks, Thursday works for me."},
            {
                "subject": "Re: Meeting",
                "body": "Hi Anna,\n\nThursday at 10 works. I'll bring the figures.\n\nBest,\nSam",
            },
            {
                "subject": "Re: Meeting on Thursday",
                "body": (
                    "Hi Anna,\n\nThursday at 10 works for me. I'll bring the Q3 figures "
                    "and the draft budget so we can review both. Could you book the "
                    "small meeting room?\n\nBest regards,\nSam"
                ),
            },
        ]
    }


@pytest.fixture
def valid_summary_payload() -> dict:
    return {
        "tldr": "Anna proposes moving the budget review to Thursday.",
        "keyPoints": ["Review moved to Thursday", "Q3 figures needed", "Room to be booked"],
    }


@pytest.fixture
def make_credential() -> Callable[..., ProviderCredential]:
    """Factory for ProviderCredential values."""
    def _make(
        provider: ProviderName = ProviderName.GEMINI,
        api_key: str = "test-key-123",
        enabled: bool = True,
    ) -> ProviderCredential:
        return ProviderCredential(
            provider=provider,
            api_key=SecretStr(api_key),
            name=f"{provider.value} test key",
            enabled=enabled,
        )
    return _make


class RecordingTransport(httpx.MockTransport):
    """MockTransport that keeps every request it served."""

    def __init__(self, handler: Callable[[httpx.Request], httpx.Response]):
        self.requests: list[httpx.Request] = []

        def _record(request: httpx.Request) -> httpx.Response:
            self.requests.append(request)
            return handler(request)

        super().__init__(_record)

    @property
    def last_json(self) -> Any:
        return json.loads(self.requests[-1].content)


@pytest.fixture
def recording_transport() -> Callable[..., RecordingTransport]:
    """Factory: recording_transport(handler) -> RecordingTransport."""
    return RecordingTransport


def gemini_body(text: str) -> dict:
    return {"candidates": [{"content": {"parts": [{"text": text}]}}]}


def openai_body(text: str) -> dict:
    return {"choices": [{"message": {"role": "assistant", "content": text}}]}


def anthropic_body(text: str) -> dict:
    return {"content": [{"type": "text", "text": text}]}


@pytest.fixture
def provider_bodies() -> dict[ProviderName, Callable[[str], dict]]:
    """Success envelope builders per provider."""
    return {
        ProviderName.GEMINI: gemini_body,
        ProviderName.OPENAI: openai_body,
        ProviderName.ANTHROPIC: anthropic_body,
    }


# === Local engine fake ===

GenerateReply = Union[str, httpx.Response, Callable[[dict], httpx.Response]]


class FakeOllama:
    """Serve /api/tags, /api/show and /api/generate from memory.

    generate replies are consumed in order; a str becomes a successful
    {"response": ...} body.
    """

    def __init__(self) -> None:
        self.models: list[str] = ["qwen2.5:3b", "llava:7b"]
        self.capabilities: dict[str, Optional[list[str]]] = {
            "qwen2.5:3b": ["completion"],
            "llava:7b": ["completion", "vision"],
        }
        self.replies: list[GenerateReply] = []
        self.generate_payloads: list[dict] = []
        self.down = False

    def reply(self, *replies: GenerateReply) -> "FakeOllama":
        self.replies.extend(replies)
        return self

    def __call__(self, request: httpx.Request) -> httpx.Response:
        if self.down:
            raise httpx.ConnectError("Connection refused", request=request)

        if request.url.path == "/api/tags":
            return httpx.Response(200, json={"models": [{"name": m} for m in self.models]})

        if request.url.path == "/api/show":
            model = json.loads(request.content)["model"]
            if model not in self.models:
                return httpx.Response(404, json={"error": f"model '{model}' not found"})
            body: dict[str, Any] = {"details": {"family": "test"}}
            if self.capabilities.get(model) is not None:
                body["capabilities"] = self.capabilities[model]
            return httpx.Response(200, json=body)

        if request.url.path == "/api/generate":
            payload = json.loads(request.content)
            self.generate_payloads.append(payload)
            reply = self.replies.pop(0) if self.replies else "ok"
            if callable(reply):
                return reply(payload)
            if isinstance(reply, httpx.Response):
                return reply
            return httpx.Response(
                200,
                json={
                    "model": payload["model"],
                    "response": reply,
                    "done": True,
                    "done_reason": "stop",
                    "prompt_eval_count": 12,
                    "eval_count": 34,
                },
            )

        return httpx.Response(404, json={"error": "not found"})


@pytest.fixture
def fake_ollama() -> FakeOllama:
    """In-process local Ollama server (tags, show, generate)."""
    return FakeOllama()
