"""
On-device engine client (local Ollama server).

Communicates with the Ollama API using httpx AsyncClient. Supports:
- Model listing and introspection for capability probing
- Scoped sessions: each session owns its own connection pool and is
  released on every exit path
- Structured output via JSON Schema (format parameter)
- Image inputs for vision models
"""

import base64
import time
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Dict, Optional

import httpx
import structlog

from hybrid_inference.errors.exceptions import (
    LocalGenerationError,
    LocalModelUnavailableError,
)
from hybrid_inference.models.llm_models import LLMGenerationResponse, SessionOptions
from hybrid_inference.monitoring.metrics import local_sessions_active


logger = structlog.get_logger(__name__)


def _error_text(response: httpx.Response) -> str:
    """Ollama reports failures as {"error": "..."}; fall back to raw text."""
    try:
        data = response.json()
    except ValueError:
        return response.text or response.reason_phrase
    if isinstance(data, dict) and data.get("error"):
        return str(data["error"])
    return response.text or response.reason_phrase


class LocalSession:
    """
    One scoped conversation with a local model.

    Holds a dedicated httpx.AsyncClient configured from SessionOptions.
    Never construct directly: use LocalEngineClient.session() so the
    session is released when the block exits.

    API Endpoints:
    - POST /api/generate: Generate completion with optional format constraint
    """

    def __init__(self, client: httpx.AsyncClient, options: SessionOptions, timeout: float):
        self._client = client
        self.options = options
        self.timeout = timeout
        self._destroyed = False

    @property
    def destroyed(self) -> bool:
        return self._destroyed

    async def prompt(
        self,
        text: str,
        response_schema: Optional[Dict[str, Any]] = None,
        images: Optional[list[bytes]] = None,
        system_prompt: Optional[str] = None,
    ) -> LLMGenerationResponse:
        """
        Send one prompt within the session.

        POST /api/generate with payload:
        {
            "model": "qwen2.5:3b",
            "system": "...",
            "prompt": "...",
            "stream": false,
            "format": <JSON Schema>,        # only with response_schema
            "images": ["<base64>", ...],    # only with images
            "options": {"temperature": 0.7, "num_predict": 2048, "top_k": 40}
        }

        Args:
            text: User prompt
            response_schema: Structured-output constraint for the engine
            images: Raw image bytes for vision models
            system_prompt: Overrides the session's system instructions
                for this prompt only

        Returns:
            LLMGenerationResponse with generated text and metadata

        Raises:
            LocalModelUnavailableError: Engine unreachable or model missing
            LocalGenerationError: Engine error, timeout or empty output
        """
        if self._destroyed:
            raise LocalGenerationError("Local session already destroyed")

        payload: Dict[str, Any] = {
            "model": self.options.model,
            "prompt": text,
            "stream": False,
            "options": {
                "temperature": self.options.temperature,
                "num_predict": self.options.max_tokens,
            },
        }
        system = system_prompt if system_prompt is not None else self.options.system_prompt
        if system:
            payload["system"] = system
        if self.options.top_k is not None:
            payload["options"]["top_k"] = self.options.top_k
        if response_schema is not None:
            payload["format"] = response_schema
        if images:
            payload["images"] = [base64.b64encode(image).decode("ascii") for image in images]

        logger.info(
            "Sending prompt to local engine",
            model=self.options.model,
            prompt_length=len(text),
            temperature=self.options.temperature,
            has_schema=response_schema is not None,
            image_count=len(images) if images else 0,
        )

        start_time = time.time()
        try:
            response = await self._client.post("/api/generate", json=payload)
        except httpx.TimeoutException as e:
            raise LocalGenerationError(
                f"Local generation timed out after {self.timeout}s",
                details={"model": self.options.model, "error": str(e)},
            ) from e
        except httpx.TransportError as e:
            raise LocalModelUnavailableError(
                f"Local engine not available: {e}",
                details={"error_type": type(e).__name__},
            ) from e

        if response.status_code == 404:
            raise LocalModelUnavailableError(
                f"Local model not available: {self.options.model}",
                details={"model": self.options.model, "status": 404},
            )
        if response.is_error:
            error_text = _error_text(response)
            logger.error(
                "Local engine HTTP error",
                status_code=response.status_code,
                error_text=error_text,
            )
            raise LocalGenerationError(
                f"Local engine error ({response.status_code}): {error_text}",
                details={"status": response.status_code, "error": error_text},
            )

        try:
            data = response.json()
        except ValueError as e:
            raise LocalGenerationError(
                "Invalid JSON envelope from local engine",
                details={"parse_error": str(e)},
            ) from e

        content = data.get("response", "")
        if not content or not content.strip():
            raise LocalGenerationError(
                "Empty response from local engine",
                details={"model": self.options.model},
            )

        latency_ms = int((time.time() - start_time) * 1000)
        logger.info(
            "Local generation successful",
            model=data.get("model", self.options.model),
            latency_ms=latency_ms,
            prompt_tokens=data.get("prompt_eval_count"),
            completion_tokens=data.get("eval_count"),
        )

        return LLMGenerationResponse(
            content=content,
            model_version=data.get("model", self.options.model),
            finish_reason=data.get("done_reason") or ("stop" if data.get("done") else "incomplete"),
            prompt_tokens=data.get("prompt_eval_count"),
            completion_tokens=data.get("eval_count"),
            latency_ms=latency_ms,
            raw_metadata={
                "total_duration": data.get("total_duration"),
                "load_duration": data.get("load_duration"),
            },
        )

    async def destroy(self) -> None:
        """Release the session's connections. Idempotent."""
        if self._destroyed:
            return
        self._destroyed = True
        await self._client.aclose()
        logger.debug("Destroyed local session", model=self.options.model)


class LocalEngineClient:
    """
    Client for the on-device inference server.

    API Endpoints:
    - GET /api/tags: List pulled models
    - POST /api/show: Model details and capabilities
    - POST /api/generate: via LocalSession
    """

    def __init__(
        self,
        base_url: str = "http://localhost:11434",
        timeout: int = 60,
        probe_timeout: float = 5.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize local engine client.

        Args:
            base_url: Local server URL
            timeout: Generation timeout in seconds
            probe_timeout: Timeout for capability queries
            transport: Custom httpx transport (tests)
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.probe_timeout = probe_timeout
        self._transport = transport

        logger.info(
            "Local engine client initialized",
            base_url=self.base_url,
            timeout=timeout,
        )

    def _new_http_client(self, timeout: float) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self.base_url,
            timeout=httpx.Timeout(timeout),
            transport=self._transport,
        )

    async def list_models(self) -> list[str]:
        """
        List pulled models via GET /api/tags.

        Returns:
            Model names (e.g. ["qwen2.5:3b", "llava:7b"])

        Raises:
            LocalModelUnavailableError: Server unreachable or erroring
        """
        try:
            async with self._new_http_client(self.probe_timeout) as client:
                response = await client.get("/api/tags")
                response.raise_for_status()
                data = response.json()
        except (httpx.HTTPError, ValueError) as e:
            raise LocalModelUnavailableError(
                f"Local engine not available: {e}",
                details={"error_type": type(e).__name__},
            ) from e

        models = [m["name"] for m in data.get("models", []) if "name" in m]
        logger.debug("Listed local models", count=len(models))
        return models

    async def get_model_info(self, model_name: str) -> Dict[str, Any]:
        """
        Get model information via POST /api/show.

        Response includes "capabilities" (e.g. ["completion", "vision"])
        on current server versions.

        Raises:
            LocalModelUnavailableError: Model not found or server unreachable
        """
        try:
            async with self._new_http_client(self.probe_timeout) as client:
                response = await client.post("/api/show", json={"model": model_name})
                response.raise_for_status()
                return response.json()
        except (httpx.HTTPError, ValueError) as e:
            raise LocalModelUnavailableError(
                f"Local model not available: {model_name}",
                details={"model": model_name, "error": str(e)},
            ) from e

    @asynccontextmanager
    async def session(self, options: SessionOptions) -> AsyncIterator[LocalSession]:
        """
        Acquire a scoped session; it is destroyed when the block exits,
        whether by return, validation failure or exception.

        Usage:
            async with engine.session(options) as session:
                response = await session.prompt(text)
        """
        local_session = LocalSession(
            self._new_http_client(self.timeout), options, timeout=self.timeout
        )
        local_sessions_active.inc()
        logger.debug("Acquired local session", model=options.model)
        try:
            yield local_session
        finally:
            local_sessions_active.dec()
            await local_session.destroy()

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}("
            f"base_url={self.base_url}, "
            f"timeout={self.timeout}s)"
        )
