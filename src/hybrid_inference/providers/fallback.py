"""
Client for the shared cloud fallback endpoint.

Used when hybrid routing sends a request to the cloud and the user has no
enabled credential of their own.

POST {endpoint} {"type": "summarise"|"draft", "text": ..., "options": {...}}
-> 2xx {"tldr", "keyPoints"} | {"drafts": [...]}
-> non-2xx {"error": "..."}
"""

import time
from typing import Any, Optional

import httpx
import structlog

from hybrid_inference.errors.classifier import ErrorClassifier
from hybrid_inference.errors.exceptions import EmptyInputError, FallbackEndpointError
from hybrid_inference.models.enums import OperationType
from hybrid_inference.models.input_models import ProcessingOptions
from hybrid_inference.models.output_models import DraftSet, SummaryResult
from hybrid_inference.monitoring.metrics import provider_latency_seconds, provider_requests_total
from hybrid_inference.validation.validator import ResponseValidator

logger = structlog.get_logger(__name__)


FALLBACK_PROVIDER_LABEL = "shared_fallback"

# Options sent over the wire per operation; names match ProcessingOptions
WIRE_OPTION_FIELDS: dict[OperationType, set[str]] = {
    OperationType.SUMMARISE: {"summary_length", "summary_format"},
    OperationType.DRAFT: {"tone", "guidance"},
}


class SharedFallbackClient:
    """
    Calls the shared endpoint and validates what comes back.

    Transport and status failures become FallbackEndpointError
    (HYBRID_FALLBACK); payloads failing validation are INVALID_JSON.
    """

    def __init__(
        self,
        endpoint_url: str,
        timeout: float = 90,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        validator: Optional[ResponseValidator] = None,
        classifier: Optional[ErrorClassifier] = None,
    ):
        self.endpoint_url = endpoint_url
        self.timeout = timeout
        self._transport = transport
        self.validator = validator or ResponseValidator()
        self.classifier = classifier or ErrorClassifier()

    async def call(
        self,
        operation: OperationType,
        text: str,
        options: Optional[ProcessingOptions] = None,
    ) -> Any:
        """
        POST one request to the shared endpoint.

        Returns:
            Parsed JSON body, or the raw text when the body is not JSON
            (the validator decides what to make of it)

        Raises:
            FallbackEndpointError: Unreachable endpoint or non-2xx status;
                the server's `error` field is carried verbatim
        """
        options = options or ProcessingOptions()
        payload = {
            "type": operation.value,
            "text": text,
            "options": options.model_dump(
                mode="json",
                include=WIRE_OPTION_FIELDS.get(operation, set()),
            ),
        }

        logger.info(
            "Calling shared fallback endpoint",
            operation=operation.value,
            text_length=len(text),
        )

        start_time = time.time()
        try:
            async with httpx.AsyncClient(
                timeout=httpx.Timeout(self.timeout),
                transport=self._transport,
            ) as client:
                response = await client.post(self.endpoint_url, json=payload)
        except httpx.TransportError as e:
            provider_requests_total.labels(
                provider=FALLBACK_PROVIDER_LABEL, operation=operation.value, outcome="network_error"
            ).inc()
            raise FallbackEndpointError(f"could not reach server ({type(e).__name__})") from e
        finally:
            provider_latency_seconds.labels(provider=FALLBACK_PROVIDER_LABEL).observe(
                time.time() - start_time
            )

        if response.is_error:
            provider_requests_total.labels(
                provider=FALLBACK_PROVIDER_LABEL, operation=operation.value, outcome="http_error"
            ).inc()
            try:
                body = response.json()
            except ValueError:
                body = None
            error = body.get("error") if isinstance(body, dict) else None
            server_error = error if isinstance(error, str) and error.strip() else None
            server_message = server_error or f"Server returned {response.status_code}"

            logger.error(
                "Shared fallback endpoint error",
                status_code=response.status_code,
                server_message=server_message,
            )
            raise FallbackEndpointError(
                server_message,
                status_code=response.status_code,
                server_error=server_error,
            )

        provider_requests_total.labels(
            provider=FALLBACK_PROVIDER_LABEL, operation=operation.value, outcome="success"
        ).inc()
        try:
            return response.json()
        except ValueError:
            return response.text

    async def summarise(
        self,
        text: str,
        options: Optional[ProcessingOptions] = None,
    ) -> SummaryResult:
        """Summarise through the shared endpoint. Raises ProcessingError."""
        try:
            if not text or not text.strip():
                raise EmptyInputError("Thread text is empty")
            data = await self.call(OperationType.SUMMARISE, text, options)
            return self.validator.validate_summary(data)
        except Exception as e:
            raise self.classifier.classify(e, OperationType.SUMMARISE) from e

    async def generate_drafts(
        self,
        text: str,
        options: Optional[ProcessingOptions] = None,
    ) -> DraftSet:
        """Generate drafts through the shared endpoint. Raises ProcessingError."""
        try:
            if not text or not text.strip():
                raise EmptyInputError("Thread text is empty")
            data = await self.call(OperationType.DRAFT, text, options)
            return self.validator.validate_drafts(data)
        except Exception as e:
            raise self.classifier.classify(e, OperationType.DRAFT) from e

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(endpoint_url={self.endpoint_url})"
