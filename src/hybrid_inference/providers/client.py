"""
Provider client: issues the outbound call for a user-supplied credential.

Features:
- Registry dispatch (no per-provider branching)
- Structured provider error messages surfaced on non-2xx
- One independent httpx.AsyncClient per call, closed on every path
- Prometheus counters and latency per provider
- Classification at the boundary for the remote entry points
"""

import time
from typing import Optional, Union

import httpx
import structlog

from hybrid_inference.errors.classifier import ErrorClassifier
from hybrid_inference.errors.exceptions import (
    EmptyInputError,
    EmptyResponseError,
    MissingCredentialError,
    ProcessingError,
    ProviderConnectionError,
    ProviderError,
    ProviderHTTPError,
)
from hybrid_inference.llm.prompt_builder import PromptBuilder
from hybrid_inference.models.enums import OperationType, ProviderName
from hybrid_inference.models.input_models import ProcessingOptions, ProviderCredential
from hybrid_inference.models.output_models import DraftSet, SummaryResult
from hybrid_inference.monitoring.metrics import provider_latency_seconds, provider_requests_total
from hybrid_inference.validation.validator import ResponseValidator
from .registry import ProviderRegistry, resolve_adapter

logger = structlog.get_logger(__name__)


CREDENTIAL_TEST_MESSAGE = (
    "Test email: Hello, this is a test message to verify the API connection "
    "is working properly."
)


class ProviderClient:
    """
    Async client for the Gemini, OpenAI and Anthropic adapters.

    call_provider() raises typed errors; the remote entry points
    (summarise_remote, draft_remote) classify them into ProcessingError.
    """

    def __init__(
        self,
        registry: Optional[ProviderRegistry] = None,
        timeout: float = 60,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        prompt_builder: Optional[PromptBuilder] = None,
        validator: Optional[ResponseValidator] = None,
        classifier: Optional[ErrorClassifier] = None,
    ):
        """
        Args:
            registry: Provider adapters (default: PROVIDER_REGISTRY)
            timeout: Transport timeout in seconds
            transport: Custom httpx transport (tests)
            prompt_builder: Prompt renderer
            validator: Output validator
            classifier: Error classifier used at the boundary
        """
        self.registry = registry
        self.timeout = timeout
        self._transport = transport
        self.prompt_builder = prompt_builder or PromptBuilder()
        self.validator = validator or ResponseValidator()
        self.classifier = classifier or ErrorClassifier()

    async def call_provider(
        self,
        provider: Union[ProviderName, str],
        api_key: str,
        prompt: str,
        operation: OperationType,
    ) -> str:
        """
        Send prompt to a provider and return the first generated text.

        Args:
            provider: Provider key
            api_key: Raw API key (never logged)
            prompt: Canonical prompt
            operation: summarise or draft (selects model and parameters)

        Returns:
            Generated text, "" when the response has no text at the
            expected path

        Raises:
            UnsupportedProviderError: No adapter for provider/operation
            ProviderHTTPError: Non-2xx status
            ProviderConnectionError: Provider unreachable or timed out
            ProviderError: Response body is not JSON
        """
        adapter = resolve_adapter(provider, self.registry)
        name = adapter.name

        url = adapter.build_url(operation)
        body = adapter.build_request(prompt, operation)
        headers = adapter.build_headers(api_key)
        params = adapter.build_params(api_key)

        logger.info(
            "Calling provider",
            provider=name.value,
            operation=operation.value,
            model=adapter.model_for(operation),
            prompt_length=len(prompt),
        )

        start_time = time.time()
        try:
            async with httpx.AsyncClient(
                timeout=httpx.Timeout(self.timeout),
                transport=self._transport,
            ) as client:
                response = await client.post(url, params=params, headers=headers, json=body)
        except httpx.TransportError as e:
            provider_requests_total.labels(
                provider=name.value, operation=operation.value, outcome="network_error"
            ).inc()
            # str(e) may carry the request URL (and with it a query-param key)
            raise ProviderConnectionError(
                f"{name.display_name} network error: connection failed ({type(e).__name__})",
                provider=name,
                details={"error_type": type(e).__name__},
            ) from e
        finally:
            provider_latency_seconds.labels(provider=name.value).observe(time.time() - start_time)

        if response.is_error:
            try:
                error_body = response.json()
            except ValueError:
                error_body = None
            message = adapter.extract_error_message(error_body) or response.reason_phrase or "Unknown error"

            provider_requests_total.labels(
                provider=name.value, operation=operation.value, outcome="http_error"
            ).inc()
            logger.error(
                "Provider HTTP error",
                provider=name.value,
                status_code=response.status_code,
                provider_message=message,
            )
            raise ProviderHTTPError(name, response.status_code, message)

        try:
            data = response.json()
        except ValueError as e:
            provider_requests_total.labels(
                provider=name.value, operation=operation.value, outcome="empty"
            ).inc()
            raise ProviderError(
                f"Invalid JSON envelope from {name.display_name}",
                provider=name,
                details={"parse_error": str(e)},
            ) from e

        text = adapter.extract_text(data)
        provider_requests_total.labels(
            provider=name.value,
            operation=operation.value,
            outcome="success" if text else "empty",
        ).inc()
        logger.info(
            "Provider call completed",
            provider=name.value,
            status_code=response.status_code,
            response_length=len(text),
        )
        return text

    async def _call_with_credential(
        self,
        credential: ProviderCredential,
        prompt: str,
        operation: OperationType,
    ) -> str:
        if not credential.has_key:
            raise MissingCredentialError(
                f"API key is empty for {credential.provider.display_name}",
                provider=credential.provider,
            )
        raw = await self.call_provider(
            credential.provider,
            credential.api_key.get_secret_value(),
            prompt,
            operation,
        )
        if not raw.strip():
            raise EmptyResponseError(
                f"Empty response from {credential.provider.display_name} API",
                provider=credential.provider,
            )
        return raw

    async def summarise_remote(self, text: str, credential: ProviderCredential) -> SummaryResult:
        """
        Summarise a thread with the user's credential.

        Raises:
            ProcessingError: Any failure, classified with the provider
        """
        try:
            if not text or not text.strip():
                raise EmptyInputError("Thread text is empty")
            prompt = self.prompt_builder.build_remote_summary_prompt(text)
            raw = await self._call_with_credential(credential, prompt, OperationType.SUMMARISE)
            return self.validator.validate_summary(raw)
        except Exception as e:
            raise self.classifier.classify(e, OperationType.SUMMARISE, credential.provider) from e

    async def draft_remote(
        self,
        text: str,
        credential: ProviderCredential,
        options: Optional[ProcessingOptions] = None,
    ) -> DraftSet:
        """
        Generate three drafts with the user's credential.

        Raises:
            ProcessingError: Any failure, classified with the provider
        """
        options = options or ProcessingOptions()
        try:
            if not text or not text.strip():
                raise EmptyInputError("Thread text is empty")
            prompt = self.prompt_builder.build_remote_draft_prompt(text, options)
            raw = await self._call_with_credential(credential, prompt, OperationType.DRAFT)
            return self.validator.validate_drafts(raw)
        except Exception as e:
            raise self.classifier.classify(e, OperationType.DRAFT, credential.provider) from e

    async def test_credential(self, credential: ProviderCredential) -> bool:
        """
        Check a credential with a minimal real summarise call.

        Returns:
            True if the provider produced a valid summary, else False.
            Never raises.
        """
        try:
            await self.summarise_remote(CREDENTIAL_TEST_MESSAGE, credential)
        except ProcessingError as e:
            logger.warning(
                "Credential test failed",
                provider=credential.provider.value,
                code=e.code.value,
            )
            return False

        logger.info("Credential test passed", provider=credential.provider.value)
        return True

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(timeout={self.timeout}s)"
