"""
Hybrid processor: the caller-facing routing façade.

For each request:
1. Admission decides local / cloud / reject
2. Local requests run on the LocalExecutor
3. Cloud requests use the first enabled custom credential, else the
   shared fallback endpoint
4. Results come back wrapped in an outcome that records the path taken

There is no automatic retry. A local failure with can_fallback=True is
reported as-is; the caller may then invoke process_remote() explicitly.
"""

from typing import Optional, Sequence, Union

import httpx
import structlog

from hybrid_inference.admission.controller import AdmissionController, TokenCeilings
from hybrid_inference.capability.ollama import OllamaCapabilityProvider
from hybrid_inference.capability.prober import CapabilityProber
from hybrid_inference.config import Settings, get_settings
from hybrid_inference.errors.classifier import ErrorClassifier
from hybrid_inference.errors.exceptions import (
    ContentTooLargeError,
    EmptyInputError,
    LocalModelUnavailableError,
    ProcessingError,
    UnsupportedProviderError,
)
from hybrid_inference.llm.prompt_builder import PromptBuilder
from hybrid_inference.local.engine import LocalEngineClient
from hybrid_inference.local.executor import LocalExecutor
from hybrid_inference.models.decision import Decision
from hybrid_inference.models.enums import (
    CapabilityState,
    ExecutionPath,
    OperationType,
    ProcessingMode,
)
from hybrid_inference.models.input_models import (
    ImageInput,
    ProcessingOptions,
    ProcessingRequest,
    ProviderCredential,
)
from hybrid_inference.models.output_models import DraftOutcome, ImageAnswer, SummaryOutcome
from hybrid_inference.providers.client import ProviderClient
from hybrid_inference.providers.fallback import SharedFallbackClient
from hybrid_inference.providers.registry import build_registry
from hybrid_inference.validation.validator import ResponseValidator

logger = structlog.get_logger(__name__)


Outcome = Union[SummaryOutcome, DraftOutcome, ImageAnswer]

REMOTE_RETRY_REASON = "Using secure cloud processing after local processing failed"


def select_credential(credentials: Sequence[ProviderCredential]) -> Optional[ProviderCredential]:
    """First enabled credential with a non-empty key, in caller order."""
    for credential in credentials:
        if credential.enabled and credential.has_key:
            return credential
    return None


class HybridProcessor:
    """
    Route requests between the on-device engine and the cloud.

    All collaborators are injected; use from_settings() for the default
    wiring against a local Ollama server and the public provider APIs.
    """

    def __init__(
        self,
        admission: AdmissionController,
        local_executor: LocalExecutor,
        provider_client: ProviderClient,
        fallback_client: SharedFallbackClient,
        classifier: Optional[ErrorClassifier] = None,
        default_options: Optional[ProcessingOptions] = None,
    ):
        self.admission = admission
        self.local_executor = local_executor
        self.provider_client = provider_client
        self.fallback_client = fallback_client
        self.classifier = classifier or ErrorClassifier()
        # Used for any call that passes no options of its own
        self.default_options = default_options or ProcessingOptions()

    @classmethod
    def from_settings(
        cls,
        settings: Optional[Settings] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> "HybridProcessor":
        """
        Build the default wiring.

        Args:
            settings: Application settings (default: process settings)
            transport: httpx transport shared by every outbound client (tests)
        """
        settings = settings or get_settings()
        prompt_builder = PromptBuilder()
        validator = ResponseValidator()
        classifier = ErrorClassifier()

        engine = LocalEngineClient(
            base_url=settings.LOCAL_ENGINE_URL,
            timeout=settings.LOCAL_ENGINE_TIMEOUT,
            probe_timeout=settings.LOCAL_PROBE_TIMEOUT,
            transport=transport,
        )
        prober = CapabilityProber(
            OllamaCapabilityProvider(
                engine,
                text_model=settings.LOCAL_TEXT_MODEL,
                vision_model=settings.LOCAL_VISION_MODEL,
            )
        )

        return cls(
            admission=AdmissionController(prober, TokenCeilings.from_settings(settings)),
            local_executor=LocalExecutor(
                engine,
                prompt_builder=prompt_builder,
                validator=validator,
                classifier=classifier,
                text_model=settings.LOCAL_TEXT_MODEL,
                vision_model=settings.LOCAL_VISION_MODEL,
            ),
            provider_client=ProviderClient(
                registry=build_registry(settings),
                timeout=settings.PROVIDER_TIMEOUT,
                transport=transport,
                prompt_builder=prompt_builder,
                validator=validator,
                classifier=classifier,
            ),
            fallback_client=SharedFallbackClient(
                settings.FALLBACK_ENDPOINT_URL,
                timeout=settings.FALLBACK_TIMEOUT,
                transport=transport,
                validator=validator,
                classifier=classifier,
            ),
            classifier=classifier,
            default_options=ProcessingOptions(max_answer_length=settings.MAX_IMAGE_ANSWER_LENGTH),
        )

    # === Admission ===

    async def _admit(
        self,
        mode: ProcessingMode,
        text: str,
        operation: OperationType,
    ) -> Decision:
        """
        Decide the path; rejected decisions surface immediately.

        Raises:
            ProcessingError: Blank input (UNKNOWN), or a rejection with
                UNAVAILABLE / TOKEN_LIMIT
        """
        if not text or not text.strip():
            raise self.classifier.classify(EmptyInputError("Input text is empty"), operation)

        decision = await self.admission.decide(mode, text, operation)
        if not decision.rejected:
            return decision

        if decision.capability != CapabilityState.READY:
            error = LocalModelUnavailableError(decision.reason)
        else:
            error = ContentTooLargeError(
                decision.reason,
                details={"estimated_tokens": decision.estimated_tokens},
            )
        raise self.classifier.classify(error, operation)

    # === Summarise ===

    async def summarise(
        self,
        text: str,
        mode: ProcessingMode = ProcessingMode.HYBRID,
        credentials: Sequence[ProviderCredential] = (),
        options: Optional[ProcessingOptions] = None,
    ) -> SummaryOutcome:
        """
        Summarise a thread on the path chosen by admission.

        Raises:
            ProcessingError: Any failure, classified
        """
        options = options or self.default_options
        decision = await self._admit(mode, text, OperationType.SUMMARISE)

        if decision.use_local:
            summary = await self.local_executor.summarise(text, options)
            return SummaryOutcome(
                summary=summary,
                path=ExecutionPath.LOCAL,
                reason=decision.reason,
                can_fallback=decision.can_fallback,
            )
        return await self._summarise_remote(text, credentials, options, decision.reason)

    async def _summarise_remote(
        self,
        text: str,
        credentials: Sequence[ProviderCredential],
        options: ProcessingOptions,
        reason: str,
    ) -> SummaryOutcome:
        credential = select_credential(credentials)
        if credential is not None:
            summary = await self.provider_client.summarise_remote(text, credential)
            return SummaryOutcome(
                summary=summary,
                path=ExecutionPath.CUSTOM_KEY,
                provider=credential.provider,
                reason=reason,
            )

        summary = await self.fallback_client.summarise(text, options)
        return SummaryOutcome(summary=summary, path=ExecutionPath.SHARED_FALLBACK, reason=reason)

    async def summarise_each(
        self,
        texts: Sequence[str],
        mode: ProcessingMode = ProcessingMode.HYBRID,
        credentials: Sequence[ProviderCredential] = (),
        options: Optional[ProcessingOptions] = None,
    ) -> list[Union[SummaryOutcome, ProcessingError]]:
        """
        Summarise several items strictly one at a time.

        Items are never run concurrently so a batch cannot saturate the
        local engine. A failed item yields its ProcessingError in place
        and the batch continues.
        """
        results: list[Union[SummaryOutcome, ProcessingError]] = []
        for index, text in enumerate(texts):
            try:
                results.append(await self.summarise(text, mode, credentials, options))
            except ProcessingError as e:
                logger.warning("Batch item failed", index=index, code=e.code.value)
                results.append(e)
        return results

    # === Drafts ===

    async def generate_drafts(
        self,
        text: str,
        mode: ProcessingMode = ProcessingMode.HYBRID,
        credentials: Sequence[ProviderCredential] = (),
        options: Optional[ProcessingOptions] = None,
    ) -> DraftOutcome:
        """
        Generate three reply drafts on the path chosen by admission.

        Raises:
            ProcessingError: Any failure, classified
        """
        options = options or self.default_options
        decision = await self._admit(mode, text, OperationType.DRAFT)

        if decision.use_local:
            draft_set = await self.local_executor.generate_drafts(text, options)
            return DraftOutcome(
                draft_set=draft_set,
                path=ExecutionPath.LOCAL,
                reason=decision.reason,
                can_fallback=decision.can_fallback,
            )
        return await self._drafts_remote(text, credentials, options, decision.reason)

    async def _drafts_remote(
        self,
        text: str,
        credentials: Sequence[ProviderCredential],
        options: ProcessingOptions,
        reason: str,
    ) -> DraftOutcome:
        credential = select_credential(credentials)
        if credential is not None:
            draft_set = await self.provider_client.draft_remote(text, credential, options)
            return DraftOutcome(
                draft_set=draft_set,
                path=ExecutionPath.CUSTOM_KEY,
                provider=credential.provider,
                reason=reason,
            )

        draft_set = await self.fallback_client.generate_drafts(text, options)
        return DraftOutcome(draft_set=draft_set, path=ExecutionPath.SHARED_FALLBACK, reason=reason)

    # === Images ===

    async def ask_image_question(
        self,
        image: ImageInput,
        question: str,
        mode: ProcessingMode = ProcessingMode.HYBRID,
        options: Optional[ProcessingOptions] = None,
    ) -> ImageAnswer:
        """
        Answer a question about an image on the local vision model.

        Images never leave the device: when admission sends the request
        to the cloud it fails with UNSUPPORTED_PROVIDER.
        """
        options = options or self.default_options
        decision = await self._admit(mode, question, OperationType.MULTIMODAL)

        if not decision.use_local:
            raise self._no_remote_image_path()

        answer, summarised = await self.local_executor.ask_image_question_with_summary(
            image,
            question,
            max_length=options.max_answer_length,
            options=options,
        )
        return ImageAnswer(
            answer=answer,
            summarised=summarised,
            path=ExecutionPath.LOCAL,
            reason=decision.reason,
            can_fallback=decision.can_fallback,
        )

    def _no_remote_image_path(self) -> ProcessingError:
        return self.classifier.classify(
            UnsupportedProviderError("Unsupported provider operation: images are processed on-device only"),
            OperationType.MULTIMODAL,
        )

    # === Generic entry points ===

    async def process(
        self,
        request: ProcessingRequest,
        mode: ProcessingMode = ProcessingMode.HYBRID,
        credentials: Sequence[ProviderCredential] = (),
    ) -> Outcome:
        """Dispatch a ProcessingRequest by operation type."""
        operation = request.operation_type
        if operation == OperationType.SUMMARISE:
            return await self.summarise(request.text, mode, credentials, request.options)
        if operation == OperationType.DRAFT:
            return await self.generate_drafts(request.text, mode, credentials, request.options)
        return await self.ask_image_question(request.image, request.text, mode, request.options)

    async def process_remote(
        self,
        request: ProcessingRequest,
        credentials: Sequence[ProviderCredential] = (),
        reason: str = REMOTE_RETRY_REASON,
    ) -> Outcome:
        """
        Run a request on the cloud path, skipping admission.

        Intended for a caller retrying after a local failure whose
        decision allowed fallback.

        Raises:
            ProcessingError: Any failure, classified
        """
        operation = request.operation_type
        if request.is_blank:
            raise self.classifier.classify(EmptyInputError("Input text is empty"), operation)

        logger.info("Explicit cloud processing requested", operation=operation.value)
        if operation == OperationType.SUMMARISE:
            return await self._summarise_remote(request.text, credentials, request.options, reason)
        if operation == OperationType.DRAFT:
            return await self._drafts_remote(request.text, credentials, request.options, reason)
        raise self._no_remote_image_path()

    async def test_credential(self, credential: ProviderCredential) -> bool:
        """True if the credential can summarise a trivial message."""
        return await self.provider_client.test_credential(credential)
