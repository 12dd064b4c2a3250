"""
Local Execution Adapter.

Runs admitted requests on the on-device engine:
1. Acquire a scoped session configured for the operation
2. Prompt (with the structured-output constraint for drafts)
3. Validate the output while the session is still held
4. Release the session on every exit path

Any failure is classified at this boundary; callers only ever see
ProcessingError.
"""

import time
from typing import Awaitable, Callable, Optional, TypeVar, Union

import structlog

from hybrid_inference.errors.classifier import ErrorClassifier
from hybrid_inference.errors.exceptions import (
    EmptyInputError,
    InvalidInputError,
    LocalGenerationError,
    ProcessingError,
)
from hybrid_inference.llm.prompt_builder import PromptBuilder
from hybrid_inference.llm.text_utils import parse_key_points
from hybrid_inference.models.enums import OperationType, SummaryType
from hybrid_inference.models.input_models import (
    SUPPORTED_IMAGE_TYPES,
    ImageInput,
    ProcessingOptions,
    ProcessingRequest,
)
from hybrid_inference.models.llm_models import SessionOptions
from hybrid_inference.models.output_models import DraftSet, SummaryResult
from hybrid_inference.monitoring.metrics import local_latency_seconds
from hybrid_inference.validation.schemas import DRAFT_RESPONSE_SCHEMA
from hybrid_inference.validation.validator import ResponseValidator
from .engine import LocalEngineClient, LocalSession

logger = structlog.get_logger(__name__)

T = TypeVar("T")

DRAFT_TEMPERATURE = 0.7
DRAFT_MAX_TOKENS = 2048
SUMMARY_TEMPERATURE = 0.3
SUMMARY_MAX_TOKENS = 1024
IMAGE_TEMPERATURE = 0.2
IMAGE_MAX_TOKENS = 1024


class LocalExecutor:
    """
    Execute summarise, draft and multimodal requests on the local engine.

    Only invoked for requests the AdmissionController admitted locally.
    Each public method owns exactly one session (or one per sub-operation
    for the standalone tldr()/key_points() helpers).
    """

    def __init__(
        self,
        engine: LocalEngineClient,
        prompt_builder: Optional[PromptBuilder] = None,
        validator: Optional[ResponseValidator] = None,
        classifier: Optional[ErrorClassifier] = None,
        text_model: str = "qwen2.5:3b",
        vision_model: str = "llava:7b",
    ):
        """
        Args:
            engine: Local engine client providing sessions
            prompt_builder: Prompt renderer (default templates)
            validator: Output validator
            classifier: Error classifier used at the boundary
            text_model: Model for summarise and draft
            vision_model: Model for image questions
        """
        self.engine = engine
        self.prompt_builder = prompt_builder or PromptBuilder()
        self.validator = validator or ResponseValidator()
        self.classifier = classifier or ErrorClassifier()
        self.text_model = text_model
        self.vision_model = vision_model

    async def _guarded(
        self,
        operation: OperationType,
        work: Callable[[], Awaitable[T]],
    ) -> T:
        """Run work, record latency, classify any failure."""
        start_time = time.time()
        success = False
        try:
            result = await work()
            success = True
            return result
        except Exception as e:
            raise self.classifier.classify(e, operation) from e
        finally:
            local_latency_seconds.labels(
                operation=operation.value,
                success=str(success).lower(),
            ).observe(time.time() - start_time)

    # === Dispatch ===

    async def run_local(self, request: ProcessingRequest) -> Union[DraftSet, SummaryResult, str]:
        """
        Run an admitted request locally.

        Returns:
            DraftSet for draft, SummaryResult for summarise, answer text
            for multimodal

        Raises:
            ProcessingError: Any failure, already classified
        """
        operation = request.operation_type
        if operation == OperationType.DRAFT:
            return await self.generate_drafts(request.text, request.options)
        if operation == OperationType.SUMMARISE:
            return await self.summarise(request.text, request.options)

        answer, _ = await self.ask_image_question_with_summary(
            request.image,
            request.text,
            max_length=request.options.max_answer_length,
            options=request.options,
        )
        return answer

    # === Drafts ===

    async def generate_drafts(
        self,
        text: str,
        options: Optional[ProcessingOptions] = None,
    ) -> DraftSet:
        """
        Generate three reply drafts for a thread.

        The prompt carries DRAFT_RESPONSE_SCHEMA so the engine emits
        directly parseable JSON; the validator still checks it.
        """
        options = options or ProcessingOptions()

        async def work() -> DraftSet:
            _require_text(text, "Thread text is empty")
            session_options = SessionOptions(
                model=self.text_model,
                system_prompt=self.prompt_builder.build_draft_instructions(
                    options.tone, options.guidance
                ),
                temperature=DRAFT_TEMPERATURE,
                max_tokens=DRAFT_MAX_TOKENS,
            )
            async with self.engine.session(session_options) as session:
                response = await session.prompt(
                    self.prompt_builder.build_draft_thread(text),
                    response_schema=DRAFT_RESPONSE_SCHEMA,
                )
                draft_set = self.validator.validate_drafts(response.content)

            logger.info(
                "Generated drafts locally",
                model=response.model_version,
                tone=options.tone.value,
                latency_ms=response.latency_ms,
            )
            return draft_set

        return await self._guarded(OperationType.DRAFT, work)

    # === Summaries ===

    def _summary_session_options(self) -> SessionOptions:
        return SessionOptions(
            model=self.text_model,
            temperature=SUMMARY_TEMPERATURE,
            max_tokens=SUMMARY_MAX_TOKENS,
        )

    async def _summarise_as(
        self,
        session: LocalSession,
        text: str,
        summary_type: SummaryType,
        options: ProcessingOptions,
    ) -> str:
        instructions = self.prompt_builder.build_summary_instructions(
            summary_type,
            length=options.summary_length,
            summary_format=options.summary_format,
        )
        response = await session.prompt(text, system_prompt=instructions)
        return response.content.strip()

    async def summarise(
        self,
        text: str,
        options: Optional[ProcessingOptions] = None,
    ) -> SummaryResult:
        """
        Produce a TL;DR and key points within one session.

        Key points come back as bulleted text; they are split into lines
        and the assembled object goes through the validator.
        """
        options = options or ProcessingOptions()

        async def work() -> SummaryResult:
            _require_text(text, "Thread text is empty")
            async with self.engine.session(self._summary_session_options()) as session:
                tldr = await self._summarise_as(session, text, SummaryType.TLDR, options)
                key_points_text = await self._summarise_as(
                    session, text, SummaryType.KEY_POINTS, options
                )
                summary = self.validator.validate_summary(
                    {"tldr": tldr, "keyPoints": parse_key_points(key_points_text)}
                )

            logger.info(
                "Summarised locally",
                tldr_length=len(summary.tldr),
                key_points=len(summary.key_points),
            )
            return summary

        return await self._guarded(OperationType.SUMMARISE, work)

    async def tldr(self, text: str, options: Optional[ProcessingOptions] = None) -> str:
        """TL;DR only, in its own session."""
        options = options or ProcessingOptions()

        async def work() -> str:
            _require_text(text, "Text to summarise is empty")
            async with self.engine.session(self._summary_session_options()) as session:
                result = await self._summarise_as(session, text, SummaryType.TLDR, options)
            if not result:
                raise LocalGenerationError("Empty summary from local engine")
            return result

        return await self._guarded(OperationType.SUMMARISE, work)

    async def key_points(
        self,
        text: str,
        options: Optional[ProcessingOptions] = None,
    ) -> list[str]:
        """Key points only, in its own session."""
        options = options or ProcessingOptions()

        async def work() -> list[str]:
            _require_text(text, "Text to summarise is empty")
            async with self.engine.session(self._summary_session_options()) as session:
                result = await self._summarise_as(
                    session, text, SummaryType.KEY_POINTS, options
                )
            return parse_key_points(result)

        return await self._guarded(OperationType.SUMMARISE, work)

    # === Images ===

    async def ask_image_question(
        self,
        image: Optional[ImageInput],
        question: str,
        options: Optional[ProcessingOptions] = None,
    ) -> str:
        """
        Answer a question about an image with the vision model.

        Raises:
            ProcessingError: Invalid image or question, engine failure,
                or an empty answer
        """
        async def work() -> str:
            _require_image(image)
            _require_text(question, "Question is empty")

            session_options = SessionOptions(
                model=self.vision_model,
                temperature=IMAGE_TEMPERATURE,
                max_tokens=IMAGE_MAX_TOKENS,
            )
            async with self.engine.session(session_options) as session:
                response = await session.prompt(
                    self.prompt_builder.build_image_question(image, question),
                    images=[image.data],
                )

            answer = response.content.strip()
            if not answer:
                raise LocalGenerationError("Empty answer from local engine")

            logger.info(
                "Answered image question locally",
                mime_type=image.mime_type,
                image_bytes=image.size,
                answer_length=len(answer),
            )
            return answer

        return await self._guarded(OperationType.MULTIMODAL, work)

    async def ask_image_question_with_summary(
        self,
        image: Optional[ImageInput],
        question: str,
        max_length: int = 500,
        options: Optional[ProcessingOptions] = None,
    ) -> tuple[str, bool]:
        """
        Answer an image question, shortening long answers with a TL;DR.

        Returns:
            (answer, summarised). When summarisation fails the original
            answer is returned with summarised=False.
        """
        answer = await self.ask_image_question(image, question, options)
        if len(answer) <= max_length:
            return answer, False

        try:
            return await self.tldr(answer, options), True
        except ProcessingError as e:
            logger.warning(
                "Summarising image answer failed, returning full answer",
                answer_length=len(answer),
                error=str(e),
            )
            return answer, False

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}("
            f"text_model={self.text_model}, "
            f"vision_model={self.vision_model})"
        )


def _require_text(text: str, message: str) -> None:
    if not text or not text.strip():
        raise EmptyInputError(message)


def _require_image(image: Optional[ImageInput]) -> None:
    if image is None or not image.data:
        raise InvalidInputError("Image is empty", hint="Please attach an image and try again")
    if not image.is_supported:
        raise InvalidInputError(
            f"Unsupported image format: {image.mime_type}",
            hint="Please use a PNG, JPEG or WebP image",
            details={"supported": list(SUPPORTED_IMAGE_TYPES)},
        )
