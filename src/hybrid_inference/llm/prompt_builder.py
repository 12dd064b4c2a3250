"""
Prompt builder for local and remote inference.

Responsible for:
- Loading and rendering Jinja2 templates shipped with the package
- Tone instructions and user guidance for reply drafts
- Summary instructions (type, length, format) for local sessions
- Canonical prompts for the cloud providers
"""

from pathlib import Path
from typing import Optional

import structlog
from jinja2 import Environment, FileSystemLoader, StrictUndefined

from hybrid_inference.models.enums import DraftTone, SummaryFormat, SummaryLength, SummaryType
from hybrid_inference.models.input_models import ImageInput, ProcessingOptions
from hybrid_inference.models.output_models import (
    MAX_BODY_LENGTH,
    MAX_KEY_POINTS,
    MAX_SUBJECT_LENGTH,
)


logger = structlog.get_logger(__name__)


DEFAULT_TEMPLATES_DIR = Path(__file__).resolve().parent.parent / "prompts"

TONE_INSTRUCTIONS: dict[DraftTone, str] = {
    DraftTone.NEUTRAL: "professional and balanced, avoiding overly formal or casual language",
    DraftTone.FRIENDLY: "warm and approachable while maintaining professionalism",
    DraftTone.ASSERTIVE: "confident and direct while remaining respectful",
    DraftTone.FORMAL: "highly professional and structured with formal language conventions",
}

LENGTH_INSTRUCTIONS: dict[SummaryLength, str] = {
    SummaryLength.SHORT: "keep it to one or two sentences",
    SummaryLength.MEDIUM: "keep it to a short paragraph",
    SummaryLength.LONG: "cover every topic discussed in a few paragraphs",
}


class PromptBuilder:
    """
    Build prompts from ProcessingRequest data.

    Templates:
    - draft_instructions.j2: system prompt for drafts (tone + guidance + JSON shape)
    - draft_thread.j2: the thread being replied to
    - summary_remote.j2: single-shot summary prompt for cloud providers
    - summary_system.j2: local summariser session instructions
    - image_question.j2: question about an attached image
    """

    def __init__(self, templates_dir: Optional[Path] = None):
        """
        Initialize prompt builder.

        Args:
            templates_dir: Directory containing prompt templates
                (default: templates shipped with the package)
        """
        self.templates_dir = Path(templates_dir or DEFAULT_TEMPLATES_DIR)

        self.jinja_env = Environment(
            loader=FileSystemLoader(str(self.templates_dir)),
            trim_blocks=True,
            lstrip_blocks=True,
            keep_trailing_newline=False,
            undefined=StrictUndefined,
            autoescape=False  # We're generating prompts, not HTML
        )

        try:
            self.draft_instructions_template = self.jinja_env.get_template("draft_instructions.j2")
            self.draft_thread_template = self.jinja_env.get_template("draft_thread.j2")
            self.summary_remote_template = self.jinja_env.get_template("summary_remote.j2")
            self.summary_system_template = self.jinja_env.get_template("summary_system.j2")
            self.image_question_template = self.jinja_env.get_template("image_question.j2")
            logger.info("Loaded prompt templates", templates_dir=str(self.templates_dir))
        except Exception as e:
            logger.error("Failed to load prompt templates", error=str(e))
            raise

    # === Drafts ===

    def build_draft_instructions(self, tone: DraftTone, guidance: str = "") -> str:
        """
        Render the draft system instructions.

        Args:
            tone: Requested tone
            guidance: Free-form user guidance (omitted when blank)
        """
        return self.draft_instructions_template.render(
            tone_instruction=TONE_INSTRUCTIONS[tone],
            guidance=guidance.strip(),
            max_subject=MAX_SUBJECT_LENGTH,
            max_body=MAX_BODY_LENGTH,
        ).strip()

    def build_draft_thread(self, text: str) -> str:
        return self.draft_thread_template.render(text=text).strip()

    def build_remote_draft_prompt(self, text: str, options: ProcessingOptions) -> str:
        """Single prompt for providers: instructions followed by the thread."""
        return (
            self.build_draft_instructions(options.tone, options.guidance)
            + "\n\n"
            + self.build_draft_thread(text)
        )

    # === Summaries ===

    def build_remote_summary_prompt(self, text: str) -> str:
        return self.summary_remote_template.render(
            text=text,
            max_key_points=MAX_KEY_POINTS,
        ).strip()

    def build_summary_instructions(
        self,
        summary_type: SummaryType,
        length: SummaryLength = SummaryLength.SHORT,
        summary_format: SummaryFormat = SummaryFormat.PLAIN_TEXT,
        context: str = "email thread",
    ) -> str:
        """
        Render local summariser instructions.

        Args:
            summary_type: tl;dr, key-points, teaser or headline
            length: Desired summary length
            summary_format: plain-text or markdown
            context: What is being summarised
        """
        return self.summary_system_template.render(
            summary_type=summary_type.value,
            length_instruction=LENGTH_INSTRUCTIONS[length],
            summary_format=summary_format.value,
            context=context,
            max_key_points=MAX_KEY_POINTS,
        ).strip()

    # === Images ===

    def build_image_question(self, image: ImageInput, question: str) -> str:
        return self.image_question_template.render(
            mime_type=image.mime_type,
            size_kb=round(image.size / 1024),
            question=question.strip(),
        ).strip()
