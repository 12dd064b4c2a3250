"""
Unit tests for PromptBuilder.
"""

import pytest

from hybrid_inference.llm.prompt_builder import TONE_INSTRUCTIONS, PromptBuilder
from hybrid_inference.models.enums import DraftTone, SummaryFormat, SummaryLength, SummaryType
from hybrid_inference.models.input_models import ImageInput, ProcessingOptions


class TestPromptBuilder:
    """Test suite for prompt rendering."""

    def setup_method(self):
        self.builder = PromptBuilder()

    @pytest.mark.parametrize("tone", list(DraftTone))
    def test_draft_instructions_carry_tone(self, tone):
        prompt = self.builder.build_draft_instructions(tone)

        assert TONE_INSTRUCTIONS[tone] in prompt
        assert "exactly 3 reply drafts" in prompt
        assert '"drafts"' in prompt

    def test_draft_instructions_state_limits(self):
        prompt = self.builder.build_draft_instructions(DraftTone.NEUTRAL)

        assert "max 120 characters" in prompt
        assert "max 2000 characters" in prompt

    def test_guidance_included_when_present(self):
        prompt = self.builder.build_draft_instructions(
            DraftTone.FRIENDLY, "  Mention the Friday deadline  "
        )

        assert "Additional user guidance: Mention the Friday deadline" in prompt

    def test_guidance_omitted_when_blank(self):
        prompt = self.builder.build_draft_instructions(DraftTone.FRIENDLY, "   ")

        assert "Additional user guidance" not in prompt

    def test_draft_thread(self):
        prompt = self.builder.build_draft_thread("Hi, can we meet?")

        assert prompt == "Email thread to reply to:\n\nHi, can we meet?"

    def test_remote_draft_prompt_combines_instructions_and_thread(self):
        options = ProcessingOptions(tone=DraftTone.FORMAL, guidance="Decline politely")

        prompt = self.builder.build_remote_draft_prompt("Invitation to the gala", options)

        assert TONE_INSTRUCTIONS[DraftTone.FORMAL] in prompt
        assert "Decline politely" in prompt
        assert prompt.endswith("Email thread to reply to:\n\nInvitation to the gala")

    def test_remote_summary_prompt(self):
        prompt = self.builder.build_remote_summary_prompt("Thread body")

        assert "TL;DR" in prompt
        assert "maximum 5 points" in prompt
        assert "Thread body" in prompt
        assert '"keyPoints"' in prompt

    def test_summary_instructions_per_type(self):
        tldr = self.builder.build_summary_instructions(SummaryType.TLDR)
        points = self.builder.build_summary_instructions(SummaryType.KEY_POINTS)
        headline = self.builder.build_summary_instructions(SummaryType.HEADLINE)

        assert "TL;DR" in tldr
        assert "bullet points" in points
        assert "at most 5 points" in points
        assert "headline" in headline

    def test_summary_instructions_format_and_length(self):
        prompt = self.builder.build_summary_instructions(
            SummaryType.TEASER,
            length=SummaryLength.LONG,
            summary_format=SummaryFormat.MARKDOWN,
        )

        assert "Markdown" in prompt
        assert "few paragraphs" in prompt
        assert "without Markdown" not in prompt

    def test_image_question(self):
        image = ImageInput(data=b"\x89PNG" + b"0" * 2044, mime_type="image/png")

        prompt = self.builder.build_image_question(image, "  What is on the whiteboard? ")

        assert "image/png, 2KB" in prompt
        assert '"What is on the whiteboard?"' in prompt

    def test_missing_templates_dir_raises(self, tmp_path):
        with pytest.raises(Exception):
            PromptBuilder(templates_dir=tmp_path)
