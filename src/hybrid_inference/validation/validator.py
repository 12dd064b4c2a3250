"""
Response Validator: structural contracts on model output.

Runs two hard-fail stages on every payload, whatever path produced it:
- Stage 1: locate and parse the JSON object (JSONParseError)
- Stage 2: JSON Schema check after whitespace trimming (SchemaValidationError)

Only whitespace is ever corrected silently. Key points beyond five are
dropped (truncation, not an error); every other deviation fails.
"""

from typing import Any

import structlog

from hybrid_inference.models.output_models import (
    MAX_KEY_POINTS,
    Draft,
    DraftSet,
    SummaryResult,
)
from .json_extract import JSONObjectExtractor
from .schema_check import SchemaCheck
from .schemas import DRAFT_VALIDATION_SCHEMA, SUMMARY_VALIDATION_SCHEMA

logger = structlog.get_logger(__name__)


def _strip(value: Any) -> Any:
    return value.strip() if isinstance(value, str) else value


class ResponseValidator:
    """
    Validate raw model output into SummaryResult / DraftSet.

    Accepts either a pre-parsed dict or a raw string that may carry
    surrounding non-JSON text.
    """

    def __init__(self) -> None:
        self._summary_extractor = JSONObjectExtractor(kind="summary")
        self._drafts_extractor = JSONObjectExtractor(kind="drafts")
        self._summary_schema = SchemaCheck(SUMMARY_VALIDATION_SCHEMA, kind="summary")
        self._drafts_schema = SchemaCheck(DRAFT_VALIDATION_SCHEMA, kind="drafts")

    def validate_summary(self, raw: Any) -> SummaryResult:
        """
        Validate a summary payload.

        Args:
            raw: dict or text containing {"tldr": str, "keyPoints": [str, ...]}

        Returns:
            SummaryResult with at most 5 key points, original order kept

        Raises:
            JSONParseError: No JSON object could be recovered
            SchemaValidationError: tldr or keyPoints missing or mistyped
        """
        parsed = self._summary_extractor.extract(raw)

        normalised = dict(parsed)
        normalised["tldr"] = _strip(parsed.get("tldr"))
        key_points = parsed.get("keyPoints")
        if isinstance(key_points, list):
            normalised["keyPoints"] = [_strip(point) for point in key_points]

        self._summary_schema.validate(normalised)

        if len(normalised["keyPoints"]) > MAX_KEY_POINTS:
            logger.debug(
                "Truncating key points",
                received=len(normalised["keyPoints"]),
                kept=MAX_KEY_POINTS,
            )

        return SummaryResult(
            tldr=normalised["tldr"],
            key_points=normalised["keyPoints"][:MAX_KEY_POINTS],
        )

    def validate_drafts(self, raw: Any) -> DraftSet:
        """
        Validate a drafts payload.

        Args:
            raw: dict or text containing {"drafts": [{"subject", "body"} x3]}

        Returns:
            DraftSet of exactly three trimmed drafts, order preserved

        Raises:
            JSONParseError: No JSON object could be recovered
            SchemaValidationError: Wrong count, missing/empty/mistyped or
                over-long subject/body
        """
        parsed = self._drafts_extractor.extract(raw)

        normalised = dict(parsed)
        drafts = parsed.get("drafts")
        if isinstance(drafts, list):
            normalised["drafts"] = [
                {key: _strip(value) for key, value in draft.items()}
                if isinstance(draft, dict) else draft
                for draft in drafts
            ]

        self._drafts_schema.validate(normalised)

        return DraftSet(
            drafts=[
                Draft(subject=draft["subject"], body=draft["body"])
                for draft in normalised["drafts"]
            ]
        )
