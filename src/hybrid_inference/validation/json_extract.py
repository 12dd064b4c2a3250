"""
Stage 1: locate and parse the JSON object in model output.

Cloud models often wrap the requested JSON in prose or code fences. This
stage finds the first balanced object literal in the text and parses it.
Hard-fail: anything that is not a JSON object raises JSONParseError.
"""

import json
from typing import Any

import structlog

from hybrid_inference.monitoring.metrics import validation_failures_total
from .exceptions import JSONParseError

logger = structlog.get_logger(__name__)


def find_first_object(text: str) -> str | None:
    """
    Return the first balanced `{...}` substring of text, or None.

    Braces inside JSON string literals (including escaped quotes) do not
    count towards nesting.

    Examples:
        >>> find_first_object('Sure! {"a": {"b": 1}} Hope this helps')
        '{"a": {"b": 1}}'
        >>> find_first_object('{"text": "a } brace"}')
        '{"text": "a } brace"}'
    """
    start = text.find("{")
    while start != -1:
        depth = 0
        in_string = False
        escaped = False
        for index in range(start, len(text)):
            char = text[index]
            if in_string:
                if escaped:
                    escaped = False
                elif char == "\\":
                    escaped = True
                elif char == '"':
                    in_string = False
                continue
            if char == '"':
                in_string = True
            elif char == "{":
                depth += 1
            elif char == "}":
                depth -= 1
                if depth == 0:
                    return text[start:index + 1]
        # Unbalanced from this opening brace; try the next one
        start = text.find("{", start + 1)
    return None


class JSONObjectExtractor:
    """
    Stage 1 validator: raw text (or pre-parsed dict) -> dict.

    Raises JSONParseError on anything that is not a JSON object.
    """

    def __init__(self, kind: str):
        """
        Args:
            kind: Payload kind used as metrics label ("summary", "drafts")
        """
        self.kind = kind

    def _fail(self, error_type: str, message: str, content: str, parse_error: str) -> JSONParseError:
        validation_failures_total.labels(kind=self.kind, error_type=error_type).inc()
        return JSONParseError(message, raw_content=content, parse_error=parse_error)

    def extract(self, raw: Any) -> dict:
        """
        Return the JSON object contained in raw.

        Args:
            raw: A dict (returned as-is) or the model's raw text

        Returns:
            Parsed dict

        Raises:
            JSONParseError: If no JSON object can be recovered
        """
        if isinstance(raw, dict):
            return raw

        if not isinstance(raw, str):
            raise self._fail(
                "not_json_object",
                f"Model output is not text or an object (got {type(raw).__name__})",
                repr(raw),
                f"Expected str or dict, got {type(raw).__name__}",
            )

        if not raw.strip():
            raise self._fail(
                "empty_content",
                "Model output is empty or whitespace-only",
                raw,
                "Empty content",
            )

        candidate = find_first_object(raw)
        if candidate is None:
            raise self._fail(
                "no_json_object",
                "Invalid JSON response: no object literal found in model output",
                raw,
                "No balanced object literal",
            )

        try:
            parsed = json.loads(candidate)
        except json.JSONDecodeError as e:
            raise self._fail(
                "json_decode_error",
                f"Invalid JSON response: {e.msg}",
                raw,
                f"{e.msg} at line {e.lineno} col {e.colno}",
            ) from e

        logger.debug("Extracted JSON object", kind=self.kind, keys=len(parsed))
        return parsed
