"""
Validation-specific exceptions for model output checks.

These exceptions are caught by the execution adapters and handed to the
ErrorClassifier, which maps them to INVALID_JSON. They are never swallowed:
malformed output must not reach the caller as a result.
"""

from typing import Any


class ValidationError(Exception):
    """
    Base exception for all output validation errors.
    """

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        """
        Initialize validation error.

        Args:
            message: Human-readable error description
            details: Structured error data for logging/metrics
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


class JSONParseError(ValidationError):
    """
    Model output could not be parsed as a JSON object.

    Raised when no balanced object literal is found in the text, or the
    literal found is not valid JSON.
    """

    def __init__(self, message: str, raw_content: str | None = None, parse_error: str | None = None):
        """
        Initialize JSON parse error.

        Args:
            message: Error description
            raw_content: First 500 chars of malformed content (for debugging)
            parse_error: Original json.JSONDecodeError message
        """
        details = {}
        if raw_content:
            details["content_snippet"] = raw_content[:500]
        if parse_error:
            details["parse_error"] = parse_error

        super().__init__(message, details)


class SchemaValidationError(ValidationError):
    """
    Parsed output does not match the expected structure.

    Raised for missing or mistyped fields, a draft count other than three,
    empty or over-long draft fields.
    """

    def __init__(
        self,
        message: str,
        validation_errors: list[str] | None = None,
        schema_name: str | None = None
    ):
        """
        Initialize schema validation error.

        Args:
            message: Error description
            validation_errors: List of jsonschema validation error messages
            schema_name: Name of the schema the payload was checked against
        """
        details = {}
        if validation_errors:
            details["validation_errors"] = validation_errors
        if schema_name:
            details["schema_name"] = schema_name

        super().__init__(message, details)
