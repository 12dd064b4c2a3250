"""
Output validation (2 hard-fail stages).

- validator.py: ResponseValidator (validate_summary / validate_drafts)
- json_extract.py: locate first balanced object literal and parse it
- schema_check.py: JSON Schema validation
- schemas.py: summary/drafts schemas, local structured-output constraint
"""

from .exceptions import (
    JSONParseError,
    SchemaValidationError,
    ValidationError,
)
from .json_extract import find_first_object
from .schemas import DRAFT_RESPONSE_SCHEMA
from .validator import ResponseValidator

__all__ = [
    "ResponseValidator",
    "DRAFT_RESPONSE_SCHEMA",
    "find_first_object",
    # Exceptions (for the error classifier)
    "ValidationError",
    "JSONParseError",
    "SchemaValidationError",
]
