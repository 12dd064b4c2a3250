"""
Stage 2: JSON Schema validation.

Validate a parsed dict against one of the output schemas.
This is a hard-fail stage: any violation raises SchemaValidationError.
"""

import structlog
from jsonschema import Draft7Validator

from hybrid_inference.monitoring.metrics import validation_failures_total
from .exceptions import SchemaValidationError

logger = structlog.get_logger(__name__)


class SchemaCheck:
    """
    Stage 2 validator: validate against an in-memory JSON Schema.

    Raises SchemaValidationError on schema violations (hard fail).
    """

    def __init__(self, schema: dict, kind: str):
        """
        Initialize schema validator.

        Args:
            schema: JSON Schema dict
            kind: Payload kind used in errors and metrics ("summary", "drafts")
        """
        Draft7Validator.check_schema(schema)
        self.kind = kind
        self._validator = Draft7Validator(schema)

    def validate(self, data: dict) -> None:
        """
        Validate data against the schema.

        Args:
            data: Parsed JSON dict to validate

        Raises:
            SchemaValidationError: If data doesn't conform to schema
        """
        errors = list(self._validator.iter_errors(data))

        if errors:
            error_messages = []
            for error in errors[:10]:  # Limit to first 10 errors
                path = ".".join(str(p) for p in error.path) if error.path else "root"
                error_messages.append(f"{path}: {error.message}")

            validation_failures_total.labels(kind=self.kind, error_type="schema_violation").inc()
            raise SchemaValidationError(
                f"Invalid response structure for {self.kind} with {len(errors)} error(s)",
                validation_errors=error_messages,
                schema_name=self.kind,
            )

        logger.debug("Schema check passed", kind=self.kind)
