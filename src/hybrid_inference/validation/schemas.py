"""
JSON Schemas for model output.

DRAFT_RESPONSE_SCHEMA doubles as the structured-output constraint sent to
the on-device engine, so the engine is asked for exactly the shape the
validator later enforces.
"""

from copy import deepcopy

from hybrid_inference.models.output_models import (
    DRAFT_COUNT,
    MAX_BODY_LENGTH,
    MAX_SUBJECT_LENGTH,
)


DRAFT_RESPONSE_SCHEMA: dict = {
    "type": "object",
    "properties": {
        "drafts": {
            "type": "array",
            "items": {
                "type": "object",
                "properties": {
                    "subject": {"type": "string", "maxLength": MAX_SUBJECT_LENGTH},
                    "body": {"type": "string", "maxLength": MAX_BODY_LENGTH},
                },
                "required": ["subject", "body"],
            },
            "minItems": DRAFT_COUNT,
            "maxItems": DRAFT_COUNT,
        }
    },
    "required": ["drafts"],
}


def _strict_draft_schema() -> dict:
    schema = deepcopy(DRAFT_RESPONSE_SCHEMA)
    item_props = schema["properties"]["drafts"]["items"]["properties"]
    item_props["subject"]["minLength"] = 1
    item_props["body"]["minLength"] = 1
    return schema


# Checked after whitespace trimming: fields must also be non-empty
DRAFT_VALIDATION_SCHEMA: dict = _strict_draft_schema()


SUMMARY_VALIDATION_SCHEMA: dict = {
    "type": "object",
    "properties": {
        "tldr": {"type": "string", "minLength": 1},
        "keyPoints": {
            "type": "array",
            "items": {"type": "string"},
        },
    },
    "required": ["tldr", "keyPoints"],
}
