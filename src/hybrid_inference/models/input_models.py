"""
Input data models for the Hybrid Inference Layer.

Collaborators (parsers, import flows, settings layer) hand the core plain
extracted text, an optional image blob and the user's credential. These
models make every option and its default explicit.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, SecretStr, field_validator, model_validator

from hybrid_inference.models.enums import (
    DraftTone,
    OperationType,
    ProviderName,
    SummaryFormat,
    SummaryLength,
)


SUPPORTED_IMAGE_TYPES = ("image/png", "image/jpeg", "image/jpg", "image/webp")


class ProcessingOptions(BaseModel):
    """
    Per-request options with explicit defaults.

    Only the options relevant to the requested operation are read:
    tone/guidance for drafts, summary_length/summary_format for summaries,
    max_answer_length for image questions.
    """
    model_config = ConfigDict(frozen=True)

    tone: DraftTone = Field(default=DraftTone.NEUTRAL, description="Reply draft tone")
    guidance: str = Field(default="", description="Free-form user guidance for drafts")
    summary_length: SummaryLength = Field(default=SummaryLength.SHORT)
    summary_format: SummaryFormat = Field(default=SummaryFormat.PLAIN_TEXT)
    max_answer_length: int = Field(
        default=500,
        ge=1,
        description="Image answers longer than this are summarised locally"
    )

    @field_validator("guidance")
    @classmethod
    def strip_guidance(cls, v: str) -> str:
        return v.strip()


class ImageInput(BaseModel):
    """Opaque image blob handed over by the attachment layer."""
    model_config = ConfigDict(frozen=True)

    data: bytes = Field(..., description="Raw image bytes")
    mime_type: str = Field(..., description="MIME type, e.g. image/png")

    @property
    def size(self) -> int:
        return len(self.data)

    @property
    def is_supported(self) -> bool:
        return self.mime_type.lower() in SUPPORTED_IMAGE_TYPES


class ProcessingRequest(BaseModel):
    """
    One unit of work for the routing layer.

    `text` is always previously extracted plain text; for multimodal
    requests it carries the user's question about `image`.
    """
    model_config = ConfigDict(frozen=True)

    text: str = Field(..., description="Extracted plain text (or the image question)")
    operation_type: OperationType
    options: ProcessingOptions = Field(default_factory=ProcessingOptions)
    image: Optional[ImageInput] = Field(default=None, description="Image blob for multimodal")

    @model_validator(mode="after")
    def check_image_presence(self) -> "ProcessingRequest":
        if self.operation_type == OperationType.MULTIMODAL and self.image is None:
            raise ValueError("multimodal requests require an image")
        return self

    @property
    def is_blank(self) -> bool:
        return not self.text or not self.text.strip()


class ProviderCredential(BaseModel):
    """
    User-supplied API key for one cloud provider.

    Owned by the settings layer; the core only reads it. The key is a
    SecretStr so it never shows up in repr() or logs.
    """
    model_config = ConfigDict(frozen=True)

    provider: ProviderName
    api_key: SecretStr
    name: str = Field(default="", description="User label for the key")
    enabled: bool = True

    @property
    def has_key(self) -> bool:
        return bool(self.api_key.get_secret_value().strip())
