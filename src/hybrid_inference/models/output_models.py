"""
Output data models for the Hybrid Inference Layer.

Payload models (SummaryResult, Draft, DraftSet) are what the validator
produces. Outcome models wrap a payload with routing metadata so callers
can explain to the user which path served the request.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from hybrid_inference.models.enums import ExecutionPath, ProviderName


MAX_KEY_POINTS = 5
MAX_SUBJECT_LENGTH = 120
MAX_BODY_LENGTH = 2000
DRAFT_COUNT = 3


class SummaryResult(BaseModel):
    """TL;DR plus up to five key points."""
    model_config = ConfigDict(frozen=True)

    tldr: str = Field(..., description="One or two sentence summary")
    key_points: list[str] = Field(
        default_factory=list,
        max_length=MAX_KEY_POINTS,
        description="Ordered key points (0-5)"
    )

    def to_wire(self) -> dict:
        """Serialise using the camelCase shape of the fallback endpoint."""
        return {"tldr": self.tldr, "keyPoints": list(self.key_points)}


class Draft(BaseModel):
    """A single reply draft."""
    model_config = ConfigDict(frozen=True)

    subject: str = Field(..., min_length=1, max_length=MAX_SUBJECT_LENGTH)
    body: str = Field(..., min_length=1, max_length=MAX_BODY_LENGTH)


class DraftSet(BaseModel):
    """
    Exactly three drafts, ordered short -> medium -> comprehensive.
    """
    model_config = ConfigDict(frozen=True)

    drafts: list[Draft] = Field(..., min_length=DRAFT_COUNT, max_length=DRAFT_COUNT)

    @property
    def short(self) -> Draft:
        return self.drafts[0]

    @property
    def medium(self) -> Draft:
        return self.drafts[1]

    @property
    def comprehensive(self) -> Draft:
        return self.drafts[2]

    def to_wire(self) -> dict:
        return {"drafts": [d.model_dump() for d in self.drafts]}


class _RoutedOutcome(BaseModel):
    """Routing metadata shared by all outcome envelopes."""
    model_config = ConfigDict(frozen=True)

    path: ExecutionPath = Field(..., description="Branch that produced the result")
    reason: str = Field(default="", description="Admission reason shown to the user")
    provider: Optional[ProviderName] = Field(
        default=None,
        description="Cloud provider when served by a custom credential"
    )
    can_fallback: bool = Field(
        default=False,
        description="Whether the caller may retry this request remotely"
    )

    @property
    def used_local(self) -> bool:
        return self.path == ExecutionPath.LOCAL

    @property
    def used_custom_key(self) -> bool:
        return self.path == ExecutionPath.CUSTOM_KEY

    @property
    def used_hybrid(self) -> bool:
        return self.path == ExecutionPath.SHARED_FALLBACK


class SummaryOutcome(_RoutedOutcome):
    summary: SummaryResult


class DraftOutcome(_RoutedOutcome):
    draft_set: DraftSet

    @property
    def drafts(self) -> list[Draft]:
        return self.draft_set.drafts


class ImageAnswer(_RoutedOutcome):
    answer: str
    summarised: bool = Field(default=False, description="Answer was shortened locally")
