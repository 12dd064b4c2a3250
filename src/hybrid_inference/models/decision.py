"""
Admission decision model.

A Decision is produced once per request by the AdmissionController and
drives exactly one downstream branch.
"""

from pydantic import BaseModel, ConfigDict, Field

from hybrid_inference.models.enums import CapabilityState


class Decision(BaseModel):
    """
    Immutable routing decision.

    use_local=False, can_fallback=False means the request must be rejected
    without trying any other path.
    """
    model_config = ConfigDict(frozen=True)

    use_local: bool
    can_fallback: bool
    reason: str = Field(default="", description="User-facing explanation")

    # Diagnostics for logs and error classification
    capability: CapabilityState = Field(default=CapabilityState.UNAVAILABLE)
    estimated_tokens: int = Field(default=0, ge=0)
    within_limits: bool = True

    @property
    def rejected(self) -> bool:
        return not self.use_local and not self.can_fallback
