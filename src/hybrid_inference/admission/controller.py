"""
Admission Controller (decision engine).

Decides, before any expensive call is made, whether a request is served
locally, sent to the cloud, or rejected outright:

    OnDevice mode:  local required; not ready or too large -> reject
    Hybrid mode:    ready and within limits -> local (cloud still allowed)
                    otherwise -> cloud, with a reason naming what failed

Content size is estimated from character length against per-operation
ceilings. The ceilings are heuristic policy constants (see Settings).
"""

from dataclasses import dataclass
from typing import Optional

import structlog

from hybrid_inference.capability.prober import CapabilityProber
from hybrid_inference.config import Settings
from hybrid_inference.llm.text_utils import estimate_token_count
from hybrid_inference.models.decision import Decision
from hybrid_inference.models.enums import CapabilityState, OperationType, ProcessingMode
from hybrid_inference.monitoring.metrics import admission_decisions_total


logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class TokenCeilings:
    """
    Per-operation local ceilings, in characters.

    Draft is roughly double summarise, multimodal about 1.5x.
    """
    summarise: int = 4000
    draft: int = 8000
    multimodal: int = 6000
    chars_per_token: int = 4

    def __post_init__(self) -> None:
        if min(self.summarise, self.draft, self.multimodal) <= 0:
            raise ValueError("ceilings must be positive")
        if self.chars_per_token <= 0:
            raise ValueError("chars_per_token must be positive")

    @classmethod
    def from_settings(cls, settings: Settings) -> "TokenCeilings":
        return cls(
            summarise=settings.SUMMARISE_CHAR_LIMIT,
            draft=settings.DRAFT_CHAR_LIMIT,
            multimodal=settings.MULTIMODAL_CHAR_LIMIT,
            chars_per_token=settings.CHARS_PER_TOKEN,
        )

    def limit_for(self, operation_type: OperationType) -> int:
        return {
            OperationType.SUMMARISE: self.summarise,
            OperationType.DRAFT: self.draft,
            OperationType.MULTIMODAL: self.multimodal,
        }[operation_type]

    def exceeds(self, text: str, operation_type: OperationType) -> bool:
        return len(text) > self.limit_for(operation_type)


class AdmissionController:
    """
    Produce one immutable Decision per request.

    Attributes:
        prober: Capability prober for the on-device engine
        ceilings: Per-operation size ceilings
    """

    def __init__(self, prober: CapabilityProber, ceilings: Optional[TokenCeilings] = None):
        self.prober = prober
        self.ceilings = ceilings or TokenCeilings()

    async def _local_ready(self, operation_type: OperationType) -> tuple[bool, CapabilityState]:
        try:
            state = await self.prober.probe(operation_type)
        except Exception as e:
            # CapabilityProber never raises, but an injected prober might
            logger.warning(
                "Availability check raised, treating as unavailable",
                operation=operation_type.value,
                error=str(e),
            )
            state = CapabilityState.UNAVAILABLE
        return state == CapabilityState.READY, state

    async def decide(
        self,
        mode: ProcessingMode,
        text: str,
        operation_type: OperationType,
    ) -> Decision:
        """
        Decide the execution path for a request.

        Args:
            mode: User processing-mode preference
            text: Content to be processed
            operation_type: Requested operation

        Returns:
            Decision (use_local, can_fallback, reason)
        """
        op = operation_type.value
        tokens = estimate_token_count(text, self.ceilings.chars_per_token)
        within_limits = not self.ceilings.exceeds(text, operation_type)
        local_ready, state = await self._local_ready(operation_type)

        if mode == ProcessingMode.ON_DEVICE:
            if not local_ready:
                decision = Decision(
                    use_local=False,
                    can_fallback=False,
                    reason=f"Local {op} model is not available on this device",
                    capability=state,
                    estimated_tokens=tokens,
                    within_limits=within_limits,
                )
            elif not within_limits:
                decision = Decision(
                    use_local=False,
                    can_fallback=False,
                    reason=(
                        f"Content is too large for local {op} processing "
                        f"({tokens} estimated tokens)"
                    ),
                    capability=state,
                    estimated_tokens=tokens,
                    within_limits=within_limits,
                )
            else:
                decision = Decision(
                    use_local=True,
                    can_fallback=False,
                    reason="Using local processing as requested",
                    capability=state,
                    estimated_tokens=tokens,
                    within_limits=within_limits,
                )
        elif local_ready and within_limits:
            decision = Decision(
                use_local=True,
                can_fallback=True,
                reason="Local processing available and within limits",
                capability=state,
                estimated_tokens=tokens,
                within_limits=within_limits,
            )
        else:
            reason = "Using secure cloud processing: "
            if not local_ready and not within_limits:
                reason += (
                    "local model unavailable and content exceeds limits "
                    f"({tokens} estimated tokens)"
                )
            elif not local_ready:
                reason += "local model is not available on this device"
            else:
                reason += f"content exceeds local processing limits ({tokens} estimated tokens)"
            decision = Decision(
                use_local=False,
                can_fallback=True,
                reason=reason,
                capability=state,
                estimated_tokens=tokens,
                within_limits=within_limits,
            )

        path = "local" if decision.use_local else ("fallback" if decision.can_fallback else "rejected")
        admission_decisions_total.labels(operation=op, path=path).inc()
        logger.info(
            "Admission decision",
            mode=mode.value,
            operation=op,
            capability=state.value,
            estimated_tokens=tokens,
            within_limits=within_limits,
            use_local=decision.use_local,
            can_fallback=decision.can_fallback,
        )
        return decision
