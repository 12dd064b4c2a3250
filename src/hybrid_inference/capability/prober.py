"""
Capability probing for the on-device engine.

Backends implement CapabilityProvider and are injected into the prober;
the prober guarantees that a probe never raises.
"""

from typing import Mapping, Optional, Protocol

import structlog

from hybrid_inference.models.enums import CapabilityState, OperationType


logger = structlog.get_logger(__name__)


class CapabilityProvider(Protocol):
    """Readiness query implemented by each inference backend."""

    async def availability(self, operation_type: OperationType) -> CapabilityState:
        ...


class StaticCapabilityProvider:
    """
    Fixed capability map.

    Useful when the embedding application already knows what the device
    can do, and for wiring tests. Operations missing from the map are
    unavailable.
    """

    def __init__(self, states: Optional[Mapping[OperationType, CapabilityState]] = None):
        self.states = dict(states or {})

    async def availability(self, operation_type: OperationType) -> CapabilityState:
        return self.states.get(operation_type, CapabilityState.UNAVAILABLE)


class CapabilityProber:
    """
    Side-effect-free readiness query per operation.

    Any failure of the underlying provider (backend absent, query error,
    unexpected return value) is reported as UNAVAILABLE.
    """

    def __init__(self, provider: CapabilityProvider):
        self.provider = provider

    async def probe(self, operation_type: OperationType) -> CapabilityState:
        """
        Query readiness for one operation.

        Args:
            operation_type: Operation to check

        Returns:
            CapabilityState (never raises)
        """
        try:
            state = await self.provider.availability(operation_type)
        except Exception as e:
            logger.warning(
                "Capability probe failed, treating as unavailable",
                operation=operation_type.value,
                error=str(e),
                error_type=type(e).__name__,
            )
            return CapabilityState.UNAVAILABLE

        if not isinstance(state, CapabilityState):
            logger.warning(
                "Capability provider returned unexpected value",
                operation=operation_type.value,
                value=repr(state),
            )
            return CapabilityState.UNAVAILABLE

        logger.debug("Capability probed", operation=operation_type.value, state=state.value)
        return state
