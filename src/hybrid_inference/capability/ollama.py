"""
Capability provider backed by the local Ollama server.
"""

import structlog

from hybrid_inference.local.engine import LocalEngineClient
from hybrid_inference.models.enums import CapabilityState, OperationType


logger = structlog.get_logger(__name__)


def _model_present(model: str, pulled: list[str]) -> bool:
    """Match "name" against "name:latest" the way the server resolves tags."""
    candidates = {model}
    if ":" not in model:
        candidates.add(f"{model}:latest")
    return any(name in candidates for name in pulled)


class OllamaCapabilityProvider:
    """
    Readiness of the local server per operation.

    - server unreachable -> UNAVAILABLE
    - configured model not pulled -> NEEDS_DOWNLOAD
    - multimodal model without the "vision" capability -> UNAVAILABLE
    - otherwise -> READY

    Errors propagate; CapabilityProber turns them into UNAVAILABLE.
    """

    def __init__(self, engine: LocalEngineClient, text_model: str, vision_model: str):
        self.engine = engine
        self.text_model = text_model
        self.vision_model = vision_model

    def model_for(self, operation_type: OperationType) -> str:
        if operation_type == OperationType.MULTIMODAL:
            return self.vision_model
        return self.text_model

    async def availability(self, operation_type: OperationType) -> CapabilityState:
        model = self.model_for(operation_type)
        pulled = await self.engine.list_models()

        if not _model_present(model, pulled):
            logger.info("Local model not pulled", model=model, operation=operation_type.value)
            return CapabilityState.NEEDS_DOWNLOAD

        if operation_type == OperationType.MULTIMODAL:
            info = await self.engine.get_model_info(model)
            capabilities = info.get("capabilities")
            # Older servers omit the field; trust the configured model then
            if capabilities is not None and "vision" not in capabilities:
                logger.info("Local model lacks vision capability", model=model)
                return CapabilityState.UNAVAILABLE

        return CapabilityState.READY
