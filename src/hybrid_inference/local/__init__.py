"""On-device execution: engine client, scoped sessions and the executor."""

from hybrid_inference.local.engine import LocalEngineClient, LocalSession
from hybrid_inference.local.executor import LocalExecutor

__all__ = ["LocalEngineClient", "LocalSession", "LocalExecutor"]
