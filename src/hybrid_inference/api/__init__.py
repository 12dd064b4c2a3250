"""
FastAPI fallback server.

- routes.py: POST/GET /api/fallback, GET /health
- dependencies.py: Provider client, capability prober, server credential
- models.py: API request/response models
- error_handlers.py: ProcessingError code -> HTTP status
- middleware.py: Request id tracing
"""

from hybrid_inference.api import dependencies, error_handlers, models
from hybrid_inference.api.routes import router

__all__ = [
    "router",
    "dependencies",
    "error_handlers",
    "models",
]
