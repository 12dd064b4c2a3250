"""
FastAPI application entry point for the shared cloud fallback server.
"""

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from prometheus_fastapi_instrumentator import Instrumentator

from hybrid_inference.api.error_handlers import EXCEPTION_HANDLERS
from hybrid_inference.api.middleware import RequestTracingMiddleware
from hybrid_inference.api.routes import router
from hybrid_inference.config import settings
from hybrid_inference.logging_config import configure_logging

# Configure structured logging before any other imports
configure_logging(settings.LOG_LEVEL, settings.ENVIRONMENT)
logger = structlog.get_logger(__name__)

app = FastAPI(
    title=settings.APP_NAME,
    description="Shared cloud fallback for the hybrid inference routing layer",
    version=settings.APP_VERSION,
    docs_url="/docs",
    redoc_url="/redoc",
)

# Request tracing middleware (must be first for request_id in all logs)
app.add_middleware(RequestTracingMiddleware)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["GET", "POST"],
    allow_headers=["*"],
)

for exc_class, handler in EXCEPTION_HANDLERS.items():
    app.add_exception_handler(exc_class, handler)

app.include_router(router, tags=["fallback"])


@app.on_event("startup")
async def startup():
    """Log the effective configuration (never the key itself)."""
    logger.info(
        "Application startup",
        version=settings.APP_VERSION,
        environment=settings.ENVIRONMENT,
        local_engine_url=settings.LOCAL_ENGINE_URL,
        fallback_provider=settings.FALLBACK_PROVIDER,
        fallback_key_configured=settings.FALLBACK_API_KEY is not None,
    )
    if settings.FALLBACK_PROVIDER is None or settings.FALLBACK_API_KEY is None:
        logger.warning("No server credential configured; /api/fallback will answer 503")


@app.on_event("shutdown")
async def shutdown():
    logger.info("Application shutdown")


# Prometheus metrics instrumentation
if settings.PROMETHEUS_ENABLED:
    Instrumentator().instrument(app).expose(app)


@app.get("/")
async def root():
    """Root endpoint with API documentation links."""
    return {
        "service": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "docs": "/docs",
        "health": "/health",
        "fallback": "/api/fallback",
        "metrics": "/metrics" if settings.PROMETHEUS_ENABLED else None,
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "hybrid_inference.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.DEBUG,
    )
