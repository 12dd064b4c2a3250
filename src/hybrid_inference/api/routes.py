"""
Routes of the shared cloud fallback server.

POST /api/fallback serves summarise/draft requests with the server's own
provider credential, using the same adapters and validator as the
client-side routing layer. Only extracted text is accepted.
"""

import asyncio
from datetime import datetime
from typing import Optional

import structlog
from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse

from hybrid_inference.api.dependencies import (
    get_capability_prober,
    get_fallback_credential,
    get_provider_client,
)
from hybrid_inference.api.models import (
    SUPPORTED_FALLBACK_TYPES,
    DraftResponse,
    ErrorResponse,
    FallbackInfoResponse,
    FallbackRequest,
    HealthResponse,
    SummaryResponse,
)
from hybrid_inference.capability.prober import CapabilityProber
from hybrid_inference.config import Settings, get_settings
from hybrid_inference.models.enums import CapabilityState, OperationType
from hybrid_inference.models.input_models import ProcessingOptions, ProviderCredential
from hybrid_inference.providers.client import ProviderClient

logger = structlog.get_logger(__name__)

router = APIRouter()


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


@router.post(
    "/api/fallback",
    summary="Process extracted text in the cloud",
    description="""
    Summarise a thread or generate three reply drafts with the server's
    provider credential.

    Returns `{tldr, keyPoints}` for `summarise` and `{drafts}` for `draft`.
    Failures return `{error}` with a non-2xx status.
    """,
    responses={
        200: {"description": "Processed successfully"},
        400: {"model": ErrorResponse, "description": "Invalid request"},
        429: {"model": ErrorResponse, "description": "Provider rate limit"},
        502: {"model": ErrorResponse, "description": "Provider failure"},
        503: {"model": ErrorResponse, "description": "No server credential configured"},
    },
)
async def process_fallback(
    request: FallbackRequest,
    credential: Optional[ProviderCredential] = Depends(get_fallback_credential),
    provider_client: ProviderClient = Depends(get_provider_client),
):
    """
    Handle one fallback request.

    ProcessingError raised by the provider client is turned into
    `{error, code}` by the exception handlers.
    """
    if not request.type or not request.text:
        return _error(status.HTTP_400_BAD_REQUEST, "Missing required fields: type and text")

    if not isinstance(request.text, str):
        return _error(
            status.HTTP_400_BAD_REQUEST,
            "Only text content is allowed for privacy protection",
        )

    if request.type not in SUPPORTED_FALLBACK_TYPES:
        return _error(status.HTTP_400_BAD_REQUEST, "Unsupported fallback type")

    if not request.text.strip():
        return _error(status.HTTP_400_BAD_REQUEST, "Missing required fields: type and text")

    if credential is None:
        logger.error("Fallback request received but no server credential is configured")
        return _error(
            status.HTTP_503_SERVICE_UNAVAILABLE,
            "Cloud processing is not configured on this server",
        )

    options = ProcessingOptions.model_validate(request.options)
    operation = OperationType(request.type)

    logger.info(
        "Fallback request received",
        operation=operation.value,
        provider=credential.provider.value,
        text_length=len(request.text),
    )

    if operation == OperationType.SUMMARISE:
        summary = await provider_client.summarise_remote(request.text, credential)
        return SummaryResponse(**summary.to_wire())

    draft_set = await provider_client.draft_remote(request.text, credential, options)
    return DraftResponse(**draft_set.to_wire())


@router.get(
    "/api/fallback",
    response_model=FallbackInfoResponse,
    summary="Describe the fallback endpoint",
)
async def describe_fallback(
    credential: Optional[ProviderCredential] = Depends(get_fallback_credential),
) -> FallbackInfoResponse:
    return FallbackInfoResponse(
        message="Hybrid fallback endpoint - supports summarise and draft types",
        configured=credential is not None,
    )


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Service health check",
    description="""
    Liveness of the fallback server plus a snapshot of on-device readiness
    per operation. Always 200; `status` is "degraded" when the local
    engine cannot serve any operation.
    """,
)
async def health_check(
    settings: Settings = Depends(get_settings),
    prober: CapabilityProber = Depends(get_capability_prober),
    credential: Optional[ProviderCredential] = Depends(get_fallback_credential),
) -> HealthResponse:
    operations = list(OperationType)
    states = await asyncio.gather(*(prober.probe(op) for op in operations))
    capabilities = {op.value: state.value for op, state in zip(operations, states)}

    local_ok = any(state == CapabilityState.READY for state in states)
    services = {
        "local_engine": "ok" if local_ok else "unavailable",
        "fallback_credential": "configured" if credential is not None else "not_configured",
    }
    health_status = "healthy" if local_ok else "degraded"

    logger.info("Health check", status=health_status, services=services)

    return HealthResponse(
        status=health_status,
        version=settings.APP_VERSION,
        services=services,
        capabilities=capabilities,
        timestamp=datetime.utcnow(),
    )
