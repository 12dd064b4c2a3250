"""
FastAPI exception handlers for the fallback server.

Every error body has an `error` field, which the SharedFallbackClient
surfaces verbatim to its caller.
"""

import structlog
from fastapi import Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import ValidationError as PydanticValidationError

from hybrid_inference.errors.exceptions import ProcessingError
from hybrid_inference.models.enums import ErrorCode

logger = structlog.get_logger(__name__)


STATUS_BY_CODE: dict[ErrorCode, int] = {
    ErrorCode.UNAVAILABLE: status.HTTP_503_SERVICE_UNAVAILABLE,
    ErrorCode.TOKEN_LIMIT: status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
    ErrorCode.NETWORK_ERROR: status.HTTP_502_BAD_GATEWAY,
    ErrorCode.INVALID_JSON: status.HTTP_502_BAD_GATEWAY,
    # The key at fault is the server's own, so this is an upstream failure
    ErrorCode.INVALID_KEY: status.HTTP_502_BAD_GATEWAY,
    ErrorCode.RATE_LIMIT: status.HTTP_429_TOO_MANY_REQUESTS,
    ErrorCode.UNSUPPORTED_PROVIDER: status.HTTP_503_SERVICE_UNAVAILABLE,
    ErrorCode.HYBRID_FALLBACK: status.HTTP_502_BAD_GATEWAY,
    ErrorCode.UNKNOWN: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


async def processing_error_handler(request: Request, exc: ProcessingError) -> JSONResponse:
    """
    Handle classified processing errors.

    Maps the ErrorCode to an HTTP status; the body carries the fixed
    user message.
    """
    status_code = STATUS_BY_CODE.get(exc.code, status.HTTP_500_INTERNAL_SERVER_ERROR)
    logger.warning(
        "Processing error",
        code=exc.code.value,
        status_code=status_code,
        cause_type=type(exc.cause).__name__ if exc.cause is not None else None,
    )

    return JSONResponse(
        status_code=status_code,
        content={"error": exc.user_message, "code": exc.code.value},
    )


async def request_validation_error_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """
    Handle malformed request bodies.

    Maps to 400 Bad Request (client error).
    """
    logger.warning("Invalid request format", errors=len(exc.errors()))

    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"error": "Invalid request body"},
    )


async def pydantic_validation_error_handler(
    request: Request, exc: PydanticValidationError
) -> JSONResponse:
    """
    Handle invalid options (e.g. an unknown tone).

    Maps to 400 Bad Request (client error).
    """
    logger.warning("Invalid request options", errors=exc.error_count())

    fields = sorted({".".join(str(p) for p in err["loc"]) for err in exc.errors()})
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"error": f"Invalid options: {', '.join(fields)}"},
    )


async def generic_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """
    Handle unexpected errors.

    Maps to 500 Internal Server Error.
    """
    logger.exception("Unexpected error", error_type=type(exc).__name__)

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"error": "Internal server error"},
    )


# Exception handler mapping for FastAPI app.add_exception_handler()
EXCEPTION_HANDLERS = {
    ProcessingError: processing_error_handler,
    RequestValidationError: request_validation_error_handler,
    PydanticValidationError: pydantic_validation_error_handler,
    Exception: generic_error_handler,
}
