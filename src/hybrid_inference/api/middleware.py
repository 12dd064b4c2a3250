"""FastAPI middleware for request tracing.

The fallback server is called by the routing layer of other processes;
their request id is reused so one id follows a request across both logs.
"""

import time
import uuid
from typing import Callable

import structlog
from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

logger = structlog.get_logger(__name__)


REQUEST_ID_HEADER = "X-Request-ID"


def _elapsed_ms(start_time: float) -> float:
    return round((time.perf_counter() - start_time) * 1000, 2)


class RequestTracingMiddleware(BaseHTTPMiddleware):
    """Bind a request id to every log line of a request.

    - Reuses an incoming X-Request-ID, else generates a UUID4
    - Binds it to structlog contextvars for the duration of the request
    - Echoes it back in the X-Request-ID response header
    - Logs completion with duration; never the body, which holds user content
    """

    async def dispatch(
        self, request: Request, call_next: Callable[[Request], Response]
    ) -> Response:
        request_id = request.headers.get(REQUEST_ID_HEADER) or str(uuid.uuid4())

        # Everything logged below this point, including route and
        # classifier events, carries these keys
        structlog.contextvars.bind_contextvars(
            request_id=request_id,
            method=request.method,
            path=request.url.path,
        )

        start_time = time.perf_counter()
        try:
            response = await call_next(request)
        except Exception as exc:
            # Handled errors never get here; this is a crash in the app
            logger.error("Request failed", exc_info=exc, duration_ms=_elapsed_ms(start_time))
            raise
        else:
            logger.info(
                "Request completed",
                status_code=response.status_code,
                duration_ms=_elapsed_ms(start_time),
            )
            response.headers[REQUEST_ID_HEADER] = request_id
            return response
        finally:
            # Workers reuse the context; don't leak ids into the next request
            structlog.contextvars.clear_contextvars()
