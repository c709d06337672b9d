"""Access logging middleware using structlog."""

import time
import uuid

import structlog
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

logger = structlog.get_logger(__name__)

REQUEST_ID_HEADER = "x-request-id"


class AccessLoggingMiddleware(BaseHTTPMiddleware):
    """
    Middleware that logs one structured event per HTTP request.

    The request id (taken from X-Request-ID or generated) is bound into
    structlog's contextvars for the duration of the request, so service logs
    emitted while handling it carry the same id. It is echoed back in the
    response header.

    Log fields:
        - method: HTTP method
        - path: Request path
        - status_code: Response status code
        - duration_ms: Request duration in milliseconds
        - client_ip: Client IP address
        - request_id: Request correlation id
    """

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        """Process request and log access information."""
        start_time = time.perf_counter()
        request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex
        client_ip = request.client.host if request.client else "unknown"

        with structlog.contextvars.bound_contextvars(request_id=request_id):
            response = await call_next(request)
            duration_ms = (time.perf_counter() - start_time) * 1000

            logger.info(
                "http_request",
                method=request.method,
                path=request.url.path,
                status_code=response.status_code,
                duration_ms=round(duration_ms, 2),
                client_ip=client_ip,
            )

        response.headers[REQUEST_ID_HEADER] = request_id
        return response
