"""FastAPI middleware for request tracing and metrics"""

import logging
import time
import uuid

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request

from rahnu_gateway.infrastructure.observability.logging import request_id_var
from rahnu_gateway.infrastructure.observability.metrics import request_duration_histogram

logger = logging.getLogger(__name__)

MAX_REQUEST_ID_LENGTH = 64
UNMATCHED_ENDPOINT = "unmatched"


def resolve_request_id(header_value: str) -> str:
    """Reuse a caller's X-Request-ID when it is sane, otherwise mint one"""
    if header_value and len(header_value) <= MAX_REQUEST_ID_LENGTH and header_value.isprintable():
        return header_value
    return str(uuid.uuid4())


class RequestIDMiddleware(BaseHTTPMiddleware):
    """Tag the request, its log lines and its response with one request ID"""

    async def dispatch(self, request: Request, call_next):
        request_id = resolve_request_id(request.headers.get("X-Request-ID", ""))
        request.state.request_id = request_id
        token = request_id_var.set(request_id)
        try:
            response = await call_next(request)
        finally:
            request_id_var.reset(token)
        response.headers["X-Request-ID"] = request_id
        return response


class MetricsMiddleware(BaseHTTPMiddleware):
    """Observe request latency per route template and write an access log line"""

    async def dispatch(self, request: Request, call_next):
        started = time.perf_counter()
        response = await call_next(request)
        duration = time.perf_counter() - started

        # Unknown paths share one label so scanners cannot blow up cardinality
        route = request.scope.get("route")
        endpoint = getattr(route, "path", UNMATCHED_ENDPOINT)
        request_duration_histogram.labels(
            method=request.method,
            endpoint=endpoint,
            status=response.status_code,
        ).observe(duration)
        logger.info(
            "Request handled",
            extra={
                "method": request.method,
                "endpoint": endpoint,
                "status": response.status_code,
                "duration_ms": round(duration * 1000, 2),
            },
        )
        return response
