"""HTTP middleware for the KYC API.

Each request runs inside its own RequestContext. The X-Request-ID header is
echoed on every response, and the request is counted and timed per route.
"""

import time
from typing import Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from .context import accept_request_id, request_context
from .logging_config import get_logger
from .metrics import kyc_http_request_duration_seconds, kyc_http_requests_total

logger = get_logger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"

UNMATCHED_ROUTE = "unmatched"


def route_label(request: Request) -> str:
    """Route template (e.g. /api/v1/admin/kyc/{kyc_id}/approve), never the raw path."""
    route = request.scope.get("route")
    return getattr(route, "path", UNMATCHED_ROUTE)


class RequestIDMiddleware(BaseHTTPMiddleware):

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = accept_request_id(request.headers.get(REQUEST_ID_HEADER))

        with request_context(request_id) as context:
            started = time.perf_counter()
            try:
                response = await call_next(request)
            except Exception:
                elapsed = time.perf_counter() - started
                kyc_http_requests_total.labels(
                    method=request.method, route=route_label(request), status_code="500"
                ).inc()
                logger.error(
                    f"{request.method} {request.url.path} raised",
                    extra={"method": request.method, "path": request.url.path,
                           "duration_ms": round(elapsed * 1000, 2)},
                    exc_info=True
                )
                raise

            elapsed = time.perf_counter() - started
            route = route_label(request)
            kyc_http_requests_total.labels(
                method=request.method, route=route, status_code=str(response.status_code)
            ).inc()
            kyc_http_request_duration_seconds.labels(method=request.method, route=route).observe(elapsed)

            # Health probes and scrapes are counted but not logged
            if route not in ("/health", "/ready", "/metrics"):
                extra = {
                    "method": request.method,
                    "path": request.url.path,
                    "status_code": response.status_code,
                    "duration_ms": round(elapsed * 1000, 2),
                }
                if context.actor_id:
                    extra["user_id"] = context.actor_id
                logger.info(f"{request.method} {request.url.path} -> {response.status_code}", extra=extra)

        response.headers[REQUEST_ID_HEADER] = request_id
        return response
