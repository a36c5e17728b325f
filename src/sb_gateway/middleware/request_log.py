"""Request logging middleware.

Tags each request with an id (reusing a well-formed upstream X-Request-ID,
e.g. from the load balancer) and exposes it on request.state for
ApiResponse, on the response header, and in the access log line.

Log format:
    INFO [POST] /api/v1/requests/abc/bids → 201 (23ms) req_a1b2c3d4e5f6
"""

import logging
import re
import time
import uuid

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

logger = logging.getLogger("sb.request")

_UPSTREAM_ID = re.compile(r"^[A-Za-z0-9_\-]{8,64}$")


def _request_id(request: Request) -> str:
    upstream = request.headers.get("x-request-id", "")
    if _UPSTREAM_ID.match(upstream):
        return upstream
    return f"req_{uuid.uuid4().hex[:12]}"


class RequestLogMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        rid = _request_id(request)
        request.state.request_id = rid

        start = time.perf_counter()
        try:
            response: Response = await call_next(request)
        except Exception:
            logger.exception("[%s] %s → unhandled %s", request.method, request.url.path, rid)
            raise
        elapsed_ms = (time.perf_counter() - start) * 1000

        level = logging.WARNING if response.status_code >= 500 else logging.INFO
        logger.log(
            level,
            "[%s] %s → %d (%.0fms) %s",
            request.method,
            request.url.path,
            response.status_code,
            elapsed_ms,
            rid,
        )
        response.headers["X-Request-ID"] = rid
        return response
