"""Request logging middleware.

Every request gets a request_id in request.state; routers and exception
handlers copy it into the ApiResponse envelope and it is echoed back in the
X-Request-ID header. A caller-supplied X-Request-ID is reused when it is a
short token of safe characters so an upstream proxy or client can correlate
its own logs with ours; anything else is replaced with a fresh id.

Log format:
    INFO  [POST] /api/v1/bets/<id>/stake -> 200 (23ms) req_a1b2c3d4e5f6
    WARNING on 5xx responses, ERROR with traceback when the handler raises.
"""

import logging
import re
import time
import uuid

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

logger = logging.getLogger("sb.request")

REQUEST_ID_HEADER = "X-Request-ID"
_INBOUND_ID = re.compile(r"[A-Za-z0-9_.\-]{8,64}")


def new_request_id() -> str:
    return f"req_{uuid.uuid4().hex[:12]}"


def resolve_request_id(inbound: str | None) -> str:
    """Reuse a well-formed inbound id, otherwise mint one."""
    if inbound and _INBOUND_ID.fullmatch(inbound):
        return inbound
    return new_request_id()


class RequestLogMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        request_id = resolve_request_id(request.headers.get(REQUEST_ID_HEADER))
        request.state.request_id = request_id

        start = time.perf_counter()
        try:
            response: Response = await call_next(request)
        except Exception:
            logger.exception(
                "[%s] %s -> unhandled (%.0fms) %s",
                request.method,
                request.url.path,
                (time.perf_counter() - start) * 1000,
                request_id,
            )
            raise
        elapsed_ms = (time.perf_counter() - start) * 1000

        level = logging.WARNING if response.status_code >= 500 else logging.INFO
        logger.log(
            level,
            "[%s] %s -> %d (%.0fms) %s",
            request.method,
            request.url.path,
            response.status_code,
            elapsed_ms,
            request_id,
        )
        response.headers[REQUEST_ID_HEADER] = request_id
        return response
