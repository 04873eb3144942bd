from __future__ import annotations

import time
import uuid
from collections.abc import Callable

import sentry_sdk
import structlog
from fastapi import Request, Response

REQUEST_ID_HEADER = "X-Request-ID"

logger = structlog.get_logger(__name__)


def _tag_sentry_scope(rid: str, request: Request) -> None:
    try:
        sentry_sdk.set_tag("request_id", rid)
        sentry_sdk.set_tag("path", request.url.path)
        sentry_sdk.set_tag("method", request.method)
    except Exception:
        # Sentry instrumentation must never fail a request
        pass


def _access_fields(rid: str, request: Request, status: int, start_ns: int) -> dict:
    return {
        "request_id": rid,
        "path": request.url.path,
        "method": request.method,
        "status": status,
        "duration_ms": round((time.perf_counter_ns() - start_ns) / 1_000_000.0, 3),
        "client_ip": (request.client.host if request.client else None) or "-",
        "user": request.headers.get("x-user-email") is not None,
    }


async def request_id_middleware(request: Request, call_next: Callable) -> Response:
    """Propagate X-Request-ID and emit one ``http_request`` access log line.

    The id is bound to structlog contextvars for the duration of the request
    so service-level events carry it too.
    """
    rid = request.headers.get(REQUEST_ID_HEADER) or str(uuid.uuid4())
    structlog.contextvars.bind_contextvars(
        request_id=rid, path=request.url.path, method=request.method
    )
    _tag_sentry_scope(rid, request)

    start_ns = time.perf_counter_ns()
    try:
        response = await call_next(request)
    except Exception:
        logger.error("http_request", **_access_fields(rid, request, 500, start_ns), exc_info=True)
        structlog.contextvars.clear_contextvars()
        raise

    logger.info("http_request", **_access_fields(rid, request, response.status_code, start_ns))
    response.headers[REQUEST_ID_HEADER] = rid
    structlog.contextvars.clear_contextvars()
    return response
