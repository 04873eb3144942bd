from __future__ import annotations

import os
from collections.abc import Callable
from typing import TypedDict

from fastapi import Request, Response
from fastapi.responses import JSONResponse
from limits import parse as parse_limit
from limits.storage import MemoryStorage
from limits.strategies import MovingWindowRateLimiter
from slowapi import Limiter

READ_LIMIT = "60/minute"
WRITE_LIMIT = "30/minute"

_READ_METHODS = frozenset({"GET", "HEAD"})
_WRITE_METHODS = frozenset({"POST", "PUT", "PATCH", "DELETE"})


class RateLimitInfo(TypedDict, total=False):
    method: str
    ip: str
    limit: str


def _client_ip(request: Request) -> str:
    # First hop of X-Forwarded-For, then the ASGI peer
    xff = request.headers.get("x-forwarded-for")
    if xff:
        return xff.split(",")[0].strip()
    if request.client and request.client.host:
        return request.client.host
    return "local"


# slowapi supplies the RateLimitExceeded type handled in main; the per-method
# windows below are enforced with limits directly.
limiter = Limiter(key_func=_client_ip)

_storage = MemoryStorage()
_rate = MovingWindowRateLimiter(_storage)


def _enabled() -> bool:
    # RATE_LIMIT_ENABLED=1 wins over TESTING
    if os.getenv("RATE_LIMIT_ENABLED") in {"1", "true", "TRUE"}:
        return True
    return not os.getenv("TESTING")


def limit_for_method(method: str) -> str | None:
    m = method.upper()
    if m in _READ_METHODS:
        return READ_LIMIT
    if m in _WRITE_METHODS:
        return WRITE_LIMIT
    return None


def reset_limits() -> None:
    _storage.reset()


async def rate_limit_middleware(request: Request, call_next: Callable) -> Response:
    limit_str = limit_for_method(request.method) if _enabled() else None
    if not limit_str:
        return await call_next(request)

    ip = _client_ip(request)
    if not _rate.hit(parse_limit(limit_str), f"ip:{ip}|m:{request.method.upper()}"):
        info: RateLimitInfo = {"method": request.method.upper(), "ip": ip, "limit": limit_str}
        request.state.rate_limit_info = info
        return JSONResponse(
            status_code=429,
            content={
                "error": {
                    "code": "rate_limited",
                    "message": "Too Many Requests",
                    "detail": info,
                }
            },
        )

    response = await call_next(request)
    response.headers.setdefault("X-RateLimit-Limit", limit_str)
    return response
