from __future__ import annotations

from collections.abc import Callable

from fastapi import Request, Response

# Geolocation stays allowed for same-origin pages since clients send coordinates
SECURITY_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "Referrer-Policy": "strict-origin-when-cross-origin",
    "Permissions-Policy": "geolocation=(self)",
    "X-Frame-Options": "DENY",
}


async def security_headers_middleware(request: Request, call_next: Callable) -> Response:
    response = await call_next(request)
    for name, value in SECURITY_HEADERS.items():
        response.headers.setdefault(name, value)
    return response
