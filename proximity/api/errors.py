from fastapi import HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from proximity.core import exceptions as domain_exceptions


def _http_exception_handler(_: Request, exc: HTTPException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code, content={"detail": exc.detail}, headers=exc.headers
    )


def _validation_exception_handler(_: Request, exc: RequestValidationError) -> JSONResponse:
    # Unified message instead of FastAPI's per-field list
    return JSONResponse(status_code=422, content={"detail": "Unprocessable Entity"})


def _unhandled_exception_handler(_: Request, exc: Exception) -> JSONResponse:
    return JSONResponse(status_code=500, content={"detail": "Internal Server Error"})


def _domain_error_handler(status_code: int, default_detail: str):
    def _handler(_: Request, exc: domain_exceptions.DomainError) -> JSONResponse:
        detail = str(exc) or default_detail
        return JSONResponse(status_code=status_code, content={"detail": detail})

    return _handler


def _slowmode_handler(_: Request, exc: domain_exceptions.SlowmodeError) -> JSONResponse:
    # Same envelope as the rate limiter's 429
    return JSONResponse(
        status_code=429,
        content={
            "error": {
                "code": "slowmode",
                "message": "Slowmode is active for this channel",
                "detail": {"cooldown_seconds": exc.cooldown_seconds},
            }
        },
        headers={"Retry-After": str(exc.cooldown_seconds)},
    )


def install(app) -> None:
    app.add_exception_handler(HTTPException, _http_exception_handler)
    app.add_exception_handler(RequestValidationError, _validation_exception_handler)
    app.add_exception_handler(domain_exceptions.SlowmodeError, _slowmode_handler)
    app.add_exception_handler(
        domain_exceptions.NotFoundError, _domain_error_handler(404, "Not Found")
    )
    app.add_exception_handler(
        domain_exceptions.ValidationError, _domain_error_handler(400, "Bad Request")
    )
    app.add_exception_handler(
        domain_exceptions.ConflictError, _domain_error_handler(409, "Conflict")
    )
    app.add_exception_handler(
        domain_exceptions.PermissionDeniedError, _domain_error_handler(403, "Forbidden")
    )
    app.add_exception_handler(
        domain_exceptions.InfrastructureError,
        _domain_error_handler(503, "Service Unavailable"),
    )
    app.add_exception_handler(Exception, _unhandled_exception_handler)
