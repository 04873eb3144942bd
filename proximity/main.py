import os
from contextlib import asynccontextmanager

import sentry_sdk
import structlog
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from sentry_sdk.integrations.starlette import StarletteIntegration
from slowapi.errors import RateLimitExceeded
from starlette.middleware.cors import CORSMiddleware

from proximity.api import errors
from proximity.api.routers import (
    channels,
    friends,
    healthz,
    locations,
    me,
    posts,
    readyz,
    summary,
    users,
)
from proximity.core.startup import run_database_migrations
from proximity.logging import setup_logging
from proximity.middleware.rate_limit import limiter, rate_limit_middleware
from proximity.middleware.request_id import request_id_middleware
from proximity.middleware.security_headers import security_headers_middleware

logger = structlog.get_logger(__name__)


def _init_sentry(env: str) -> None:
    dsn = os.getenv("SENTRY_DSN")
    if not dsn:
        return
    # traces_sample_rate is clamped to [0.0, 0.2]
    try:
        rate_raw = float(os.getenv("SENTRY_TRACES_RATE", "0"))
    except ValueError:
        rate_raw = 0.0
    sentry_sdk.init(
        dsn=dsn,
        environment=env,
        release=os.getenv("RELEASE"),
        integrations=[StarletteIntegration()],
        traces_sample_rate=max(0.0, min(0.2, rate_raw)),
        send_default_pii=False,
    )


@asynccontextmanager
async def lifespan(_: FastAPI):
    await run_database_migrations()
    yield


def create_app() -> FastAPI:
    setup_logging()
    env = os.getenv("APP_ENV", "dev")
    _init_sentry(env)

    app = FastAPI(title="Proximity", version="0.1.0", lifespan=lifespan)
    app.state.limiter = limiter
    errors.install(app)

    app.middleware("http")(request_id_middleware)
    app.middleware("http")(security_headers_middleware)
    app.middleware("http")(rate_limit_middleware)

    # CORS from ALLOW_ORIGINS env (comma-separated)
    allow_origins = [o.strip() for o in os.getenv("ALLOW_ORIGINS", "").split(",") if o.strip()]
    if allow_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=allow_origins,
            allow_credentials=True,
            allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS", "HEAD"],
            allow_headers=["*"],
        )

    app.include_router(healthz.router)
    app.include_router(readyz.router)
    app.include_router(users.router)
    app.include_router(me.router)
    app.include_router(friends.router)
    app.include_router(posts.router)
    app.include_router(posts.comments_router)
    app.include_router(channels.router)
    app.include_router(summary.router)
    app.include_router(locations.router)

    @app.get("/health")
    def health():
        return {"status": "ok", "env": os.getenv("APP_ENV", "dev")}

    @app.exception_handler(RateLimitExceeded)
    async def _rate_limit_handler(request: Request, exc: RateLimitExceeded):
        info = getattr(request.state, "rate_limit_info", None)
        if not isinstance(info, dict):
            info = {
                "method": request.method,
                "ip": (request.client.host if request.client else None) or "-",
                "limit": "-",
            }
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

    logger.info("app_startup", env=env)
    return app


app = create_app()
