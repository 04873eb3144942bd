"""Startup helpers for database migrations and readiness tracking."""

from __future__ import annotations

import asyncio
import os
from pathlib import Path
from typing import Final

import structlog
from alembic import command
from alembic.config import Config
from structlog.stdlib import BoundLogger

_PROJECT_ROOT: Final[Path] = Path(__file__).resolve().parents[2]
_MAX_ATTEMPTS: Final[int] = int(os.getenv("ALEMBIC_STARTUP_MAX_ATTEMPTS", "10"))
_RETRY_DELAY_SECONDS: Final[float] = float(os.getenv("ALEMBIC_STARTUP_RETRY_SECONDS", "2"))
_MIGRATIONS_COMPLETED: bool = False
_MIGRATION_ERROR: str | None = None


def _truthy(value: str | None) -> bool:
    if value is None:
        return False
    return value.lower() in {"1", "true", "yes", "on"}


def _exit_on_failure() -> bool:
    override = os.getenv("ALEMBIC_EXIT_ON_FAILURE")
    if override is not None:
        return _truthy(override)
    return os.getenv("APP_ENV", "dev").lower() == "prod"


def is_migration_completed() -> bool:
    """Return True when startup migrations have finished successfully."""

    return _MIGRATIONS_COMPLETED


def last_migration_error() -> str | None:
    return _MIGRATION_ERROR


def _alembic_config() -> Config:
    config = Config(str(_PROJECT_ROOT / "alembic.ini"))
    config.set_main_option("script_location", str(_PROJECT_ROOT / "migrations"))
    return config


async def run_database_migrations() -> None:
    """Run `alembic upgrade head` with retries; skipped under TESTING."""

    global _MIGRATIONS_COMPLETED, _MIGRATION_ERROR
    logger = structlog.get_logger(__name__)

    if _MIGRATIONS_COMPLETED:
        logger.info("alembic_upgrade_skipped", reason="already_completed")
        return

    if os.getenv("TESTING"):
        _MIGRATIONS_COMPLETED = True
        _MIGRATION_ERROR = None
        logger.info("alembic_upgrade_skipped", reason="testing")
        return

    success, error_message = await _run_migrations_sequence(logger)
    _MIGRATIONS_COMPLETED = success
    _MIGRATION_ERROR = error_message
    if not success and _exit_on_failure():
        raise SystemExit(1)


async def _run_migrations_sequence(logger: BoundLogger) -> tuple[bool, str | None]:
    last_error: str | None = None

    for attempt in range(1, _MAX_ATTEMPTS + 1):
        try:
            logger.info("alembic_upgrade_start", attempt=attempt)
            await asyncio.to_thread(command.upgrade, _alembic_config(), "head")
        except Exception as exc:  # pragma: no cover - depends on a live database
            last_error = str(exc) or exc.__class__.__name__
            logger.exception("alembic_upgrade_failed", attempt=attempt)
        else:
            logger.info("alembic_upgrade_succeeded", attempt=attempt)
            return True, None

        if attempt < _MAX_ATTEMPTS:
            delay = _RETRY_DELAY_SECONDS * attempt
            logger.info("alembic_upgrade_retry", next_attempt=attempt + 1, delay_seconds=delay)
            await asyncio.sleep(delay)

    logger.error("alembic_upgrade_exhausted", attempts=_MAX_ATTEMPTS)
    return False, last_error or "alembic upgrade failed"


__all__ = ["is_migration_completed", "last_migration_error", "run_database_migrations"]
