"""Readiness checks behind /readyz."""

from __future__ import annotations

import structlog
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from proximity.core.exceptions import InfrastructureError

logger = structlog.get_logger(__name__)


async def check_database(session: AsyncSession) -> None:
    """Round-trip the database; InfrastructureError (503) when it is unreachable."""
    try:
        await session.execute(text("SELECT 1"))
    except SQLAlchemyError as exc:
        logger.warning("readiness_db_failed", error=str(exc))
        raise InfrastructureError("database unavailable") from exc
