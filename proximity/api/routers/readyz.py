from fastapi import APIRouter, status
from fastapi.responses import JSONResponse

from proximity import db
from proximity.core.startup import is_migration_completed, last_migration_error
from proximity.schemas.common import ErrorResponse, OkResponse
from proximity.services.health import check_database

router = APIRouter(prefix="/readyz", tags=["health"])


def _migrations_pending() -> JSONResponse:
    error = {"code": "migrations_pending", "message": "Database migrations are still running"}
    if detail := last_migration_error():
        error["detail"] = detail
    return JSONResponse(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, content={"error": error})


@router.get(
    "",
    response_model=OkResponse,
    summary="Readiness probe",
    description="503 until startup migrations finish or while the database is unreachable.",
    responses={503: {"model": ErrorResponse, "description": "Not ready"}},
)
async def readyz():
    if not is_migration_completed():
        return _migrations_pending()

    async with db.SessionLocal() as session:
        await check_database(session)
    return OkResponse(ok=True)
