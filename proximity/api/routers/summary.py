from __future__ import annotations

from fastapi import APIRouter, Depends

from proximity.api.deps import get_current_session, get_origin, get_summary_service
from proximity.core.session import UserSession
from proximity.schemas.summary import SummaryResponse
from proximity.services.summary import SummaryService
from proximity.utils.geo import Coordinate

router = APIRouter(prefix="/summary", tags=["summary"])


@router.get(
    "",
    response_model=SummaryResponse,
    summary="Digest of nearby posts per interest",
    description="Summaries are null when no LLM is configured or a category fails.",
)
async def get_summary(
    origin: Coordinate = Depends(get_origin),
    ctx: UserSession = Depends(get_current_session),
    svc: SummaryService = Depends(get_summary_service),
):
    return await svc.summarize(ctx, origin)
