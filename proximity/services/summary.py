"""Per-interest digest of nearby posts."""

from __future__ import annotations

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from proximity.core.config import Settings, get_settings
from proximity.core.session import UserSession
from proximity.repositories.user_repository import UserRepository
from proximity.schemas.summary import CategorySummary, SummaryResponse
from proximity.services.channels import label_for
from proximity.services.posts import PostService
from proximity.utils.geo import Coordinate
from proximity.utils.openai_client import OpenAIClientWrapper

logger = structlog.get_logger(__name__)

SUMMARY_SAMPLE_SIZE = 5

_PROMPT = """You are summarizing local community posts in the "{label}" category.

Posts:
{posts}

Create a brief, engaging 2-3 sentence summary that captures the key themes and \
highlights from these posts. Write it like a news headline with personality. \
Be concise and conversational."""


def build_summary_prompt(label: str, contents: list[str]) -> str:
    return _PROMPT.format(label=label, posts="\n\n".join(contents[:SUMMARY_SAMPLE_SIZE]))


class SummaryService:
    def __init__(
        self,
        session: AsyncSession,
        llm: OpenAIClientWrapper | None,
        settings: Settings | None = None,
    ) -> None:
        self.users = UserRepository(session)
        self.posts = PostService(session, settings)
        self.llm = llm
        self.settings = settings or get_settings()

    async def summarize(self, ctx: UserSession, origin: Coordinate) -> SummaryResponse:
        user = await self.users.get(ctx.user_id)
        interests = list(user.interests or []) if user is not None else []
        if not interests:
            return SummaryResponse(categories=[])

        records = await self.posts.nearby_records(
            origin, limit=self.settings.summary_fetch_limit
        )
        out: list[CategorySummary] = []
        for category in interests:
            matching = [r for r in records if r.record.category == category]
            items = await self.posts.to_items(ctx, [(r.record, r.distance) for r in matching])
            label = label_for(category)
            summary = None
            if items:
                summary = await self._summarize_one(category, label, [i.content for i in items])
            out.append(
                CategorySummary(
                    category=category,
                    label=label,
                    post_count=len(items),
                    summary=summary,
                    posts=items,
                )
            )
        logger.info("summary_built", categories=len(out), posts=len(records))
        return SummaryResponse(categories=out)

    async def _summarize_one(self, category: str, label: str, contents: list[str]) -> str | None:
        if self.llm is None:
            return None
        try:
            return await self.llm.complete_text(build_summary_prompt(label, contents))
        except Exception as exc:
            # One failing category leaves the rest of the digest intact
            logger.warning("summary_failed", category=category, error=str(exc))
            return None
