from __future__ import annotations

from pydantic import BaseModel

from proximity.schemas.post import PostItem


class CategorySummary(BaseModel):
    category: str
    label: str
    post_count: int
    summary: str | None = None
    posts: list[PostItem]


class SummaryResponse(BaseModel):
    categories: list[CategorySummary]
