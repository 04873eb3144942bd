from __future__ import annotations

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from proximity.models.user import User


class UserRepository:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get(self, user_id: int) -> User | None:
        return await self._session.get(User, int(user_id))

    async def get_by_email(self, email: str) -> User | None:
        stmt = select(User).where(func.lower(User.email) == email.strip().lower())
        return (await self._session.execute(stmt)).scalar_one_or_none()

    async def get_by_username(self, username: str) -> User | None:
        stmt = select(User).where(User.username_lower == username.lower())
        return (await self._session.execute(stmt)).scalar_one_or_none()

    async def get_many(self, ids: list[int]) -> list[User]:
        if not ids:
            return []
        stmt = select(User).where(User.id.in_(ids)).order_by(User.full_name.asc(), User.id.asc())
        return list((await self._session.execute(stmt)).scalars().all())

    async def create(self, *, email: str, full_name: str, avatar_url: str | None) -> User:
        user = User(
            email=email.strip().lower(),
            full_name=full_name,
            avatar_url=avatar_url,
            interests=[],
        )
        self._session.add(user)
        await self._session.flush()
        return user

    async def list_located(self, *, exclude_id: int | None = None) -> list[User]:
        """Users with a stored location, most recently updated first."""
        stmt = select(User).where(User.latitude.is_not(None), User.longitude.is_not(None))
        if exclude_id is not None:
            stmt = stmt.where(User.id != int(exclude_id))
        stmt = stmt.order_by(User.location_updated_at.desc(), User.id.asc())
        return list((await self._session.execute(stmt)).scalars().all())

    async def search_by_username(self, q: str, *, exclude_id: int, limit: int) -> list[User]:
        # Wildcards in the query match literally
        term = q.strip().lower().replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
        pattern = f"%{term}%"
        stmt = (
            select(User)
            .where(User.username_lower.like(pattern, escape="\\"), User.id != int(exclude_id))
            .order_by(User.username_lower.asc(), User.id.asc())
            .limit(limit)
        )
        return list((await self._session.execute(stmt)).scalars().all())
