"""
Repository Pattern -- abstracts DB access so domain logic stays DB-agnostic.

Each repository receives an ``AsyncSession`` (unit-of-work) and exposes
domain-relevant queries only.  Repositories flush but never commit; the
request-scoped session owns the transaction.
"""

from __future__ import annotations

from typing import Optional

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from .models import DistanceQueryModel, UserModel


class DistanceQueryRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(
        self,
        *,
        source: str,
        destination: str,
        distance: float,
        source_lat: float | None = None,
        source_lon: float | None = None,
        destination_lat: float | None = None,
        destination_lon: float | None = None,
        user_id: int | None = None,
    ) -> DistanceQueryModel:
        query = DistanceQueryModel(
            user_id=user_id,
            source=source,
            destination=destination,
            distance=distance,
            source_lat=source_lat,
            source_lon=source_lon,
            destination_lat=destination_lat,
            destination_lon=destination_lon,
        )
        self.session.add(query)
        await self.session.flush()
        return query

    @staticmethod
    def _owned_by(stmt, user_id: int | None):
        # ``None`` means rows nobody owns, never "every row"
        if user_id is None:
            return stmt.where(DistanceQueryModel.user_id.is_(None))
        return stmt.where(DistanceQueryModel.user_id == user_id)

    async def list_recent(
        self, *, user_id: int | None = None, limit: int = 100
    ) -> list[DistanceQueryModel]:
        """Newest first.  Only *user_id*'s rows, or only anonymous rows when ``None``."""
        stmt = self._owned_by(select(DistanceQueryModel), user_id)
        stmt = stmt.order_by(
            DistanceQueryModel.created_at.desc(), DistanceQueryModel.id.desc()
        ).limit(limit)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def count(self, *, user_id: int | None = None) -> int:
        """Same ownership rule as ``list_recent``, without the limit."""
        stmt = self._owned_by(
            select(func.count()).select_from(DistanceQueryModel), user_id
        )
        result = await self.session.execute(stmt)
        return result.scalar() or 0


class UserRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(
        self, *, username: str, email: str, password_hash: str
    ) -> UserModel:
        user = UserModel(
            username=username, email=email, password_hash=password_hash
        )
        self.session.add(user)
        await self.session.flush()
        return user

    async def get_by_id(self, user_id: int) -> Optional[UserModel]:
        return await self.session.get(UserModel, user_id)

    async def get_by_email(self, email: str) -> Optional[UserModel]:
        result = await self.session.execute(
            select(UserModel).where(UserModel.email == email)
        )
        return result.scalar_one_or_none()

    async def get_by_username(self, username: str) -> Optional[UserModel]:
        result = await self.session.execute(
            select(UserModel).where(UserModel.username == username)
        )
        return result.scalar_one_or_none()
