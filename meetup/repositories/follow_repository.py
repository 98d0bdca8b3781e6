from typing import List, Optional, Tuple

from sqlalchemy import and_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from meetup.models.user import User
from meetup.models.user_connection import UserConnection


class FollowRepository:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def get(self, follower_id: int, following_id: int) -> Optional[UserConnection]:
        result = await self.db.execute(
            select(UserConnection).where(
                and_(
                    UserConnection.follower_id == follower_id,
                    UserConnection.following_id == following_id,
                )
            )
        )
        return result.scalar_one_or_none()

    async def create(self, follower_id: int, following_id: int) -> Tuple[UserConnection, bool]:
        """Follow a user; an existing or concurrently created follow is returned with False."""
        existing = await self.get(follower_id, following_id)
        if existing:
            return existing, False

        connection = UserConnection(follower_id=follower_id, following_id=following_id)
        self.db.add(connection)
        try:
            await self.db.commit()
        except IntegrityError:
            await self.db.rollback()
            existing = await self.get(follower_id, following_id)
            if existing is None:
                raise
            return existing, False

        await self.db.refresh(connection)
        return connection, True

    async def delete(self, follower_id: int, following_id: int) -> bool:
        connection = await self.get(follower_id, following_id)
        if not connection:
            return False

        await self.db.delete(connection)
        await self.db.commit()
        return True

    async def get_followers(self, user_id: int) -> List[User]:
        result = await self.db.execute(
            select(User)
            .join(UserConnection, UserConnection.follower_id == User.id)
            .where(UserConnection.following_id == user_id)
            .order_by(UserConnection.id.asc())
        )
        return list(result.scalars().all())

    async def get_following(self, user_id: int) -> List[User]:
        result = await self.db.execute(
            select(User)
            .join(UserConnection, UserConnection.following_id == User.id)
            .where(UserConnection.follower_id == user_id)
            .order_by(UserConnection.id.asc())
        )
        return list(result.scalars().all())
