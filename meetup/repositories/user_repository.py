from typing import List, Optional

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from meetup.auth import get_password_hash
from meetup.models.base import utcnow
from meetup.models.user import User
from meetup.schemas.user import UserCreate, UserUpdate


class UserRepository:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def create(self, user_data: UserCreate) -> User:
        db_user = User(
            username=user_data.username,
            email=user_data.email,
            hashed_password=get_password_hash(user_data.password),
            display_name=user_data.display_name,
            bio=user_data.bio,
            profile_image=user_data.profile_image,
            location=user_data.location,
            interests=list(user_data.interests),
            wishlist=list(user_data.wishlist),
            privacy_settings=user_data.privacy_settings,
        )
        self.db.add(db_user)
        await self.db.commit()
        await self.db.refresh(db_user)
        return db_user

    async def get_by_id(self, user_id: int) -> Optional[User]:
        result = await self.db.execute(select(User).where(User.id == user_id))
        return result.scalar_one_or_none()

    async def get_by_username(self, username: str) -> Optional[User]:
        result = await self.db.execute(
            select(User).where(func.lower(User.username) == username.lower())
        )
        return result.scalar_one_or_none()

    async def get_by_email(self, email: str) -> Optional[User]:
        result = await self.db.execute(
            select(User).where(func.lower(User.email) == email.lower())
        )
        return result.scalar_one_or_none()

    async def update(self, user_id: int, user_data: UserUpdate) -> Optional[User]:
        db_user = await self.get_by_id(user_id)
        if not db_user:
            return None

        for field, value in user_data.model_dump(exclude_unset=True).items():
            setattr(db_user, field, value)
        db_user.last_active = utcnow()

        await self.db.commit()
        await self.db.refresh(db_user)
        return db_user

    async def get_nearby(self, location: str, limit: int = 10) -> List[User]:
        result = await self.db.execute(
            select(User)
            .where(User.location.icontains(location, autoescape=True))
            .order_by(User.id)
            .limit(limit)
        )
        return list(result.scalars().all())

    async def get_all_except(self, user_id: int) -> List[User]:
        result = await self.db.execute(
            select(User).where(User.id != user_id, User.is_active.is_(True)).order_by(User.id)
        )
        return list(result.scalars().all())
