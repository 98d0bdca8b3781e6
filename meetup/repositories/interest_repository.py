from typing import List

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from meetup.models.interest_category import InterestCategory

DEFAULT_INTEREST_CATEGORIES = [
    ("Hiking", "mountain"),
    ("Photography", "camera"),
    ("Cooking", "utensils"),
    ("Music", "music"),
    ("Art", "palette"),
    ("Sports", "football"),
    ("Technology", "laptop-code"),
    ("Travel", "plane"),
    ("Books", "book"),
    ("Movies", "film"),
    ("Gaming", "gamepad"),
    ("Fitness", "dumbbell"),
]


class InterestRepository:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_all(self) -> List[InterestCategory]:
        result = await self.db.execute(select(InterestCategory).order_by(InterestCategory.id))
        return list(result.scalars().all())

    async def seed_defaults(self) -> int:
        """Insert the default categories that are missing; returns how many were added."""
        existing = {category.name for category in await self.get_all()}
        added = 0
        for name, icon in DEFAULT_INTEREST_CATEGORIES:
            if name in existing:
                continue
            self.db.add(InterestCategory(name=name, icon=icon))
            added += 1
        if added:
            await self.db.commit()
        return added
