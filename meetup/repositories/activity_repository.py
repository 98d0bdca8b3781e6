from typing import List, Optional, Tuple

from sqlalchemy import and_, delete, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from meetup.errors import ActivityFull
from meetup.models.activity import Activity
from meetup.models.activity_participant import ActivityParticipant
from meetup.models.base import utcnow
from meetup.models.message import Message
from meetup.models.user import User
from meetup.schemas.activity import ActivityCreate, ActivityUpdate


class ActivityRepository:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def create(self, activity_data: ActivityCreate, creator_id: int) -> Activity:
        """Create an activity; the creator becomes its first participant."""
        activity = Activity(
            title=activity_data.title,
            description=activity_data.description,
            creator_id=creator_id,
            location=activity_data.location,
            date_time=activity_data.date_time,
            max_participants=activity_data.max_participants,
            categories=list(activity_data.categories),
            image=activity_data.image,
        )
        self.db.add(activity)
        await self.db.flush()

        self.db.add(ActivityParticipant(activity_id=activity.id, user_id=creator_id, status="joined"))

        await self.db.commit()
        await self.db.refresh(activity)
        return activity

    async def get_by_id(self, activity_id: int) -> Optional[Activity]:
        result = await self.db.execute(select(Activity).where(Activity.id == activity_id))
        return result.scalar_one_or_none()

    async def get_upcoming(self, limit: int = 20) -> List[Activity]:
        """Activities scheduled after now, soonest first."""
        result = await self.db.execute(
            select(Activity)
            .where(Activity.date_time > utcnow())
            .order_by(Activity.date_time.asc(), Activity.id.asc())
            .limit(limit)
        )
        return list(result.scalars().all())

    async def get_nearby(self, location: str, limit: int = 20) -> List[Activity]:
        result = await self.db.execute(
            select(Activity)
            .where(
                and_(
                    Activity.location.icontains(location, autoescape=True),
                    Activity.date_time > utcnow(),
                )
            )
            .order_by(Activity.date_time.asc(), Activity.id.asc())
            .limit(limit)
        )
        return list(result.scalars().all())

    async def update(self, activity_id: int, activity_data: ActivityUpdate) -> Optional[Activity]:
        activity = await self.get_by_id(activity_id)
        if not activity:
            return None

        for field, value in activity_data.model_dump(exclude_unset=True).items():
            setattr(activity, field, value)

        await self.db.commit()
        await self.db.refresh(activity)
        return activity

    async def delete(self, activity_id: int) -> bool:
        """Delete an activity together with its participants and messages."""
        activity = await self.get_by_id(activity_id)
        if not activity:
            return False

        await self.db.execute(delete(Message).where(Message.activity_id == activity_id))
        await self.db.execute(
            delete(ActivityParticipant).where(ActivityParticipant.activity_id == activity_id)
        )
        await self.db.delete(activity)
        await self.db.commit()
        return True

    async def get_participants(self, activity_id: int) -> List[User]:
        """Users who have joined the activity, in join order."""
        result = await self.db.execute(
            select(User)
            .join(ActivityParticipant, ActivityParticipant.user_id == User.id)
            .where(ActivityParticipant.activity_id == activity_id)
            .order_by(ActivityParticipant.id.asc())
        )
        return list(result.scalars().all())

    async def get_participant_ids(self, activity_id: int) -> List[int]:
        result = await self.db.execute(
            select(ActivityParticipant.user_id)
            .where(ActivityParticipant.activity_id == activity_id)
            .order_by(ActivityParticipant.id.asc())
        )
        return list(result.scalars().all())

    async def get_participant(self, activity_id: int, user_id: int) -> Optional[ActivityParticipant]:
        result = await self.db.execute(
            select(ActivityParticipant).where(
                and_(
                    ActivityParticipant.activity_id == activity_id,
                    ActivityParticipant.user_id == user_id,
                )
            )
        )
        return result.scalar_one_or_none()

    async def is_participant(self, activity_id: int, user_id: int) -> bool:
        return await self.get_participant(activity_id, user_id) is not None

    async def count_participants(self, activity_id: int) -> int:
        result = await self.db.execute(
            select(func.count(ActivityParticipant.id)).where(
                ActivityParticipant.activity_id == activity_id
            )
        )
        return result.scalar() or 0

    async def add_participant(
        self,
        activity_id: int,
        user_id: int,
        capacity: Optional[int] = None,
        status: str = "joined",
    ) -> Tuple[ActivityParticipant, bool]:
        """Join a user to an activity.

        Joining twice is idempotent, also when both joins race: the existing
        record is returned and the second element of the tuple is False.
        With ``capacity`` set, the participant count is checked after the
        insert inside the same transaction and ``ActivityFull`` is raised
        (and nothing stored) when the insert would exceed it.
        """
        existing = await self.get_participant(activity_id, user_id)
        if existing:
            return existing, False

        if capacity is not None:
            # serialises joins on the same activity where row locks exist
            await self.db.execute(select(Activity.id).where(Activity.id == activity_id).with_for_update())

        participant = ActivityParticipant(activity_id=activity_id, user_id=user_id, status=status)
        self.db.add(participant)
        try:
            await self.db.flush()
            if capacity is not None and await self.count_participants(activity_id) > capacity:
                await self.db.rollback()
                raise ActivityFull(activity_id)
            await self.db.commit()
        except IntegrityError:
            await self.db.rollback()
            existing = await self.get_participant(activity_id, user_id)
            if existing is None:
                raise
            return existing, False

        await self.db.refresh(participant)
        return participant, True

    async def remove_participant(self, activity_id: int, user_id: int) -> bool:
        participant = await self.get_participant(activity_id, user_id)
        if not participant:
            return False

        await self.db.delete(participant)
        await self.db.commit()
        return True
