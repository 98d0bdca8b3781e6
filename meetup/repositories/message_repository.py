from datetime import datetime
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from meetup.models.base import utcnow
from meetup.models.message import Message


class MessageRepository:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def create(
        self,
        activity_id: int,
        sender_id: int,
        content: str,
        sent_at: Optional[datetime] = None,
    ) -> Message:
        """Persist a chat message; id and timestamp are assigned here, never by the client."""
        message = Message(
            activity_id=activity_id,
            sender_id=sender_id,
            content=content,
            sent_at=sent_at or utcnow(),
        )
        self.db.add(message)
        await self.db.commit()
        await self.db.refresh(message)
        return message

    async def get_activity_messages(self, activity_id: int) -> List[Message]:
        """Full chat history of an activity, oldest first; ties on sent_at keep insertion order."""
        result = await self.db.execute(
            select(Message)
            .where(Message.activity_id == activity_id)
            .order_by(Message.sent_at.asc(), Message.id.asc())
        )
        return list(result.scalars().all())
