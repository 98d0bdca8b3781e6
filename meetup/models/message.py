from sqlalchemy import Column, DateTime, ForeignKey, Integer, Text

from .base import BaseModel, utcnow


class Message(BaseModel):
    __tablename__ = "messages"

    activity_id = Column(Integer, ForeignKey("activities.id"), nullable=False, index=True)
    sender_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    content = Column(Text, nullable=False)
    sent_at = Column(DateTime, default=utcnow, nullable=False, index=True)

    # ids are never reused, even after an activity and its messages are deleted
    __table_args__ = {"sqlite_autoincrement": True}
