from enum import Enum as PyEnum

from sqlalchemy import Boolean, Column, ForeignKey, Integer, String, Text

from .base import BaseModel


class NotificationType(str, PyEnum):
    ACTIVITY_JOIN = "activity-join"
    NEW_FOLLOWER = "new-follower"


class Notification(BaseModel):
    __tablename__ = "notifications"

    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    type = Column(String(50), nullable=False)
    content = Column(Text, nullable=False)
    related_id = Column(Integer, nullable=True)
    is_read = Column(Boolean, default=False, nullable=False)
