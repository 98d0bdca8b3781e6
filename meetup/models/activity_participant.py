from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, UniqueConstraint

from .base import BaseModel, utcnow


class ActivityParticipant(BaseModel):
    __tablename__ = "activity_participants"

    activity_id = Column(Integer, ForeignKey("activities.id"), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    status = Column(String(20), nullable=False, default="joined")
    joined_at = Column(DateTime, default=utcnow, nullable=False)

    # one participant record per user and activity
    __table_args__ = (
        UniqueConstraint("activity_id", "user_id", name="unique_activity_participant"),
    )
