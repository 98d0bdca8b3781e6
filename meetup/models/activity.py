from sqlalchemy import JSON, Column, DateTime, ForeignKey, Integer, String, Text

from .base import BaseModel


class Activity(BaseModel):
    __tablename__ = "activities"

    title = Column(String(200), nullable=False)
    description = Column(Text, nullable=False)
    creator_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    location = Column(String(200), nullable=False, index=True)
    date_time = Column(DateTime, nullable=False, index=True)
    max_participants = Column(Integer, nullable=True)
    categories = Column(JSON, nullable=False, default=list)
    image = Column(String(500), nullable=True)
    status = Column(String(20), nullable=False, default="upcoming")
