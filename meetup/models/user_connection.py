from sqlalchemy import Column, ForeignKey, Integer, UniqueConstraint

from .base import BaseModel


class UserConnection(BaseModel):
    """Follow edge: ``follower_id`` follows ``following_id``."""

    __tablename__ = "user_connections"

    follower_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    following_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)

    __table_args__ = (
        UniqueConstraint("follower_id", "following_id", name="unique_user_connection"),
    )
