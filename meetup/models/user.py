from sqlalchemy import JSON, Boolean, Column, DateTime, String, Text

from .base import BaseModel, utcnow


class User(BaseModel):
    __tablename__ = "users"

    username = Column(String(50), unique=True, index=True, nullable=False)
    email = Column(String(100), unique=True, index=True, nullable=False)
    hashed_password = Column(String(255), nullable=False)
    display_name = Column(String(100), nullable=False)
    bio = Column(Text, nullable=True)
    profile_image = Column(String(500), nullable=True)
    location = Column(String(200), nullable=True, index=True)
    interests = Column(JSON, nullable=False, default=list)
    wishlist = Column(JSON, nullable=False, default=list)
    privacy_settings = Column(JSON, nullable=True)
    is_active = Column(Boolean, default=True, nullable=False)
    last_active = Column(DateTime, default=utcnow, nullable=False)
