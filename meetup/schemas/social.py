from typing import Optional

from .base import CamelModel, UTCDateTime


class UserConnectionResponse(CamelModel):
    id: int
    follower_id: int
    following_id: int
    created_at: UTCDateTime


class NotificationResponse(CamelModel):
    id: int
    user_id: int
    type: str
    content: str
    related_id: Optional[int] = None
    is_read: bool
    created_at: UTCDateTime


class InterestCategoryResponse(CamelModel):
    id: int
    name: str
    icon: Optional[str] = None
