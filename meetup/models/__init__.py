from .base import Base
from .user import User
from .activity import Activity
from .activity_participant import ActivityParticipant
from .message import Message
from .user_connection import UserConnection
from .notification import Notification, NotificationType
from .interest_category import InterestCategory

__all__ = [
    "Base",
    "User",
    "Activity",
    "ActivityParticipant",
    "Message",
    "UserConnection",
    "Notification",
    "NotificationType",
    "InterestCategory",
]
