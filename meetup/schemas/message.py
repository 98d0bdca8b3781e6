from .base import CamelModel, UTCDateTime


class MessageResponse(CamelModel):
    """Canonical persisted chat message, as broadcast and as returned by history."""

    id: int
    activity_id: int
    sender_id: int
    content: str
    sent_at: UTCDateTime
