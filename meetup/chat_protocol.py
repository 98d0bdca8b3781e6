"""Activity chat: validate, persist, fan out.

``handle_event`` turns one inbound frame into the list of deliveries it
causes without touching any socket; ``dispatch`` applies them through the
connection manager. The websocket endpoint awaits ``dispatch`` for each frame
before reading the next one, so frames from one channel are handled strictly
in arrival order.
"""

import json
import logging
from datetime import datetime
from typing import Callable, Iterable, List, NamedTuple, Optional

from fastapi import WebSocket
from pydantic import ValidationError

from meetup.database import Database
from meetup.errors import ActivityNotFound, ChatError, InvalidPayload, NotParticipant, SenderMismatch
from meetup.models.base import utcnow
from meetup.models.message import Message
from meetup.repositories.activity_repository import ActivityRepository
from meetup.repositories.message_repository import MessageRepository
from meetup.schemas.envelope import (
    ActivityChatFrame,
    ActivityMessageEnvelope,
    ChatErrorCode,
    ErrorEnvelope,
    OutboundEnvelope,
    PingFrame,
    PongEnvelope,
    format_validation_error,
    parse_inbound_frame,
)
from meetup.schemas.message import MessageResponse
from meetup.websocket_manager import ConnectionManager

logger = logging.getLogger(__name__)


class Delivery(NamedTuple):
    user_id: int
    envelope: OutboundEnvelope
    # replies go back on the channel the frame arrived on, not through the registry
    reply: bool = False


class MonotonicClock:
    """Server timestamps that never go backwards within the process."""

    def __init__(self, now: Callable[[], datetime] = utcnow):
        self._now = now
        self._last: Optional[datetime] = None

    def __call__(self) -> datetime:
        current = self._now()
        if self._last is not None and current < self._last:
            current = self._last
        self._last = current
        return current


def fan_out(message: Message, participant_ids: Iterable[int]) -> List[Delivery]:
    """One ``activity-message`` delivery per distinct participant."""
    envelope = ActivityMessageEnvelope(message=MessageResponse.model_validate(message))
    deliveries: List[Delivery] = []
    seen = set()
    for user_id in participant_ids:
        if user_id in seen:
            continue
        seen.add(user_id)
        deliveries.append(Delivery(user_id, envelope))
    return deliveries


def error_reply(user_id: int, code: ChatErrorCode, message: str) -> Delivery:
    return Delivery(user_id, ErrorEnvelope(code=code, message=message), reply=True)


class ActivityChatProtocol:
    def __init__(
        self,
        database: Database,
        manager: ConnectionManager,
        *,
        max_length: int = 2000,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.database = database
        self.manager = manager
        self.max_length = max_length
        self.clock = clock or MonotonicClock()

    async def submit(self, activity_id: int, sender_id: int, content: str) -> Message:
        """Validate and persist one chat message and return the stored row.

        Raises ``InvalidPayload`` for blank or oversized content,
        ``ActivityNotFound`` for an unknown activity and ``NotParticipant``
        when the sender has not joined the activity. Nothing is persisted
        when any of these is raised.
        """
        if not content or not content.strip():
            raise InvalidPayload("Message content must not be empty")
        if len(content) > self.max_length:
            raise InvalidPayload(f"Message content must be at most {self.max_length} characters")

        async with self.database.session() as db:
            activity_repo = ActivityRepository(db)
            if await activity_repo.get_by_id(activity_id) is None:
                raise ActivityNotFound(activity_id)
            if not await activity_repo.is_participant(activity_id, sender_id):
                raise NotParticipant(activity_id, sender_id)

            message = await MessageRepository(db).create(
                activity_id, sender_id, content, sent_at=self.clock()
            )

        logger.info(
            "chat message stored",
            extra={"message_id": message.id, "activity_id": activity_id, "sender_id": sender_id},
        )
        return message

    async def participant_ids(self, activity_id: int) -> List[int]:
        async with self.database.session() as db:
            return await ActivityRepository(db).get_participant_ids(activity_id)

    async def history(self, activity_id: int) -> List[Message]:
        async with self.database.session() as db:
            if await ActivityRepository(db).get_by_id(activity_id) is None:
                raise ActivityNotFound(activity_id)
            return await MessageRepository(db).get_activity_messages(activity_id)

    async def message_deliveries(self, message: Message) -> List[Delivery]:
        """One delivery per participant, resolved now.

        The participant set is a snapshot taken after the write: a user joining
        in between still gets the message, one leaving in between may get it too.
        """
        return fan_out(message, await self.participant_ids(message.activity_id))

    async def handle_event(self, user_id: int, raw: str) -> List[Delivery]:
        try:
            frame = parse_inbound_frame(raw)
        except json.JSONDecodeError:
            return [error_reply(user_id, ChatErrorCode.INVALID_JSON, "Invalid JSON format")]
        except ValidationError as exc:
            return [error_reply(user_id, ChatErrorCode.INVALID_PAYLOAD, format_validation_error(exc))]

        if isinstance(frame, ActivityChatFrame):
            return await self._handle_chat(user_id, frame)
        if isinstance(frame, PingFrame):
            return [Delivery(user_id, PongEnvelope(), reply=True)]
        raise TypeError(f"Unhandled chat frame: {type(frame).__name__}")

    async def _handle_chat(self, user_id: int, frame: ActivityChatFrame) -> List[Delivery]:
        try:
            if frame.sender_id != user_id:
                raise SenderMismatch("senderId does not match the connected user")
            message = await self.submit(frame.activity_id, frame.sender_id, frame.content)
        except ChatError as exc:
            logger.info(
                "chat frame rejected",
                extra={"activity_id": frame.activity_id, "error_code": exc.code.value},
            )
            return [error_reply(user_id, exc.code, exc.message)]

        return await self.message_deliveries(message)

    async def deliver(self, deliveries: Iterable[Delivery], channel: Optional[WebSocket] = None) -> int:
        delivered = 0
        for delivery in deliveries:
            if delivery.reply and channel is not None:
                sent = await self.manager.send_to_channel(channel, delivery.envelope)
            else:
                sent = await self.manager.send(delivery.user_id, delivery.envelope)
            delivered += int(sent)
        return delivered

    async def dispatch(self, user_id: int, raw: str, channel: Optional[WebSocket] = None) -> List[Delivery]:
        deliveries = await self.handle_event(user_id, raw)
        await self.deliver(deliveries, channel)
        return deliveries
