"""Websocket frames exchanged on the activity chat channel.

Inbound and outbound frames are tagged unions discriminated by ``type``.
"""

import json
from enum import Enum
from typing import Annotated, List, Literal, Union

from pydantic import BaseModel, Field, StrictInt, StrictStr, TypeAdapter, ValidationError

from .base import CamelModel
from .message import MessageResponse


class ChatErrorCode(str, Enum):
    INVALID_JSON = "invalid_json"
    INVALID_PAYLOAD = "invalid_payload"
    SENDER_MISMATCH = "sender_mismatch"
    NOT_FOUND = "not_found"
    NOT_PARTICIPANT = "not_participant"
    INTERNAL = "internal"


class ActivityChatFrame(CamelModel):
    type: Literal["activity-chat"]
    activity_id: StrictInt
    sender_id: StrictInt
    content: StrictStr


class PingFrame(BaseModel):
    type: Literal["ping"]


InboundFrame = Annotated[Union[ActivityChatFrame, PingFrame], Field(discriminator="type")]


class ActivityMessageEnvelope(BaseModel):
    type: Literal["activity-message"] = "activity-message"
    message: MessageResponse


class ErrorEnvelope(BaseModel):
    type: Literal["error"] = "error"
    code: ChatErrorCode
    message: str


class PongEnvelope(BaseModel):
    type: Literal["pong"] = "pong"


OutboundEnvelope = Annotated[
    Union[ActivityMessageEnvelope, ErrorEnvelope, PongEnvelope],
    Field(discriminator="type"),
]

inbound_frame_adapter = TypeAdapter(InboundFrame)
outbound_envelope_adapter = TypeAdapter(OutboundEnvelope)


def parse_inbound_frame(raw: str) -> InboundFrame:
    """Decode one text frame from a client.

    Raises ``json.JSONDecodeError`` for text that is not JSON and
    ``pydantic.ValidationError`` for JSON of the wrong shape.
    """
    return inbound_frame_adapter.validate_python(json.loads(raw))


def encode_envelope(envelope: OutboundEnvelope) -> str:
    return envelope.model_dump_json(by_alias=True)


def decode_envelope(raw: str) -> OutboundEnvelope:
    return outbound_envelope_adapter.validate_json(raw)


def format_validation_error(exc: ValidationError) -> str:
    parts: List[str] = []
    for error in exc.errors():
        location = ".".join(str(item) for item in error["loc"])
        parts.append(f"{location}: {error['msg']}" if location else error["msg"])
    return "; ".join(parts)
