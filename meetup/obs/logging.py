"""Structured logging for the API and the chat socket."""

from __future__ import annotations

import json
import logging
from contextvars import ContextVar, Token
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from meetup.config import Settings

_USER_ID: ContextVar[Optional[int]] = ContextVar("meetup_user_id", default=None)
_CHANNEL: ContextVar[Optional[str]] = ContextVar("meetup_channel", default=None)

_SENSITIVE_KEYWORDS = (
    "token",
    "secret",
    "authorization",
    "password",
    "email",
    "content",
)

_MAX_STRING_LENGTH = 256

_RESERVED_ATTRS = {
    "args",
    "msg",
    "levelname",
    "levelno",
    "pathname",
    "filename",
    "module",
    "exc_info",
    "exc_text",
    "stack_info",
    "lineno",
    "funcName",
    "created",
    "msecs",
    "relativeCreated",
    "thread",
    "threadName",
    "process",
    "processName",
    "message",
    "name",
    "taskName",
}


def bind_context(*, user_id: Optional[int] = None, channel: Optional[str] = None) -> Dict[str, Token]:
    """Bind fields logged with every record of the current task; returns reset tokens."""
    tokens: Dict[str, Token] = {}
    if user_id is not None:
        tokens["user_id"] = _USER_ID.set(user_id)
    if channel is not None:
        tokens["channel"] = _CHANNEL.set(channel)
    return tokens


def reset_context(tokens: Dict[str, Token]) -> None:
    for key, token in tokens.items():
        if key == "user_id":
            _USER_ID.reset(token)
        elif key == "channel":
            _CHANNEL.reset(token)


def _sanitize_field(key: str, value: Any) -> Any:
    lowered = key.lower()
    if any(keyword in lowered for keyword in _SENSITIVE_KEYWORDS):
        return "[redacted]"
    if isinstance(value, str) and len(value) > _MAX_STRING_LENGTH:
        return f"{value[:_MAX_STRING_LENGTH]}…"
    return value


class JSONLogFormatter(logging.Formatter):
    """Emit logs as JSON objects with structured fields."""

    def __init__(self, service: str, env: str) -> None:
        super().__init__()
        self.service = service
        self.env = env

    def format(self, record: logging.LogRecord) -> str:  # noqa: A003 (match logging api)
        payload: Dict[str, object] = {
            "ts": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname.lower(),
            "msg": record.getMessage(),
            "logger": record.name,
            "service": self.service,
            "env": self.env,
        }
        user_id = _USER_ID.get()
        if user_id is not None:
            payload["user_id"] = user_id
        channel = _CHANNEL.get()
        if channel:
            payload["channel"] = channel
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        for key, value in record.__dict__.items():
            if key in _RESERVED_ATTRS or key in payload:
                continue
            payload[key] = _sanitize_field(key, value)
        return json.dumps(payload, separators=(",", ":"), default=str)


class _MeetupHandler(logging.StreamHandler):
    """Marker type so reconfiguration only replaces our own handler."""


def configure_logging(settings: Settings) -> logging.Logger:
    root = logging.getLogger()
    for handler in list(root.handlers):
        if isinstance(handler, _MeetupHandler):
            root.removeHandler(handler)
    handler = _MeetupHandler()
    if settings.LOG_JSON:
        handler.setFormatter(
            JSONLogFormatter(service=settings.APP_NAME, env="debug" if settings.DEBUG else "production")
        )
    else:
        handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s"))
    root.addHandler(handler)
    root.setLevel(settings.LOG_LEVEL.upper())
    return logging.getLogger("meetup")
