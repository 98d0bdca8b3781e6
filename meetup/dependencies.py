from fastapi.requests import HTTPConnection

from meetup.chat_protocol import ActivityChatProtocol
from meetup.config import Settings


def get_settings(connection: HTTPConnection) -> Settings:
    return connection.app.state.settings


def get_chat_protocol(connection: HTTPConnection) -> ActivityChatProtocol:
    return connection.app.state.chat_protocol
