import logging
from typing import Dict, List, Optional

from fastapi import WebSocket, WebSocketDisconnect
from starlette.websockets import WebSocketState

from meetup.schemas.envelope import OutboundEnvelope, encode_envelope

logger = logging.getLogger(__name__)


def is_open(websocket: WebSocket) -> bool:
    return (
        websocket.client_state == WebSocketState.CONNECTED
        and websocket.application_state == WebSocketState.CONNECTED
    )


class ConnectionManager:
    """Maps each connected user to exactly one live websocket.

    A second registration for the same user replaces the first: the older
    socket stays open but stops receiving broadcasts. Delivery is best effort;
    envelopes for users without an open socket are dropped.
    """

    def __init__(self):
        self.active_connections: Dict[int, WebSocket] = {}

    async def connect(self, websocket: WebSocket, user_id: int):
        await websocket.accept()
        self.register(user_id, websocket)
        logger.info("chat channel opened", extra={"connected_users": len(self.active_connections)})

    async def disconnect(self, websocket: WebSocket, user_id: int):
        if self.unregister(user_id, websocket):
            logger.info("chat channel closed", extra={"connected_users": len(self.active_connections)})

    def register(self, user_id: int, websocket: WebSocket):
        previous = self.active_connections.get(user_id)
        if previous is not None and previous is not websocket:
            logger.info("chat channel replaced by a newer connection", extra={"target_user_id": user_id})
        self.active_connections[user_id] = websocket

    def unregister(self, user_id: int, websocket: Optional[WebSocket] = None) -> bool:
        """Drop the mapping for ``user_id``; a no-op if it is already gone.

        With ``websocket`` given, the mapping is only dropped while it still
        points at that socket, so a replaced connection closing late cannot
        evict its successor.
        """
        current = self.active_connections.get(user_id)
        if current is None:
            return False
        if websocket is not None and current is not websocket:
            return False
        del self.active_connections[user_id]
        return True

    async def send_to_channel(self, websocket: WebSocket, envelope: OutboundEnvelope) -> bool:
        if not is_open(websocket):
            return False
        try:
            await websocket.send_text(encode_envelope(envelope))
        except (WebSocketDisconnect, RuntimeError):
            logger.warning("send on a closed chat channel", extra={"envelope_type": envelope.type})
            return False
        return True

    async def send(self, user_id: int, envelope: OutboundEnvelope) -> bool:
        websocket = self.active_connections.get(user_id)
        if websocket is None:
            return False
        delivered = await self.send_to_channel(websocket, envelope)
        if not delivered:
            self.unregister(user_id, websocket)
            logger.debug("envelope dropped", extra={"target_user_id": user_id, "envelope_type": envelope.type})
        return delivered
