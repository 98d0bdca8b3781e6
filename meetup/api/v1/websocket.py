import logging
from typing import Optional

from fastapi import APIRouter, WebSocket, WebSocketDisconnect, status

from meetup.obs.logging import bind_context, reset_context
from meetup.repositories.user_repository import UserRepository
from meetup.schemas.envelope import ChatErrorCode, ErrorEnvelope

logger = logging.getLogger(__name__)

router = APIRouter()


def parse_user_id(raw: Optional[str]) -> Optional[int]:
    if raw is None:
        return None
    try:
        user_id = int(raw)
    except ValueError:
        return None
    return user_id if user_id > 0 else None


@router.websocket("/ws")
async def activity_chat_socket(websocket: WebSocket):
    state = websocket.app.state
    manager = state.connection_manager
    protocol = state.chat_protocol

    user_id = parse_user_id(websocket.query_params.get("userId"))
    if user_id is None:
        logger.info("chat channel refused: missing or malformed userId")
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION, reason="userId required")
        return

    async with state.database.session() as db:
        user = await UserRepository(db).get_by_id(user_id)
    if user is None or not user.is_active:
        logger.info("chat channel refused: unknown user", extra={"target_user_id": user_id})
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION, reason="Unknown user")
        return

    tokens = bind_context(user_id=user_id, channel="activity-chat")
    try:
        await manager.connect(websocket, user_id)
        while True:
            raw = await websocket.receive_text()
            try:
                await protocol.dispatch(user_id, raw, channel=websocket)
            except WebSocketDisconnect:
                raise
            except Exception:
                logger.exception("chat frame failed")
                await manager.send_to_channel(
                    websocket,
                    ErrorEnvelope(code=ChatErrorCode.INTERNAL, message="Failed to process message"),
                )
    except WebSocketDisconnect:
        pass
    finally:
        await manager.disconnect(websocket, user_id)
        reset_context(tokens)
