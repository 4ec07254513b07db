"""WebSocket endpoint for live queries and notices."""

import asyncio
import json
import logging
from typing import Annotated
from uuid import UUID

from fastapi import (
    APIRouter,
    Depends,
    Query,
    WebSocket,
    WebSocketDisconnect,
    WebSocketException,
    status,
)

from pastoral.core.security import verify_token
from pastoral.services.websocket_manager import manager

logger = logging.getLogger(__name__)

router = APIRouter()


async def get_current_user_ws(token: str = Query(...)) -> UUID:
    """
    Verify JWT token for WebSocket connection.
    Token is passed as query parameter since WebSocket doesn't support headers.
    """
    try:
        payload = verify_token(token, token_type="access")
        user_id = payload.get("sub")
        if user_id is None:
            raise ValueError("Invalid token: no user_id")
        return UUID(user_id)
    except ValueError as e:
        logger.error(f"WebSocket auth error: {e}")
        raise WebSocketException(code=status.WS_1008_POLICY_VIOLATION) from None


@router.websocket("/live")
async def websocket_live(
    websocket: WebSocket,
    user_id: Annotated[UUID, Depends(get_current_user_ws)],
):
    """
    Live queries over a WebSocket.

    Client connects with: ws://host/api/ws/live?token=JWT_TOKEN and sends

        {"action": "subscribe", "collection": "careNotes", "member_id": "..."}
        {"action": "unsubscribe", "collection": "careNotes"}

    Server messages are ``snapshot`` (tagged with their generation),
    ``notice``, ``error`` and ``pong``.
    """
    await manager.connect(websocket, user_id)
    session, outbox = manager.open_session(
        websocket.app.state.store, websocket.app.state.notices
    )
    sender = asyncio.create_task(manager.pump(websocket, outbox))

    try:
        # Everything outgoing goes through the outbox so only one task writes
        await outbox.put({
            "type": "connected",
            "message": "WebSocket connected successfully",
            "user_id": str(user_id),
        })

        while True:
            data = await websocket.receive_text()
            if data == "ping":
                await outbox.put({"type": "pong"})
                continue
            try:
                message = json.loads(data)
                # Opening a subscription runs the first query synchronously
                await asyncio.to_thread(session.handle, message)
            except ValueError as e:
                logger.warning(f"Rejected live query message from user {user_id}: {e}")
                await outbox.put({"type": "error", "message": str(e)})

    except WebSocketDisconnect:
        logger.info(f"WebSocket disconnected gracefully for user {user_id}")

    finally:
        session.close()
        sender.cancel()
        try:
            await sender
        except asyncio.CancelledError:
            pass
        except (WebSocketDisconnect, RuntimeError) as e:
            logger.debug(f"Sender for user {user_id} stopped on a closed socket: {e}")
        logger.info(f"WebSocket connection closed for user {user_id}")
