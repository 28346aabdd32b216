"""WebSocket endpoint: ``/ws?token=<jwt>``.

A connection joins its owner's room, and the admin room for admins. Clients
only listen; anything they send is answered with a ``pong`` so they can keep
the connection alive through proxies.
"""

from fastapi import APIRouter, WebSocket, WebSocketDisconnect

from pizzeria.domain import pizzeria
from pizzeria.identity.access import authenticate
from pizzeria.realtime import hub
from pizzeria.realtime.port import ADMIN_ROOM, user_room
from pizzeria.shared.errors import PizzeriaError
from pizzeria.utils.logging import get_logger

logger = get_logger(__name__)

router = APIRouter(tags=["realtime"])

# Application-defined close code: authentication failed
POLICY_UNAUTHORIZED = 4401


@router.websocket("/ws")
async def connect(websocket: WebSocket, token: str | None = None):
    # HTTP middleware doesn't run for WebSocket scopes
    with pizzeria.domain_context():
        try:
            user = authenticate(token)
        except PizzeriaError as exc:
            logger.info("realtime_rejected", reason=exc.message)
            await websocket.close(code=POLICY_UNAUTHORIZED, reason=exc.message)
            return
        user_id, is_admin = str(user.id), user.is_admin

    await websocket.accept()
    rooms = [user_room(user_id)]
    if is_admin:
        rooms.append(ADMIN_ROOM)
    hub.join(websocket, rooms)
    await websocket.send_json({"event": "connected", "data": {"rooms": rooms}})

    try:
        while True:
            await websocket.receive_text()
            await websocket.send_json({"event": "pong", "data": {}})
    except WebSocketDisconnect:
        logger.info("realtime_disconnected", user_id=user_id)
    finally:
        hub.leave(websocket)
