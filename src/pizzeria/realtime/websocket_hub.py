"""In-process WebSocket hub.

Connections join rooms when they authenticate. ``emit`` may be called from
any thread (request handlers run command processing synchronously); delivery
is scheduled on the event loop that owns the sockets and never awaited by the
caller.
"""

import asyncio
import threading
from collections import defaultdict

from fastapi import WebSocket

from pizzeria.realtime.port import Broadcaster
from pizzeria.utils.logging import get_logger

logger = get_logger(__name__)


class WebSocketHub(Broadcaster):
    def __init__(self):
        self._rooms: dict[str, set[WebSocket]] = defaultdict(set)
        self._guard = threading.Lock()
        self._loop: asyncio.AbstractEventLoop | None = None

    def bind_loop(self, loop: asyncio.AbstractEventLoop) -> None:
        self._loop = loop

    def join(self, websocket: WebSocket, rooms: list[str]) -> None:
        with self._guard:
            for room in rooms:
                self._rooms[room].add(websocket)
        logger.info("realtime_joined", rooms=rooms)

    def leave(self, websocket: WebSocket) -> None:
        with self._guard:
            for room in list(self._rooms):
                self._rooms[room].discard(websocket)
                if not self._rooms[room]:
                    del self._rooms[room]

    def connection_count(self, room: str) -> int:
        with self._guard:
            return len(self._rooms.get(room, ()))

    def emit(self, room: str, event: str, payload: dict) -> None:
        with self._guard:
            targets = list(self._rooms.get(room, ()))
        if not targets:
            return

        loop = self._loop
        if loop is None or loop.is_closed():
            logger.warning("realtime_no_loop", room=room, event_name=event)
            return

        message = {"event": event, "data": payload}
        for websocket in targets:
            asyncio.run_coroutine_threadsafe(self._deliver(websocket, message), loop)

    async def _deliver(self, websocket: WebSocket, message: dict) -> None:
        try:
            await websocket.send_json(message)
        except Exception as exc:
            logger.warning("realtime_delivery_failed", event_name=message["event"], error=str(exc))
            self.leave(websocket)
