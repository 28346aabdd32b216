"""Real-time broadcaster port: push an event to everyone in a room."""

from abc import ABC, abstractmethod

ADMIN_ROOM = "admin-room"


def user_room(user_id) -> str:
    return f"user-{user_id}"


class Broadcaster(ABC):
    @abstractmethod
    def emit(self, room: str, event: str, payload: dict) -> None:
        """Deliver ``payload`` to every subscriber of ``room``. Must not block on slow clients."""
        ...
