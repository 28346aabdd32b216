"""Fake broadcaster: records emitted events for test assertions."""

from pizzeria.realtime.port import Broadcaster


class FakeBroadcaster(Broadcaster):
    def __init__(self):
        self.events: list[dict] = []
        self.should_fail = False

    def emit(self, room: str, event: str, payload: dict) -> None:
        if self.should_fail:
            raise ConnectionError("broadcast transport down")
        self.events.append({"room": room, "event": event, "payload": payload})

    def emitted(self, event: str, room: str | None = None) -> list[dict]:
        return [e for e in self.events if e["event"] == event and (room is None or e["room"] == room)]

    def reset(self):
        self.events.clear()
        self.should_fail = False
