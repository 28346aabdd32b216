"""Broadcaster registry.

The running application broadcasts through the process-wide WebSocketHub;
tests swap in FakeBroadcaster with set_broadcaster().
"""

from pizzeria.realtime.port import Broadcaster
from pizzeria.realtime.websocket_hub import WebSocketHub

hub = WebSocketHub()

_current_broadcaster: Broadcaster | None = None


def get_broadcaster() -> Broadcaster:
    return _current_broadcaster or hub


def set_broadcaster(broadcaster: Broadcaster) -> None:
    global _current_broadcaster
    _current_broadcaster = broadcaster


def reset_broadcaster() -> None:
    global _current_broadcaster
    _current_broadcaster = None
