"""Integration tests for the /ws endpoint."""

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from starlette.websockets import WebSocketDisconnect

from pizzeria.realtime import hub
from pizzeria.realtime.routes import router

@pytest.fixture()
def ws_client():
    app = FastAPI()
    app.include_router(router)
    return TestClient(app)

def _token(bearer, user):
    return bearer(user)["Authorization"].removeprefix("Bearer ")

class TestWebSocket:
    def test_customer_joins_own_room(self, ws_client, customer, bearer):
        with ws_client.websocket_connect(f"/ws?token={_token(bearer, customer)}") as websocket:
            message = websocket.receive_json()
            assert message == {"event": "connected", "data": {"rooms": [f"user-{customer.id}"]}}
            assert hub.connection_count(f"user-{customer.id}") == 1

            websocket.send_text("ping")
            assert websocket.receive_json()["event"] == "pong"

    def test_admin_joins_admin_room(self, ws_client, admin, bearer):
        with ws_client.websocket_connect(f"/ws?token={_token(bearer, admin)}") as websocket:
            rooms = websocket.receive_json()["data"]["rooms"]
        assert rooms == [f"user-{admin.id}", "admin-room"]

    def test_bad_token_is_refused(self, ws_client):
        with pytest.raises(WebSocketDisconnect) as exc:
            with ws_client.websocket_connect("/ws?token=garbage") as websocket:
                websocket.receive_json()
        assert exc.value.code == 4401
