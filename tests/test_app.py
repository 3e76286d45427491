"""End-to-end tests through the FastAPI WebSocket and HTTP routes."""

import pytest
from fastapi.testclient import TestClient
from starlette.websockets import WebSocketDisconnect

from app import app


def join_message(room_id):
    return {"type": "join", "roomId": room_id}


@pytest.fixture
def client():
    # Entering the client runs the lifespan, so every test gets a fresh registry.
    with TestClient(app) as client:
        yield client


class TestSignaling:

    def test_broadcaster_viewer_scenario(self, client):
        with client.websocket_connect("/") as a:
            a.send_json(join_message("Room1"))
            assert a.receive_json() == {"type": "broadcast"}

            with client.websocket_connect("/") as b:
                b.send_json(join_message("Room1"))
                assert b.receive_json() == {"type": "view"}
                assert a.receive_json() == {"type": "viewer", "viewerId": "0"}

                a.send_json({"type": "webrtcbroadcaster", "viewerId": "0", "kind": "offer", "message": {"sdp": "x"}})
                assert b.receive_json() == {"type": "webrtcviewer", "kind": "offer", "message": {"sdp": "x"}}

                b.send_json({"type": "webrtcviewer", "kind": "answer", "message": {"sdp": "y"}})
                assert a.receive_json() == {
                    "type": "webrtcbroadcaster",
                    "viewerId": "0",
                    "kind": "answer",
                    "message": {"sdp": "y"},
                }

            assert a.receive_json() == {"type": "viewerdisconnected", "viewerId": "0"}

    def test_broadcaster_disconnect_closes_viewers(self, client):
        with client.websocket_connect("/") as viewer:
            with client.websocket_connect("/") as broadcaster:
                broadcaster.send_json(join_message("room"))
                assert broadcaster.receive_json() == {"type": "broadcast"}
                viewer.send_json(join_message("room"))
                assert viewer.receive_json() == {"type": "view"}
                assert broadcaster.receive_json() == {"type": "viewer", "viewerId": "0"}

            assert viewer.receive_json() == {"type": "broadcasterdisconnected"}
            with pytest.raises(WebSocketDisconnect):
                viewer.receive_json()

        assert client.get("/health").json()["rooms"] == 0

    def test_invalid_frames_do_not_close_connection(self, client):
        with client.websocket_connect("/") as ws:
            ws.send_text("not json")
            ws.send_bytes(b"\x00\x01")
            ws.send_json({"type": "join", "roomId": ""})
            ws.send_json({"type": "requestviewers"})

            ws.send_json(join_message("room"))
            assert ws.receive_json() == {"type": "broadcast"}

            ws.send_text("{broken")
            ws.send_json({"type": "requestviewers"})
            ws.send_json({"type": "webrtcbroadcaster", "viewerId": "0", "kind": "offer", "message": {}})

            assert client.get("/rooms/room").json() == {"room_id": "room", "viewers": 0}

    def test_any_path_is_accepted(self, client):
        with client.websocket_connect("/some/page") as ws:
            ws.send_json(join_message("room"))
            assert ws.receive_json() == {"type": "broadcast"}


class TestHttpRoutes:

    def test_health(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json() == {"status": "ok", "rooms": 0}

    def test_unknown_room_is_404(self, client):
        response = client.get("/rooms/nope")
        assert response.status_code == 404

    def test_room_details_count_viewers(self, client):
        with client.websocket_connect("/") as broadcaster:
            broadcaster.send_json(join_message("room"))
            broadcaster.receive_json()
            with client.websocket_connect("/") as viewer:
                viewer.send_json(join_message("room"))
                viewer.receive_json()
                broadcaster.receive_json()

                assert client.get("/health").json() == {"status": "ok", "rooms": 1}
                assert client.get("/rooms/room").json() == {"room_id": "room", "viewers": 1}
