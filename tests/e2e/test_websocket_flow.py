"""
E2E tests for the WebSocket endpoint.

Usage:
    pytest tests/e2e/test_websocket_flow.py
"""

import time

import pytest
from fastapi.testclient import TestClient
from fastapi.websockets import WebSocketDisconnect

pytestmark = pytest.mark.e2e

GREETING = {"type": "CONNECTED", "message": "Connected to Tocsin realtime server"}


class TestWebSocketFlow:
    """Client-visible protocol over a real ASGI app."""

    def test_greeting_and_ping(self, client):
        """Test connect -> CONNECTED, PING -> PONG."""
        with client.websocket_connect("/ws") as ws:
            assert ws.receive_json() == GREETING

            ws.send_json({"type": "PING"})
            assert ws.receive_json() == {"type": "PONG"}

    def test_user_auth_then_notification(self, client, make_token):
        """Test an authenticated user receives a per-user notification."""
        with client.websocket_connect("/ws") as ws:
            ws.receive_json()
            ws.send_json({"type": "USER_AUTH", "token": make_token(user_id="u1")})

            reply = ws.receive_json()
            assert reply["type"] == "AUTH_SUCCESS"
            assert reply["user"]["id"] == "u1"

            notification = {"_id": "n1", "title": "Report Verified!"}
            response = client.post(
                "/publish",
                json={
                    "event": "notification.created",
                    "recipientId": "u1",
                    "notification": notification,
                },
            )
            assert response.status_code == 202

            assert ws.receive_json() == {
                "type": "NEW_NOTIFICATION",
                "notification": notification,
            }

    def test_admin_auth_with_user_token(self, client, make_token, tocsin_app):
        """Test ADMIN_AUTH with a user-role token is refused."""
        with client.websocket_connect("/ws") as ws:
            ws.receive_json()
            ws.send_json({"type": "ADMIN_AUTH", "token": make_token(user_id="u1")})

            assert ws.receive_json() == {
                "type": "AUTH_ERROR",
                "message": "Admin access required",
            }
            assert tocsin_app.container.hub.get_admin_count() == 0

    def test_malformed_frame(self, client):
        """Test non-JSON text gets ERROR and the socket stays usable."""
        with client.websocket_connect("/ws") as ws:
            ws.receive_json()

            ws.send_text("this is not json")
            assert ws.receive_json() == {
                "type": "ERROR",
                "message": "Invalid message format",
            }

            ws.send_json({"type": "PING"})
            assert ws.receive_json() == {"type": "PONG"}

    def test_binary_frame_decoded(self, client):
        with client.websocket_connect("/ws") as ws:
            ws.receive_json()

            ws.send_bytes(b'{"type": "PING"}')
            assert ws.receive_json() == {"type": "PONG"}

    def test_unknown_type_gets_no_reply(self, client):
        """Test the next frame after an unknown type is the PONG."""
        with client.websocket_connect("/ws") as ws:
            ws.receive_json()

            ws.send_json({"type": "SUBSCRIBE", "data": {"channel": "x"}})
            ws.send_json({"type": "PING"})

            assert ws.receive_json() == {"type": "PONG"}

    def test_second_session_takes_over(self, client, make_token):
        """Test an unread-count push reaches only the newest session."""
        token = make_token(user_id="u1")

        with client.websocket_connect("/ws") as first:
            first.receive_json()
            first.send_json({"type": "USER_AUTH", "token": token})
            first.receive_json()

            with client.websocket_connect("/ws") as second:
                second.receive_json()
                second.send_json({"type": "USER_AUTH", "token": token})
                second.receive_json()

                client.post(
                    "/publish",
                    json={
                        "event": "notification.count",
                        "recipientId": "u1",
                        "unreadCount": 5,
                    },
                )

                assert second.receive_json() == {
                    "type": "NOTIFICATION_COUNT_UPDATE",
                    "unreadCount": 5,
                }

            first.send_json({"type": "PING"})
            assert first.receive_json() == {"type": "PONG"}

    def test_disconnect_unregisters(self, client, make_token, tocsin_app):
        hub = tocsin_app.container.hub

        with client.websocket_connect("/ws") as ws:
            ws.receive_json()
            ws.send_json({"type": "USER_AUTH", "token": make_token(user_id="u1")})
            ws.receive_json()
            assert hub.get_registered_count() == 1

        # The endpoint task finishes on its own after the client closes
        for _ in range(100):
            if hub.get_total_connections() == 0:
                break
            time.sleep(0.01)

        assert hub.get_total_connections() == 0
        assert hub.get_connection("user_u1") is None

    def test_custom_ws_path(self, make_app):
        """Test the endpoint follows the configured path."""
        app = make_app(ws_path="/realtime")

        with TestClient(app.app) as client:
            with client.websocket_connect("/realtime") as ws:
                assert ws.receive_json() == GREETING

    def test_refused_during_shutdown(self, client, tocsin_app):
        """Test new sockets are closed with 1001 once shutdown starts."""
        client.portal.call(tocsin_app.container.shutdown_manager.initiate_shutdown, "test")

        with pytest.raises(WebSocketDisconnect) as exc_info:
            with client.websocket_connect("/ws") as ws:
                ws.receive_json()

        assert exc_info.value.code == 1001
        assert tocsin_app.container.stats["connections_refused"] == 1

    def test_shutdown_notifies_open_sockets(self, client, tocsin_app):
        """Test SHUTDOWN is sent before the server closes the socket."""
        with client.websocket_connect("/ws") as ws:
            ws.receive_json()

            client.portal.call(
                tocsin_app.container.shutdown_manager.initiate_shutdown, "test"
            )

            assert ws.receive_json() == {
                "type": "SHUTDOWN",
                "message": "Server is shutting down",
            }
            with pytest.raises(WebSocketDisconnect) as exc_info:
                ws.receive_json()
            assert exc_info.value.code == 1001
