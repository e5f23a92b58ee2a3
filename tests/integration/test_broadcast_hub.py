"""
Integration tests for BroadcastHub.

Drives the hub with real JWTs and mock WebSockets through the full
connect -> authenticate -> fan-out -> disconnect flow.

Usage:
    pytest tests/integration/test_broadcast_hub.py
"""

import json

import pytest
from fastapi.websockets import WebSocketState
from prometheus_client import REGISTRY

from tocsin.domain.entities import ConnectionState

pytestmark = pytest.mark.integration


def _metric(name: str, **labels) -> float:
    return REGISTRY.get_sample_value(name, labels or None) or 0.0


class TestHubConnectionLifecycle:
    """Greeting, ping, malformed frames and disconnect."""

    async def test_connect_sends_greeting(self, hub, make_websocket, frames):
        """Test every accepted socket is greeted once."""
        ws = make_websocket()

        connection = await hub.connect(ws)

        assert frames(ws) == [
            {"type": "CONNECTED", "message": "Connected to Tocsin realtime server"}
        ]
        assert connection.state == ConnectionState.UNAUTHENTICATED
        assert hub.get_total_connections() == 1
        assert hub.get_registered_count() == 0

    async def test_ping_pong(self, hub, connect_as, frames):
        connection, ws = await connect_as()

        await hub.handle_message(connection, json.dumps({"type": "PING"}))

        assert frames(ws) == [{"type": "PONG"}]

    @pytest.mark.parametrize("raw", ["not json", "[]", '{"no": "type"}'])
    async def test_malformed_frame_yields_one_error(self, hub, connect_as, frames, raw):
        """Test bad frames get exactly one ERROR and change nothing."""
        connection, ws = await connect_as("u1")
        state_before = connection.state

        await hub.handle_message(connection, raw)

        assert frames(ws) == [{"type": "ERROR", "message": "Invalid message format"}]
        assert connection.state == state_before
        assert hub.get_connection("user_u1") is connection

    async def test_unknown_type_ignored(self, hub, connect_as, frames):
        """Test unrecognised tags produce no reply."""
        connection, ws = await connect_as()

        await hub.handle_message(connection, json.dumps({"type": "SUBSCRIBE"}))

        assert frames(ws) == []

    async def test_disconnect_removes_everywhere(self, hub, connect_as, frames):
        """Test a closed admin leaves registry and admin set."""
        connection, ws = await connect_as("a1", admin=True)
        assert hub.get_admin_count() == 1

        hub.disconnect(connection)

        assert hub.get_admin_count() == 0
        assert hub.get_connection("admin_a1") is None
        assert hub.get_total_connections() == 0

        await hub.broadcast_new_report({"_id": "r1"})
        await hub.broadcast_analytics_update()

        assert frames(ws) == []

    async def test_disconnect_is_idempotent(self, hub, connect_as):
        connection, _ = await connect_as("u1")
        closed_before = _metric("tocsin_connections_closed_total")

        hub.disconnect(connection)
        hub.disconnect(connection)

        assert connection.state == ConnectionState.CLOSED
        assert _metric("tocsin_connections_closed_total") == closed_before + 1

    async def test_frames_after_close_ignored(self, hub, connect_as, frames):
        connection, ws = await connect_as()
        hub.disconnect(connection)

        await hub.handle_message(connection, json.dumps({"type": "PING"}))

        assert frames(ws) == []


class TestHubAuthentication:
    """In-band authentication and registry bookkeeping."""

    async def test_user_auth_success(self, hub, connect_as, make_token, frames):
        """Test USER_AUTH registers user_<id> and echoes the identity."""
        connection, ws = await connect_as()

        await hub.handle_message(
            connection,
            json.dumps({"type": "USER_AUTH", "token": make_token(user_id="u1")}),
        )

        [reply] = frames(ws)
        assert reply["type"] == "AUTH_SUCCESS"
        assert reply["user"] == {"id": "u1", "name": "Test User", "role": "user"}
        assert hub.get_connection("user_u1") is connection
        assert connection.is_authenticated()

    async def test_user_auth_with_numeric_role_field(
        self, hub, connect_as, make_token, frames
    ):
        """Test a role field in the frame does not affect authentication."""
        connection, ws = await connect_as()

        await hub.handle_message(
            connection,
            json.dumps(
                {"type": "USER_AUTH", "token": make_token(user_id="u1"), "role": 1}
            ),
        )

        [reply] = frames(ws)
        assert reply["type"] == "AUTH_SUCCESS"
        assert hub.get_connection("user_u1") is connection

    async def test_admin_auth_success(self, hub, connect_as, make_token, frames):
        connection, ws = await connect_as()

        await hub.handle_message(
            connection,
            json.dumps(
                {"type": "ADMIN_AUTH", "token": make_token(user_id="a1", role="admin")}
            ),
        )

        assert frames(ws)[0]["type"] == "AUTH_SUCCESS"
        assert hub.get_connection("admin_a1") is connection
        assert connection in hub.admin_connections

    async def test_admin_auth_with_user_role(self, hub, connect_as, make_token, frames):
        """Test a user token on ADMIN_AUTH is refused and not registered."""
        connection, ws = await connect_as()

        await hub.handle_message(
            connection,
            json.dumps({"type": "ADMIN_AUTH", "token": make_token(user_id="u1")}),
        )

        assert frames(ws) == [{"type": "AUTH_ERROR", "message": "Admin access required"}]
        assert connection not in hub.admin_connections
        assert hub.get_registered_count() == 0

    @pytest.mark.parametrize(
        "message, expected",
        [
            ({"type": "USER_AUTH"}, "No token provided"),
            ({"type": "USER_AUTH", "token": "garbage"}, "Invalid token"),
            ({"type": "ADMIN_AUTH", "token": ""}, "No token provided"),
        ],
    )
    async def test_auth_errors(self, hub, connect_as, frames, message, expected):
        connection, ws = await connect_as()

        await hub.handle_message(connection, json.dumps(message))

        assert frames(ws) == [{"type": "AUTH_ERROR", "message": expected}]
        assert not connection.is_authenticated()

    async def test_expired_token(self, hub, connect_as, make_token, frames):
        connection, ws = await connect_as()

        await hub.handle_message(
            connection,
            json.dumps({"type": "USER_AUTH", "token": make_token(expires_in=-10)}),
        )

        assert frames(ws) == [{"type": "AUTH_ERROR", "message": "Token expired"}]

    async def test_failed_reauth_keeps_previous_identity(
        self, hub, connect_as, make_token
    ):
        """Test a rejected attempt leaves an authenticated connection alone."""
        connection, _ = await connect_as("u1")

        await hub.handle_message(
            connection,
            json.dumps({"type": "ADMIN_AUTH", "token": make_token(user_id="u1")}),
        )

        assert hub.get_connection("user_u1") is connection
        assert connection.user_id == "u1"

    async def test_distinct_admins_all_reachable(self, hub, connect_as):
        """Test N admin ids give N admin connections, each keyed."""
        connections = [
            (await connect_as(f"a{i}", admin=True))[0] for i in range(5)
        ]

        assert hub.get_admin_count() == 5
        for i, connection in enumerate(connections):
            assert hub.get_connection(f"admin_a{i}") is connection

    async def test_reauth_replaces_registry_entry(self, hub, connect_as, make_token):
        """Test re-authentication moves the connection to its new key."""
        connection, _ = await connect_as("u1")

        await hub.handle_message(
            connection,
            json.dumps({"type": "USER_AUTH", "token": make_token(user_id="u2")}),
        )

        assert hub.get_connection("user_u1") is None
        assert hub.get_connection("user_u2") is connection
        assert hub.get_registered_count() == 1

    async def test_admin_reauth_as_user_leaves_admin_set(
        self, hub, connect_as, make_token
    ):
        connection, _ = await connect_as("a1", admin=True)

        await hub.handle_message(
            connection,
            json.dumps(
                {"type": "USER_AUTH", "token": make_token(user_id="a1", role="admin")}
            ),
        )

        assert connection not in hub.admin_connections
        assert hub.get_connection("admin_a1") is None
        assert hub.get_connection("user_a1") is connection

    async def test_same_user_twice_newest_wins(self, hub, connect_as, frames):
        """Test a per-user push reaches only the latest connection."""
        first, first_ws = await connect_as("u1")
        second, second_ws = await connect_as("u1")

        await hub.send_notification_count("u1", 3)

        assert frames(first_ws) == []
        assert frames(second_ws) == [{"type": "NOTIFICATION_COUNT_UPDATE", "unreadCount": 3}]
        assert not first.is_closed()

    async def test_displaced_connection_close_keeps_new_entry(self, hub, connect_as):
        """Test closing the older connection does not evict the newer one."""
        first, _ = await connect_as("u1")
        second, _ = await connect_as("u1")

        hub.disconnect(first)

        assert hub.get_connection("user_u1") is second


class TestHubFanOut:
    """Audience selection and failure isolation."""

    async def test_new_report_reaches_admins_only(self, hub, connect_as, frames):
        """Test NEW_REPORT goes to every admin and no plain user."""
        _, admin1 = await connect_as("a1", admin=True)
        _, admin2 = await connect_as("a2", admin=True)
        _, user_ws = await connect_as("u1")
        _, anon_ws = await connect_as()
        report = {"_id": "r1", "title": "Flood on Main St"}

        await hub.broadcast_new_report(report)

        assert frames(admin1) == [{"type": "NEW_REPORT", "report": report}]
        assert frames(admin2) == [{"type": "NEW_REPORT", "report": report}]
        assert frames(user_ws) == []
        assert frames(anon_ws) == []

    async def test_report_update_reaches_all_registered(self, hub, connect_as, frames):
        """Test REPORT_UPDATED reaches registered connections, not anonymous ones."""
        _, admin_ws = await connect_as("a1", admin=True)
        _, user_ws = await connect_as("u1")
        _, anon_ws = await connect_as()

        await hub.broadcast_report_update({"_id": "r1"})

        assert frames(admin_ws) == [{"type": "REPORT_UPDATED", "report": {"_id": "r1"}}]
        assert frames(user_ws) == [{"type": "REPORT_UPDATED", "report": {"_id": "r1"}}]
        assert frames(anon_ws) == []

    async def test_report_deletion(self, hub, connect_as, frames):
        _, user_ws = await connect_as("u1")

        await hub.broadcast_report_deletion("r9")

        assert frames(user_ws) == [{"type": "REPORT_DELETED", "reportId": "r9"}]

    async def test_report_verification(self, hub, connect_as, frames):
        _, user_ws = await connect_as("u1")

        await hub.broadcast_report_verification("r1", "REJECTED", "Dana")

        [event] = frames(user_ws)
        assert event["type"] == "REPORT_VERIFICATION"
        assert event["status"] == "REJECTED"
        assert event["verifiedBy"] == "Dana"
        assert "verifiedAt" in event

    async def test_invalid_verification_status_dropped(self, hub, connect_as, frames):
        """Test a bad status is logged and nothing is sent."""
        _, user_ws = await connect_as("u1")

        await hub.broadcast_report_verification("r1", "PENDING", "Dana")

        assert frames(user_ws) == []

    async def test_analytics_reaches_admin_twice(self, hub, connect_as, frames):
        """Test admins get ANALYTICS_UPDATE from both audiences."""
        _, admin_ws = await connect_as("a1", admin=True)
        _, user_ws = await connect_as("u1")

        await hub.broadcast_analytics_update()

        assert [f["type"] for f in frames(admin_ws)] == ["ANALYTICS_UPDATE"] * 2
        assert [f["type"] for f in frames(user_ws)] == ["ANALYTICS_UPDATE"]

    async def test_notification_to_user(self, hub, connect_as, frames):
        """Test NEW_NOTIFICATION reaches exactly the recipient."""
        _, u1_ws = await connect_as("u1")
        _, u2_ws = await connect_as("u2")
        notification = {"_id": "n1", "title": "Report Verified!"}

        await hub.send_notification("u1", notification)

        assert frames(u1_ws) == [{"type": "NEW_NOTIFICATION", "notification": notification}]
        assert frames(u2_ws) == []

    async def test_notification_to_offline_user(self, hub, connect_as, frames):
        """Test pushes to absent recipients complete silently."""
        _, u1_ws = await connect_as("u1")
        dropped_before = _metric(
            "tocsin_events_dropped_total",
            event_type="NEW_NOTIFICATION",
            reason="not_registered",
        )

        assert await hub.send_notification("nobody", {"_id": "n1"}) is None

        assert frames(u1_ws) == []
        assert (
            _metric(
                "tocsin_events_dropped_total",
                event_type="NEW_NOTIFICATION",
                reason="not_registered",
            )
            == dropped_before + 1
        )

    async def test_notification_not_sent_to_admin_key(self, hub, connect_as, frames):
        """Test per-user pushes look up user_<id> only."""
        _, admin_ws = await connect_as("a1", admin=True)

        await hub.send_notification("a1", {"_id": "n1"})

        assert frames(admin_ws) == []

    async def test_failing_send_isolated(self, hub, connect_as, frames):
        """Test one broken socket does not block the others."""
        _, broken_ws = await connect_as("a1", admin=True)
        _, healthy_ws = await connect_as("a2", admin=True)
        broken_ws.send_json.side_effect = RuntimeError("socket gone")

        await hub.broadcast_new_report({"_id": "r1"})

        assert frames(healthy_ws) == [{"type": "NEW_REPORT", "report": {"_id": "r1"}}]

    async def test_non_open_socket_skipped(self, hub, connect_as, frames):
        """Test sockets that are closing are skipped."""
        _, closing_ws = await connect_as("u1")
        closing_ws.client_state = WebSocketState.DISCONNECTED

        await hub.broadcast_report_update({"_id": "r1"})

        closing_ws.send_json.assert_not_awaited()

    async def test_delivery_metrics(self, hub, connect_as):
        _, _ = await connect_as("u1")
        before = _metric("tocsin_events_delivered_total", event_type="REPORT_DELETED")

        await hub.broadcast_report_deletion("r1")

        assert _metric("tocsin_events_delivered_total", event_type="REPORT_DELETED") == (
            before + 1
        )


class TestHubCloseAll:
    """Shutdown fan-out."""

    async def test_close_all(self, hub, connect_as, frames):
        """Test every live connection gets SHUTDOWN then a 1001 close."""
        _, user_ws = await connect_as("u1")
        _, anon_ws = await connect_as()

        closed = await hub.close_all()

        assert closed == 2
        for ws in (user_ws, anon_ws):
            assert frames(ws) == [
                {"type": "SHUTDOWN", "message": "Server is shutting down"}
            ]
            ws.close.assert_awaited_once_with(code=1001, reason="Server shutdown")
        assert hub.get_total_connections() == 0
        assert hub.get_registered_count() == 0

    async def test_close_all_empty(self, hub):
        assert await hub.close_all() == 0

    async def test_close_failure_still_disconnects(self, hub, connect_as):
        connection, ws = await connect_as("u1")
        ws.close.side_effect = RuntimeError("already closed")

        assert await hub.close_all() == 1
        assert connection.is_closed()
