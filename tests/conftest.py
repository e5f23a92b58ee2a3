"""
Test fixtures and configuration.
"""

import json
import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List
from unittest.mock import AsyncMock, Mock

import jwt
import pytest
from fastapi.websockets import WebSocketState

from tocsin.application.use_cases import AuthenticateConnectionUseCase
from tocsin.infrastructure.auth import JWTVerifier
from tocsin.infrastructure.websocket import BroadcastHub
from tocsin.reporter import SystemReporter

# Matches config/test.yaml
JWT_SECRET = "test-secret-key-for-tocsin-hub-suite"


@pytest.fixture
def reporter() -> SystemReporter:
    """Quiet reporter for tests."""
    return SystemReporter(name="tocsin-test", level=logging.WARNING, verbose=1)


@pytest.fixture
def jwt_secret() -> str:
    return JWT_SECRET


@pytest.fixture
def make_token():
    """
    Factory for signed JWTs shaped like the auth service's tokens.

    Pass ``expires_in`` negative for an expired token, ``name=None`` to
    omit the name claim, extra keyword arguments become claims.
    """

    def _make(
        user_id: Any = "user-1",
        role: str = "user",
        name: Any = "Test User",
        expires_in: int = 3600,
        secret: str = JWT_SECRET,
        **claims: Any,
    ) -> str:
        now = datetime.now(timezone.utc)
        payload: Dict[str, Any] = {
            "role": role,
            "iat": now,
            "exp": now + timedelta(seconds=expires_in),
        }
        if user_id is not None:
            payload["userId"] = user_id
        if name is not None:
            payload["name"] = name
        payload.update(claims)
        return jwt.encode(payload, secret, algorithm="HS256")

    return _make


@pytest.fixture
def make_websocket():
    """Factory for open WebSocket mocks."""

    def _make() -> Mock:
        ws = Mock()
        ws.client_state = WebSocketState.CONNECTED
        ws.application_state = WebSocketState.CONNECTED
        ws.send_json = AsyncMock()
        ws.close = AsyncMock()
        return ws

    return _make


@pytest.fixture
def frames():
    """Return every payload sent to a mock WebSocket, in order."""

    def _frames(ws: Mock) -> List[Dict[str, Any]]:
        return [call.args[0] for call in ws.send_json.await_args_list]

    return _frames


@pytest.fixture
def hub(reporter) -> BroadcastHub:
    """BroadcastHub wired to a real JWT verifier."""
    return BroadcastHub(
        authenticate_use_case=AuthenticateConnectionUseCase(JWTVerifier(JWT_SECRET)),
        greeting_message="Connected to Tocsin realtime server",
        reporter=reporter,
    )


@pytest.fixture
def connect_as(hub, make_websocket, make_token):
    """
    Open a connection on ``hub`` and optionally authenticate it.

    Returns (connection, websocket) with the websocket's send history
    cleared, so tests only see frames produced after setup.
    """

    async def _connect(user_id: Any = None, admin: bool = False, role: str = None):
        ws = make_websocket()
        connection = await hub.connect(ws)

        if user_id is not None:
            token = make_token(
                user_id=user_id, role=role or ("admin" if admin else "user")
            )
            message = {"type": "ADMIN_AUTH" if admin else "USER_AUTH", "token": token}
            await hub.handle_message(connection, json.dumps(message))

        ws.send_json.reset_mock()
        return connection, ws

    return _connect
