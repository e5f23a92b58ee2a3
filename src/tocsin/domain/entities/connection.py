"""
Connection entity - one live duplex channel to a remote peer.
"""

import uuid
from datetime import datetime
from enum import Enum
from typing import Any, Optional

from fastapi.websockets import WebSocketState

from tocsin.domain.auth import TokenPayload
from tocsin.domain.events import OutboundEvent


class ConnectionState(str, Enum):
    """Connection lifecycle states."""

    CONNECTING = "connecting"
    UNAUTHENTICATED = "unauthenticated"
    AUTHENTICATED = "authenticated"
    CLOSED = "closed"


def generate_connection_id() -> str:
    """Generate unique connection ID for tracking."""
    return f"conn_{uuid.uuid4().hex[:12]}"


class Connection:
    """
    Connection entity wrapping an accepted WebSocket.

    A connection starts unauthenticated and gains an identity only after a
    valid authentication message arrives over the socket. Re-authentication
    overwrites the previous identity.

    Attributes:
        id: Unique transport identity
        websocket: Underlying WebSocket
        identity: Decoded token payload once authenticated
        is_admin: Whether the last successful authentication was ADMIN_AUTH
        state: Current lifecycle state
        connected_at: Connection timestamp
    """

    def __init__(
        self,
        websocket: Any,
        connection_id: Optional[str] = None,
        connected_at: Optional[datetime] = None,
    ):
        """
        Initialize Connection entity.

        Args:
            websocket: Accepted WebSocket (anything with send_json/close)
            connection_id: Optional ID (generated if not provided)
            connected_at: Optional connection timestamp
        """
        self.id: str = connection_id or generate_connection_id()
        self.websocket = websocket
        self.identity: Optional[TokenPayload] = None
        self.is_admin: bool = False
        self.state: ConnectionState = ConnectionState.CONNECTING
        self.connected_at: datetime = connected_at or datetime.utcnow()

    @property
    def user_id(self) -> Optional[str]:
        """Authenticated user ID, if any."""
        return self.identity.user_id if self.identity else None

    def is_authenticated(self) -> bool:
        """Check if connection carries an identity."""
        return self.state == ConnectionState.AUTHENTICATED

    def is_closed(self) -> bool:
        """Check if connection reached the terminal state."""
        return self.state == ConnectionState.CLOSED

    def is_open(self) -> bool:
        """Check if frames can still be written to the socket."""
        if self.is_closed():
            return False
        return (
            self.websocket.client_state == WebSocketState.CONNECTED
            and self.websocket.application_state == WebSocketState.CONNECTED
        )

    def mark_ready(self) -> None:
        """Transport handshake finished; waiting for authentication."""
        if self.state == ConnectionState.CONNECTING:
            self.state = ConnectionState.UNAUTHENTICATED

    def authenticate(self, identity: TokenPayload, as_admin: bool) -> None:
        """
        Bind an identity to this connection.

        Args:
            identity: Decoded token payload
            as_admin: True for the admin authentication path
        """
        if self.is_closed():
            raise ValueError(f"Cannot authenticate closed connection {self.id}")

        self.identity = identity
        self.is_admin = as_admin
        self.state = ConnectionState.AUTHENTICATED

    def mark_closed(self) -> None:
        """Move to the terminal state."""
        self.state = ConnectionState.CLOSED

    async def send(self, event: OutboundEvent) -> None:
        """
        Write one event to the socket.

        Args:
            event: Event to serialize and send
        """
        await self.websocket.send_json(event.to_wire())

    def __eq__(self, other) -> bool:
        """Check equality based on connection ID."""
        if not isinstance(other, Connection):
            return False
        return self.id == other.id

    def __hash__(self) -> int:
        """Hash based on connection ID."""
        return hash(self.id)

    def __repr__(self) -> str:
        """String representation."""
        if self.identity:
            role = "admin" if self.is_admin else "user"
            auth = f"{role}={self.identity.user_id}"
        else:
            auth = "unauthenticated"
        return f"Connection(id={self.id}, state={self.state.value}, {auth})"
