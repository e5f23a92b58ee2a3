"""
Realtime broadcast hub with production logging.

Owns every live WebSocket connection, authenticates connections from
in-band auth messages, and fans server events out to the right audience.
"""

import asyncio
from typing import Any, Dict, Iterable, List, Optional, Set

from fastapi import WebSocket
from pydantic import ValidationError

from tocsin.application.use_cases.authenticate_connection import (
    AuthenticateConnectionUseCase,
)
from tocsin.domain.auth import TokenPayload
from tocsin.domain.entities import Connection
from tocsin.domain.events import (
    AdminAuthMessage,
    AnalyticsUpdateEvent,
    AuthenticatedUser,
    AuthErrorEvent,
    AuthSuccessEvent,
    ConnectedEvent,
    ErrorEvent,
    NewNotificationEvent,
    NewReportEvent,
    NotificationCountUpdateEvent,
    OutboundEvent,
    PingMessage,
    PongEvent,
    ReportDeletedEvent,
    ReportUpdatedEvent,
    ReportVerificationEvent,
    ShutdownEvent,
    UserAuthMessage,
    parse_inbound,
)
from tocsin.domain.exceptions import (
    AuthenticationError,
    AuthorizationError,
    InvalidMessageError,
)
from tocsin.domain.value_objects import ClientKey
from tocsin.infrastructure.monitoring import metrics
from tocsin.reporter import Emoji, SystemReporter


class BroadcastHub:
    """
    Connection registry and fan-out for realtime events.

    Delivery is best-effort: targets that are offline or not open are
    skipped, and a failing send never affects the other recipients.
    Broadcast methods return nothing and never raise.

    Attributes:
        clients: Registry of role-qualified key -> connection
        admin_connections: Connections that completed ADMIN_AUTH
        live_connections: Every accepted connection by connection ID
    """

    def __init__(
        self,
        authenticate_use_case: AuthenticateConnectionUseCase,
        greeting_message: str = "Connected to Tocsin realtime server",
        reporter: Optional[SystemReporter] = None,
    ):
        self.authenticate_use_case = authenticate_use_case
        self.greeting_message = greeting_message
        self.reporter = reporter

        self.clients: Dict[str, Connection] = {}
        self.admin_connections: Set[Connection] = set()
        self.live_connections: Dict[str, Connection] = {}

        self._log("info", "BroadcastHub initialized", verbose_level=2)

    # ================================================================
    # Connection lifecycle
    # ================================================================

    async def connect(self, websocket: WebSocket) -> Connection:
        """
        Register an accepted WebSocket and greet it.

        Args:
            websocket: Accepted WebSocket

        Returns:
            New unauthenticated Connection
        """
        connection = Connection(websocket)
        self.live_connections[connection.id] = connection
        connection.mark_ready()

        metrics.connections_opened_total.inc()
        self._update_gauges()

        self._log(
            "info",
            f"{Emoji.NETWORK.CONNECTED} Connection opened "
            f"[conn={connection.id}] [live={len(self.live_connections)}]",
            verbose_level=2,
        )

        await self._deliver(connection, ConnectedEvent(message=self.greeting_message))
        return connection

    def disconnect(self, connection: Connection) -> None:
        """
        Tear down a connection after transport close or error.

        Removes it from the admin set and from every registry entry bound
        to it. Safe to call more than once.

        Args:
            connection: Connection to remove
        """
        was_live = self.live_connections.pop(connection.id, None) is not None
        connection.mark_closed()
        self.admin_connections.discard(connection)
        removed_keys = self._unregister(connection)

        if not was_live:
            return

        metrics.connections_closed_total.inc()
        self._update_gauges()

        self._log(
            "info",
            f"{Emoji.NETWORK.DISCONNECT} Connection closed "
            f"[conn={connection.id}] [user={connection.user_id}] "
            f"[keys={removed_keys}] [live={len(self.live_connections)}]",
            verbose_level=2,
        )

    async def handle_message(self, connection: Connection, raw: str) -> None:
        """
        Decode and dispatch one inbound frame.

        Undecodable frames get a single ERROR reply; unknown message types
        are logged and ignored. Never raises.

        Args:
            connection: Connection the frame arrived on
            raw: Text payload
        """
        if connection.is_closed():
            return

        try:
            message = parse_inbound(raw)
        except InvalidMessageError as e:
            metrics.invalid_messages_total.inc()
            self._log(
                "warning",
                f"Rejected frame [conn={connection.id}]: {e.reason}",
            )
            await self._deliver(connection, ErrorEvent())
            return

        if isinstance(message, AdminAuthMessage):
            await self._authenticate(connection, message.token, as_admin=True)
        elif isinstance(message, UserAuthMessage):
            await self._authenticate(connection, message.token, as_admin=False)
        elif isinstance(message, PingMessage):
            await self._deliver(connection, PongEvent())
        else:
            self._log(
                "info",
                f"Unknown message type ignored [conn={connection.id}] "
                f"[type={message.type}]",
                verbose_level=2,
            )

    async def close_all(
        self,
        code: int = 1001,
        reason: str = "Server shutdown",
        grace_period: float = 0,
    ) -> int:
        """
        Notify and close every live connection.

        Args:
            code: WebSocket close code
            reason: Close reason
            grace_period: Seconds between the SHUTDOWN notice and closing

        Returns:
            Number of connections closed
        """
        connections = list(self.live_connections.values())
        if not connections:
            return 0

        await self._fan_out(connections, ShutdownEvent())

        if grace_period > 0:
            self._log(
                "info",
                f"Waiting {grace_period}s before closing {len(connections)} connections",
            )
            await asyncio.sleep(grace_period)

        closed = 0
        for connection in connections:
            if connection.is_closed():
                continue
            try:
                await connection.websocket.close(code=code, reason=reason)
            except Exception as e:
                self._log(
                    "debug",
                    f"Close failed [conn={connection.id}]: {type(e).__name__}",
                )
            self.disconnect(connection)
            closed += 1

        self._log(
            "info",
            f"{Emoji.SYSTEM.CLEANUP} Closed {closed} connections",
        )
        return closed

    # ================================================================
    # Fan-out operations
    # ================================================================

    async def broadcast_new_report(self, report: Dict[str, Any]) -> None:
        """Send NEW_REPORT to every admin connection."""
        event = self._build(NewReportEvent, report=report)
        if event is not None:
            await self._broadcast(self.admin_connections, event, audience="admins")

    async def broadcast_report_update(self, report: Dict[str, Any]) -> None:
        """Send REPORT_UPDATED to every registered connection."""
        event = self._build(ReportUpdatedEvent, report=report)
        if event is not None:
            await self._broadcast(self.clients.values(), event, audience="clients")

    async def broadcast_report_deletion(self, report_id: str) -> None:
        """Send REPORT_DELETED to every registered connection."""
        event = self._build(ReportDeletedEvent, report_id=str(report_id))
        if event is not None:
            await self._broadcast(self.clients.values(), event, audience="clients")

    async def broadcast_report_verification(
        self, report_id: str, status: str, verified_by: str
    ) -> None:
        """
        Send REPORT_VERIFICATION to every registered connection.

        Args:
            report_id: Verified report
            status: "VERIFIED" or "REJECTED"
            verified_by: Display name of the verifying admin
        """
        event = self._build(
            ReportVerificationEvent,
            report_id=str(report_id),
            status=status,
            verified_by=verified_by,
        )
        if event is not None:
            await self._broadcast(self.clients.values(), event, audience="clients")

    async def broadcast_analytics_update(self) -> None:
        """
        Send ANALYTICS_UPDATE to admins, then to every registered connection.

        Admin connections are also registered, so they receive it twice.
        """
        event = AnalyticsUpdateEvent()
        await self._broadcast(self.admin_connections, event, audience="admins")
        await self._broadcast(self.clients.values(), event, audience="clients")

    async def send_notification(
        self, recipient_id: str, notification: Dict[str, Any]
    ) -> None:
        """
        Push NEW_NOTIFICATION to one user, if connected.

        Args:
            recipient_id: User ID of the recipient
            notification: Stored notification record
        """
        event = self._build(NewNotificationEvent, notification=notification)
        if event is not None and not await self._send_to_user(recipient_id, event):
            self._log(
                "info",
                f"User {recipient_id} is not connected, notification will be "
                f"delivered when they reconnect",
                verbose_level=2,
            )

    async def send_notification_count(
        self, recipient_id: str, unread_count: int
    ) -> None:
        """
        Push NOTIFICATION_COUNT_UPDATE to one user, if connected.

        Args:
            recipient_id: User ID of the recipient
            unread_count: New unread count
        """
        event = self._build(NotificationCountUpdateEvent, unread_count=unread_count)
        if event is not None:
            await self._send_to_user(recipient_id, event)

    # ================================================================
    # Queries
    # ================================================================

    def get_connection(self, key: str) -> Optional[Connection]:
        """Get the connection registered under a key such as 'user_42'."""
        return self.clients.get(key)

    def get_total_connections(self) -> int:
        """Get number of live connections (authenticated or not)."""
        return len(self.live_connections)

    def get_registered_count(self) -> int:
        """Get number of registry entries."""
        return len(self.clients)

    def get_admin_count(self) -> int:
        """Get number of admin connections."""
        return len(self.admin_connections)

    # ================================================================
    # Internals
    # ================================================================

    async def _authenticate(
        self, connection: Connection, token: Optional[str], as_admin: bool
    ) -> None:
        """Run one authentication attempt and reply with its outcome."""
        role = "admin" if as_admin else "user"

        try:
            identity = self.authenticate_use_case.execute(token, require_admin=as_admin)
        except (AuthenticationError, AuthorizationError) as e:
            metrics.auth_attempts_total.labels(role=role, outcome="rejected").inc()
            self._log(
                "warning",
                f"{Emoji.SECURITY.AUTH_FAIL} {role} auth rejected "
                f"[conn={connection.id}]: {e}",
            )
            await self._deliver(connection, AuthErrorEvent(message=str(e)))
            return

        key = ClientKey.for_admin(identity.user_id) if as_admin else ClientKey.for_user(
            identity.user_id
        )
        self._register(connection, key, identity, as_admin)
        metrics.auth_attempts_total.labels(role=role, outcome="accepted").inc()

        self._log(
            "info",
            f"{Emoji.SECURITY.AUTH_OK} {role.capitalize()} {identity.name or identity.user_id} "
            f"authenticated [conn={connection.id}] [key={key}]",
        )

        await self._deliver(
            connection,
            AuthSuccessEvent(
                message=f"{role.capitalize()} authentication successful",
                user=AuthenticatedUser(
                    id=identity.user_id,
                    name=identity.name,
                    role=identity.role,
                ),
            ),
        )

    def _register(
        self,
        connection: Connection,
        key: ClientKey,
        identity: TokenPayload,
        as_admin: bool,
    ) -> None:
        """Bind identity and registry slot; the newest connection wins a key."""
        connection.authenticate(identity, as_admin)

        for stale_key in [
            k for k, c in self.clients.items() if c == connection and k != key.value
        ]:
            del self.clients[stale_key]

        displaced = self.clients.get(key.value)
        self.clients[key.value] = connection

        if as_admin:
            self.admin_connections.add(connection)
        else:
            self.admin_connections.discard(connection)

        if displaced is not None and displaced != connection:
            self._log(
                "info",
                f"Registry entry {key} moved [from={displaced.id}] [to={connection.id}]",
                verbose_level=2,
            )

        self._update_gauges()

    def _unregister(self, connection: Connection) -> List[str]:
        """Remove every registry entry bound to a connection."""
        keys = [k for k, c in self.clients.items() if c == connection]
        for key in keys:
            del self.clients[key]
        return keys

    async def _broadcast(
        self, targets: Iterable[Connection], event: OutboundEvent, audience: str
    ) -> None:
        """Fan one event out and log the reach."""
        targets = list(targets)
        delivered = await self._fan_out(targets, event)

        self._log(
            "info",
            f"{Emoji.NETWORK.BROADCAST} {event.type} -> {delivered}/{len(targets)} "
            f"{audience}",
            verbose_level=2,
        )

    async def _fan_out(self, targets: List[Connection], event: OutboundEvent) -> int:
        """Deliver to all targets concurrently; returns delivered count."""
        if not targets:
            return 0

        results = await asyncio.gather(*(self._deliver(c, event) for c in targets))
        return sum(1 for ok in results if ok)

    async def _send_to_user(self, recipient_id: str, event: OutboundEvent) -> bool:
        """Deliver to the connection registered as user_<recipient_id>."""
        try:
            key = ClientKey.for_user(str(recipient_id))
        except ValueError:
            metrics.events_dropped_total.labels(
                event_type=event.type, reason="not_registered"
            ).inc()
            return False

        connection = self.clients.get(key.value)
        if connection is None:
            metrics.events_dropped_total.labels(
                event_type=event.type, reason="not_registered"
            ).inc()
            return False

        delivered = await self._deliver(connection, event)
        if delivered:
            self._log(
                "info",
                f"{Emoji.NETWORK.SEND} {event.type} sent to user {recipient_id}",
                verbose_level=2,
            )
        return delivered

    async def _deliver(self, connection: Connection, event: OutboundEvent) -> bool:
        """Write one event to one connection; failures are contained here."""
        if not connection.is_open():
            metrics.events_dropped_total.labels(
                event_type=event.type, reason="not_open"
            ).inc()
            return False

        try:
            await connection.send(event)
        except Exception as e:
            metrics.events_failed_total.labels(event_type=event.type).inc()
            self._log(
                "warning",
                f"Send failed [conn={connection.id}] [type={event.type}]: "
                f"{type(e).__name__}: {e}",
            )
            return False

        metrics.events_delivered_total.labels(event_type=event.type).inc()
        return True

    def _build(self, event_cls, **fields) -> Optional[OutboundEvent]:
        """Construct an event, logging instead of raising on bad input."""
        try:
            return event_cls(**fields)
        except ValidationError as e:
            self._log(
                "error",
                f"Dropped {event_cls.__name__}: {e.error_count()} invalid field(s)",
            )
            return None

    def _update_gauges(self) -> None:
        metrics.live_connections.set(len(self.live_connections))
        metrics.registered_clients.set(len(self.clients))
        metrics.admin_connections.set(len(self.admin_connections))

    def _log(self, level: str, msg: str, verbose_level: int = 1) -> None:
        if self.reporter:
            getattr(self.reporter, level)(
                msg, context="BroadcastHub", verbose_level=verbose_level
            )
