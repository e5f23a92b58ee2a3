"""
Outbound event schemas.

Every frame Tocsin writes to a WebSocket is one of these models. All share
the same envelope: a ``type`` tag plus type-specific camelCase fields.
"""

from datetime import datetime, timezone
from typing import Any, Dict, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

VerificationStatus = Literal["VERIFIED", "REJECTED"]


def utc_now() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


class OutboundEvent(BaseModel):
    """
    Base class for server-originated frames.

    Events are immutable once built and rendered with ``to_wire``.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    type: str

    def to_wire(self) -> Dict[str, Any]:
        """
        Render the JSON envelope sent over the socket.

        Returns:
            Dictionary with camelCase keys and ISO-8601 timestamps
        """
        return self.model_dump(mode="json", by_alias=True)


# ================================================================
# Connection-level replies
# ================================================================


class ConnectedEvent(OutboundEvent):
    """Greeting sent once after the socket is accepted."""

    type: Literal["CONNECTED"] = "CONNECTED"
    message: str


class AuthenticatedUser(BaseModel):
    """Identity echoed back on successful authentication."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: Optional[str] = None
    role: str


class AuthSuccessEvent(OutboundEvent):
    """Reply to a successful ADMIN_AUTH or USER_AUTH."""

    type: Literal["AUTH_SUCCESS"] = "AUTH_SUCCESS"
    message: str
    user: AuthenticatedUser


class AuthErrorEvent(OutboundEvent):
    """Reply to a failed authentication attempt."""

    type: Literal["AUTH_ERROR"] = "AUTH_ERROR"
    message: str


class PongEvent(OutboundEvent):
    """Reply to PING."""

    type: Literal["PONG"] = "PONG"


class ErrorEvent(OutboundEvent):
    """Reply to an undecodable inbound frame."""

    type: Literal["ERROR"] = "ERROR"
    message: str = "Invalid message format"


class ShutdownEvent(OutboundEvent):
    """Sent to every live connection before the server closes it."""

    type: Literal["SHUTDOWN"] = "SHUTDOWN"
    message: str = "Server is shutting down"


# ================================================================
# Server-initiated pushes
# ================================================================


class NewReportEvent(OutboundEvent):
    """A citizen submitted a report (admins only)."""

    type: Literal["NEW_REPORT"] = "NEW_REPORT"
    report: Dict[str, Any]


class ReportUpdatedEvent(OutboundEvent):
    """A report changed."""

    type: Literal["REPORT_UPDATED"] = "REPORT_UPDATED"
    report: Dict[str, Any]


class ReportDeletedEvent(OutboundEvent):
    """A report was removed."""

    type: Literal["REPORT_DELETED"] = "REPORT_DELETED"
    report_id: str = Field(..., alias="reportId")


class ReportVerificationEvent(OutboundEvent):
    """An admin verified or rejected a report."""

    type: Literal["REPORT_VERIFICATION"] = "REPORT_VERIFICATION"
    report_id: str = Field(..., alias="reportId")
    status: VerificationStatus
    verified_by: str = Field(..., alias="verifiedBy")
    verified_at: datetime = Field(default_factory=utc_now, alias="verifiedAt")


class AnalyticsUpdateEvent(OutboundEvent):
    """Dashboard aggregates are stale and should be refetched."""

    type: Literal["ANALYTICS_UPDATE"] = "ANALYTICS_UPDATE"
    timestamp: datetime = Field(default_factory=utc_now)


class NewNotificationEvent(OutboundEvent):
    """A notification record was created for the recipient."""

    type: Literal["NEW_NOTIFICATION"] = "NEW_NOTIFICATION"
    notification: Dict[str, Any]


class NotificationCountUpdateEvent(OutboundEvent):
    """The recipient's unread notification count changed."""

    type: Literal["NOTIFICATION_COUNT_UPDATE"] = "NOTIFICATION_COUNT_UPDATE"
    unread_count: int = Field(..., ge=0, alias="unreadCount")
