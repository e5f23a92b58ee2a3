"""
Wire protocol for Tocsin WebSocket clients.
"""

from tocsin.domain.events.inbound import (
    AdminAuthMessage,
    ClientMessage,
    InboundMessage,
    PingMessage,
    UnknownMessage,
    UserAuthMessage,
    parse_inbound,
)
from tocsin.domain.events.outbound import (
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
    PongEvent,
    ReportDeletedEvent,
    ReportUpdatedEvent,
    ReportVerificationEvent,
    ShutdownEvent,
    VerificationStatus,
)

__all__ = [
    # Inbound
    "AdminAuthMessage",
    "ClientMessage",
    "InboundMessage",
    "PingMessage",
    "UnknownMessage",
    "UserAuthMessage",
    "parse_inbound",
    # Outbound
    "AnalyticsUpdateEvent",
    "AuthenticatedUser",
    "AuthErrorEvent",
    "AuthSuccessEvent",
    "ConnectedEvent",
    "ErrorEvent",
    "NewNotificationEvent",
    "NewReportEvent",
    "NotificationCountUpdateEvent",
    "OutboundEvent",
    "PongEvent",
    "ReportDeletedEvent",
    "ReportUpdatedEvent",
    "ReportVerificationEvent",
    "ShutdownEvent",
    "VerificationStatus",
]
