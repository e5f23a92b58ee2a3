"""
Domain entities for Tocsin.
"""

from tocsin.domain.entities.connection import (
    Connection,
    ConnectionState,
    generate_connection_id,
)
from tocsin.domain.entities.notification import NotificationRecord, NotificationType

__all__ = [
    "Connection",
    "ConnectionState",
    "NotificationRecord",
    "NotificationType",
    "generate_connection_id",
]
