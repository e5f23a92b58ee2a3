"""
Notification store interface.

Implemented by the persistence layer that owns notification documents.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict

from tocsin.domain.entities.notification import NotificationRecord


class INotificationStore(ABC):
    """
    Abstract store for durable notification records.
    """

    @abstractmethod
    async def create(self, record: NotificationRecord) -> Dict[str, Any]:
        """
        Persist a new notification.

        Args:
            record: Notification to save

        Returns:
            Stored document as pushed to the recipient (with its ID,
            read flag and timestamps)
        """

    @abstractmethod
    async def count_unread(self, recipient_id: str) -> int:
        """
        Count unread notifications for a recipient.

        Args:
            recipient_id: User ID

        Returns:
            Number of notifications with isRead == False
        """
