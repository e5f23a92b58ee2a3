"""
Repository interfaces for Tocsin.
"""

from tocsin.domain.repositories.i_notification_store import INotificationStore

__all__ = ["INotificationStore"]
