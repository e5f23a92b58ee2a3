"""
Application use cases for Tocsin.
"""

from tocsin.application.use_cases.authenticate_connection import (
    AuthenticateConnectionUseCase,
)
from tocsin.application.use_cases.dispatch_notification import NotificationDispatcher
from tocsin.application.use_cases.publish_report_event import ReportEventPublisher

__all__ = [
    "AuthenticateConnectionUseCase",
    "NotificationDispatcher",
    "ReportEventPublisher",
]
