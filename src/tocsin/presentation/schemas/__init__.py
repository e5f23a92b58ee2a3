"""
Request/Response schemas for Tocsin API.
"""

from tocsin.presentation.schemas.health import StatsResponse
from tocsin.presentation.schemas.publish import (
    AnalyticsUpdatedBody,
    NotificationCountBody,
    NotificationCreatedBody,
    PublishRequest,
    PublishResponse,
    ReportCreatedBody,
    ReportDeletedBody,
    ReportUpdatedBody,
    ReportVerifiedBody,
)

__all__ = [
    "AnalyticsUpdatedBody",
    "NotificationCountBody",
    "NotificationCreatedBody",
    "PublishRequest",
    "PublishResponse",
    "ReportCreatedBody",
    "ReportDeletedBody",
    "ReportUpdatedBody",
    "ReportVerifiedBody",
    "StatsResponse",
]
