"""
Schemas for the event publishing endpoint.

Backend services POST one of these bodies, discriminated on ``event``,
and the hub turns it into WebSocket fan-out.
"""

from datetime import datetime, timezone
from typing import Any, Dict, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from tocsin.domain.events import VerificationStatus


class _PublishBody(BaseModel):
    model_config = ConfigDict(populate_by_name=True, coerce_numbers_to_str=True)


class ReportCreatedBody(_PublishBody):
    event: Literal["report.created"]
    report: Dict[str, Any]


class ReportUpdatedBody(_PublishBody):
    event: Literal["report.updated"]
    report: Dict[str, Any]


class ReportDeletedBody(_PublishBody):
    event: Literal["report.deleted"]
    report_id: str = Field(..., alias="reportId", min_length=1)


class ReportVerifiedBody(_PublishBody):
    """Moderation decision; ``report`` is the refreshed report, if available."""

    event: Literal["report.verified"]
    report_id: str = Field(..., alias="reportId", min_length=1)
    status: VerificationStatus
    verified_by: Optional[str] = Field(None, alias="verifiedBy")
    report: Optional[Dict[str, Any]] = None


class NotificationCreatedBody(_PublishBody):
    event: Literal["notification.created"]
    recipient_id: str = Field(..., alias="recipientId", min_length=1)
    notification: Dict[str, Any]


class NotificationCountBody(_PublishBody):
    event: Literal["notification.count"]
    recipient_id: str = Field(..., alias="recipientId", min_length=1)
    unread_count: int = Field(..., alias="unreadCount", ge=0)


class AnalyticsUpdatedBody(_PublishBody):
    event: Literal["analytics.updated"]


PublishRequest = Union[
    ReportCreatedBody,
    ReportUpdatedBody,
    ReportDeletedBody,
    ReportVerifiedBody,
    NotificationCreatedBody,
    NotificationCountBody,
    AnalyticsUpdatedBody,
]


class PublishResponse(BaseModel):
    """
    Response schema for event publishing.

    Returned as soon as fan-out finished, whatever the number of
    connections reached.
    """

    status: str = Field(default="accepted")
    event: str = Field(..., description="Published event name")
    timestamp: str = Field(
        default_factory=lambda: datetime.now(timezone.utc).isoformat()
    )
