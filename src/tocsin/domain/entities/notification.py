"""
Notification record - what the dispatcher asks the store to persist.
"""

from typing import Any, Dict, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

NotificationType = Literal[
    "REPORT_VERIFIED",
    "REPORT_REJECTED",
    "REPORT_LIKED",
    "REPORT_DISLIKED",
    "COMMENT_ADDED",
]


class NotificationRecord(BaseModel):
    """
    Unsaved notification for one recipient.

    Attributes:
        recipient: User ID who receives the notification
        sender: User ID who triggered it
        type: Notification kind
        title: Short headline
        message: Body text
        related_report: Report ID the notification is about
        related_comment: Comment ID, for comment notifications
        metadata: Free-form extra data
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    recipient: str
    sender: Optional[str] = None
    type: NotificationType
    title: str
    message: str
    related_report: Optional[str] = Field(None, alias="relatedReport")
    related_comment: Optional[str] = Field(None, alias="relatedComment")
    metadata: Dict[str, Any] = Field(default_factory=dict)

    @field_validator(
        "recipient", "sender", "related_report", "related_comment", mode="before"
    )
    @classmethod
    def coerce_id(cls, v: Any) -> Any:
        """Accept numeric and ObjectId-style ids as their string form."""
        if v is None or isinstance(v, str):
            return v
        return str(v)
