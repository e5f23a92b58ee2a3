"""
Use case for creating and pushing user notifications.

Notifications are persisted through the store first, then pushed to the
recipient if they are connected. Offline recipients pick them up from the
store on their next fetch.
"""

from typing import TYPE_CHECKING, Any, Dict, Optional

from pydantic import ValidationError

from tocsin.domain.entities import NotificationRecord
from tocsin.domain.repositories import INotificationStore
from tocsin.reporter import SystemReporter

if TYPE_CHECKING:
    from tocsin.infrastructure.websocket import BroadcastHub

VOTE_TYPES = ("up", "down")


class NotificationDispatcher:
    """
    Persists notifications and pushes them over the broadcast hub.

    Invalid input and store failures are logged and the notification is
    dropped; callers are never interrupted by a notification problem.

    Attributes:
        store: Durable notification store
        hub: BroadcastHub for realtime push
        reporter: Optional SystemReporter
    """

    def __init__(
        self,
        store: INotificationStore,
        hub: "BroadcastHub",
        reporter: Optional[SystemReporter] = None,
    ):
        self.store = store
        self.hub = hub
        self.reporter = reporter

    async def notify_report_verification(
        self,
        report_id: str,
        author_id: str,
        verified_by: str,
        status: str,
    ) -> Optional[Dict[str, Any]]:
        """
        Tell a report's author about a moderation decision.

        Args:
            report_id: Moderated report
            author_id: Report author (recipient)
            verified_by: Admin user ID
            status: "VERIFIED" or "REJECTED"

        Returns:
            Stored notification, or None if it could not be created
        """
        verified = status == "VERIFIED"

        return await self._dispatch(
            recipient=author_id,
            sender=verified_by,
            type="REPORT_VERIFIED" if verified else "REPORT_REJECTED",
            title="Report Verified!" if verified else "Report Rejected",
            message=(
                "Your disaster report has been verified by an admin and is now live."
                if verified
                else "Your disaster report has been reviewed and rejected by an admin."
            ),
            related_report=report_id,
            metadata={"status": status, "verifiedBy": verified_by},
        )

    async def notify_report_vote(
        self,
        report_id: str,
        author_id: str,
        voter_id: str,
        voter_name: str,
        vote_type: str,
    ) -> Optional[Dict[str, Any]]:
        """
        Tell a report's author about a vote. Self-votes are ignored.

        Args:
            report_id: Voted report
            author_id: Report author (recipient)
            voter_id: Voting user ID
            voter_name: Voting user display name
            vote_type: "up" or "down"

        Returns:
            Stored notification, or None if skipped or failed
        """
        if str(author_id) == str(voter_id):
            return None

        if vote_type not in VOTE_TYPES:
            self._log("warning", f"Ignoring vote notification with type '{vote_type}'")
            return None

        liked = vote_type == "up"

        return await self._dispatch(
            recipient=author_id,
            sender=voter_id,
            type="REPORT_LIKED" if liked else "REPORT_DISLIKED",
            title="Someone liked your report!" if liked else "Someone disliked your report",
            message=f"{voter_name} {'liked' if liked else 'disliked'} your disaster report.",
            related_report=report_id,
            metadata={"voterName": voter_name, "voteType": vote_type},
        )

    async def notify_comment(
        self,
        report_id: str,
        author_id: str,
        commenter_id: str,
        commenter_name: str,
        comment_id: str,
    ) -> Optional[Dict[str, Any]]:
        """Tell a report's author about a new comment. Self-comments are ignored."""
        if str(author_id) == str(commenter_id):
            return None

        return await self._dispatch(
            recipient=author_id,
            sender=commenter_id,
            type="COMMENT_ADDED",
            title="New comment on your report",
            message=f"{commenter_name} commented on your disaster report.",
            related_report=report_id,
            related_comment=comment_id,
            metadata={"commenterName": commenter_name},
        )

    async def refresh_unread_count(self, recipient_id: str) -> Optional[int]:
        """
        Push the recipient's current unread count.

        Returns:
            Unread count, or None if the store failed
        """
        try:
            unread = await self.store.count_unread(recipient_id)
        except Exception as e:
            self._log("error", f"Failed to count unread notifications for {recipient_id}: {e}")
            return None

        await self.hub.send_notification_count(recipient_id, unread)
        return unread

    async def clear_unread_count(self, recipient_id: str) -> None:
        """Push a zero unread count, after the recipient marked all as read."""
        await self.hub.send_notification_count(recipient_id, 0)

    async def _dispatch(self, **fields: Any) -> Optional[Dict[str, Any]]:
        try:
            record = NotificationRecord(**fields)
        except ValidationError as e:
            self._log(
                "error",
                f"Rejected {fields.get('type')} notification "
                f"for report {fields.get('related_report')}: {e}",
            )
            return None

        try:
            stored = await self.store.create(record)
        except Exception as e:
            self._log(
                "error",
                f"Failed to create {record.type} notification "
                f"for report {record.related_report}: {e}",
            )
            return None

        self._log(
            "info",
            f"{record.type} notification created for report {record.related_report}",
            verbose_level=2,
        )

        await self.hub.send_notification(record.recipient, stored)
        return stored

    def _log(self, level: str, msg: str, verbose_level: int = 1) -> None:
        if self.reporter:
            getattr(self.reporter, level)(
                msg, context="NotificationDispatcher", verbose_level=verbose_level
            )
