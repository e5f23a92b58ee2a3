"""
Use case for publishing report lifecycle events.

Each report change produces a fixed sequence of broadcasts so that admin
dashboards and user feeds stay consistent.
"""

from typing import TYPE_CHECKING, Any, Dict, Optional

if TYPE_CHECKING:
    from tocsin.infrastructure.websocket import BroadcastHub

VERIFICATION_STATUSES = ("VERIFIED", "REJECTED")
DEFAULT_VERIFIER_NAME = "Admin"


class ReportEventPublisher:
    """
    Publishes report lifecycle events through the broadcast hub.

    Attributes:
        hub: BroadcastHub used for fan-out
    """

    def __init__(self, hub: "BroadcastHub"):
        self.hub = hub

    async def report_created(self, report: Dict[str, Any]) -> None:
        """
        Announce a newly created report.

        Admins get NEW_REPORT for the moderation queue, then every
        connection gets ANALYTICS_UPDATE.

        Args:
            report: Created report document
        """
        await self.hub.broadcast_new_report(report)
        await self.hub.broadcast_analytics_update()

    async def report_updated(self, report: Dict[str, Any]) -> None:
        """Announce an edited report."""
        await self.hub.broadcast_report_update(report)
        await self.hub.broadcast_analytics_update()

    async def report_deleted(self, report_id: str) -> None:
        """Announce a deleted report."""
        await self.hub.broadcast_report_deletion(report_id)
        await self.hub.broadcast_analytics_update()

    async def report_verified(
        self,
        report_id: str,
        status: str,
        verifier_name: Optional[str] = None,
        report: Optional[Dict[str, Any]] = None,
    ) -> None:
        """
        Announce a moderation decision.

        Args:
            report_id: Moderated report
            status: "VERIFIED" or "REJECTED"
            verifier_name: Display name of the admin (default: "Admin")
            report: Refreshed report document, re-broadcast as
                REPORT_UPDATED when given

        Raises:
            ValueError: If status is not a verification status
        """
        if status not in VERIFICATION_STATUSES:
            raise ValueError(
                f"Invalid verification status '{status}', "
                f"expected one of {', '.join(VERIFICATION_STATUSES)}"
            )

        verified_by = (verifier_name or "").strip() or DEFAULT_VERIFIER_NAME

        await self.hub.broadcast_report_verification(report_id, status, verified_by)

        if report is not None:
            await self.hub.broadcast_report_update(report)
