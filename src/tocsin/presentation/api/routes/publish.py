"""
Event publishing endpoint.

Backend services call POST /publish after a report or notification
changes; the hub fans the event out to connected clients.
"""

from typing import Annotated

from fastapi import APIRouter, Body, Depends, HTTPException, status

from tocsin.di import Container
from tocsin.presentation.api.dependencies import get_container, verify_publish_key
from tocsin.presentation.schemas import (
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

router = APIRouter(tags=["publish"])


@router.post(
    "/publish",
    response_model=PublishResponse,
    status_code=status.HTTP_202_ACCEPTED,
    dependencies=[Depends(verify_publish_key)],
)
async def publish_event(
    publish_request: Annotated[PublishRequest, Body(discriminator="event")],
    container: Container = Depends(get_container),
):
    """
    Publish one domain event to WebSocket clients.

    Args:
        publish_request: Event body, discriminated on ``event``
        container: DI container

    Returns:
        Acceptance receipt

    Raises:
        HTTPException:
            - 400: Event rejected by the publisher
            - 401: Missing or wrong X-API-Key
            - 422: Body does not match any event schema
    """
    publisher = container.report_publisher
    hub = container.hub

    try:
        if isinstance(publish_request, ReportCreatedBody):
            await publisher.report_created(publish_request.report)

        elif isinstance(publish_request, ReportUpdatedBody):
            await publisher.report_updated(publish_request.report)

        elif isinstance(publish_request, ReportDeletedBody):
            await publisher.report_deleted(publish_request.report_id)

        elif isinstance(publish_request, ReportVerifiedBody):
            await publisher.report_verified(
                publish_request.report_id,
                publish_request.status,
                publish_request.verified_by,
                report=publish_request.report,
            )

        elif isinstance(publish_request, NotificationCreatedBody):
            await hub.send_notification(
                publish_request.recipient_id, publish_request.notification
            )

        elif isinstance(publish_request, NotificationCountBody):
            await hub.send_notification_count(
                publish_request.recipient_id, publish_request.unread_count
            )

        elif isinstance(publish_request, AnalyticsUpdatedBody):
            await hub.broadcast_analytics_update()

    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"error": "Event rejected", "message": str(e)},
        )

    container.record_publish(publish_request.event)

    container.reporter.debug(
        f"Published {publish_request.event}",
        context="Publish",
        verbose_level=2,
    )

    return PublishResponse(event=publish_request.event)
