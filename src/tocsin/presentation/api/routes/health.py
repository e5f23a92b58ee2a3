"""
Health check and statistics API routes.

Kubernetes-compatible liveness and readiness probes.
"""

from fastapi import APIRouter, Depends, Response, status

from tocsin.di import Container
from tocsin.infrastructure.monitoring.tocsin_health_checker import (
    TocsinHealthChecker,
)
from tocsin.presentation.api.dependencies import get_container
from tocsin.presentation.schemas import StatsResponse

router = APIRouter(tags=["health"])


def get_health_checker(container: Container = Depends(get_container)):
    """Dependency for health checker."""
    return TocsinHealthChecker(
        settings=container.settings,
        hub=container.hub,
        shutdown_manager=container.shutdown_manager,
    )


@router.get("/health/live", status_code=status.HTTP_200_OK)
def liveness_probe(
    response: Response,
    health_checker: TocsinHealthChecker = Depends(get_health_checker),
):
    """
    Liveness probe endpoint.

    Returns 200 if the process is alive, 503 otherwise.
    """
    report = health_checker.check_liveness()

    if not report.is_healthy:
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE

    return report.to_dict()


@router.get("/health/ready", status_code=status.HTTP_200_OK)
def readiness_probe(
    response: Response,
    health_checker: TocsinHealthChecker = Depends(get_health_checker),
):
    """
    Readiness probe endpoint.

    Returns 503 while shutting down so load balancers stop routing new
    WebSocket upgrades here.
    """
    report = health_checker.check_readiness()

    if not report.is_ready:
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE

    return report.to_dict()


@router.get("/health", status_code=status.HTTP_200_OK)
def health_check_endpoint(
    response: Response,
    health_checker: TocsinHealthChecker = Depends(get_health_checker),
):
    """General health check endpoint (alias for readiness)."""
    return readiness_probe(response, health_checker)


@router.get("/stats", response_model=StatsResponse)
def get_stats(container: Container = Depends(get_container)):
    """Get runtime counters for the hub and the publish API."""
    hub = container.hub
    stats = container.stats

    return StatsResponse(
        uptime_seconds=container.get_uptime_seconds(),
        live_connections=hub.get_total_connections(),
        registered_clients=hub.get_registered_count(),
        admin_connections=hub.get_admin_count(),
        events_published=stats["events_published"],
        events_published_by_type=dict(stats["events_published_by_type"]),
        publish_rejections=stats["publish_rejections"],
        connections_refused=stats["connections_refused"],
        shutting_down=container.shutdown_manager.is_shutting_down(),
    )
