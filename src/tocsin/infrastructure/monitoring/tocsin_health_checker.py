"""
Tocsin health checker.

Liveness only proves the process answers; readiness also looks at the
shutdown state and the broadcast hub.
"""

import time
from datetime import datetime, timezone
from typing import Optional

from tocsin.config.settings import Settings
from tocsin.infrastructure.monitoring.health import (
    HealthCheck,
    HealthChecker,
    HealthReport,
    HealthStatus,
)
from tocsin.infrastructure.shutdown import ShutdownManager
from tocsin.infrastructure.websocket import BroadcastHub


def _now() -> datetime:
    return datetime.now(timezone.utc)


class TocsinHealthChecker(HealthChecker):
    """
    Health checker for the realtime hub.

    Checks:
    - Service liveness
    - Shutdown state (not ready once shutdown starts)
    - Broadcast hub availability and connection counts
    """

    def __init__(
        self,
        settings: Settings,
        hub: Optional[BroadcastHub] = None,
        shutdown_manager: Optional[ShutdownManager] = None,
    ):
        """
        Initialize health checker.

        Args:
            settings: Tocsin settings
            hub: BroadcastHub for readiness checks
            shutdown_manager: ShutdownManager for readiness checks
        """
        self.settings = settings
        self.hub = hub
        self.shutdown_manager = shutdown_manager

    def check_liveness(self) -> HealthReport:
        checks = {
            "service": HealthCheck(
                name="service",
                status=HealthStatus.HEALTHY,
                message="Service is alive",
                timestamp=_now(),
            )
        }

        return HealthReport(
            status=HealthStatus.HEALTHY,
            checks=checks,
            version=self.settings.APP_VERSION,
            timestamp=_now(),
        )

    def check_readiness(self) -> HealthReport:
        """
        Readiness probe.

        Returns:
            HealthReport, UNHEALTHY while shutting down or without a hub
        """
        checks = {
            "shutdown": self._check_shutdown(),
            "hub": self._check_hub(),
        }

        overall = HealthStatus.HEALTHY
        for check in checks.values():
            if check.status == HealthStatus.UNHEALTHY:
                overall = HealthStatus.UNHEALTHY
                break
            if check.status == HealthStatus.DEGRADED:
                overall = HealthStatus.DEGRADED

        return HealthReport(
            status=overall,
            checks=checks,
            version=self.settings.APP_VERSION,
            timestamp=_now(),
        )

    def _check_shutdown(self) -> HealthCheck:
        if self.shutdown_manager and self.shutdown_manager.is_shutting_down():
            return HealthCheck(
                name="shutdown",
                status=HealthStatus.UNHEALTHY,
                message="Service is shutting down",
                timestamp=_now(),
                metadata=self.shutdown_manager.get_shutdown_info(),
            )

        return HealthCheck(
            name="shutdown",
            status=HealthStatus.HEALTHY,
            message="Accepting connections",
            timestamp=_now(),
        )

    def _check_hub(self) -> HealthCheck:
        if self.hub is None:
            return HealthCheck(
                name="hub",
                status=HealthStatus.UNHEALTHY,
                message="Broadcast hub not initialized",
                timestamp=_now(),
            )

        start = time.time()
        try:
            metadata = {
                "live_connections": self.hub.get_total_connections(),
                "registered_clients": self.hub.get_registered_count(),
                "admin_connections": self.hub.get_admin_count(),
            }
        except Exception as e:
            return HealthCheck(
                name="hub",
                status=HealthStatus.UNHEALTHY,
                message=f"Hub check failed: {e}",
                duration=time.time() - start,
                timestamp=_now(),
            )

        return HealthCheck(
            name="hub",
            status=HealthStatus.HEALTHY,
            message=(
                f"Operational ({metadata['registered_clients']} registered, "
                f"{metadata['admin_connections']} admin)"
            ),
            duration=time.time() - start,
            timestamp=_now(),
            metadata=metadata,
        )
