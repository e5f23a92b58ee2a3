"""
Monitoring infrastructure for Tocsin.

TocsinHealthChecker lives in ``tocsin_health_checker`` and is imported
from there, since it depends on the websocket package.
"""

from tocsin.infrastructure.monitoring.health import (
    HealthCheck,
    HealthChecker,
    HealthReport,
    HealthStatus,
)
from tocsin.infrastructure.monitoring.metrics_server import MetricsServer

__all__ = [
    "HealthCheck",
    "HealthChecker",
    "HealthReport",
    "HealthStatus",
    "MetricsServer",
]
