"""
Health check result types.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional, Protocol


class HealthStatus(str, Enum):
    """Health status levels."""

    HEALTHY = "healthy"
    DEGRADED = "degraded"
    UNHEALTHY = "unhealthy"


@dataclass
class HealthCheck:
    """Result of one named probe."""

    name: str
    status: HealthStatus
    message: Optional[str] = None
    duration: Optional[float] = None
    timestamp: Optional[datetime] = None
    metadata: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {
            "status": self.status.value,
            "message": self.message,
            "duration": self.duration,
        }
        if self.metadata:
            result["metadata"] = self.metadata
        return result


@dataclass
class HealthReport:
    """
    Aggregate of probe results.

    ``is_ready`` accepts DEGRADED, ``is_healthy`` does not.
    """

    status: HealthStatus
    checks: Dict[str, HealthCheck]
    version: str
    timestamp: datetime

    def to_dict(self) -> Dict[str, Any]:
        return {
            "status": self.status.value,
            "timestamp": self.timestamp.isoformat(),
            "version": self.version,
            "checks": {name: check.to_dict() for name, check in self.checks.items()},
        }

    @property
    def is_healthy(self) -> bool:
        return self.status == HealthStatus.HEALTHY

    @property
    def is_ready(self) -> bool:
        return self.status in (HealthStatus.HEALTHY, HealthStatus.DEGRADED)


class HealthChecker(Protocol):
    """Liveness and readiness probes for a service."""

    def check_liveness(self) -> HealthReport:
        ...

    def check_readiness(self) -> HealthReport:
        ...
