"""
Graceful shutdown infrastructure for Tocsin.
"""

from tocsin.infrastructure.shutdown.shutdown_manager import (
    ShutdownManager,
    ShutdownState,
)

__all__ = ["ShutdownManager", "ShutdownState"]
