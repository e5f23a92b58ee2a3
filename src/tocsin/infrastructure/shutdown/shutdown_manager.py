"""
Graceful shutdown manager.

Tracks the RUNNING -> SHUTTING_DOWN -> SHUTDOWN lifecycle, turns
SIGTERM/SIGINT into an orderly shutdown, and runs registered callbacks
(closing WebSocket clients, stopping uvicorn).
"""

import asyncio
import signal
import threading
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Set

from tocsin.reporter import Emoji, SystemReporter


class ShutdownState(Enum):
    """Shutdown state enum."""

    RUNNING = "running"
    SHUTTING_DOWN = "shutting_down"
    SHUTDOWN = "shutdown"


class ShutdownManager:
    """
    Coordinates graceful shutdown of the Tocsin server.

    Sequence:
    1. Signal (or lifespan end) calls initiate_shutdown
    2. State flips to SHUTTING_DOWN, so new WebSockets are refused
    3. Callbacks run in registration order
    4. The app marks the shutdown complete

    Attributes:
        state: Current shutdown state
        shutdown_timeout: Max seconds callbacks may take in total
        grace_period: Seconds clients get between SHUTDOWN notice and close
        shutdown_started_at: When shutdown was initiated
    """

    def __init__(
        self,
        shutdown_timeout: int = 30,
        grace_period: int = 5,
        reporter: Optional[SystemReporter] = None,
    ):
        """
        Initialize shutdown manager.

        Args:
            shutdown_timeout: Maximum seconds for shutdown callbacks
            grace_period: Seconds to wait before closing WebSockets
            reporter: Optional SystemReporter
        """
        self.shutdown_timeout = shutdown_timeout
        self.grace_period = grace_period
        self.reporter = reporter

        self.state = ShutdownState.RUNNING
        self.shutdown_started_at: Optional[datetime] = None
        self.shutdown_reason: Optional[str] = None

        self._shutdown_event = asyncio.Event()
        self._shutdown_callbacks: List[Callable] = []
        self._original_handlers: Dict[int, Any] = {}
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._pending: Set[asyncio.Task] = set()

    def is_shutting_down(self) -> bool:
        """True once shutdown has been initiated."""
        return self.state in (ShutdownState.SHUTTING_DOWN, ShutdownState.SHUTDOWN)

    def is_running(self) -> bool:
        return self.state == ShutdownState.RUNNING

    def register_shutdown_callback(self, callback: Callable) -> None:
        """
        Register a sync or async callable to run on shutdown.

        Args:
            callback: Called with no arguments
        """
        self._shutdown_callbacks.append(callback)

    def setup_signal_handlers(self) -> None:
        """
        Install SIGTERM/SIGINT handlers.

        Must be called from the running event loop; original handlers are
        kept for restore_signal_handlers(). Outside the main thread (test
        clients, embedded servers) signals cannot be trapped and this is a
        no-op.
        """
        if threading.current_thread() is not threading.main_thread():
            if self.reporter:
                self.reporter.debug(
                    "Not in main thread, signal handlers not installed",
                    context="ShutdownManager",
                )
            return

        self._loop = asyncio.get_running_loop()

        for sig in (signal.SIGTERM, signal.SIGINT):
            self._original_handlers[sig] = signal.getsignal(sig)
            signal.signal(sig, self._handle_signal)

    def restore_signal_handlers(self) -> None:
        for sig, handler in self._original_handlers.items():
            signal.signal(sig, handler)
        self._original_handlers.clear()

    def _handle_signal(self, signum: int, frame) -> None:
        sig_name = signal.Signals(signum).name

        if self._loop is None or self._loop.is_closed():
            return

        self._loop.call_soon_threadsafe(self._schedule_shutdown, sig_name)

    def _schedule_shutdown(self, reason: str) -> None:
        task = asyncio.ensure_future(self.initiate_shutdown(reason))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    async def initiate_shutdown(self, reason: str = "manual") -> None:
        """
        Start the shutdown sequence. Later calls are no-ops.

        Args:
            reason: Signal name, "lifespan", "manual", ...
        """
        if self.state != ShutdownState.RUNNING:
            return

        self.state = ShutdownState.SHUTTING_DOWN
        self.shutdown_started_at = datetime.now(timezone.utc)
        self.shutdown_reason = reason
        self._shutdown_event.set()

        if self.reporter:
            self.reporter.warning(
                f"{Emoji.SYSTEM.SHUTDOWN} Shutdown initiated ({reason})",
                context="ShutdownManager",
            )

        try:
            await asyncio.wait_for(self._run_callbacks(), timeout=self.shutdown_timeout)
        except asyncio.TimeoutError:
            if self.reporter:
                self.reporter.error(
                    f"Shutdown callbacks exceeded {self.shutdown_timeout}s",
                    context="ShutdownManager",
                )

    async def _run_callbacks(self) -> None:
        for callback in self._shutdown_callbacks:
            try:
                result = callback()
                if asyncio.iscoroutine(result):
                    await result
            except Exception as e:
                # Remaining callbacks still run
                if self.reporter:
                    self.reporter.error(
                        f"Shutdown callback {getattr(callback, '__name__', callback)} "
                        f"failed: {e}",
                        context="ShutdownManager",
                    )

    async def wait_for_shutdown(self) -> None:
        """Block until shutdown is initiated."""
        await self._shutdown_event.wait()

    def mark_shutdown_complete(self) -> None:
        self.state = ShutdownState.SHUTDOWN

    def get_shutdown_info(self) -> Dict[str, Any]:
        """
        Get shutdown status information.

        Returns:
            Dictionary with shutdown status details
        """
        return {
            "state": self.state.value,
            "is_shutting_down": self.is_shutting_down(),
            "reason": self.shutdown_reason,
            "shutdown_started_at": (
                self.shutdown_started_at.isoformat()
                if self.shutdown_started_at
                else None
            ),
            "shutdown_timeout": self.shutdown_timeout,
            "grace_period": self.grace_period,
        }
