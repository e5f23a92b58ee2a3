"""
Dependency Injection container for Tocsin.

Builds the hub, its collaborators, and the publishing use cases once per
application and hands them to the presentation layer.
"""

from datetime import datetime, timezone
from typing import Any, Dict, Optional

from tocsin.application.use_cases import (
    AuthenticateConnectionUseCase,
    NotificationDispatcher,
    ReportEventPublisher,
)
from tocsin.config.settings import Settings
from tocsin.domain.repositories import INotificationStore
from tocsin.infrastructure.auth import JWTVerifier
from tocsin.infrastructure.shutdown import ShutdownManager
from tocsin.infrastructure.websocket import BroadcastHub
from tocsin.reporter import SystemReporter


class Container:
    """
    Dependency Injection container.

    Lazily creates singletons on first access.

    Attributes:
        settings: Application settings
        reporter: SystemReporter shared by all components
        notification_store: Store used by the notification dispatcher,
            supplied by the embedding application
        stats: Publish API counters for /stats
    """

    def __init__(
        self,
        settings: Settings,
        reporter: Optional[SystemReporter] = None,
        notification_store: Optional[INotificationStore] = None,
    ):
        """
        Initialize container with settings.

        Args:
            settings: Application settings
            reporter: SystemReporter (a default one is created if omitted)
            notification_store: Optional notification persistence
        """
        self.settings = settings
        self.reporter = reporter or SystemReporter(name="tocsin")
        self.notification_store = notification_store

        self._hub: Optional[BroadcastHub] = None
        self._jwt_verifier: Optional[JWTVerifier] = None
        self._shutdown_manager: Optional[ShutdownManager] = None
        self._report_publisher: Optional[ReportEventPublisher] = None
        self._notification_dispatcher: Optional[NotificationDispatcher] = None

        self.stats: Dict[str, Any] = {
            "events_published": 0,
            "events_published_by_type": {},
            "publish_rejections": 0,
            "connections_refused": 0,
            "start_time": datetime.now(timezone.utc),
        }

    @property
    def jwt_verifier(self) -> JWTVerifier:
        """
        Get JWTVerifier singleton.

        Raises:
            ValueError: If jwt_secret is not configured
        """
        if self._jwt_verifier is None:
            if not self.settings.jwt_secret:
                raise ValueError("jwt_secret not configured")

            self._jwt_verifier = JWTVerifier(
                secret=self.settings.jwt_secret,
                algorithm=self.settings.jwt_algorithm,
            )

        return self._jwt_verifier

    @property
    def hub(self) -> BroadcastHub:
        """Get BroadcastHub singleton."""
        if self._hub is None:
            self._hub = BroadcastHub(
                authenticate_use_case=AuthenticateConnectionUseCase(self.jwt_verifier),
                greeting_message=self.settings.greeting_message,
                reporter=self.reporter,
            )
        return self._hub

    @property
    def shutdown_manager(self) -> ShutdownManager:
        """Get ShutdownManager singleton."""
        if self._shutdown_manager is None:
            self._shutdown_manager = ShutdownManager(
                shutdown_timeout=self.settings.shutdown_timeout,
                grace_period=self.settings.shutdown_grace_period,
                reporter=self.reporter,
            )
        return self._shutdown_manager

    @property
    def report_publisher(self) -> ReportEventPublisher:
        """Get ReportEventPublisher singleton."""
        if self._report_publisher is None:
            self._report_publisher = ReportEventPublisher(self.hub)
        return self._report_publisher

    @property
    def notification_dispatcher(self) -> Optional[NotificationDispatcher]:
        """
        Get NotificationDispatcher singleton.

        Returns:
            Dispatcher if a notification store was supplied, None otherwise
        """
        if self.notification_store is None:
            return None

        if self._notification_dispatcher is None:
            self._notification_dispatcher = NotificationDispatcher(
                store=self.notification_store,
                hub=self.hub,
                reporter=self.reporter,
            )
        return self._notification_dispatcher

    def record_publish(self, event: str) -> None:
        """Count one accepted POST /publish event."""
        self.stats["events_published"] += 1
        by_type = self.stats["events_published_by_type"]
        by_type[event] = by_type.get(event, 0) + 1

    def increment_stat(self, stat_name: str, amount: int = 1) -> None:
        if stat_name in self.stats:
            self.stats[stat_name] += amount

    def get_uptime_seconds(self) -> float:
        return (datetime.now(timezone.utc) - self.stats["start_time"]).total_seconds()
