"""
Tocsin - realtime broadcast hub for disaster reports.

Wires the Clean Architecture components into a FastAPI application and
runs it under uvicorn.
"""

import asyncio
import logging
import os
import sys
from contextlib import asynccontextmanager
from typing import Optional

import uvicorn
from fastapi import FastAPI

from tocsin import __version__
from tocsin.config.settings import Settings, load_config
from tocsin.di import Container
from tocsin.domain.repositories import INotificationStore
from tocsin.infrastructure.monitoring import MetricsServer
from tocsin.presentation.api.dependencies import set_container
from tocsin.presentation.api.routes import (
    create_websocket_router,
    health_router,
    publish_router,
)
from tocsin.reporter import Emoji, SystemReporter


class TocsinApp:
    """
    Tocsin application orchestrator.

    Responsibilities:
        - Initialize DI container
        - Setup FastAPI application and routes
        - Manage lifecycle with graceful shutdown
        - Start the Prometheus metrics server
        - Run uvicorn server
    """

    def __init__(
        self,
        settings: Settings,
        notification_store: Optional[INotificationStore] = None,
    ):
        """
        Initialize Tocsin application.

        Args:
            settings: Application settings
            notification_store: Optional store enabling the notification
                dispatcher
        """
        self.settings = settings

        self.reporter = self._create_reporter()

        self.container = Container(
            settings,
            reporter=self.reporter,
            notification_store=notification_store,
        )

        self.app = self._create_app()

        set_container(self.container)

        self.metrics_server: Optional[MetricsServer] = None
        self.server: Optional[uvicorn.Server] = None

        self.reporter.info(
            f"{Emoji.SYSTEM.READY} Tocsin initialized",
            context="Tocsin",
            verbose_level=1,
        )

    def _create_reporter(self) -> SystemReporter:
        """
        Create SystemReporter instance.

        Returns:
            Configured SystemReporter
        """
        log_dir = None

        if self.settings.log_file:
            log_dir = os.path.dirname(self.settings.log_file) or "logs"

        return SystemReporter(
            name="tocsin",
            log_dir=log_dir,
            level=getattr(logging, self.settings.log_level.upper()),
            verbose=2 if self.settings.DEBUG else 1,
        )

    def _create_app(self) -> FastAPI:
        """
        Create FastAPI application with lifespan management.

        Returns:
            Configured FastAPI application
        """

        @asynccontextmanager
        async def lifespan(app: FastAPI):
            await self._on_startup()
            yield
            await self._on_shutdown()

        app = FastAPI(
            title=self.settings.APP_NAME,
            description="Realtime broadcast hub for disaster reports",
            version=__version__,
            lifespan=lifespan,
        )

        app.include_router(create_websocket_router(self.settings.ws_path))
        app.include_router(publish_router)
        app.include_router(health_router)

        return app

    async def _on_startup(self):
        """
        Application startup event handler.

        Fails fast on missing JWT configuration, installs signal handlers
        and starts the metrics server.
        """
        self.reporter.info(
            f"{Emoji.SYSTEM.STARTUP} Tocsin starting...",
            context="Tocsin",
            verbose_level=1,
        )

        # Builds the verifier, raising ValueError without jwt_secret
        self.container.hub

        shutdown_manager = self.container.shutdown_manager
        shutdown_manager.setup_signal_handlers()
        shutdown_manager.register_shutdown_callback(self._graceful_shutdown_callback)

        self.reporter.info(
            f"Graceful shutdown enabled (timeout: {self.settings.shutdown_timeout}s, "
            f"grace: {self.settings.shutdown_grace_period}s)",
            context="Tocsin",
            verbose_level=1,
        )

        if self.settings.METRICS_ENABLED:
            self.metrics_server = MetricsServer(
                host=self.settings.METRICS_HOST,
                port=self.settings.METRICS_PORT,
                reporter=self.reporter,
            )
            self.metrics_server.start_in_background()

        self.reporter.info(
            f"Listening on {self.settings.host}:{self.settings.port}"
            f"{self.settings.ws_path}",
            context="Tocsin",
            verbose_level=1,
        )

        if self.container.notification_dispatcher is None:
            self.reporter.info(
                "Notification store: NOT CONFIGURED (push via /publish only)",
                context="Tocsin",
                verbose_level=1,
            )

    async def _graceful_shutdown_callback(self):
        """
        Callback executed when shutdown is initiated.

        Sends SHUTDOWN to clients, closes them after the grace period,
        then stops uvicorn.
        """
        await self.container.hub.close_all(
            code=1001,
            reason="Server shutdown",
            grace_period=self.settings.shutdown_grace_period,
        )

        if self.server:
            self.server.should_exit = True

    async def _on_shutdown(self):
        """
        Application shutdown event handler.

        Covers exits that did not go through our signal handlers.
        """
        shutdown_manager = self.container.shutdown_manager

        await shutdown_manager.initiate_shutdown("lifespan")
        await self.container.hub.close_all(code=1001, reason="Server shutdown")

        shutdown_manager.mark_shutdown_complete()
        shutdown_manager.restore_signal_handlers()

        if self.metrics_server:
            self.metrics_server.shutdown()

        self.reporter.info(
            f"{Emoji.SYSTEM.SHUTDOWN} Tocsin stopped",
            context="Tocsin",
            verbose_level=1,
        )

    async def serve(self):
        """
        Run server under uvicorn.Server for shutdown control.
        """
        config = uvicorn.Config(
            self.app,
            host=self.settings.host,
            port=self.settings.port,
            log_level=self.settings.log_level,
        )
        self.server = uvicorn.Server(config)
        await self.server.serve()

    def start(self):
        """
        Start Tocsin server.

        Blocks until the server is stopped.
        """
        asyncio.run(self.serve())


def main():
    """
    Main entry point for Tocsin.

    Usage:
        tocsin [port]
    """
    config = load_config()

    if len(sys.argv) > 1:
        try:
            config.port = int(sys.argv[1])
        except ValueError:
            print(f"Invalid port: {sys.argv[1]}")
            sys.exit(1)

    app = TocsinApp(config)

    try:
        app.start()
    except KeyboardInterrupt:
        print("\nTocsin stopped by user")
        sys.exit(0)


if __name__ == "__main__":
    main()
