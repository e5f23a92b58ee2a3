"""
Prometheus metrics HTTP server.

Exposes /metrics endpoint for Prometheus scraping on its own port.
Uses wsgiref.simple_server (stdlib) for lightweight HTTP serving.
"""

import threading
from typing import Optional
from wsgiref.simple_server import WSGIServer, make_server

from prometheus_client import make_wsgi_app

from tocsin.reporter import SystemReporter


class MetricsServer:
    """
    Standalone HTTP server for Prometheus metrics.

    Example:
        server = MetricsServer(host="0.0.0.0", port=9090)
        server.start_in_background()
        ...
        server.shutdown()
    """

    def __init__(
        self,
        host: str = "0.0.0.0",
        port: int = 9090,
        reporter: Optional[SystemReporter] = None,
    ) -> None:
        """
        Initialize metrics server.

        Args:
            host: Host to bind to (default: 0.0.0.0)
            port: Port to bind to (default: 9090)
            reporter: Optional SystemReporter
        """
        self.host = host
        self.port = port
        self.reporter = reporter
        self.httpd: Optional[WSGIServer] = None
        self._thread: Optional[threading.Thread] = None
        self._running = False

    def start(self) -> None:
        """
        Start the metrics server.

        Blocks until shutdown() is called from another thread.

        Raises:
            OSError: If port is already in use
        """
        app = make_wsgi_app()

        try:
            self.httpd = make_server(self.host, self.port, app)
            self._running = True
        except OSError as e:
            if self.reporter:
                self.reporter.error(
                    f"Failed to bind metrics server to {self.host}:{self.port}: {e}",
                    context="MetricsServer",
                )
            raise

        if self.reporter:
            self.reporter.info(
                f"Metrics server listening on {self.url}",
                context="MetricsServer",
            )

        self.httpd.serve_forever()

    def start_in_background(self) -> None:
        """Start the metrics server in a daemon thread."""
        self._thread = threading.Thread(
            target=self.start,
            daemon=True,
            name="MetricsServer",
        )
        self._thread.start()

    def shutdown(self) -> None:
        """Shutdown the server gracefully."""
        if self.httpd and self._running:
            self._running = False
            self.httpd.shutdown()
            self.httpd.server_close()
            self.httpd = None

            if self.reporter:
                self.reporter.info("Metrics server shut down", context="MetricsServer")

    @property
    def is_running(self) -> bool:
        """Check if server is running."""
        return self._running

    @property
    def url(self) -> str:
        """Get the full URL of the metrics endpoint."""
        return f"http://{self.host}:{self.port}/metrics"
