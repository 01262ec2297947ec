"""
Copyright (C) 2026 Garudex Labs.  All Rights Reserved.
Statsview, a product of Garudex Labs

HTTP server for the stats endpoint.

Serves:
- /stats    stats query endpoint (plain, json and monitor formats)
- /metrics  Prometheus text exposition of the same stats
- /health   liveness check
"""

from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from threading import Thread
from typing import Optional
from urllib.parse import parse_qs, urlsplit

from statsview.logging_config import clear_correlation_id, get_logger, set_correlation_id
from statsview.monitoring.metrics import StatsRegistry, get_stats_registry
from statsview.stats.dispatcher import StatsRequestHandler, StatsResponse
from statsview.stats.formatters import ProcessIdentity

logger = get_logger(__name__)

STATS_PATH = "/stats"
METRICS_PATH = "/metrics"
HEALTH_PATH = "/health"

# Errors raised by the socket when the client goes away mid-request
TRANSPORT_ERRORS = (ConnectionResetError, BrokenPipeError, ConnectionAbortedError)


class StatsHTTPHandler(BaseHTTPRequestHandler):
    """
    HTTP request handler for the stats web service.

    Each request to /stats gets its own StatsRequestHandler; nothing is
    shared between requests except the stats registry.
    """

    def __init__(
        self,
        *args,
        stats_registry: Optional[StatsRegistry] = None,
        identity: Optional[ProcessIdentity] = None,
        **kwargs
    ):
        """
        Initialize stats handler.

        Args:
            stats_registry: StatsRegistry instance (uses global if not provided)
            identity: Identity reported in monitor output
        """
        self.stats_registry = stats_registry
        self.identity = identity
        self._headers_sent = False
        super().__init__(*args, **kwargs)

    def do_GET(self):
        """Handle GET requests."""
        path = urlsplit(self.path).path
        if path == STATS_PATH:
            self._serve_stats("GET")
        elif path == METRICS_PATH:
            self._serve_metrics()
        elif path == HEALTH_PATH:
            self._serve_health()
        else:
            self.send_error(404, "Not Found")

    def __getattr__(self, name: str):
        # BaseHTTPRequestHandler dispatches on do_<COMMAND> and answers 501
        # when it is missing; every non-GET verb goes through one handler.
        if name.startswith("do_"):
            return self._handle_other_method
        raise AttributeError(f"{type(self).__name__!r} object has no attribute {name!r}")

    def _handle_other_method(self):
        if urlsplit(self.path).path == STATS_PATH:
            self._serve_stats(self.command)
        else:
            self.send_error(404, "Not Found")

    def _get_registry(self) -> StatsRegistry:
        if self.stats_registry is None:
            self.stats_registry = get_stats_registry()
        return self.stats_registry

    def _serve_stats(self, method: str):
        """Drive one StatsRequestHandler through the request."""
        set_correlation_id()
        handler = StatsRequestHandler(
            self._get_registry(),
            self.identity,
            self._write_stats_response,
        )
        try:
            body = self._read_body()
            handler.on_request(method, parse_qs(urlsplit(self.path).query, keep_blank_values=True))
            if body:
                handler.on_body(body)
            handler.on_eom()
        except TRANSPORT_ERRORS as e:
            handler.on_error(e)
        except Exception as e:
            logger.error(f"Failed to serve stats: {e}", exc_info=True)
            if not self._headers_sent:
                self.send_error(500, "Internal Server Error")
        finally:
            handler.request_complete()
            clear_correlation_id()

    def _read_body(self) -> bytes:
        """Read and return the request body so the connection stays usable."""
        try:
            length = int(self.headers.get('Content-Length') or 0)
        except ValueError:
            logger.debug(f"Ignoring malformed Content-Length: {self.headers.get('Content-Length')!r}")
            return b""
        if length <= 0:
            return b""
        return self.rfile.read(length)

    def _write_stats_response(self, response: StatsResponse):
        payload = response.body.encode("utf-8")

        self._headers_sent = True
        self.send_response(response.status, response.reason)
        self.send_header('Content-Type', response.content_type)
        self.send_header('Content-Length', str(len(payload)))
        self.end_headers()
        if self.command != "HEAD":
            self.wfile.write(payload)

    def _serve_metrics(self):
        """Serve Prometheus metrics."""
        try:
            registry = self._get_registry()
            metrics_data = registry.generate_metrics()
            content_type = registry.get_content_type()

            self.send_response(200)
            self.send_header('Content-Type', content_type)
            self.send_header('Content-Length', str(len(metrics_data)))
            self.end_headers()
            self.wfile.write(metrics_data)

            logger.debug("Served Prometheus metrics")

        except TRANSPORT_ERRORS as e:
            logger.error(f"Connection lost while serving metrics: {e}")
        except Exception as e:
            logger.error(f"Failed to serve metrics: {e}", exc_info=True)
            self.send_error(500, "Internal Server Error")

    def _serve_health(self):
        """Serve health check endpoint."""
        health_data = b'{"status": "healthy", "service": "statsview"}\n'

        self.send_response(200)
        self.send_header('Content-Type', 'application/json')
        self.send_header('Content-Length', str(len(health_data)))
        self.end_headers()
        self.wfile.write(health_data)

        logger.debug("Served health check")

    def log_message(self, format, *args):
        """Override to use our logger instead of stderr."""
        logger.debug(f"HTTP {format % args}")


class StatsWebServer:
    """
    HTTP server for the stats endpoint.

    Runs in a separate thread to avoid blocking the main application and
    handles each request on its own thread.
    """

    def __init__(
        self,
        host: str = "0.0.0.0",
        port: int = 11000,
        local_ip: str = "",
        role: str = "unknown",
        stats_registry: Optional[StatsRegistry] = None
    ):
        """
        Initialize stats web server.

        Args:
            host: Host to bind to (default: 0.0.0.0)
            port: Port to bind to (default: 11000, 0 picks a free port)
            local_ip: Address advertised in monitor output (default: hostname)
            role: Role name advertised in monitor output
            stats_registry: StatsRegistry instance (uses global if not provided)
        """
        self.host = host
        self.port = port
        self.local_ip = local_ip
        self.role = role
        self.stats_registry = stats_registry
        self.identity: Optional[ProcessIdentity] = None

        self._server: Optional[ThreadingHTTPServer] = None
        self._thread: Optional[Thread] = None
        self._running = False

        logger.info(f"StatsWebServer initialized: host={host}, port={port}, role={role}")

    def start(self):
        """
        Start HTTP server in background thread.

        The socket is bound before this method returns, so ``port`` holds the
        actual listening port afterwards.
        """
        if self._running:
            logger.warning("Stats web server already running")
            return

        self._server = ThreadingHTTPServer((self.host, self.port), self._make_handler)
        self.port = self._server.server_address[1]
        self.identity = ProcessIdentity(local_ip=self.local_ip, port=self.port, role=self.role)

        self._thread = Thread(target=self._run_server, daemon=True)
        self._thread.start()

        self._running = True

        logger.info(f"Stats web server started: {self.get_url()}")

    def _make_handler(self, *args, **kwargs):
        return StatsHTTPHandler(
            *args,
            stats_registry=self.stats_registry,
            identity=self.identity,
            **kwargs
        )

    def _run_server(self):
        """Run HTTP server (called in background thread)."""
        try:
            logger.info("Stats web server thread started")
            self._server.serve_forever()
        except Exception as e:
            logger.error(f"Stats web server error: {e}", exc_info=True)
        finally:
            logger.info("Stats web server thread stopped")

    def serve_forever(self):
        """Start the server if needed and block until it is stopped."""
        if not self._running:
            self.start()
        thread = self._thread
        if thread is not None:
            thread.join()

    def stop(self):
        """Stop HTTP server."""
        if not self._running:
            return

        logger.info("Stopping stats web server")

        if self._server:
            self._server.shutdown()
            self._server.server_close()
            self._server = None

        if self._thread:
            self._thread.join(timeout=5.0)
            self._thread = None

        self._running = False

        logger.info("Stats web server stopped")

    def is_running(self) -> bool:
        """Check if server is running."""
        return self._running

    def get_url(self) -> str:
        """Get stats endpoint URL."""
        return f"http://{self.host}:{self.port}{STATS_PATH}"


# Global stats web server instance
_stats_server: Optional[StatsWebServer] = None


def get_stats_server() -> StatsWebServer:
    """
    Get global stats web server instance.

    Returns:
        StatsWebServer singleton instance

    Raises:
        RuntimeError: If stats web server not started
    """
    global _stats_server
    if _stats_server is None:
        raise RuntimeError(
            "Stats web server not initialized. "
            "Call start_stats_server() first."
        )
    return _stats_server


def start_stats_server(
    host: str = "0.0.0.0",
    port: int = 11000,
    local_ip: str = "",
    role: str = "unknown",
    stats_registry: Optional[StatsRegistry] = None
) -> StatsWebServer:
    """
    Start global stats web server.

    Args:
        host: Host to bind to
        port: Port to bind to
        local_ip: Address advertised in monitor output
        role: Role name advertised in monitor output
        stats_registry: StatsRegistry instance

    Returns:
        Started StatsWebServer instance
    """
    global _stats_server

    if _stats_server is not None and _stats_server.is_running():
        logger.warning("Stats web server already running")
        return _stats_server

    _stats_server = StatsWebServer(
        host=host,
        port=port,
        local_ip=local_ip,
        role=role,
        stats_registry=stats_registry
    )
    _stats_server.start()

    logger.info(f"Global stats web server started: {_stats_server.get_url()}")
    return _stats_server


def stop_stats_server():
    """Stop global stats web server."""
    global _stats_server

    if _stats_server is not None:
        _stats_server.stop()
        _stats_server = None
        logger.info("Global stats web server stopped")
