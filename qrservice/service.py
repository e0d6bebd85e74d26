"""A small HTTP service and the command that starts it."""

from __future__ import annotations

import argparse
import logging
import threading
from abc import ABC, abstractmethod
from http import HTTPStatus
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from typing import Callable, Sequence

DEFAULT_HOST = "0.0.0.0"
DEFAULT_PORT = 8080

_Route = Callable[[], tuple[bytes, str]]

_log = logging.getLogger(__name__)


class HttpServerBase(ABC):
    """Interface of an HTTP server that can be started and stopped."""

    @abstractmethod
    def start(self, port: int) -> None:
        """Listen on the port and serve requests until stopped."""

    @abstractmethod
    def stop(self) -> None:
        """Stop serving requests."""


def _hello() -> tuple[bytes, str]:
    return b"Hello, World!", "text/plain"


_ROUTES: dict[str, _Route] = {"/hello": _hello}


class _Handler(BaseHTTPRequestHandler):
    def do_GET(self) -> None:  # noqa: N802 - name fixed by the base class
        route = _ROUTES.get(self.path.split("?", 1)[0])
        if route is None:
            self.send_response(HTTPStatus.NOT_FOUND)
            self.send_header("Content-Length", "0")
            self.end_headers()
            return
        body, content_type = route()
        self.send_response(HTTPStatus.OK)
        self.send_header("Content-Type", content_type)
        self.send_header("Content-Length", str(len(body)))
        self.end_headers()
        self.wfile.write(body)

    def log_message(self, format: str, *args: object) -> None:
        """Send request logs to the module logger instead of stderr."""
        _log.debug("%s - %s", self.address_string(), format % args)


class HttpServer(HttpServerBase):
    """Threaded HTTP server answering GET /hello with a plain-text greeting."""

    def __init__(self, host: str = DEFAULT_HOST) -> None:
        self.host = host
        self._server: ThreadingHTTPServer | None = None
        self._ready = threading.Event()
        self._lock = threading.Lock()

    @property
    def server_address(self) -> tuple[str, int] | None:
        """The bound (host, port), or None when not listening."""
        server = self._server
        if server is None:
            return None
        host, port = server.server_address[:2]
        return str(host), int(port)

    def wait_until_ready(self, timeout: float | None = None) -> bool:
        """Block until the server is listening; False if the timeout passed."""
        return self._ready.wait(timeout)

    def start(self, port: int) -> None:
        """Bind to the port and serve until :meth:`stop` is called."""
        server = ThreadingHTTPServer((self.host, port), _Handler)
        server.daemon_threads = True
        with self._lock:
            self._server = server
            self._ready.set()
        try:
            server.serve_forever()
        finally:
            with self._lock:
                self._server = None
                self._ready.clear()
            server.server_close()

    def stop(self) -> None:
        """Ask a running server to stop; does nothing if none is running."""
        with self._lock:
            server = self._server
        if server is not None:
            server.shutdown()


def main(argv: Sequence[str] | None = None) -> int:
    """Start the HTTP service and serve until interrupted."""
    parser = argparse.ArgumentParser(prog="qrservice", description="Run the HTTP service.")
    parser.add_argument("--port", type=int, default=DEFAULT_PORT, help="port to listen on")
    args = parser.parse_args(argv)

    print("Starting HTTP server...", flush=True)
    server = HttpServer()
    try:
        server.start(args.port)
    except KeyboardInterrupt:
        server.stop()
    return 0