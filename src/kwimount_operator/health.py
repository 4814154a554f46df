"""Health check and metrics endpoints for the operator."""

from __future__ import annotations

import threading
from typing import Any

from prometheus_client import make_wsgi_app
from werkzeug.serving import make_server
from werkzeug.wrappers import Request, Response

_ready = threading.Event()


def set_ready(ready: bool = True) -> None:
    """Mark the operator as ready (or not) to reconcile."""
    if ready:
        _ready.set()
    else:
        _ready.clear()


def is_ready() -> bool:
    """Whether the operator finished starting up."""
    return _ready.is_set()


def health_response(path: str) -> Response | None:
    """Build the response for a health endpoint, or None for other paths."""
    if path == "/healthz":
        return Response('{"status":"ok"}', mimetype="application/json", status=200)
    if path == "/readyz":
        if is_ready():
            return Response('{"status":"ready"}', mimetype="application/json", status=200)
        return Response('{"status":"not ready"}', mimetype="application/json", status=503)
    return None


def create_combined_wsgi_app() -> Any:
    """Create a WSGI app that combines metrics and health check endpoints.

    Returns:
        Combined WSGI application
    """
    metrics_app = make_wsgi_app()

    def combined_app(environ: dict[str, Any], start_response: Any) -> Any:
        """WSGI app that routes /healthz and /readyz, delegates everything else to prometheus."""
        request = Request(environ)
        response = health_response(request.path)
        if response is not None:
            return response(environ, start_response)
        return metrics_app(environ, start_response)

    return combined_app


def start_metrics_server(port: int) -> threading.Thread:
    """Serve metrics and health endpoints from a background thread.

    Args:
        port: Port number to listen on

    Returns:
        The server thread
    """
    server = make_server("", port, create_combined_wsgi_app(), threaded=True)
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()
    return thread
