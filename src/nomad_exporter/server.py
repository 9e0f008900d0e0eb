"""
HTTP exposition for the exporter.

The telemetry path serves the Prometheus text format for one registry;
every other path gets a small landing page pointing at it. Requests are
handled on their own threads, so concurrent polls queue up on the
exporter's lock rather than on the socket.
"""

from __future__ import annotations

import logging
import socket
from socketserver import ThreadingMixIn
from typing import Tuple
from wsgiref.simple_server import WSGIRequestHandler, WSGIServer, make_server

from prometheus_client import CollectorRegistry, make_wsgi_app

log = logging.getLogger(__name__)

LANDING_PAGE = """<html>
<head><title>Nomad Exporter</title></head>
<body>
<h1>Nomad Exporter</h1>
<p><a href='{metrics_path}'>Metrics</a></p>
</body>
</html>
"""


class _ThreadingWSGIServer(ThreadingMixIn, WSGIServer):
    daemon_threads = True


class _ThreadingWSGIServerV6(_ThreadingWSGIServer):
    address_family = socket.AF_INET6


class _QuietHandler(WSGIRequestHandler):
    def log_message(self, format, *args):
        log.debug("%s - %s", self.address_string(), format % args)


def parse_listen_address(listen_address: str) -> Tuple[str, int]:
    """Split "host:port". The host may be empty (":9000") or a bracketed
    IPv6 address ("[::]:9000"), which comes back without brackets."""
    host, sep, port = listen_address.rpartition(":")
    if not sep or not port.isdigit():
        raise ValueError(f"invalid listen address {listen_address!r}, expected host:port")
    if host.startswith("[") and host.endswith("]"):
        host = host[1:-1]
    return host, int(port)


def create_app(registry: CollectorRegistry, metrics_path: str = "/metrics"):
    metrics_app = make_wsgi_app(registry)
    landing = LANDING_PAGE.format(metrics_path=metrics_path).encode()

    def app(environ, start_response):
        if environ.get("PATH_INFO", "/") == metrics_path:
            return metrics_app(environ, start_response)

        start_response(
            "200 OK",
            [("Content-Type", "text/html; charset=utf-8"), ("Content-Length", str(len(landing)))],
        )
        return [landing]

    return app


def serve(app, listen_address: str = ":9000"):
    """Serve forever. Raises OSError if the address can't be bound."""
    host, port = parse_listen_address(listen_address)
    server_class = _ThreadingWSGIServerV6 if ":" in host else _ThreadingWSGIServer
    httpd = make_server(host, port, app, server_class, _QuietHandler)
    log.info("Listening on %s", listen_address)
    try:
        httpd.serve_forever()
    finally:
        httpd.server_close()
