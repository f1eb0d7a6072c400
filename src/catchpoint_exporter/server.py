"""
HTTP endpoint Prometheus scrapes.

GET <metrics path> runs a scrape and returns the text exposition, GET /
shows a small landing page. Threaded, so a slow scrape doesn't hold up the
next one.
"""

from __future__ import annotations

import logging
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from typing import Type

from prometheus_client import CONTENT_TYPE_LATEST, CollectorRegistry, generate_latest

log = logging.getLogger(__name__)

DEFAULT_METRICS_PATH = "/metrics"

LANDING_PAGE = """<html>
<head><title>Catchpoint Exporter</title></head>
<body>
\t<h1>Catchpoint Exporter</h1>
\t<p><a href='{path}'>Metrics</a></p>
</body>
</html>"""


def make_handler(
    registry: CollectorRegistry,
    metrics_path: str = DEFAULT_METRICS_PATH,
) -> Type[BaseHTTPRequestHandler]:
    landing_page = LANDING_PAGE.format(path=metrics_path).encode()

    class _ExporterHandler(BaseHTTPRequestHandler):
        def _send(self, status: int, content_type: str, body: bytes):
            self.send_response(status)
            self.send_header("Content-Type", content_type)
            self.send_header("Content-Length", str(len(body)))
            self.end_headers()
            self.wfile.write(body)

        def do_GET(self):
            path = self.path.split("?", 1)[0]
            if path == metrics_path:
                self._send(200, CONTENT_TYPE_LATEST, generate_latest(registry))
            elif path == "/":
                self._send(200, "text/html; charset=UTF-8", landing_page)
            else:
                self._send(404, "text/plain; charset=utf-8", b"Not found\n")

        def log_message(self, format, *args):
            log.debug("%s - %s", self.address_string(), format % args)

    return _ExporterHandler


def make_server(
    registry: CollectorRegistry,
    host: str = "",
    port: int = 8080,
    metrics_path: str = DEFAULT_METRICS_PATH,
) -> ThreadingHTTPServer:
    return ThreadingHTTPServer((host, port), make_handler(registry, metrics_path))


def serve_metrics(
    registry: CollectorRegistry,
    host: str = "",
    port: int = 8080,
    metrics_path: str = DEFAULT_METRICS_PATH,
):
    server = make_server(registry, host, port, metrics_path)
    log.info("Serving metrics on %s:%d%s", host or "0.0.0.0", port, metrics_path)
    try:
        server.serve_forever()
    except KeyboardInterrupt:
        pass
    finally:
        server.server_close()
