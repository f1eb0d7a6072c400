"""
Fake Catchpoint v2 API for testing without a real account.

    python -m catchpoint_exporter.mock.fake_catchpoint_server
    catchpoint-exporter --bearer-token dev --base-url http://127.0.0.1:9200/api/v2 --node-ids 1,2
"""

from __future__ import annotations

import json
import re
from http.server import BaseHTTPRequestHandler, HTTPServer

from catchpoint_exporter.mock.generator import MockCatchpointAPI, envelope

API_PREFIX = "/api/v2"

_api = MockCatchpointAPI(seed=42)

_ROUTES = [
    (re.compile(r"^/nodes/status/(\d+)$"), lambda m: _api.node_status(int(m.group(1)))),
    (re.compile(r"^/slapurgeitems$"), lambda m: _api.sla_purge_items()),
    (re.compile(r"^/tests/errors/raw$"), lambda m: _api.test_errors_raw()),
    (re.compile(r"^/tests/alerts$"), lambda m: _api.alerts()),
    (re.compile(r"^/nodes/testrun/(\d+)$"), lambda m: _api.node_test_runs(int(m.group(1)))),
    (re.compile(r"^/nodes/runrate/(\d+)$"), lambda m: _api.node_run_rate(int(m.group(1)))),
    (re.compile(r"^/nodes/testruncount/(\d+)$"), lambda m: _api.node_test_run_count(int(m.group(1)))),
]


def _route(path: str):
    path = path.split("?", 1)[0]
    if path.startswith(API_PREFIX):
        path = path[len(API_PREFIX):]
    for pattern, handler in _ROUTES:
        match = pattern.match(path)
        if match:
            return handler(match)
    return None


class _ApiHandler(BaseHTTPRequestHandler):
    def _send_json(self, status: int, payload: dict):
        body = json.dumps(payload).encode()
        self.send_response(status)
        self.send_header("Content-Type", "application/json; charset=utf-8")
        self.send_header("Content-Length", str(len(body)))
        self.end_headers()
        self.wfile.write(body)

    def do_GET(self):
        auth = self.headers.get("Authorization", "")
        if not auth.startswith("Bearer ") or not auth[len("Bearer "):].strip():
            self._send_json(403, envelope(None, errors=[
                {"id": "403", "message": "You do not have permission to access this information."},
            ]))
            return

        payload = _route(self.path)
        if payload is None:
            self._send_json(404, envelope(None, errors=[{"id": "404", "message": "Not found"}]))
            return
        self._send_json(200, payload)

    def log_message(self, format, *args):
        pass  # Suppress request logging noise


def run_fake_server(host: str = "127.0.0.1", port: int = 9200):
    server = HTTPServer((host, port), _ApiHandler)
    print(f"Fake Catchpoint API running at http://{host}:{port}{API_PREFIX}")
    print("Press Ctrl+C to stop.\n")
    try:
        server.serve_forever()
    except KeyboardInterrupt:
        pass
    server.server_close()
    print("\nServer stopped.")


if __name__ == "__main__":
    run_fake_server()
