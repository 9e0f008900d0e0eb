"""
Fake Nomad health server for testing without a cluster.

    python -m nomad_exporter.mock.fake_nomad_server
    nomad_exporter --nomad.address http://localhost:4646
"""

from __future__ import annotations

import json
from http.server import BaseHTTPRequestHandler, HTTPServer

from nomad_exporter.mock.generator import MockNomadAgent

_agent = MockNomadAgent(seed=42)


class _HealthHandler(BaseHTTPRequestHandler):
    def do_GET(self):
        body = json.dumps(_agent.payload()).encode()
        self.send_response(200)
        self.send_header("Content-Type", "application/json")
        self.send_header("Content-Length", str(len(body)))
        self.end_headers()
        self.wfile.write(body)

    def log_message(self, format, *args):
        pass  # Suppress request logging noise


def run_fake_server(host: str = "127.0.0.1", port: int = 4646):
    server = HTTPServer((host, port), _HealthHandler)
    print(f"Fake Nomad health server running at http://{host}:{port}/")
    print("Press Ctrl+C to stop.\n")
    try:
        server.serve_forever()
    except KeyboardInterrupt:
        pass
    server.server_close()
    print("\nServer stopped.")


if __name__ == "__main__":
    run_fake_server()
