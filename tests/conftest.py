# tests/conftest.py - local HTTP server fixture recording requests and serving scripted responses
import threading
import time
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer

import pytest


class RecordedRequest:
    def __init__(self, method, path, headers, body):
        self.method = method
        self.path = path
        self.headers = headers
        self.body = body

    @property
    def query(self):
        return self.path.split("?", 1)[1] if "?" in self.path else ""

    @property
    def route(self):
        return self.path.split("?", 1)[0]


class FakeFrappe:
    """Routes map path -> (status, headers, body, delay_seconds)."""

    def __init__(self):
        self.requests = []
        self.routes = {}
        self.declared_lengths = {}
        self.trickles = {}
        self.default = (200, {"Content-Type": "application/json"}, b'{"message": "ok"}', 0)
        self.base_url = ""

    def route(self, path, status=200, body=b'{"message": "ok"}', headers=None, delay=0, declared_length=None,
              trickle=0):
        if isinstance(body, str):
            body = body.encode("utf-8")
        self.routes[path] = (status, headers or {"Content-Type": "application/json"}, body, delay)
        if declared_length is not None:
            self.declared_lengths[path] = declared_length
        if trickle:
            self.trickles[path] = trickle

    def requests_to(self, path):
        return [r for r in self.requests if r.route == path]


def _make_handler(fake):
    class Handler(BaseHTTPRequestHandler):
        def _handle(self):
            length = int(self.headers.get("Content-Length") or 0)
            body = self.rfile.read(length) if length else b""
            req_headers = {k.lower(): v for k, v in self.headers.items()}
            fake.requests.append(RecordedRequest(self.command, self.path, req_headers, body))
            status, headers, payload, delay = fake.routes.get(self.path.split("?", 1)[0], fake.default)
            if delay:
                time.sleep(delay)
            self.send_response(status)
            for k, v in headers.items():
                self.send_header(k, v)
            # a declared length longer than the payload simulates a truncated body
            self.send_header("Content-Length", str(fake.declared_lengths.get(self.path.split("?", 1)[0], len(payload))))
            self.end_headers()
            interval = fake.trickles.get(self.path.split("?", 1)[0])
            if not interval:
                self.wfile.write(payload)
                return
            # one byte at a time, never idle long enough for a per-read timeout
            for i in range(len(payload)):
                self.wfile.write(payload[i:i + 1])
                self.wfile.flush()
                time.sleep(interval)

        do_GET = do_POST = do_PUT = do_DELETE = _handle

        def log_message(self, format, *args):
            pass

    return Handler


@pytest.fixture
def frappe_server():
    fake = FakeFrappe()
    server = ThreadingHTTPServer(("127.0.0.1", 0), _make_handler(fake))
    server.daemon_threads = True
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()
    fake.base_url = f"http://127.0.0.1:{server.server_address[1]}/"
    try:
        yield fake
    finally:
        server.shutdown()
        server.server_close()
