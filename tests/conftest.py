"""Shared pytest fixtures for bridge_session tests."""

from __future__ import annotations

import threading
import time
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from urllib.parse import parse_qsl, urlsplit

import pytest

from bridge_session.config import SessionConfig
from bridge_session.mocks import MockClock, MockExecutor
from bridge_session.session import DeviceSession

SLEEP_ENDPOINT_S = 2.0
DRIP_PIECE = b"x" * 256
DRIP_PIECES = 64
DRIP_INTERVAL_S = 0.1


class _DeviceServiceHandler(BaseHTTPRequestHandler):
    """Stand-in for the HTTP service running inside the device.

    GET  hello?param1=1&param2=2 -> "hello get param1 param2"
    GET  sleep                   -> sleeps, then "slept"
    GET  drip                    -> 16 KiB body, 256 bytes every 0.1s
    POST hello <body>            -> "hello post <body>"
    anything else                -> 404
    """

    def _reply(self, status: int, text: str) -> None:
        data = text.encode()
        self.send_response(status)
        self.send_header("Content-Type", "text/plain")
        self.send_header("Content-Length", str(len(data)))
        self.end_headers()
        self.wfile.write(data)

    def do_GET(self):
        parts = urlsplit(self.path)
        self.server.requests.append(("GET", self.path, dict(self.headers), b""))
        if parts.path == "/hello":
            keys = [k for k, _ in parse_qsl(parts.query)]
            self._reply(200, " ".join(["hello get"] + keys))
        elif parts.path == "/sleep":
            time.sleep(SLEEP_ENDPOINT_S)
            self._reply(200, "slept")
        elif parts.path == "/drip":
            self._drip()
        else:
            self._reply(404, "not found")

    def _drip(self) -> None:
        self.send_response(200)
        self.send_header("Content-Type", "application/octet-stream")
        self.send_header("Content-Length", str(len(DRIP_PIECE) * DRIP_PIECES))
        self.end_headers()
        try:
            for _ in range(DRIP_PIECES):
                self.wfile.write(DRIP_PIECE)
                self.wfile.flush()
                time.sleep(DRIP_INTERVAL_S)
        except (BrokenPipeError, ConnectionResetError):
            pass

    def do_POST(self):
        length = int(self.headers.get("Content-Length", 0))
        body = self.rfile.read(length)
        self.server.requests.append(("POST", self.path, dict(self.headers), body))
        if urlsplit(self.path).path == "/hello":
            self._reply(200, "hello post " + body.decode())
        else:
            self._reply(404, "not found")

    def log_message(self, format, *args):
        pass


@pytest.fixture
def device_service():
    """Local HTTP server playing the service behind the forwarded port."""
    server = ThreadingHTTPServer(("127.0.0.1", 0), _DeviceServiceHandler)
    server.requests = []
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()
    yield server
    server.shutdown()
    server.server_close()


@pytest.fixture
def executor():
    return MockExecutor()


@pytest.fixture
def clock():
    return MockClock()


@pytest.fixture
def config():
    return SessionConfig(
        bridge_path="adb",
        device_id="emulator-5554",
        ip="127.0.0.1",
        forward_port="8080",
    )


@pytest.fixture
def session(config, executor, clock):
    return DeviceSession(config, executor=executor, clock=clock)


@pytest.fixture
def http_session(device_service, executor, clock):
    """Session whose forward port is the local stub service."""
    config = SessionConfig(
        bridge_path="adb",
        device_id="emulator-5554",
        ip="127.0.0.1",
        forward_port=str(device_service.server_port),
    )
    return DeviceSession(config, executor=executor, clock=clock)
