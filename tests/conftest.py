"""Shared fixtures: a real local HTTP server that answers slowly."""

from __future__ import annotations

import threading
import time
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from typing import Callable, Generator

import pytest

SlowServerFactory = Callable[..., str]


def _make_handler(header_delay: float, body_delay: float, body: bytes) -> type:
    class _SlowHandler(BaseHTTPRequestHandler):
        def _answer(self) -> None:
            length = int(self.headers.get("Content-Length") or 0)
            if length:
                self.rfile.read(length)
            time.sleep(header_delay)
            try:
                self.send_response(200)
                self.send_header("Content-Type", "text/html; charset=utf-8")
                self.send_header("Content-Length", str(len(body)))
                self.end_headers()
                self.wfile.flush()
                time.sleep(body_delay)
                self.wfile.write(body)
            except (BrokenPipeError, ConnectionResetError):
                # The client gave up first.
                pass

        do_GET = _answer
        do_POST = _answer

        def log_message(self, format: str, *args: object) -> None:
            pass

    return _SlowHandler


@pytest.fixture
def slow_server() -> Generator[SlowServerFactory, None, None]:
    """Start local servers that wait before sending headers and again before the body."""
    started: list[tuple[ThreadingHTTPServer, threading.Thread]] = []

    def _start(header_delay: float = 0.0, body_delay: float = 0.0, body: bytes = b"ok") -> str:
        server = ThreadingHTTPServer(
            ("127.0.0.1", 0), _make_handler(header_delay, body_delay, body)
        )
        thread = threading.Thread(target=server.serve_forever, daemon=True)
        thread.start()
        started.append((server, thread))
        return f"http://127.0.0.1:{server.server_port}"

    yield _start

    for server, thread in started:
        server.shutdown()
        server.server_close()
        thread.join(timeout=5)
