import json
import threading
import time
from dataclasses import dataclass, field
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from typing import BinaryIO, Dict, Mapping, Optional

import structlog

from .receiver import WebhookReceiver
from .response import DispatchResult


logger = structlog.get_logger()


@dataclass(frozen=True)
class RelayServerStatus:
    running: bool
    started_at: Optional[float]
    stopped_at: Optional[float]
    total_requests: int
    status_counts: Dict[int, int] = field(default_factory=dict)
    last_error: Optional[str] = None


class RelayServer:
    """Local HTTP listener that feeds Slack requests into a ``WebhookReceiver``."""

    def __init__(
        self,
        receiver: WebhookReceiver,
        *,
        host: str = "0.0.0.0",
        port: int = 8081,
        path: str = "/slack/events",
        max_requests: Optional[int] = None,
    ) -> None:
        self._receiver = receiver
        self._host = host
        self._port = port
        self._path = path if path.startswith("/") else f"/{path}"
        self._max_requests = max_requests

        self._lock = threading.Lock()
        self._httpd: Optional[ThreadingHTTPServer] = None
        self._started_at: Optional[float] = None
        self._stopped_at: Optional[float] = None
        self._total_requests = 0
        self._status_counts: Dict[int, int] = {}
        self._last_error: Optional[str] = None

    @property
    def path(self) -> str:
        return self._path

    @property
    def server_address(self) -> tuple[str, int]:
        if self._httpd is None:
            return (self._host, self._port)
        host, port = self._httpd.server_address[:2]
        return (str(host), int(port))

    def bind(self) -> None:
        if self._httpd is not None:
            return
        self._httpd = ThreadingHTTPServer((self._host, self._port), self._build_handler())

    def serve_forever(self) -> None:
        self.bind()
        httpd = self._httpd
        if httpd is None:
            return
        self._started_at = time.time()
        self._stopped_at = None
        host, port = self.server_address
        logger.info("server_listening", host=host, port=port, path=self._path)
        try:
            httpd.serve_forever()
        except KeyboardInterrupt:
            pass
        finally:
            httpd.server_close()
            self._httpd = None
            self._stopped_at = time.time()
            logger.info("server_stopped", requests=self._total_requests)

    def shutdown(self) -> None:
        httpd = self._httpd
        if httpd is not None:
            httpd.shutdown()

    def status(self) -> RelayServerStatus:
        with self._lock:
            return RelayServerStatus(
                running=self._httpd is not None and self._started_at is not None and self._stopped_at is None,
                started_at=self._started_at,
                stopped_at=self._stopped_at,
                total_requests=self._total_requests,
                status_counts=dict(self._status_counts),
                last_error=self._last_error,
            )

    def handle_request(self, headers: Mapping[str, str], raw_body: bytes) -> DispatchResult:
        try:
            result = self._receiver.handle(headers, raw_body)
        except Exception as exc:
            logger.exception("request_failed")
            with self._lock:
                self._last_error = f"{type(exc).__name__}: {exc}"
            result = DispatchResult.error(500, "internal server error")
        self._record(result.status_code)
        return result

    def _record(self, status_code: int) -> None:
        with self._lock:
            self._total_requests += 1
            self._status_counts[status_code] = self._status_counts.get(status_code, 0) + 1
            reached_limit = self._max_requests is not None and self._total_requests >= self._max_requests
        if reached_limit:
            threading.Thread(target=self.shutdown, daemon=True).start()

    def _build_handler(self) -> type:
        server = self

        class _Handler(BaseHTTPRequestHandler):
            def do_POST(self) -> None:  # noqa: N802
                request_path = self.path.split("?", 1)[0]
                if request_path != server.path:
                    self._send(DispatchResult.error(404, "not found"))
                    return
                headers = {str(k): str(v) for k, v in self.headers.items()}
                self._send(server.handle_request(headers, _read_request_body(headers, self.rfile)))

            def do_GET(self) -> None:  # noqa: N802
                health = json.dumps({"ok": True, "path": server.path})
                self._send(DispatchResult(body=health, headers={"Content-Type": "application/json"}))

            def log_message(self, format: str, *args: object) -> None:  # noqa: A003
                logger.debug("http_access", client=self.client_address[0], line=format % args)

            def _send(self, result: DispatchResult) -> None:
                body = result.body.encode("utf-8")
                self.send_response(result.status_code)
                for key, value in result.headers.items():
                    self.send_header(key, value)
                self.send_header("Content-Length", str(len(body)))
                self.end_headers()
                self.wfile.write(body)

        return _Handler


def _read_request_body(headers: Mapping[str, str], stream: BinaryIO) -> bytes:
    lengths = [value for key, value in headers.items() if str(key).lower() == "content-length"]
    try:
        length = int(lengths[0]) if lengths else 0
    except ValueError:
        return b""
    return stream.read(length) if length > 0 else b""
