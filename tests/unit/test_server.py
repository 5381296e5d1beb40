import json
import threading
from typing import Mapping, Optional

import httpx

from emoji_checker.response import DispatchResult
from emoji_checker.server import RelayServer, _read_request_body


class _ReceiverStub:
    def __init__(self, result: Optional[DispatchResult] = None, error: Optional[Exception] = None) -> None:
        self._result = result or DispatchResult.empty()
        self._error = error
        self.calls: list[tuple[dict[str, str], bytes]] = []

    def handle(self, headers: Mapping[str, str], raw_body: bytes) -> DispatchResult:
        self.calls.append((dict(headers), raw_body))
        if self._error is not None:
            raise self._error
        return self._result


def test_handle_request_updates_status_counts():
    receiver = _ReceiverStub(result=DispatchResult.text("abc123"))
    server = RelayServer(receiver)  # type: ignore[arg-type]

    result = server.handle_request({"X-Slack-Signature": "v0=abc"}, b"{}")

    assert result.body == "abc123"
    status = server.status()
    assert status.running is False
    assert status.total_requests == 1
    assert status.status_counts == {200: 1}
    assert status.last_error is None


def test_handle_request_maps_unexpected_errors_to_500():
    server = RelayServer(_ReceiverStub(error=KeyError("boom")))  # type: ignore[arg-type]

    result = server.handle_request({}, b"{}")

    assert result.status_code == 500
    assert result.body == "internal server error"
    status = server.status()
    assert status.status_counts == {500: 1}
    assert status.last_error == "KeyError: 'boom'"


def test_server_serves_post_requests_over_http():
    receiver = _ReceiverStub(result=DispatchResult.text("abc123"))
    server = RelayServer(receiver, host="127.0.0.1", port=0)  # type: ignore[arg-type]
    server.bind()
    host, port = server.server_address
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()
    try:
        with httpx.Client(base_url=f"http://{host}:{port}", timeout=5) as client:
            response = client.post(
                "/slack/events",
                content=b'{"type":"url_verification"}',
                headers={"X-Slack-Request-Timestamp": "1700000000"},
            )
            missing = client.post("/other", content=b"{}")
            health = client.get("/")
    finally:
        server.shutdown()
        thread.join(timeout=5)

    assert response.status_code == 200
    assert response.text == "abc123"
    assert response.headers["content-type"] == "text/plain"
    assert missing.status_code == 404
    assert json.loads(health.text) == {"ok": True, "path": "/slack/events"}

    headers, body = receiver.calls[0]
    assert body == b'{"type":"url_verification"}'
    assert {key.lower(): value for key, value in headers.items()}["x-slack-request-timestamp"] == "1700000000"
    assert len(receiver.calls) == 1
    assert server.status().stopped_at is not None


def test_read_request_body_honors_content_length():
    class _Stream:
        def __init__(self, data: bytes) -> None:
            self._data = data

        def read(self, size: int) -> bytes:
            return self._data[:size]

    assert _read_request_body({"Content-Length": "2"}, _Stream(b"{}extra")) == b"{}"
    assert _read_request_body({}, _Stream(b"{}")) == b""
    assert _read_request_body({"content-length": "x"}, _Stream(b"{}")) == b""
