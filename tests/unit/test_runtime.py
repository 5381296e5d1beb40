import json
from typing import Any

import httpx
import pytest

from emoji_checker.exceptions import HTTPRequestError
from emoji_checker.runtime import LambdaRuntimeClient


class _RuntimeApiStub:
    def __init__(self, events: list[dict[str, Any]]) -> None:
        self._events = list(events)
        self.posted: list[tuple[str, Any]] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        path = request.url.path
        if path.endswith("/invocation/next"):
            event = self._events.pop(0)
            return httpx.Response(
                200,
                json=event,
                headers={
                    "Lambda-Runtime-Aws-Request-Id": f"req-{len(self.posted) + 1}",
                    "Lambda-Runtime-Deadline-Ms": "1700000030000",
                    "Lambda-Runtime-Invoked-Function-Arn": "arn:aws:lambda:ap-northeast-1:123:function:relay",
                },
            )
        self.posted.append((path, json.loads(request.content)))
        return httpx.Response(202, json={"status": "OK"})


def _client(api: _RuntimeApiStub) -> LambdaRuntimeClient:
    return LambdaRuntimeClient("127.0.0.1:9001", session=httpx.Client(transport=httpx.MockTransport(api)))


def test_next_invocation_reads_context_headers():
    api = _RuntimeApiStub([{"body": "{}"}])

    invocation = _client(api).next_invocation()

    assert invocation.event == {"body": "{}"}
    assert invocation.context.aws_request_id == "req-1"
    assert invocation.context.deadline_ms == 1700000030000
    assert invocation.context.invoked_function_arn.endswith(":function:relay")


def test_run_posts_handler_results():
    api = _RuntimeApiStub([{"n": 1}, {"n": 2}])
    seen: list[Any] = []

    def handler(event: Any, context: Any) -> dict[str, Any]:
        seen.append((event["n"], context.aws_request_id))
        return {"statusCode": 200, "headers": {}, "body": ""}

    handled = _client(api).run(handler, max_invocations=2)

    assert handled == 2
    assert seen == [(1, "req-1"), (2, "req-2")]
    assert api.posted == [
        ("/2018-06-01/runtime/invocation/req-1/response", {"statusCode": 200, "headers": {}, "body": ""}),
        ("/2018-06-01/runtime/invocation/req-2/response", {"statusCode": 200, "headers": {}, "body": ""}),
    ]


def test_run_reports_handler_exceptions():
    api = _RuntimeApiStub([{}])

    def handler(_event: Any, _context: Any) -> Any:
        raise ValueError("boom")

    assert _client(api).run(handler, max_invocations=1) == 1
    path, payload = api.posted[0]
    assert path == "/2018-06-01/runtime/invocation/req-1/error"
    assert payload["errorType"] == "ValueError"
    assert payload["errorMessage"] == "boom"


def test_next_invocation_without_request_id_raises():
    def handler(_request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={})

    client = LambdaRuntimeClient("127.0.0.1:9001", session=httpx.Client(transport=httpx.MockTransport(handler)))
    with pytest.raises(HTTPRequestError):
        client.next_invocation()
