"""Client for the AWS Lambda Runtime API.

Lets the relay run as a custom runtime or container image: ``emoji-checker run``
polls for invocations and forwards each API Gateway event to a handler such
as :func:`emoji_checker.lambda_handler.handler`.
"""

import json
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, Mapping, Optional

import httpx
import structlog

from .exceptions import HTTPRequestError


logger = structlog.get_logger()

_API_VERSION = "2018-06-01"

LambdaHandler = Callable[[Mapping[str, Any], Any], Any]


@dataclass(frozen=True)
class LambdaContext:
    aws_request_id: str
    deadline_ms: int
    invoked_function_arn: Optional[str] = None
    trace_id: Optional[str] = None

    def get_remaining_time_in_millis(self) -> int:
        return max(0, self.deadline_ms - int(time.time() * 1000))


@dataclass(frozen=True)
class Invocation:
    context: LambdaContext
    event: Mapping[str, Any]


class LambdaRuntimeClient:
    def __init__(
        self,
        runtime_api: str,
        *,
        session: Optional[httpx.Client] = None,
    ) -> None:
        self._base_url = f"http://{runtime_api}/{_API_VERSION}/runtime"
        self._session = session or httpx.Client(timeout=None)

    def next_invocation(self) -> Invocation:
        response = self._session.get(f"{self._base_url}/invocation/next", timeout=None)
        _raise_for_status(response, "next invocation")
        headers = response.headers
        request_id = headers.get("Lambda-Runtime-Aws-Request-Id")
        if not request_id:
            raise HTTPRequestError("runtime api response missing Lambda-Runtime-Aws-Request-Id")
        try:
            event = response.json()
        except ValueError as exc:
            raise HTTPRequestError("invocation event is not valid json") from exc
        if not isinstance(event, Mapping):
            event = {}
        context = LambdaContext(
            aws_request_id=request_id,
            deadline_ms=_to_int(headers.get("Lambda-Runtime-Deadline-Ms")),
            invoked_function_arn=headers.get("Lambda-Runtime-Invoked-Function-Arn"),
            trace_id=headers.get("Lambda-Runtime-Trace-Id"),
        )
        return Invocation(context=context, event=event)

    def post_response(self, request_id: str, payload: Any) -> None:
        response = self._session.post(
            f"{self._base_url}/invocation/{request_id}/response",
            content=json.dumps(payload, ensure_ascii=False).encode("utf-8"),
            headers={"Content-Type": "application/json"},
        )
        _raise_for_status(response, "post response")

    def post_error(self, request_id: str, exc: BaseException) -> None:
        response = self._session.post(
            f"{self._base_url}/invocation/{request_id}/error",
            json=_error_payload(exc),
            headers={"Lambda-Runtime-Function-Error-Type": f"Runtime.{type(exc).__name__}"},
        )
        _raise_for_status(response, "post error")

    def post_init_error(self, exc: BaseException) -> None:
        response = self._session.post(
            f"{self._base_url}/init/error",
            json=_error_payload(exc),
            headers={"Lambda-Runtime-Function-Error-Type": f"Runtime.{type(exc).__name__}"},
        )
        _raise_for_status(response, "post init error")

    def run(self, handler: LambdaHandler, *, max_invocations: Optional[int] = None) -> int:
        handled = 0
        logger.info("lambda_runtime_started")
        while max_invocations is None or handled < max_invocations:
            invocation = self.next_invocation()
            request_id = invocation.context.aws_request_id
            try:
                result = handler(invocation.event, invocation.context)
            except Exception as exc:
                logger.exception("lambda_handler_failed", aws_request_id=request_id)
                self.post_error(request_id, exc)
            else:
                self.post_response(request_id, result)
            handled += 1
        return handled


def _error_payload(exc: BaseException) -> Dict[str, Any]:
    return {"errorMessage": str(exc), "errorType": type(exc).__name__, "stackTrace": []}


def _raise_for_status(response: httpx.Response, action: str) -> None:
    if response.status_code >= 400:
        raise HTTPRequestError(
            f"runtime api {action} failed: {response.status_code}",
            status_code=response.status_code,
            response_text=response.text,
            response_headers=dict(response.headers),
        )


def _to_int(value: Optional[str]) -> int:
    if not value:
        return 0
    try:
        return int(value.strip())
    except ValueError:
        return 0
