"""AWS Lambda adapter for API Gateway proxy events.

Configure the function handler as ``emoji_checker.lambda_handler.handler``.
The receiver is built on the first invocation and reused while the execution
environment stays warm.
"""

import base64
import binascii
from typing import Any, Dict, Mapping, Optional

import structlog

from .app import build_receiver
from .config import load_config
from .log import configure_logging
from .receiver import WebhookReceiver
from .response import DispatchResult


logger = structlog.get_logger()

_receiver: Optional[WebhookReceiver] = None


def handler(event: Mapping[str, Any], context: Any) -> Dict[str, Any]:
    if context is None:
        return DispatchResult.error(500, "not invoked from aws lambda").to_dict()
    try:
        headers = extract_headers(event)
        body = extract_body(event)
    except ValueError as exc:
        logger.warning("lambda_event_malformed", error=str(exc))
        return DispatchResult.error(400, "bad request").to_dict()
    structlog.contextvars.bind_contextvars(aws_request_id=getattr(context, "aws_request_id", None))
    try:
        return _get_receiver().handle(headers, body).to_dict()
    except Exception:
        logger.exception("lambda_invocation_failed")
        return DispatchResult.error(500, "internal server error").to_dict()
    finally:
        structlog.contextvars.unbind_contextvars("aws_request_id")


def extract_headers(event: Mapping[str, Any]) -> Dict[str, str]:
    headers = event.get("headers") or {}
    if not isinstance(headers, Mapping):
        raise ValueError("event headers must be a mapping")
    return {str(key): str(value) for key, value in headers.items() if value is not None}


def extract_body(event: Mapping[str, Any]) -> bytes:
    body = event.get("body") or ""
    if not isinstance(body, str):
        raise ValueError("event body must be a string")
    if event.get("isBase64Encoded"):
        try:
            return base64.b64decode(body, validate=True)
        except (binascii.Error, ValueError) as exc:
            raise ValueError("event body is not valid base64") from exc
    return body.encode("utf-8")


def set_receiver(receiver: Optional[WebhookReceiver]) -> None:
    global _receiver
    _receiver = receiver


def _get_receiver() -> WebhookReceiver:
    global _receiver
    if _receiver is None:
        config = load_config()
        configure_logging(config.log_level, config.log_format)
        _receiver = build_receiver(config)
    return _receiver
