from typing import Mapping, Optional

import structlog

from .dispatcher import EventDispatcher
from .events import Callback, parse_request
from .response import DispatchResult
from .webhook.errors import WebhookError
from .webhook.request import InboundRequest
from .webhook.security import DEFAULT_TOLERANCE_SECONDS, verify_request


logger = structlog.get_logger()


class WebhookReceiver:
    """The single ``(headers, body) -> DispatchResult`` entry for both adapters."""

    def __init__(
        self,
        dispatcher: EventDispatcher,
        *,
        signing_secret: str,
        timestamp_tolerance_seconds: float = DEFAULT_TOLERANCE_SECONDS,
    ) -> None:
        self._dispatcher = dispatcher
        self._signing_secret = signing_secret
        self._timestamp_tolerance_seconds = timestamp_tolerance_seconds

    def handle(
        self,
        headers: Mapping[str, str],
        raw_body: bytes,
        *,
        now: Optional[float] = None,
    ) -> DispatchResult:
        try:
            verified = verify_request(
                InboundRequest.create(headers, raw_body),
                signing_secret=self._signing_secret,
                tolerance_seconds=self._timestamp_tolerance_seconds,
                now=now,
            )
            envelope = parse_request(verified)
            if isinstance(envelope, Callback):
                structlog.contextvars.bind_contextvars(
                    event_type=envelope.event_type,
                    event_id=envelope.event_id,
                )
            else:
                structlog.contextvars.bind_contextvars(event_type="url_verification")
            return self._dispatcher.dispatch(envelope)
        except WebhookError as exc:
            logger.warning(
                "webhook_rejected",
                error_type=type(exc).__name__,
                error=str(exc),
                status_code=exc.status_code,
            )
            return DispatchResult.error(exc.status_code, exc.public_message)
        finally:
            structlog.contextvars.unbind_contextvars("event_type", "event_id")
