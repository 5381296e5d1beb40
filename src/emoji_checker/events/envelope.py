import json
from typing import Any, Dict, Mapping, Optional

from ..webhook.challenge import extract_challenge
from ..webhook.errors import ParseError
from ..webhook.request import VerifiedRequest
from .models import parse_inner_event
from .types import EVENT_CALLBACK, URL_VERIFICATION, Callback, EventEnvelope, HandshakeChallenge


def _as_optional_str(value: Any) -> Optional[str]:
    if value is None:
        return None
    if isinstance(value, str):
        return value
    return str(value)


def decode_webhook_body(raw_body: bytes) -> Dict[str, Any]:
    try:
        data = json.loads(raw_body.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise ParseError("webhook body is not valid json") from exc
    if not isinstance(data, Mapping):
        raise ParseError("webhook body must be a json object")
    return {str(k): v for k, v in data.items()}


def parse_event_envelope(payload: Mapping[str, Any]) -> EventEnvelope:
    envelope_type = _as_optional_str(payload.get("type"))
    if envelope_type == URL_VERIFICATION:
        challenge = extract_challenge(payload)
        if challenge is None:
            raise ParseError("url_verification payload missing challenge")
        return HandshakeChallenge(challenge=challenge)
    if envelope_type == EVENT_CALLBACK:
        return Callback(
            event=parse_inner_event(payload.get("event")),
            event_id=_as_optional_str(payload.get("event_id")),
            team_id=_as_optional_str(payload.get("team_id")),
            api_app_id=_as_optional_str(payload.get("api_app_id")),
            raw=dict(payload),
        )
    if not envelope_type:
        raise ParseError("webhook payload missing type")
    raise ParseError(f"unsupported webhook payload type: {envelope_type}")


def parse_request(request: VerifiedRequest) -> EventEnvelope:
    return parse_event_envelope(decode_webhook_body(request.body))
