from .envelope import decode_webhook_body, parse_event_envelope, parse_request
from .models import parse_inner_event
from .types import (
    APP_MENTION,
    CHANNEL_CREATED,
    EMOJI_CHANGED,
    EVENT_CALLBACK,
    URL_VERIFICATION,
    Callback,
    ChannelAdded,
    EmojiAdded,
    EventEnvelope,
    HandshakeChallenge,
    InnerEvent,
    Mention,
    UnknownEvent,
)

__all__ = [
    "APP_MENTION",
    "CHANNEL_CREATED",
    "Callback",
    "ChannelAdded",
    "EMOJI_CHANGED",
    "EVENT_CALLBACK",
    "EmojiAdded",
    "EventEnvelope",
    "HandshakeChallenge",
    "InnerEvent",
    "Mention",
    "URL_VERIFICATION",
    "UnknownEvent",
    "decode_webhook_body",
    "parse_event_envelope",
    "parse_inner_event",
    "parse_request",
]
