from typing import Any, Callable, Dict, Mapping, Optional

from ..webhook.errors import ParseError
from .types import (
    APP_MENTION,
    CHANNEL_CREATED,
    EMOJI_CHANGED,
    ChannelAdded,
    EmojiAdded,
    InnerEvent,
    Mention,
    UnknownEvent,
)


def _as_mapping(value: Any) -> Mapping[str, Any]:
    if isinstance(value, Mapping):
        return value
    return {}


def _as_optional_str(value: Any) -> Optional[str]:
    if value is None:
        return None
    if isinstance(value, str):
        return value
    return str(value)


def _require_str(event: Mapping[str, Any], key: str, event_type: str) -> str:
    value = _as_optional_str(event.get(key))
    if not value:
        raise ParseError(f"{event_type} event missing {key}")
    return value


def _parse_mention(event: Mapping[str, Any]) -> InnerEvent:
    return Mention(
        text=_as_optional_str(event.get("text")) or "",
        channel_id=_require_str(event, "channel", APP_MENTION),
        user_id=_as_optional_str(event.get("user")),
        ts=_as_optional_str(event.get("ts")),
    )


def _parse_emoji_changed(event: Mapping[str, Any]) -> InnerEvent:
    subtype = _as_optional_str(event.get("subtype"))
    if subtype not in (None, "add"):
        return UnknownEvent(event_type=EMOJI_CHANGED, subtype=subtype)
    return EmojiAdded(
        name=_require_str(event, "name", EMOJI_CHANGED),
        value=_as_optional_str(event.get("value")),
    )


def _parse_channel_created(event: Mapping[str, Any]) -> InnerEvent:
    channel = event.get("channel")
    if isinstance(channel, Mapping):
        return ChannelAdded(
            channel_id=_require_str(channel, "id", CHANNEL_CREATED),
            name=_as_optional_str(channel.get("name")),
        )
    # older payloads carry the bare channel id
    return ChannelAdded(channel_id=_require_str(event, "channel", CHANNEL_CREATED))


_INNER_PARSERS: Dict[str, Callable[[Mapping[str, Any]], InnerEvent]] = {
    APP_MENTION: _parse_mention,
    EMOJI_CHANGED: _parse_emoji_changed,
    CHANNEL_CREATED: _parse_channel_created,
}


def parse_inner_event(event: Any) -> InnerEvent:
    if not isinstance(event, Mapping):
        raise ParseError("callback payload missing event object")
    event_type = _as_optional_str(event.get("type")) or ""
    parser = _INNER_PARSERS.get(event_type)
    if parser is None:
        return UnknownEvent(
            event_type=event_type,
            subtype=_as_optional_str(event.get("subtype")),
        )
    return parser(_as_mapping(event))
