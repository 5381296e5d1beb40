from dataclasses import dataclass, field
from typing import Any, ClassVar, Mapping, Optional, Union

URL_VERIFICATION = "url_verification"
EVENT_CALLBACK = "event_callback"

APP_MENTION = "app_mention"
EMOJI_CHANGED = "emoji_changed"
CHANNEL_CREATED = "channel_created"


@dataclass(frozen=True)
class Mention:
    kind: ClassVar[str] = APP_MENTION

    text: str
    channel_id: str
    user_id: Optional[str] = None
    ts: Optional[str] = None


@dataclass(frozen=True)
class EmojiAdded:
    kind: ClassVar[str] = EMOJI_CHANGED

    name: str
    value: Optional[str] = None


@dataclass(frozen=True)
class ChannelAdded:
    kind: ClassVar[str] = CHANNEL_CREATED

    channel_id: str
    name: Optional[str] = None


@dataclass(frozen=True)
class UnknownEvent:
    kind: ClassVar[str] = "unknown"

    event_type: str
    subtype: Optional[str] = None


InnerEvent = Union[Mention, EmojiAdded, ChannelAdded, UnknownEvent]


@dataclass(frozen=True)
class HandshakeChallenge:
    challenge: str


@dataclass(frozen=True)
class Callback:
    event: InnerEvent
    event_id: Optional[str] = None
    team_id: Optional[str] = None
    api_app_id: Optional[str] = None
    raw: Mapping[str, Any] = field(default_factory=dict)

    @property
    def event_type(self) -> str:
        if isinstance(self.event, UnknownEvent):
            return self.event.event_type
        return self.event.kind


EventEnvelope = Union[HandshakeChallenge, Callback]
