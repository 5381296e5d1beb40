from typing import Any, Callable, Dict, Optional, Protocol

import httpx
import structlog

from .events import Callback, ChannelAdded, EmojiAdded, EventEnvelope, HandshakeChallenge, Mention
from .exceptions import RelayError
from .forwarder import DocumentForwarder
from .response import DispatchResult
from .tasks import BackgroundRunner, InlineRunner
from .text import channel_added_message, emoji_added_message, normalize_command
from .webhook.challenge import build_challenge_response
from .webhook.errors import DispatchError


logger = structlog.get_logger()

PING_COMMAND = "ping"
PONG_REPLY = "pong"


class MessagePoster(Protocol):
    def post_message(self, channel: str, text: str) -> object:
        ...


_Handler = Callable[[Any], DispatchResult]


class EventDispatcher:
    """Turns a parsed envelope into exactly one ``DispatchResult``.

    Each callback variant has one handler; at most one outbound call is made
    synchronously. Document forwarding is handed to ``runner`` and its outcome
    is never reflected in the result.
    """

    def __init__(
        self,
        notifier: MessagePoster,
        *,
        notify_channel: Optional[str] = None,
        forwarder: Optional[DocumentForwarder] = None,
        runner: Optional[BackgroundRunner] = None,
    ) -> None:
        self._notifier = notifier
        self._notify_channel = notify_channel
        self._forwarder = forwarder
        self._runner = runner or InlineRunner()
        self._handlers: Dict[str, _Handler] = {
            Mention.kind: self._on_mention,
            EmojiAdded.kind: self._on_emoji_added,
            ChannelAdded.kind: self._on_channel_added,
        }

    def dispatch(self, envelope: EventEnvelope) -> DispatchResult:
        if isinstance(envelope, HandshakeChallenge):
            return build_challenge_response(envelope.challenge)
        return self.dispatch_callback(envelope)

    def dispatch_callback(self, callback: Callback) -> DispatchResult:
        handler = self._handlers.get(callback.event.kind)
        if handler is None:
            logger.info("event_ignored", event_type=callback.event_type)
            return DispatchResult.empty()
        return handler(callback.event)

    def _on_mention(self, event: Mention) -> DispatchResult:
        command = normalize_command(event.text)
        if command == PING_COMMAND:
            self._post(event.channel_id, PONG_REPLY, action="ping")
            return DispatchResult.empty()

        if self._forwarder is not None:
            post_id = self._forwarder.find_post_id(command)
            if post_id is not None:
                forwarder = self._forwarder
                channel = event.channel_id
                logger.info("docbase_forward_scheduled", post_id=post_id, channel=channel)
                self._runner.submit(
                    f"docbase-forward-{post_id}",
                    lambda: forwarder.forward(post_id, channel),
                )
        return DispatchResult.empty()

    def _on_emoji_added(self, event: EmojiAdded) -> DispatchResult:
        self._post(self._require_notify_channel(), emoji_added_message(event.name), action="emoji_added")
        return DispatchResult.empty()

    def _on_channel_added(self, event: ChannelAdded) -> DispatchResult:
        self._post(
            self._require_notify_channel(),
            channel_added_message(event.channel_id),
            action="channel_added",
        )
        return DispatchResult.empty()

    def _require_notify_channel(self) -> str:
        if not self._notify_channel:
            raise DispatchError("notify channel is not configured")
        return self._notify_channel

    def _post(self, channel: str, text: str, *, action: str) -> None:
        try:
            self._notifier.post_message(channel, text)
        except (RelayError, httpx.HTTPError) as exc:
            raise DispatchError(f"{action}: post_message to {channel} failed: {exc}") from exc
