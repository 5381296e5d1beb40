from .app import build_dispatcher, build_receiver, select_entry_point
from .config import RelayConfig, load_config
from .dispatcher import EventDispatcher
from .docbase import DocBaseClient, DocBasePost, extract_post_id
from .events import (
    Callback,
    ChannelAdded,
    EmojiAdded,
    EventEnvelope,
    HandshakeChallenge,
    InnerEvent,
    Mention,
    UnknownEvent,
    parse_event_envelope,
)
from .exceptions import (
    ConfigurationError,
    DocBaseError,
    HTTPRequestError,
    RelayError,
    SlackApiError,
)
from .forwarder import DocumentForwarder
from .http_client import JsonHttpClient
from .receiver import WebhookReceiver
from .response import DispatchResult
from .server import RelayServer, RelayServerStatus
from .slack import SlackClient
from .tasks import InlineRunner, ThreadRunner
from .webhook import (
    AuthError,
    DispatchError,
    InboundRequest,
    ParseError,
    VerifiedRequest,
    compute_signature,
    verify_request,
    verify_signature,
)

__all__ = [
    "AuthError",
    "Callback",
    "ChannelAdded",
    "ConfigurationError",
    "DispatchError",
    "DispatchResult",
    "DocBaseClient",
    "DocBaseError",
    "DocBasePost",
    "DocumentForwarder",
    "EmojiAdded",
    "EventDispatcher",
    "EventEnvelope",
    "HTTPRequestError",
    "HandshakeChallenge",
    "InboundRequest",
    "InlineRunner",
    "InnerEvent",
    "JsonHttpClient",
    "Mention",
    "ParseError",
    "RelayConfig",
    "RelayError",
    "RelayServer",
    "RelayServerStatus",
    "SlackApiError",
    "SlackClient",
    "ThreadRunner",
    "UnknownEvent",
    "VerifiedRequest",
    "WebhookReceiver",
    "build_dispatcher",
    "build_receiver",
    "compute_signature",
    "extract_post_id",
    "load_config",
    "parse_event_envelope",
    "select_entry_point",
    "verify_request",
    "verify_signature",
]
