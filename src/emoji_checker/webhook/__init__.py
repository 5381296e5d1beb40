from .challenge import build_challenge_response, extract_challenge
from .errors import (
    AuthError,
    DispatchError,
    ParseError,
    WebhookError,
    WebhookHeaderError,
    WebhookSignatureError,
    WebhookTimestampError,
)
from .request import InboundRequest, VerifiedRequest
from .security import (
    HEADER_SIGNATURE,
    HEADER_TIMESTAMP,
    build_signature_headers,
    compute_signature,
    verify_request,
    verify_signature,
    verify_timestamp,
)

__all__ = [
    "AuthError",
    "DispatchError",
    "HEADER_SIGNATURE",
    "HEADER_TIMESTAMP",
    "InboundRequest",
    "ParseError",
    "VerifiedRequest",
    "WebhookError",
    "WebhookHeaderError",
    "WebhookSignatureError",
    "WebhookTimestampError",
    "build_challenge_response",
    "build_signature_headers",
    "compute_signature",
    "extract_challenge",
    "verify_request",
    "verify_signature",
    "verify_timestamp",
]
