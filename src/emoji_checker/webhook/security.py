import hashlib
import hmac
import time
from typing import Mapping, Optional

from .errors import WebhookHeaderError, WebhookSignatureError, WebhookTimestampError
from .request import _SEAL, InboundRequest, VerifiedRequest

HEADER_TIMESTAMP = "X-Slack-Request-Timestamp"
HEADER_SIGNATURE = "X-Slack-Signature"
SIGNATURE_VERSION = "v0"
DEFAULT_TOLERANCE_SECONDS = 300.0


def verify_timestamp(
    timestamp: str,
    *,
    tolerance_seconds: float = DEFAULT_TOLERANCE_SECONDS,
    now: Optional[float] = None,
) -> int:
    if not timestamp:
        raise WebhookHeaderError("missing timestamp header")
    digits = timestamp.strip()
    # ascii digits only; int() also accepts "1_700", "+1700" and full-width digits
    if not (digits.isascii() and digits.isdigit()):
        raise WebhookTimestampError("invalid timestamp header")
    timestamp_value = int(digits)
    now_value = now if now is not None else time.time()
    if abs(now_value - timestamp_value) > tolerance_seconds:
        raise WebhookTimestampError("timestamp is outside allowed range")
    return timestamp_value


def compute_signature(timestamp: str, raw_body: bytes, signing_secret: str) -> str:
    base = f"{SIGNATURE_VERSION}:{timestamp}:".encode("utf-8") + raw_body
    digest = hmac.new(signing_secret.encode("utf-8"), base, hashlib.sha256)
    return f"{SIGNATURE_VERSION}={digest.hexdigest()}"


def build_signature_headers(
    raw_body: bytes,
    signing_secret: str,
    *,
    timestamp: Optional[int] = None,
) -> dict[str, str]:
    timestamp_text = str(int(time.time()) if timestamp is None else timestamp)
    return {
        HEADER_TIMESTAMP: timestamp_text,
        HEADER_SIGNATURE: compute_signature(timestamp_text, raw_body, signing_secret),
    }


def verify_request(
    request: InboundRequest,
    *,
    signing_secret: str,
    tolerance_seconds: float = DEFAULT_TOLERANCE_SECONDS,
    now: Optional[float] = None,
) -> VerifiedRequest:
    if not signing_secret:
        raise WebhookHeaderError("signing secret is not configured")
    timestamp = request.header(HEADER_TIMESTAMP)
    signature = request.header(HEADER_SIGNATURE)
    if not timestamp or not signature:
        raise WebhookHeaderError("missing signature headers")
    timestamp_value = verify_timestamp(timestamp, tolerance_seconds=tolerance_seconds, now=now)
    expected = compute_signature(timestamp.strip(), request.body, signing_secret)
    if not hmac.compare_digest(expected.encode("utf-8"), signature.strip().encode("utf-8")):
        raise WebhookSignatureError("signature verification failed")
    return VerifiedRequest(request=request, timestamp=timestamp_value, _seal=_SEAL)


def verify_signature(
    headers: Mapping[str, str],
    raw_body: bytes,
    *,
    signing_secret: str,
    tolerance_seconds: float = DEFAULT_TOLERANCE_SECONDS,
    now: Optional[float] = None,
) -> VerifiedRequest:
    return verify_request(
        InboundRequest.create(headers, raw_body),
        signing_secret=signing_secret,
        tolerance_seconds=tolerance_seconds,
        now=now,
    )
