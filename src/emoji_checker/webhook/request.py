from dataclasses import dataclass, field
from typing import Mapping, Optional

import httpx

from .errors import WebhookHeaderError

_SEAL = object()


@dataclass(frozen=True)
class InboundRequest:
    headers: httpx.Headers
    body: bytes

    @classmethod
    def create(cls, headers: Mapping[str, str], body: bytes | str) -> "InboundRequest":
        raw_body = body.encode("utf-8") if isinstance(body, str) else bytes(body)
        try:
            # proxies may forward non-ascii header values
            parsed = httpx.Headers({str(k): str(v) for k, v in headers.items()}, encoding="utf-8")
        except UnicodeError as exc:
            raise WebhookHeaderError("request headers are not valid utf-8") from exc
        return cls(headers=parsed, body=raw_body)

    def header(self, name: str) -> Optional[str]:
        return self.headers.get(name)


@dataclass(frozen=True)
class VerifiedRequest:
    """An inbound request whose signature has been checked.

    Only :func:`emoji_checker.webhook.security.verify_request` builds these.
    """

    request: InboundRequest
    timestamp: int
    _seal: object = field(default=None, repr=False, compare=False)

    def __post_init__(self) -> None:
        if self._seal is not _SEAL:
            raise TypeError("VerifiedRequest can only be created by verify_request()")

    @property
    def body(self) -> bytes:
        return self.request.body
