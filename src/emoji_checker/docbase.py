import re
from dataclasses import dataclass, field
from typing import Any, Mapping, Optional

import structlog

from .exceptions import ConfigurationError, DocBaseError
from .http_client import JsonHttpClient


logger = structlog.get_logger()

_DEFAULT_API_URL = "https://api.docbase.io"
_DEFAULT_HOST = "docbase.io"


def build_post_url_pattern(domain: str, *, host: str = _DEFAULT_HOST) -> "re.Pattern[str]":
    return re.compile(rf"https://{re.escape(domain)}\.{re.escape(host)}/posts/([0-9]{{7}})")


def extract_post_id(text: str, domain: str, *, host: str = _DEFAULT_HOST) -> Optional[int]:
    """Return the first seven-digit post id linked in ``text`` for the team domain."""
    if not domain:
        return None
    match = build_post_url_pattern(domain, host=host).search(text)
    if match is None:
        return None
    return int(match.group(1))


@dataclass(frozen=True)
class DocBasePost:
    post_id: int
    title: str
    body: str
    url: Optional[str] = None
    raw: Mapping[str, Any] = field(default_factory=dict)

    @classmethod
    def from_raw(cls, post_id: int, payload: Mapping[str, Any]) -> "DocBasePost":
        title = payload.get("title")
        body = payload.get("body")
        if not isinstance(title, str) or not isinstance(body, str):
            raise DocBaseError(f"docbase post {post_id} response missing title/body")
        url = payload.get("url")
        return cls(
            post_id=post_id,
            title=title,
            body=body,
            url=url if isinstance(url, str) else None,
            raw=dict(payload),
        )


class DocBaseClient:
    def __init__(
        self,
        domain: str,
        access_token: str,
        *,
        base_url: str = _DEFAULT_API_URL,
        timeout_seconds: float = 30.0,
        http_client: Optional[JsonHttpClient] = None,
    ) -> None:
        if not domain or not access_token:
            raise ConfigurationError("docbase domain/access_token is required")
        self._domain = domain
        self._access_token = access_token
        self._base_url = base_url.rstrip("/")
        self._timeout_seconds = timeout_seconds
        self._http = http_client or JsonHttpClient(timeout_seconds=timeout_seconds)

    @property
    def domain(self) -> str:
        return self._domain

    def get_post(self, post_id: int) -> DocBasePost:
        data = self._http.request_json(
            "GET",
            f"{self._base_url}/teams/{self._domain}/posts/{post_id}",
            headers={
                "X-DocBaseToken": self._access_token,
                "Accept": "application/json",
            },
            timeout_seconds=self._timeout_seconds,
        )
        post = DocBasePost.from_raw(post_id, data)
        logger.info("docbase_post_fetched", post_id=post_id)
        return post
