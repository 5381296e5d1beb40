import json
from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional

import structlog

from .exceptions import ConfigurationError, SlackApiError
from .http_client import JsonHttpClient


logger = structlog.get_logger()

_DEFAULT_SLACK_API_URL = "https://slack.com/api"


def _as_optional_str(value: Any) -> Optional[str]:
    if value is None:
        return None
    if isinstance(value, str):
        return value
    return str(value)


@dataclass(frozen=True)
class PostedMessage:
    channel: Optional[str]
    ts: Optional[str]
    raw: Mapping[str, Any] = field(default_factory=dict)

    @classmethod
    def from_raw(cls, payload: Mapping[str, Any]) -> "PostedMessage":
        return cls(
            channel=_as_optional_str(payload.get("channel")),
            ts=_as_optional_str(payload.get("ts")),
            raw=dict(payload),
        )


@dataclass(frozen=True)
class UploadedFile:
    file_id: str
    title: Optional[str]
    raw: Mapping[str, Any] = field(default_factory=dict)


class SlackClient:
    """Minimal Slack Web API client for the two calls the relay makes."""

    def __init__(
        self,
        bot_token: str,
        *,
        base_url: str = _DEFAULT_SLACK_API_URL,
        timeout_seconds: float = 30.0,
        http_client: Optional[JsonHttpClient] = None,
    ) -> None:
        if not bot_token:
            raise ConfigurationError("bot_token is required")
        self._bot_token = bot_token
        self._base_url = base_url.rstrip("/")
        self._timeout_seconds = timeout_seconds
        self._http = http_client or JsonHttpClient(timeout_seconds=timeout_seconds)

    def post_message(self, channel: str, text: str) -> PostedMessage:
        if not channel:
            raise ConfigurationError("channel is required to post a message")
        data = self._call("chat.postMessage", payload={"channel": channel, "text": text})
        logger.info("slack_message_posted", channel=channel)
        return PostedMessage.from_raw(data)

    def upload_file(
        self,
        channel: str,
        title: str,
        content: str,
        *,
        filetype: str = "markdown",
        filename: Optional[str] = None,
    ) -> UploadedFile:
        """Upload ``content`` as a file shared into ``channel``.

        Uses the external upload flow: reserve an upload URL, send the bytes,
        then complete the upload with the title and destination channel.
        """
        if not channel:
            raise ConfigurationError("channel is required to upload a file")
        encoded = content.encode("utf-8")
        final_name = filename or f"{title or 'document'}.{_extension_for(filetype)}"
        reserve_form = {
            "filename": final_name,
            "length": str(len(encoded)),
        }
        if filetype:
            reserve_form["snippet_type"] = filetype
        reserved = self._call("files.getUploadURLExternal", form=reserve_form)
        upload_url = _as_optional_str(reserved.get("upload_url"))
        file_id = _as_optional_str(reserved.get("file_id"))
        if not upload_url or not file_id:
            raise SlackApiError("files.getUploadURLExternal response missing upload_url/file_id")

        self._http.request_raw(
            "POST",
            upload_url,
            headers={"Content-Type": "application/octet-stream"},
            content=encoded,
            timeout_seconds=self._timeout_seconds,
        )

        completed = self._call(
            "files.completeUploadExternal",
            form={
                "files": json.dumps([{"id": file_id, "title": title}], ensure_ascii=False),
                "channel_id": channel,
            },
        )
        logger.info("slack_file_uploaded", channel=channel, file_id=file_id)
        return UploadedFile(file_id=file_id, title=title, raw=dict(completed))

    def _call(
        self,
        api_method: str,
        *,
        payload: Optional[Mapping[str, object]] = None,
        form: Optional[Mapping[str, str]] = None,
    ) -> Dict[str, Any]:
        headers = {"Authorization": f"Bearer {self._bot_token}"}
        if form is None:
            headers["Content-Type"] = "application/json; charset=utf-8"
        data = self._http.request_json(
            "POST",
            f"{self._base_url}/{api_method}",
            headers=headers,
            payload=payload,
            form=form,
            timeout_seconds=self._timeout_seconds,
        )
        if data.get("ok") is not True:
            error = _as_optional_str(data.get("error")) or "unknown_error"
            raise SlackApiError(f"slack api {api_method} failed: {error}", error=error)
        return data


def _extension_for(filetype: str) -> str:
    if filetype == "markdown":
        return "md"
    return filetype or "txt"
