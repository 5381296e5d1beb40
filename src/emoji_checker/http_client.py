from typing import Any, Dict, Mapping, Optional

import httpx

from .exceptions import HTTPRequestError

USER_AGENT = "emoji-checker/0.1.0"


class JsonHttpClient:
    """Shared ``httpx.Client`` wrapper for the Slack and DocBase APIs.

    Non-2xx responses raise :class:`HTTPRequestError` with the status, body and
    headers attached; callers decide whether that fails the webhook.
    """

    def __init__(
        self,
        *,
        timeout_seconds: float = 30.0,
        session: Optional[httpx.Client] = None,
    ) -> None:
        self._timeout_seconds = timeout_seconds
        self._session = session or httpx.Client(headers={"User-Agent": USER_AGENT})

    def request_json(
        self,
        method: str,
        url: str,
        *,
        headers: Optional[Mapping[str, str]] = None,
        params: Optional[Mapping[str, object]] = None,
        payload: Optional[Mapping[str, object]] = None,
        form: Optional[Mapping[str, str]] = None,
        timeout_seconds: Optional[float] = None,
    ) -> Dict[str, Any]:
        body: Dict[str, Any] = {}
        if method.upper() != "GET":
            # Slack's files.* methods only accept form encoding
            body = {"data": dict(form)} if form is not None else {"json": dict(payload or {})}
        response = self._send(method, url, headers=headers, params=params, timeout_seconds=timeout_seconds, **body)
        try:
            data = response.json()
        except ValueError as exc:
            raise HTTPRequestError(f"{method.upper()} {url}: response is not json") from exc
        if not isinstance(data, dict):
            raise HTTPRequestError(f"{method.upper()} {url}: expected a json object")
        return data

    def request_raw(
        self,
        method: str,
        url: str,
        *,
        headers: Optional[Mapping[str, str]] = None,
        content: Optional[bytes] = None,
        timeout_seconds: Optional[float] = None,
    ) -> httpx.Response:
        return self._send(method, url, headers=headers, timeout_seconds=timeout_seconds, content=content)

    def close(self) -> None:
        self._session.close()

    def _send(
        self,
        method: str,
        url: str,
        *,
        headers: Optional[Mapping[str, str]],
        timeout_seconds: Optional[float],
        params: Optional[Mapping[str, object]] = None,
        **body: Any,
    ) -> httpx.Response:
        response = self._session.request(
            method.upper(),
            url,
            headers=dict(headers or {}),
            params=dict(params or {}),
            timeout=timeout_seconds or self._timeout_seconds,
            **body,
        )
        if response.status_code >= 400:
            raise HTTPRequestError(
                f"{method.upper()} {url} failed: {response.status_code}",
                status_code=response.status_code,
                response_text=response.text,
                response_headers=dict(response.headers),
            )
        return response
