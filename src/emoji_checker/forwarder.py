from typing import Optional, Protocol

import structlog

from .docbase import DocBasePost, extract_post_id


logger = structlog.get_logger()

_DOCUMENT_FILETYPE = "markdown"


class PostFetcher(Protocol):
    def get_post(self, post_id: int) -> DocBasePost:
        ...


class FileUploader(Protocol):
    def upload_file(self, channel: str, title: str, content: str, *, filetype: str = ...) -> object:
        ...


class DocumentForwarder:
    """Re-posts a DocBase article into a Slack channel as a markdown file."""

    def __init__(
        self,
        fetcher: PostFetcher,
        uploader: FileUploader,
        *,
        domain: str,
        host: str = "docbase.io",
    ) -> None:
        self._fetcher = fetcher
        self._uploader = uploader
        self._domain = domain
        self._host = host

    def find_post_id(self, text: str) -> Optional[int]:
        return extract_post_id(text, self._domain, host=self._host)

    def forward(self, post_id: int, channel: str) -> None:
        post = self._fetcher.get_post(post_id)
        self._uploader.upload_file(channel, post.title, post.body, filetype=_DOCUMENT_FILETYPE)
        logger.info("docbase_post_forwarded", post_id=post_id, channel=channel)
