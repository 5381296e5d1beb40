from typing import Optional

import structlog

from .config import RelayConfig
from .dispatcher import EventDispatcher
from .docbase import DocBaseClient
from .forwarder import DocumentForwarder
from .http_client import JsonHttpClient
from .receiver import WebhookReceiver
from .slack import SlackClient
from .tasks import BackgroundRunner, InlineRunner, ThreadRunner


logger = structlog.get_logger()

ENTRY_LAMBDA = "lambda"
ENTRY_HTTP = "http"


def select_entry_point(config: RelayConfig) -> str:
    return ENTRY_LAMBDA if config.is_lambda else ENTRY_HTTP


def build_dispatcher(
    config: RelayConfig,
    *,
    runner: Optional[BackgroundRunner] = None,
    http_client: Optional[JsonHttpClient] = None,
) -> EventDispatcher:
    http = http_client or JsonHttpClient(timeout_seconds=config.timeout_seconds)
    slack = SlackClient(
        config.bot_token,
        base_url=config.slack_api_url,
        timeout_seconds=config.timeout_seconds,
        http_client=http,
    )
    forwarder: Optional[DocumentForwarder] = None
    if config.docbase_enabled:
        docbase = DocBaseClient(
            config.docbase_domain or "",
            config.docbase_token or "",
            base_url=config.docbase_api_url,
            timeout_seconds=config.timeout_seconds,
            http_client=http,
        )
        forwarder = DocumentForwarder(docbase, slack, domain=docbase.domain, host=config.docbase_host)
    else:
        logger.info("docbase_forwarding_disabled")
    if not config.notify_channel:
        logger.warning("notify_channel_missing")
    if runner is None:
        runner = InlineRunner() if config.is_lambda else ThreadRunner()
    return EventDispatcher(
        slack,
        notify_channel=config.notify_channel,
        forwarder=forwarder,
        runner=runner,
    )


def build_receiver(
    config: RelayConfig,
    *,
    runner: Optional[BackgroundRunner] = None,
    http_client: Optional[JsonHttpClient] = None,
) -> WebhookReceiver:
    return WebhookReceiver(
        build_dispatcher(config, runner=runner, http_client=http_client),
        signing_secret=config.signing_secret,
        timestamp_tolerance_seconds=config.timestamp_tolerance_seconds,
    )
