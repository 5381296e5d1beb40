"""Sign sample Slack payloads and POST them to a running ``emoji-checker serve``.

Usage: python examples/send_local_event.py [challenge|ping|emoji|channel|docbase]
"""

import json
import sys

import httpx

from emoji_checker import load_config
from emoji_checker.webhook import build_signature_headers


SAMPLES = {
    "challenge": {"type": "url_verification", "challenge": "local-challenge", "token": "local"},
    "ping": {
        "type": "event_callback",
        "event_id": "EvLOCAL1",
        "event": {"type": "app_mention", "text": "<@U0BOT> ping", "channel": "C0LOCAL", "user": "U0LOCAL"},
    },
    "emoji": {
        "type": "event_callback",
        "event_id": "EvLOCAL2",
        "event": {"type": "emoji_changed", "subtype": "add", "name": "tada2", "value": "https://emoji.example/tada2.gif"},
    },
    "channel": {
        "type": "event_callback",
        "event_id": "EvLOCAL3",
        "event": {"type": "channel_created", "channel": {"id": "C0NEWCHAN", "name": "new-channel"}},
    },
}


def _docbase_sample(domain: str) -> dict:
    return {
        "type": "event_callback",
        "event_id": "EvLOCAL4",
        "event": {
            "type": "app_mention",
            "text": f"<@U0BOT> https://{domain}.docbase.io/posts/1234567",
            "channel": "C0LOCAL",
        },
    }


def main() -> None:
    name = sys.argv[1] if len(sys.argv) > 1 else "challenge"
    config = load_config()
    payload = _docbase_sample(config.docbase_domain or "example") if name == "docbase" else SAMPLES[name]
    body = json.dumps(payload).encode("utf-8")
    headers = build_signature_headers(body, config.signing_secret)
    headers["Content-Type"] = "application/json"

    url = f"http://127.0.0.1:{config.port}{config.events_path}"
    response = httpx.post(url, content=body, headers=headers, timeout=10)
    print(response.status_code, response.text or "<empty>")


if __name__ == "__main__":
    main()
