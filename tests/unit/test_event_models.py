import json

import pytest

from emoji_checker.events import (
    Callback,
    ChannelAdded,
    EmojiAdded,
    HandshakeChallenge,
    Mention,
    UnknownEvent,
    decode_webhook_body,
    parse_event_envelope,
)
from emoji_checker.webhook import ParseError


def test_url_verification_returns_challenge_verbatim():
    envelope = parse_event_envelope(
        {
            "token": "Jhj5dZrVaK7ZwHHjRyZWjbDl",
            "challenge": "3eZbrw1aBm2rZgRNFdxV2595E9CY3gmdALWMmHkvFXO7tYXAYM8P",
            "type": "url_verification",
        }
    )
    assert envelope == HandshakeChallenge(challenge="3eZbrw1aBm2rZgRNFdxV2595E9CY3gmdALWMmHkvFXO7tYXAYM8P")


def test_url_verification_without_challenge_is_parse_error():
    with pytest.raises(ParseError):
        parse_event_envelope({"type": "url_verification"})


def test_app_mention_callback():
    envelope = parse_event_envelope(
        {
            "type": "event_callback",
            "team_id": "T123ABC456",
            "api_app_id": "A123ABC456",
            "event_id": "Ev123ABC456",
            "event": {
                "type": "app_mention",
                "user": "U061F7AUR",
                "text": "<@U0LAN0Z89> ping",
                "ts": "1515449522.000016",
                "channel": "C123ABC456",
            },
        }
    )
    assert isinstance(envelope, Callback)
    assert envelope.event_id == "Ev123ABC456"
    assert envelope.team_id == "T123ABC456"
    assert envelope.event_type == "app_mention"
    assert envelope.event == Mention(
        text="<@U0LAN0Z89> ping",
        channel_id="C123ABC456",
        user_id="U061F7AUR",
        ts="1515449522.000016",
    )


def test_emoji_added_callback():
    envelope = parse_event_envelope(
        {
            "type": "event_callback",
            "event": {
                "type": "emoji_changed",
                "subtype": "add",
                "name": "picard_facepalm",
                "value": "https://my.slack.com/emoji/picard_facepalm/db8e287430eaa459.gif",
            },
        }
    )
    assert isinstance(envelope, Callback)
    assert envelope.event == EmojiAdded(
        name="picard_facepalm",
        value="https://my.slack.com/emoji/picard_facepalm/db8e287430eaa459.gif",
    )


def test_emoji_removed_is_unknown_event():
    envelope = parse_event_envelope(
        {
            "type": "event_callback",
            "event": {"type": "emoji_changed", "subtype": "remove", "names": ["picard_facepalm"]},
        }
    )
    assert isinstance(envelope, Callback)
    assert envelope.event == UnknownEvent(event_type="emoji_changed", subtype="remove")


def test_channel_created_callback():
    envelope = parse_event_envelope(
        {
            "type": "event_callback",
            "event": {
                "type": "channel_created",
                "channel": {"id": "C024BE91L", "name": "fun", "created": 1360782804, "creator": "U024BE7LH"},
            },
        }
    )
    assert isinstance(envelope, Callback)
    assert envelope.event == ChannelAdded(channel_id="C024BE91L", name="fun")


def test_unknown_inner_event_type_is_not_an_error():
    envelope = parse_event_envelope(
        {"type": "event_callback", "event": {"type": "reaction_added", "reaction": "thumbsup"}}
    )
    assert isinstance(envelope, Callback)
    assert isinstance(envelope.event, UnknownEvent)
    assert envelope.event_type == "reaction_added"


def test_callback_missing_event_object_is_parse_error():
    with pytest.raises(ParseError):
        parse_event_envelope({"type": "event_callback"})


def test_mention_missing_channel_is_parse_error():
    with pytest.raises(ParseError):
        parse_event_envelope({"type": "event_callback", "event": {"type": "app_mention", "text": "ping"}})


def test_missing_or_unknown_top_level_type_is_parse_error():
    with pytest.raises(ParseError):
        parse_event_envelope({"challenge": "abc"})
    with pytest.raises(ParseError):
        parse_event_envelope({"type": "app_rate_limited"})


def test_decode_webhook_body_rejects_invalid_json():
    with pytest.raises(ParseError):
        decode_webhook_body(b"not json")
    with pytest.raises(ParseError):
        decode_webhook_body(b"\xff\xfe")
    with pytest.raises(ParseError):
        decode_webhook_body(json.dumps(["a", "b"]).encode("utf-8"))


def test_decode_webhook_body_returns_mapping():
    payload = decode_webhook_body(b'{"type":"url_verification","challenge":"abc123"}')
    assert payload == {"type": "url_verification", "challenge": "abc123"}
