from pathlib import Path

import pytest

from emoji_checker.app import ENTRY_HTTP, ENTRY_LAMBDA, select_entry_point
from emoji_checker.config import RelayConfig, load_config
from emoji_checker.exceptions import ConfigurationError


_BASE_ENV = {"SLACK_SIGNING_SECRET": "secret", "SLACK_BOT_TOKEN": "xoxb-test"}


def test_load_config_defaults(tmp_path: Path) -> None:
    config = load_config(dict(_BASE_ENV), env_file=tmp_path / "missing.env")

    assert config.signing_secret == "secret"
    assert config.bot_token == "xoxb-test"
    assert config.port == 8081
    assert config.events_path == "/slack/events"
    assert config.timestamp_tolerance_seconds == 300.0
    assert config.log_format == "console"
    assert config.is_lambda is False
    assert config.docbase_enabled is False
    assert select_entry_point(config) == ENTRY_HTTP


def test_load_config_reads_all_variables(tmp_path: Path) -> None:
    env = dict(_BASE_ENV)
    env.update(
        {
            "NOTIFY_CHANNEL": "C999",
            "DOCBASE_DOMAIN": "acme",
            "DOCBASE_TOKEN": "db-token",
            "AWS_LAMBDA_RUNTIME_API": "127.0.0.1:9001",
            "PORT": "9000",
            "SLACK_TIMESTAMP_TOLERANCE_SECONDS": "60",
        }
    )
    config = load_config(env, env_file=tmp_path / "missing.env")

    assert config.notify_channel == "C999"
    assert config.docbase_enabled is True
    assert config.port == 9000
    assert config.timestamp_tolerance_seconds == 60.0
    assert config.is_lambda is True
    assert config.log_format == "json"
    assert select_entry_point(config) == ENTRY_LAMBDA


def test_env_file_fills_missing_values_only(tmp_path: Path) -> None:
    env_file = tmp_path / ".env"
    env_file.write_text(
        "# relay settings\n"
        "export SLACK_SIGNING_SECRET='from-file'\n"
        'SLACK_BOT_TOKEN="xoxb-file"\n'
        "NOTIFY_CHANNEL=C-file\n",
        encoding="utf-8",
    )

    config = load_config({"NOTIFY_CHANNEL": "C-env"}, env_file=env_file)

    assert config.signing_secret == "from-file"
    assert config.bot_token == "xoxb-file"
    assert config.notify_channel == "C-env"


def test_missing_credentials_raise(tmp_path: Path) -> None:
    with pytest.raises(ConfigurationError):
        load_config({"SLACK_BOT_TOKEN": "xoxb-test"}, env_file=tmp_path / "missing.env")


@pytest.mark.parametrize(
    "key,value",
    [
        ("PORT", "not-a-port"),
        ("PORT", "70000"),
        ("SLACK_TIMESTAMP_TOLERANCE_SECONDS", "0"),
        ("LOG_FORMAT", "xml"),
    ],
)
def test_invalid_values_raise(tmp_path: Path, key: str, value: str) -> None:
    env = dict(_BASE_ENV)
    env[key] = value
    with pytest.raises(ConfigurationError):
        load_config(env, env_file=tmp_path / "missing.env")


def test_events_path_is_normalized() -> None:
    config = RelayConfig(signing_secret="s", bot_token="t", events_path="hooks/slack")
    assert config.events_path == "/hooks/slack"
