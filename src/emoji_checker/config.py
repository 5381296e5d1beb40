import os
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Mapping, Optional

from .exceptions import ConfigurationError


_DEFAULT_PORT = 8081
_DEFAULT_EVENTS_PATH = "/slack/events"
_DEFAULT_DOCBASE_HOST = "docbase.io"
_DEFAULT_DOCBASE_API_URL = "https://api.docbase.io"
_DEFAULT_SLACK_API_URL = "https://slack.com/api"


@dataclass(frozen=True)
class RelayConfig:
    signing_secret: str
    bot_token: str
    notify_channel: Optional[str] = None
    docbase_domain: Optional[str] = None
    docbase_token: Optional[str] = None
    docbase_host: str = _DEFAULT_DOCBASE_HOST
    docbase_api_url: str = _DEFAULT_DOCBASE_API_URL
    slack_api_url: str = _DEFAULT_SLACK_API_URL
    lambda_runtime_api: Optional[str] = None
    host: str = "0.0.0.0"
    port: int = _DEFAULT_PORT
    events_path: str = _DEFAULT_EVENTS_PATH
    timestamp_tolerance_seconds: float = 300.0
    timeout_seconds: float = 30.0
    log_level: str = "INFO"
    log_format: str = "console"

    def __post_init__(self) -> None:
        if not 0 < self.port < 65536:
            raise ValueError("port must be between 1 and 65535")
        if self.timestamp_tolerance_seconds <= 0:
            raise ValueError("timestamp_tolerance_seconds must be positive")
        if self.timeout_seconds <= 0:
            raise ValueError("timeout_seconds must be positive")
        normalized_format = str(self.log_format or "").strip().lower()
        if normalized_format not in {"console", "json"}:
            raise ValueError("log_format must be either 'console' or 'json'")
        object.__setattr__(self, "log_format", normalized_format)
        if not self.events_path.startswith("/"):
            object.__setattr__(self, "events_path", f"/{self.events_path}")

    @property
    def is_lambda(self) -> bool:
        return bool(self.lambda_runtime_api)

    @property
    def docbase_enabled(self) -> bool:
        return bool(self.docbase_domain and self.docbase_token)


def load_config(
    environ: Optional[Mapping[str, str]] = None,
    *,
    env_file: Optional[Path] = None,
) -> RelayConfig:
    values = _load_env_values(environ, env_file=env_file)
    signing_secret = values.get("SLACK_SIGNING_SECRET")
    bot_token = values.get("SLACK_BOT_TOKEN")
    if not signing_secret or not bot_token:
        raise ConfigurationError("missing SLACK_SIGNING_SECRET/SLACK_BOT_TOKEN in environment or .env")
    lambda_runtime_api = values.get("AWS_LAMBDA_RUNTIME_API") or None
    try:
        return RelayConfig(
            signing_secret=signing_secret,
            bot_token=bot_token,
            notify_channel=values.get("NOTIFY_CHANNEL") or None,
            docbase_domain=values.get("DOCBASE_DOMAIN") or None,
            docbase_token=values.get("DOCBASE_TOKEN") or None,
            docbase_host=values.get("DOCBASE_HOST") or _DEFAULT_DOCBASE_HOST,
            docbase_api_url=values.get("DOCBASE_API_URL") or _DEFAULT_DOCBASE_API_URL,
            slack_api_url=values.get("SLACK_API_URL") or _DEFAULT_SLACK_API_URL,
            lambda_runtime_api=lambda_runtime_api,
            port=int(values.get("PORT") or _DEFAULT_PORT),
            timestamp_tolerance_seconds=float(values.get("SLACK_TIMESTAMP_TOLERANCE_SECONDS") or 300.0),
            timeout_seconds=float(values.get("HTTP_TIMEOUT_SECONDS") or 30.0),
            log_level=values.get("LOG_LEVEL") or "INFO",
            log_format=values.get("LOG_FORMAT") or ("json" if lambda_runtime_api else "console"),
        )
    except ValueError as exc:
        raise ConfigurationError(f"invalid configuration: {exc}") from exc


def _load_env_values(
    environ: Optional[Mapping[str, str]],
    *,
    env_file: Optional[Path],
) -> Dict[str, str]:
    source = os.environ if environ is None else environ
    values: Dict[str, str] = {str(key): str(value) for key, value in source.items()}

    candidates = [env_file] if env_file is not None else _candidate_env_files()
    for candidate in candidates:
        if not candidate.exists():
            continue
        for line in candidate.read_text(encoding="utf-8").splitlines():
            parsed = _parse_line(line)
            if parsed is None:
                continue
            key, value = parsed
            values.setdefault(key, value)
        break
    return values


def _candidate_env_files() -> list[Path]:
    cwd = Path.cwd()
    return [cwd / ".env", cwd.parent / ".env"]


def _parse_line(line: str) -> tuple[str, str] | None:
    stripped = line.strip()
    if not stripped or stripped.startswith("#"):
        return None
    if stripped.startswith("export "):
        stripped = stripped[len("export "):].strip()
    if "=" not in stripped:
        return None
    key, value = stripped.split("=", 1)
    key = key.strip()
    value = value.strip()
    if len(value) >= 2 and value[0] == value[-1] and value[0] in {"'", '"'}:
        value = value[1:-1]
    if not key:
        return None
    return key, value
