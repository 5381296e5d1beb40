from __future__ import annotations

import argparse
import dataclasses
import json
import os
import sys
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Sequence

from . import lambda_handler
from .app import ENTRY_LAMBDA, build_receiver, select_entry_point
from .config import RelayConfig, load_config
from .events import HandshakeChallenge, decode_webhook_body, parse_event_envelope
from .exceptions import ConfigurationError, HTTPRequestError
from .log import configure_logging
from .runtime import LambdaRuntimeClient
from .server import RelayServer
from .webhook import WebhookError, build_signature_headers, verify_signature
from .webhook.security import DEFAULT_TOLERANCE_SECONDS

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_USAGE = 2
EXIT_WEBHOOK = 3
EXIT_HTTP = 4


def build_parser() -> argparse.ArgumentParser:
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument(
        "--format",
        dest="output_format",
        choices=("human", "json"),
        default="human",
        help="Output format. Default: human",
    )
    common.add_argument("--env-file", help="Read settings from this .env file instead of ./.env")

    parser = argparse.ArgumentParser(
        prog="emoji-checker",
        description="Slack event relay: emoji and channel announcements, DocBase forwarding",
        parents=[common],
    )
    commands = parser.add_subparsers(dest="command")
    commands.required = True

    run = commands.add_parser(
        "run",
        help="Poll the Lambda Runtime API when AWS_LAMBDA_RUNTIME_API is set, else serve locally",
        parents=[common],
    )
    run.add_argument("--max-invocations", type=int, help="Exit after N Lambda invocations")
    run.set_defaults(handler=_cmd_run)

    serve = commands.add_parser("serve", help="Serve Slack events over local HTTP", parents=[common])
    serve.add_argument("--host", help="Listen host (default: 0.0.0.0)")
    serve.add_argument("--port", type=int, help="Listen port (default: PORT or 8081)")
    serve.add_argument("--path", help="Events path (default: /slack/events)")
    serve.add_argument("--max-requests", type=int, help="Stop after answering N POST requests")
    serve.set_defaults(handler=_cmd_serve)

    webhook = commands.add_parser("webhook", help="Sign, verify and decode Slack payloads offline")
    tools = webhook.add_subparsers(dest="webhook_command")
    tools.required = True

    verify = tools.add_parser("verify-signature", help="Check X-Slack-Signature for a body", parents=[common])
    verify.add_argument("--headers-json", help="Request headers as a JSON object")
    verify.add_argument("--headers-file", help="File holding the request headers JSON object")
    _add_body_source(verify)
    _add_signing_secret(verify)
    verify.add_argument(
        "--tolerance-seconds",
        type=float,
        default=DEFAULT_TOLERANCE_SECONDS,
        help="Allowed clock skew for X-Slack-Request-Timestamp (default: 300)",
    )
    verify.set_defaults(handler=_cmd_verify_signature)

    sign = tools.add_parser("sign", help="Print the Slack signature headers for a body", parents=[common])
    _add_body_source(sign)
    _add_signing_secret(sign)
    sign.add_argument("--timestamp", type=int, help="Unix timestamp to sign with (default: now)")
    sign.set_defaults(handler=_cmd_sign)

    decode = tools.add_parser("parse", help="Decode an Events API payload", parents=[common])
    _add_body_source(decode)
    decode.set_defaults(handler=_cmd_parse)
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    parser = build_parser()
    output_format = "human"
    try:
        args = parser.parse_args(argv)
        output_format = args.output_format
        result = args.handler(args)
    except SystemExit as exc:
        return _exit_code(exc)
    except (ConfigurationError, ValueError) as exc:
        return _fail(str(exc), EXIT_USAGE, output_format)
    except WebhookError as exc:
        return _fail(f"{type(exc).__name__}: {exc}", EXIT_WEBHOOK, output_format)
    except HTTPRequestError as exc:
        detail = str(exc) if exc.status_code is None else f"{exc}; status_code={exc.status_code}"
        return _fail(detail, EXIT_HTTP, output_format)
    except Exception as exc:
        return _fail(f"{type(exc).__name__}: {exc}", EXIT_FAILURE, output_format)
    _emit(result, output_format)
    return EXIT_OK


def _add_body_source(parser: argparse.ArgumentParser) -> None:
    source = parser.add_mutually_exclusive_group()
    source.add_argument("--body-json", help="Raw request body as a string")
    source.add_argument("--body-file", help="File holding the raw request body")
    source.add_argument("--body-stdin", action="store_true", help="Read the raw request body from stdin")


def _add_signing_secret(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--signing-secret", help="Slack signing secret (default: SLACK_SIGNING_SECRET)")


def _cmd_run(args: argparse.Namespace) -> Mapping[str, Any]:
    config = _load_config(args)
    configure_logging(config.log_level, config.log_format)
    mode = select_entry_point(config)
    if mode == ENTRY_LAMBDA:
        handled = _run_lambda_runtime(config, max_invocations=args.max_invocations)
        return {"ok": True, "mode": mode, "invocations": handled}
    return {"ok": True, "mode": mode, "requests": _serve_http(config, max_requests=None)}


def _cmd_serve(args: argparse.Namespace) -> Mapping[str, Any]:
    config = _load_config(args)
    overrides: Dict[str, Any] = {}
    if args.host:
        overrides["host"] = args.host
    if args.port:
        overrides["port"] = args.port
    if args.path:
        overrides["events_path"] = args.path
    # replace() re-runs RelayConfig validation on the overridden values
    config = dataclasses.replace(config, **overrides)
    if args.max_requests is not None and args.max_requests <= 0:
        raise ValueError("--max-requests must be a positive integer")
    configure_logging(config.log_level, config.log_format)
    return {"ok": True, "mode": "http", "requests": _serve_http(config, max_requests=args.max_requests)}


def _cmd_verify_signature(args: argparse.Namespace) -> Mapping[str, Any]:
    headers = _read_headers(args)
    verified = verify_signature(
        headers,
        _read_body(args),
        signing_secret=_signing_secret(args),
        tolerance_seconds=args.tolerance_seconds,
    )
    return {"ok": True, "timestamp": verified.timestamp}


def _cmd_sign(args: argparse.Namespace) -> Mapping[str, str]:
    return build_signature_headers(_read_body(args), _signing_secret(args), timestamp=args.timestamp)


def _cmd_parse(args: argparse.Namespace) -> Mapping[str, Any]:
    envelope = parse_event_envelope(decode_webhook_body(_read_body(args)))
    if isinstance(envelope, HandshakeChallenge):
        return {"type": "url_verification", "challenge": envelope.challenge}
    return {
        "type": "event_callback",
        "event_type": envelope.event_type,
        "event_id": envelope.event_id,
        "team_id": envelope.team_id,
        "event": {"kind": type(envelope.event).__name__, **dataclasses.asdict(envelope.event)},
    }


def _serve_http(config: RelayConfig, *, max_requests: Optional[int]) -> int:
    server = RelayServer(
        build_receiver(config),
        host=config.host,
        port=config.port,
        path=config.events_path,
        max_requests=max_requests,
    )
    server.serve_forever()
    return server.status().total_requests


def _run_lambda_runtime(config: RelayConfig, *, max_invocations: Optional[int]) -> int:
    if not config.lambda_runtime_api:
        raise ConfigurationError("AWS_LAMBDA_RUNTIME_API is not set")
    client = LambdaRuntimeClient(config.lambda_runtime_api)
    try:
        lambda_handler.set_receiver(build_receiver(config))
    except Exception as exc:
        client.post_init_error(exc)
        raise
    return client.run(lambda_handler.handler, max_invocations=max_invocations)


def _load_config(args: argparse.Namespace) -> RelayConfig:
    return load_config(env_file=Path(args.env_file) if args.env_file else None)


def _signing_secret(args: argparse.Namespace) -> str:
    secret = args.signing_secret or os.getenv("SLACK_SIGNING_SECRET")
    if not secret:
        raise ConfigurationError("missing signing secret: set SLACK_SIGNING_SECRET or pass --signing-secret")
    return secret


def _read_body(args: argparse.Namespace) -> bytes:
    if args.body_json is not None:
        return args.body_json.encode("utf-8")
    if args.body_file is not None:
        return Path(args.body_file).read_bytes()
    if args.body_stdin:
        buffer = getattr(sys.stdin, "buffer", None)
        return buffer.read() if buffer is not None else sys.stdin.read().encode("utf-8")
    raise ValueError("pass the request body with --body-json, --body-file or --body-stdin")


def _read_headers(args: argparse.Namespace) -> Dict[str, str]:
    if args.headers_json and args.headers_file:
        raise ValueError("--headers-json and --headers-file are mutually exclusive")
    if args.headers_json:
        text = args.headers_json
    elif args.headers_file:
        text = Path(args.headers_file).read_text(encoding="utf-8")
    else:
        raise ValueError("pass the request headers with --headers-json or --headers-file")
    try:
        headers = json.loads(text)
    except json.JSONDecodeError as exc:
        raise ValueError(f"headers are not valid JSON: {exc}") from exc
    if not isinstance(headers, dict):
        raise ValueError("headers must be a JSON object")
    return {str(name): str(value) for name, value in headers.items()}


def _emit(result: Mapping[str, Any], output_format: str) -> None:
    if output_format == "json":
        print(json.dumps(result, ensure_ascii=False, indent=2))
        return
    if not result:
        print("OK")
        return
    width = max(len(str(key)) for key in result)
    for key in sorted(result):
        value = result[key]
        if isinstance(value, dict):
            value = json.dumps(value, ensure_ascii=False)
        print(f"{key:<{width}} : {value}")


def _fail(message: str, exit_code: int, output_format: str) -> int:
    if output_format == "json":
        print(json.dumps({"ok": False, "error": message, "exit_code": exit_code}, ensure_ascii=False))
    else:
        print(f"Error: {message}", file=sys.stderr)
    return exit_code


def _exit_code(exc: SystemExit) -> int:
    if exc.code is None:
        return EXIT_OK
    if isinstance(exc.code, int):
        return exc.code
    return EXIT_USAGE
