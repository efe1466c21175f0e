"""CLI interface for message-channel.

Usage:
    # Channel a message (stdin: JSON message, stdout: interpreted text)
    echo '{"payload": {"code": 1}, "arguments": {"!password": "hunter2"}}' | \
        python -m message_channel.cli --config channel.yaml channel

    # Show how argument keys would be classified
    python -m message_channel.cli classify user '!password' '!!card'

    # Render a message without redaction
    echo '{"payload": {"key": "greeting"}, "arguments": {"name": "Ada"}}' | \
        python -m message_channel.cli --config channel.yaml render
"""

from __future__ import annotations
import argparse
import os
import sys
from typing import Any

from .channel import MessageChannel
from .config import build_environments, create_channel, load_config, load_from_yaml
from .errors import MessageChannelError
from .interpreter import MessageInterpreter
from .log import configure_logging, get_logger
from .types import Message

logger = get_logger(__name__)

DEFAULT_CONFIG = os.environ.get("MESSAGE_CHANNEL_CONFIG", "")


def _load_cfg(args: argparse.Namespace) -> dict[str, Any]:
    cfg = load_from_yaml(args.config) if args.config else load_config({})
    if args.language:
        cfg["default_language"] = args.language
        cfg["language_preferences"] = [args.language]
    if args.forward_private:
        cfg["forward_private"] = True
    if args.public_keys:
        cfg["public_keys"] = cfg["public_keys"] | set(args.public_keys.split(","))
    return cfg


def _read_message() -> Message:
    return Message.from_json(sys.stdin.read())


def _write(text: str) -> None:
    sys.stdout.write(text)
    sys.stdout.write("\n")


def cmd_channel(args: argparse.Namespace) -> None:
    """Channel a JSON message from stdin through the configured pipeline."""
    channel = create_channel(_load_cfg(args), sink=_write)
    sanitized = channel.channel(_read_message())
    if args.show_sanitized and sanitized is not None:
        _write(sanitized.to_json())


def cmd_classify(args: argparse.Namespace) -> None:
    """Print the privacy level of each argument key."""
    channel_env, _ = build_environments(_load_cfg(args))
    channel = MessageChannel(environment=channel_env)
    for key in args.keys:
        _write(f"{key}\t{channel.privacy_status_for(key)}")


def cmd_render(args: argparse.Namespace) -> None:
    """Render a JSON message from stdin without redaction."""
    _, interpreter_env = build_environments(_load_cfg(args))
    interpreter = MessageInterpreter(interpreter_env, sink=_write)
    interpreter.interpret(_read_message())


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(
        prog="message_channel",
        description="Privacy-aware message channeling",
    )
    parser.add_argument("--config", default=DEFAULT_CONFIG, help="YAML config path")
    parser.add_argument("--language", default="", help="Render in this language")
    parser.add_argument("--forward-private", action="store_true", help="Pass private arguments through")
    parser.add_argument("--public-keys", default="", help="Comma-separated keys to treat as public")
    parser.add_argument("--log-level", default="WARNING", help="Log level (DEBUG, INFO, ...)")
    parser.add_argument("--log-json", action="store_true", help="Emit JSON log lines")

    sub = parser.add_subparsers(dest="command", required=True)
    p_channel = sub.add_parser("channel", help="Channel a JSON message (stdin)")
    p_channel.add_argument("--show-sanitized", action="store_true", help="Also print the sanitized message")
    p_classify = sub.add_parser("classify", help="Classify argument keys")
    p_classify.add_argument("keys", nargs="+", metavar="KEY")
    sub.add_parser("render", help="Render a JSON message (stdin)")

    args = parser.parse_args(argv)
    configure_logging(args.log_level, json=args.log_json)

    cmds = {
        "channel": cmd_channel,
        "classify": cmd_classify,
        "render": cmd_render,
    }
    try:
        cmds[args.command](args)
    except (MessageChannelError, OSError) as e:
        logger.error("command_failed", command=args.command, error=str(e))
        sys.stderr.write(f"error: {e}\n")
        raise SystemExit(2) from e


if __name__ == "__main__":
    main()
