"""YAML/dict config loader for message-channel.

Supports loading from a YAML file or a plain dict (for embedding
in a larger application config).

Example YAML:

    message_channel:
      enabled: true
      channel:
        obfuscation_character: "*"
        obfuscate_sensitive: true
        forward_private: false
        forward_without_arguments: false
        assume_unknown_keys_as: sensitive
        public_keys: [user, host]
        sensitive_keys: [email]
        private_keys: [card]
      interpreter:
        default_language: en
        language_preferences: [de, en]
        no_match: NO MATCH
        ignore_messages_without_template: true
        ignore_unmatched_arguments: true
      templates:
        codes:
          en: {1: "Login failed for <@user@>"}
        keys:
          en: {greeting: "Hello <@name@>"}
"""

from __future__ import annotations
from pathlib import Path
from typing import Any, Callable, Mapping

from .channel import ChannelEnvironment, MessageChannel
from .errors import ConfigError, TemplateError
from .interpreter import InterpreterEnvironment, MessageInterpreter
from .types import Message, PrivacyLevel


class _NoopChannel:
    """Channel used when the pipeline is disabled: nothing is forwarded."""
    environment = None
    interpreter = None

    def channel(self, message: Message) -> Message | None:
        return None

    def should_channel(self, message: Message) -> bool:
        return False

    def privacy_status_for(self, key: str) -> PrivacyLevel:
        return PrivacyLevel.PRIVATE


def _section(data: Any, name: str) -> Mapping[str, Any]:
    value = data or {}
    if not isinstance(value, Mapping):
        raise ConfigError(f"{name} must be a mapping")
    return value


def _string_list(section: Mapping[str, Any], path: str, name: str, default: list[str]) -> list[str]:
    value = section.get(name) or default
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        raise ConfigError(f"{path}.{name} must be a list of strings")
    return list(value)


def _string_set(section: Mapping[str, Any], name: str) -> set[str]:
    return set(_string_list(section, "channel", name, []))


def load_config(data: dict[str, Any]) -> dict[str, Any]:
    """Normalize a config dict (from YAML or inline)."""
    data = _section(data, "config")
    # Support nested under "message_channel" key or flat
    if "message_channel" in data:
        data = _section(data["message_channel"], "message_channel")

    channel = _section(data.get("channel"), "channel")
    interpreter = _section(data.get("interpreter"), "interpreter")
    default_language = interpreter.get("default_language", "en")

    try:
        assume = PrivacyLevel.parse(channel.get("assume_unknown_keys_as", "sensitive"))
    except ValueError as e:
        raise ConfigError(str(e)) from e

    return {
        "enabled": data.get("enabled", True),
        "obfuscation_character": channel.get("obfuscation_character", "*"),
        "obfuscate_sensitive": channel.get("obfuscate_sensitive", True),
        "forward_private": channel.get("forward_private", False),
        "forward_without_arguments": channel.get("forward_without_arguments", False),
        "assume_unknown_keys_as": assume,
        "public_keys": _string_set(channel, "public_keys"),
        "sensitive_keys": _string_set(channel, "sensitive_keys"),
        "private_keys": _string_set(channel, "private_keys"),
        "default_language": default_language,
        "language_preferences": _string_list(
            interpreter, "interpreter", "language_preferences", [default_language]
        ),
        "no_match": interpreter.get("no_match", "NO MATCH"),
        "ignore_messages_without_template": interpreter.get("ignore_messages_without_template", True),
        "ignore_unmatched_arguments": interpreter.get("ignore_unmatched_arguments", True),
        "templates": data.get("templates") or {},
    }


def load_from_yaml(path: str | Path) -> dict[str, Any]:
    """Load config from a YAML file."""
    import yaml
    with open(path, encoding="utf-8") as f:
        return load_config(yaml.safe_load(f) or {})


def build_environments(cfg: dict[str, Any]) -> tuple[ChannelEnvironment, InterpreterEnvironment]:
    """Create both environments from a normalized config."""
    try:
        channel_env = ChannelEnvironment(
            obfuscation_character=cfg["obfuscation_character"],
            obfuscate_sensitive=cfg["obfuscate_sensitive"],
            forward_private=cfg["forward_private"],
            public_keys=cfg["public_keys"],
            sensitive_keys=cfg["sensitive_keys"],
            private_keys=cfg["private_keys"],
            assume_unknown_keys_as=cfg["assume_unknown_keys_as"],
            forward_without_arguments=cfg["forward_without_arguments"],
        )
    except ValueError as e:
        raise ConfigError(str(e)) from e

    interpreter_env = InterpreterEnvironment(
        default_language=cfg["default_language"],
        language_preferences=cfg["language_preferences"],
        no_match=cfg["no_match"],
        ignore_messages_without_template=cfg["ignore_messages_without_template"],
        ignore_unmatched_arguments=cfg["ignore_unmatched_arguments"],
    )
    try:
        interpreter_env.load_templates(cfg["templates"])
    except TemplateError as e:
        raise ConfigError(f"templates: {e}") from e
    return channel_env, interpreter_env


def create_channel(
    config: dict[str, Any],
    sink: Callable[[str], object] | None = None,
) -> MessageChannel | _NoopChannel:
    """Create a fully wired channel + interpreter from a config dict."""
    # Already-normalized configs carry the flattened channel fields
    cfg = config if "obfuscation_character" in config else load_config(config)

    if not cfg["enabled"]:
        # Return a channel that drops everything
        return _NoopChannel()

    channel_env, interpreter_env = build_environments(cfg)
    interpreter = MessageInterpreter(interpreter_env, sink=sink)
    return MessageChannel(environment=channel_env, interpreter=interpreter)
