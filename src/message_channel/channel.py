"""Channel — the main API.  Classifies, redacts, then forwards.

Usage:
    from message_channel import Code, Message, MessageChannel, MessageInterpreter

    channel = MessageChannel(interpreter=MessageInterpreter())
    channel.channel(Message(Code(1), arguments={"!password": "hunter2"}))
    # interpreter receives arguments {"password": "*******"}
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Mapping, Protocol, runtime_checkable

from .log import get_logger
from .privacy import classify, cleanup_key
from .types import Message, PrivacyLevel

logger = get_logger(__name__)


@runtime_checkable
class MessageInterpreting(Protocol):
    """Anything a channel can forward sanitized messages to."""

    def interpret(self, message: Message) -> object: ...


@runtime_checkable
class MessageChanneling(Protocol):
    def channel(self, message: Message) -> Message | None: ...

    def should_channel(self, message: Message) -> bool: ...

    def privacy_status_for(self, key: str) -> PrivacyLevel: ...


@dataclass
class ChannelEnvironment:
    """Redaction policy for a channel.  Configure once, then only read."""
    obfuscation_character: str = "*"
    obfuscate_sensitive: bool = True
    forward_private: bool = False
    # Bare (unprefixed) keys whose level is known up front
    public_keys: set[str] = field(default_factory=set)
    sensitive_keys: set[str] = field(default_factory=set)
    private_keys: set[str] = field(default_factory=set)
    assume_unknown_keys_as: PrivacyLevel = PrivacyLevel.SENSITIVE
    # Forward even when no arguments are left after redaction
    forward_without_arguments: bool = False

    def __post_init__(self) -> None:
        if not isinstance(self.obfuscation_character, str) or len(self.obfuscation_character) != 1:
            raise ValueError(
                f"obfuscation_character must be a single character, got {self.obfuscation_character!r}"
            )
        self.assume_unknown_keys_as = PrivacyLevel.parse(self.assume_unknown_keys_as)

    def obfuscate(self, value: str) -> str:
        """Same length, no content."""
        return self.obfuscation_character * len(value)


class MessageChannel:
    """Sanitizes message arguments and forwards them to an interpreter.

    The interpreter is referenced, not owned; several channels may share one.
    Subclasses can override ``should_channel`` to filter messages.
    """

    def __init__(
        self,
        environment: ChannelEnvironment | None = None,
        interpreter: MessageInterpreting | None = None,
    ) -> None:
        self.environment = environment or ChannelEnvironment()
        self.interpreter = interpreter

    def should_channel(self, message: Message) -> bool:
        return True

    def privacy_status_for(self, key: str) -> PrivacyLevel:
        return classify(key, self.environment)

    def sanitize_arguments(self, arguments: Mapping[str, str] | None) -> dict[str, str] | None:
        """Apply the redaction policy to an argument map.

        Returns ``None`` rather than an empty dict when nothing survives.
        """
        if not arguments:
            return None

        env = self.environment
        sanitized: dict[str, str] = {}
        dropped = obfuscated = 0
        for key, value in arguments.items():
            level = self.privacy_status_for(key)
            clean_key = cleanup_key(key)

            if level is PrivacyLevel.PUBLIC:
                sanitized[clean_key] = value
            elif level is PrivacyLevel.SENSITIVE:
                if env.obfuscate_sensitive:
                    sanitized[clean_key] = env.obfuscate(value)
                    obfuscated += 1
                else:
                    sanitized[clean_key] = value
            elif env.forward_private:
                sanitized[clean_key] = value
            else:
                dropped += 1

        # Values never reach the log, only counts
        logger.debug(
            "arguments_sanitized",
            total=len(arguments),
            obfuscated=obfuscated,
            dropped=dropped,
        )
        return sanitized or None

    def channel(self, message: Message) -> Message | None:
        """Sanitize ``message`` and forward it to the interpreter.

        Returns the sanitized message, or ``None`` when ``should_channel``
        rejected it. A message is only forwarded when some arguments survive
        redaction, unless ``forward_without_arguments`` is set.
        """
        if not self.should_channel(message):
            logger.debug("message_skipped", payload=str(message.payload))
            return None

        sanitized = message.replace_arguments(self.sanitize_arguments(message.arguments))

        has_arguments = bool(sanitized.arguments)
        if self.interpreter is not None and (has_arguments or self.environment.forward_without_arguments):
            self.interpreter.interpret(sanitized)
            logger.debug("message_forwarded", payload=str(message.payload))
        else:
            logger.debug(
                "message_not_forwarded",
                payload=str(message.payload),
                has_interpreter=self.interpreter is not None,
                has_arguments=has_arguments,
            )
        return sanitized
