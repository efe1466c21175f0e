"""Message channel — privacy-aware notifications from producer to interpreter."""

from .types import Code, Key, Message, Payload, PrivacyLevel, PRIVATE_PREFIX, SENSITIVE_PREFIX
from .privacy import classify, cleanup_key
from .channel import ChannelEnvironment, MessageChannel, MessageChanneling, MessageInterpreting
from .interpreter import CodedTemplate, InterpreterEnvironment, KeyedTemplate, MessageInterpreter
from .substitution import placeholder_keys, replace_placeholders
from .config import create_channel, load_config, load_from_yaml
from .errors import ConfigError, MessageChannelError, MessageFormatError, TemplateError

__all__ = [
    "Code", "Key", "Message", "Payload", "PrivacyLevel",
    "PRIVATE_PREFIX", "SENSITIVE_PREFIX",
    "classify", "cleanup_key",
    "ChannelEnvironment", "MessageChannel", "MessageChanneling", "MessageInterpreting",
    "CodedTemplate", "InterpreterEnvironment", "KeyedTemplate", "MessageInterpreter",
    "placeholder_keys", "replace_placeholders",
    "create_channel", "load_config", "load_from_yaml",
    "ConfigError", "MessageChannelError", "MessageFormatError", "TemplateError",
]
__version__ = "0.1.0"
