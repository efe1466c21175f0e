"""Exceptions raised at the edges of the pipeline.

The core (classifier, channel, substitution, interpreter) never raises for
string input; these only surface when decoding messages, loading templates
or reading configuration.
"""

from __future__ import annotations


class MessageChannelError(ValueError):
    """Base class for all message-channel errors."""


class MessageFormatError(MessageChannelError):
    """A serialized message could not be decoded."""


class TemplateError(MessageChannelError):
    """A template table is malformed."""


class ConfigError(MessageChannelError):
    """A configuration value is invalid."""
