"""Interpreter — renders messages through per-language templates.

Templates are looked up by payload (``Code`` → code table, ``Key`` → key
table) and language, then ``<@name@>`` placeholders are filled from the
(already sanitized) message arguments.  A missing template never raises;
it degrades to a diagnostic string such as
``"Undefined message with code: 1"``.

Template tables can be loaded from JSON/YAML shaped like:

    codes:
      en: {1: "Login failed for <@user@>"}
      de: {1: "Anmeldung für <@user@> fehlgeschlagen"}
    keys:
      en: {greeting: "Hello <@name@>"}

or, one entry per message:

    codes:
      - code: 1
        templates: {en: "Login failed", de: "Anmeldung fehlgeschlagen"}
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Callable, Mapping

from .errors import TemplateError
from .log import get_logger
from .substitution import (
    DEFAULT_END_MARKER,
    DEFAULT_NO_MATCH,
    DEFAULT_START_MARKER,
    placeholder_keys,
    replace_placeholders,
)
from .types import Code, Message, Payload

logger = get_logger(__name__)


@dataclass(frozen=True, slots=True)
class CodedTemplate:
    """One coded message in several languages."""
    code: int
    templates: Mapping[str, str]    # language → text


@dataclass(frozen=True, slots=True)
class KeyedTemplate:
    """One keyed message in several languages."""
    key: str
    templates: Mapping[str, str]    # language → text


@dataclass
class InterpreterEnvironment:
    """Template tables and rendering options for an interpreter."""
    default_language: str = "en"
    language_preferences: list[str] = field(default_factory=list)   # empty = [default_language]
    code_templates: dict[str, dict[int, str]] = field(default_factory=dict)   # {"en": {13: "Blah"}}
    key_templates: dict[str, dict[str, str]] = field(default_factory=dict)    # {"de": {"blah": "Blah"}}

    undefined_code_prefix: str = "Undefined message with code: "
    undefined_key_prefix: str = "Undefined message with key: "

    start_marker: str = DEFAULT_START_MARKER
    end_marker: str = DEFAULT_END_MARKER
    no_match: str = DEFAULT_NO_MATCH

    # When False, missing templates list the message arguments
    ignore_messages_without_template: bool = True
    message_without_template: str = "Message without templates with arguments: "

    # When False, arguments no placeholder consumed are appended
    ignore_unmatched_arguments: bool = True
    unmatched_arguments_message: str = " Unmatched arguments: "

    def __post_init__(self) -> None:
        if not self.language_preferences:
            self.language_preferences = [self.default_language]

    # ------------------------------------------------------------------
    # Registration
    # ------------------------------------------------------------------

    def set_messages_for_codes(self, table: Mapping[int, str], language: str | None = None) -> None:
        """Replace the whole code table for ``language``."""
        self.code_templates[language or self.default_language] = dict(table)

    def set_messages_for_keys(self, table: Mapping[str, str], language: str | None = None) -> None:
        """Replace the whole key table for ``language``."""
        self.key_templates[language or self.default_language] = dict(table)

    def add_coded_template(self, template: CodedTemplate) -> None:
        for language, text in template.templates.items():
            self.code_templates.setdefault(language, {})[template.code] = text

    def add_keyed_template(self, template: KeyedTemplate) -> None:
        for language, text in template.templates.items():
            self.key_templates.setdefault(language, {})[template.key] = text

    def clear_code_templates(self) -> None:
        self.code_templates.clear()

    def clear_key_templates(self) -> None:
        self.key_templates.clear()

    def load_templates(self, data: Mapping[str, Any]) -> None:
        """Merge templates from a decoded JSON/YAML document."""
        if not isinstance(data, Mapping):
            raise TemplateError("templates must be an object with 'codes' and/or 'keys'")
        for code, language, text in _iter_entries(data.get("codes"), "code"):
            self.code_templates.setdefault(language, {})[_to_code(code)] = text
        for key, language, text in _iter_entries(data.get("keys"), "key"):
            self.key_templates.setdefault(language, {})[str(key)] = text

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------

    def template_for(self, payload: Payload, language: str) -> str | None:
        if isinstance(payload, Code):
            return self.code_templates.get(language, {}).get(payload.code)
        return self.key_templates.get(language, {}).get(payload.key)


def _iter_entries(section: Any, id_field: str):
    """Yield (id, language, text) from either supported layout."""
    if section is None:
        return
    if isinstance(section, Mapping):
        for language, table in section.items():
            if not isinstance(table, Mapping):
                raise TemplateError(f"templates for language {language!r} must be an object")
            for ident, text in table.items():
                yield ident, str(language), _to_text(text)
    elif isinstance(section, list):
        for entry in section:
            if not isinstance(entry, Mapping) or id_field not in entry:
                raise TemplateError(f"template entries must be objects with a {id_field!r} field")
            templates = entry.get("templates")
            if not isinstance(templates, Mapping):
                raise TemplateError(f"template entry {entry[id_field]!r} has no 'templates' object")
            for language, text in templates.items():
                yield entry[id_field], str(language), _to_text(text)
    else:
        raise TemplateError(f"'{id_field}s' section must be an object or a list")


def _to_code(raw: Any) -> int:
    if isinstance(raw, bool):
        raise TemplateError(f"template code must be an integer, got {raw!r}")
    if isinstance(raw, int):
        return raw
    if isinstance(raw, str):
        try:
            return int(raw)
        except ValueError:
            pass
    raise TemplateError(f"template code must be an integer, got {raw!r}")


def _to_text(raw: Any) -> str:
    if not isinstance(raw, str):
        raise TemplateError(f"template text must be a string, got {raw!r}")
    return raw


def _format_arguments(arguments: Mapping[str, str]) -> str:
    return ", ".join(f"{k}={v}" for k, v in sorted(arguments.items()))


class MessageInterpreter:
    """Turns sanitized messages into display strings.

    ``sink`` receives every string produced by ``interpret``; it defaults to
    ``print``.
    """

    def __init__(
        self,
        environment: InterpreterEnvironment | None = None,
        sink: Callable[[str], object] | None = None,
    ) -> None:
        self.environment = environment or InterpreterEnvironment()
        self.sink = sink or print

    @property
    def default_language(self) -> str:
        return self.environment.default_language

    def set_messages_for_codes(self, table: Mapping[int, str], language: str | None = None) -> None:
        self.environment.set_messages_for_codes(table, language)

    def set_messages_for_keys(self, table: Mapping[str, str], language: str | None = None) -> None:
        self.environment.set_messages_for_keys(table, language)

    def string_value(self, message: Message) -> str:
        """Render in the default language."""
        return self.localized_string_value(message, self.environment.default_language)

    def localized_string_value(self, message: Message, language: str) -> str:
        """Render ``message`` in ``language``.  Never raises."""
        env = self.environment
        payload = message.payload
        arguments = message.arguments
        template = env.template_for(payload, language)

        if template is None:
            logger.debug("template_missing", payload=str(payload), language=language)
            prefix = env.undefined_code_prefix if isinstance(payload, Code) else env.undefined_key_prefix
            text = f"{prefix}{payload.value}"
            if arguments and not env.ignore_messages_without_template:
                text += f". {env.message_without_template}{_format_arguments(arguments)}"
            return text

        if not arguments:
            return template

        text = replace_placeholders(
            template,
            arguments,
            start_marker=env.start_marker,
            end_marker=env.end_marker,
            no_match=env.no_match,
        )
        if not env.ignore_unmatched_arguments:
            used = set(placeholder_keys(template, start_marker=env.start_marker, end_marker=env.end_marker))
            unmatched = {k: v for k, v in arguments.items() if k not in used}
            if unmatched:
                text += f"{env.unmatched_arguments_message}{_format_arguments(unmatched)}"
        return text

    def preferred_string_value(self, message: Message) -> str:
        """Render in the first preferred language that has a template."""
        for language in self.environment.language_preferences:
            if self.environment.template_for(message.payload, language) is not None:
                return self.localized_string_value(message, language)
        return self.string_value(message)

    def interpret(self, message: Message) -> str:
        """Render ``message`` and hand the text to the sink."""
        text = self.preferred_string_value(message)
        self.sink(text)
        return text
