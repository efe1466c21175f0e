"""Core types: payloads, privacy levels and the Message envelope."""

from __future__ import annotations
import json
from dataclasses import dataclass
from enum import IntEnum
from functools import total_ordering
from types import MappingProxyType
from typing import Any, ClassVar, Mapping, Union

from .errors import MessageFormatError

# Argument key prefixes that declare sensitivity explicitly
SENSITIVE_PREFIX = "!"
PRIVATE_PREFIX = "!!"


class PrivacyLevel(IntEnum):
    """Sensitivity of a message argument, ordered by severity."""
    PUBLIC = 0       # passed through untouched
    SENSITIVE = 1    # obfuscated
    PRIVATE = 2      # dropped

    def __str__(self) -> str:
        return self.name.lower()

    @classmethod
    def parse(cls, value: str | PrivacyLevel) -> PrivacyLevel:
        """Accept a level or its (case-insensitive) name."""
        if isinstance(value, PrivacyLevel):
            return value
        if isinstance(value, str):
            try:
                return cls[value.strip().upper()]
            except KeyError:
                pass
        raise ValueError(f"unknown privacy level: {value!r}")


@total_ordering
class _Payload:
    """Shared behaviour of the two payload variants.

    Payloads sort by variant tag first ("code" < "key"), then by value.
    """
    __slots__ = ()
    tag: ClassVar[str]

    @property
    def value(self) -> int | str:
        raise NotImplementedError

    def _sort_key(self) -> tuple[str, Any]:
        return (self.tag, self.value)

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, _Payload):
            return NotImplemented
        return self._sort_key() < other._sort_key()


@dataclass(frozen=True, slots=True, eq=True)
class Key(_Payload):
    """Payload identifying a template by string key."""
    key: str
    tag: ClassVar[str] = "key"

    @property
    def value(self) -> str:
        return self.key

    def __str__(self) -> str:
        return f"Key: {self.key}"


@dataclass(frozen=True, slots=True, eq=True)
class Code(_Payload):
    """Payload identifying a template by integer code."""
    code: int
    tag: ClassVar[str] = "code"

    @property
    def value(self) -> int:
        return self.code

    def __str__(self) -> str:
        return f"Code: {self.code}"


Payload = Union[Key, Code]

_MAP_FIELDS = ("arguments", "actions", "formatting_info")


def _freeze(mapping: Mapping[str, str] | None) -> Mapping[str, str] | None:
    if mapping is None:
        return None
    return MappingProxyType(dict(mapping))


@dataclass(frozen=True)
class Message:
    """Compact envelope carried from a producer to an interpreter.

    ``arguments`` keys may carry a privacy prefix: ``!!`` marks a private
    value, ``!`` a sensitive one. ``actions`` and ``formatting_info`` are
    hints for the interpreter and are passed along verbatim.
    """
    payload: Payload
    arguments: Mapping[str, str] | None = None
    actions: Mapping[str, str] | None = None
    formatting_info: Mapping[str, str] | None = None

    def __post_init__(self) -> None:
        # Copy into read-only views so the caller's dicts can't leak in
        for name in _MAP_FIELDS:
            object.__setattr__(self, name, _freeze(getattr(self, name)))

    def __hash__(self) -> int:
        maps = tuple(
            None if mapping is None else frozenset(mapping.items())
            for mapping in (getattr(self, name) for name in _MAP_FIELDS)
        )
        return hash((self.payload, maps))

    def replace_arguments(self, arguments: Mapping[str, str] | None) -> Message:
        """Return a copy of this message carrying different arguments."""
        return Message(
            payload=self.payload,
            arguments=arguments,
            actions=self.actions,
            formatting_info=self.formatting_info,
        )

    # ------------------------------------------------------------------
    # Serialization
    # ------------------------------------------------------------------

    def to_dict(self) -> dict[str, Any]:
        """JSON-compatible dict; the payload is a tagged value."""
        out: dict[str, Any] = {"payload": {self.payload.tag: self.payload.value}}
        for name in _MAP_FIELDS:
            mapping = getattr(self, name)
            if mapping is not None:
                out[name] = dict(mapping)
        return out

    def to_json(self, **kwargs: Any) -> str:
        return json.dumps(self.to_dict(), ensure_ascii=False, **kwargs)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Message:
        """Decode the output of ``to_dict``."""
        if not isinstance(data, Mapping):
            raise MessageFormatError("message must be an object")
        payload = _decode_payload(data.get("payload"))
        maps = {name: _decode_map(name, data.get(name)) for name in _MAP_FIELDS}
        return cls(payload=payload, **maps)

    @classmethod
    def from_json(cls, text: str) -> Message:
        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            raise MessageFormatError(f"invalid JSON: {e}") from e
        return cls.from_dict(data)


def _decode_payload(raw: Any) -> Payload:
    if not isinstance(raw, Mapping) or len(raw) != 1:
        raise MessageFormatError("payload must be an object with exactly one of 'key' or 'code'")
    (tag, value), = raw.items()
    if tag == Key.tag:
        if not isinstance(value, str):
            raise MessageFormatError("payload key must be a string")
        return Key(value)
    if tag == Code.tag:
        # bool is an int subclass but never a valid code
        if not isinstance(value, int) or isinstance(value, bool):
            raise MessageFormatError("payload code must be an integer")
        return Code(value)
    raise MessageFormatError(f"unknown payload tag: {tag!r}")


def _decode_map(name: str, raw: Any) -> dict[str, str] | None:
    if raw is None:
        return None
    if not isinstance(raw, Mapping):
        raise MessageFormatError(f"{name} must be an object")
    for k, v in raw.items():
        if not isinstance(k, str) or not isinstance(v, str):
            raise MessageFormatError(f"{name} must map strings to strings")
    return dict(raw)
