"""Placeholder substitution for message templates.

Templates reference arguments with ``<@name@>`` tokens:

    replace_placeholders("Blah is <@bla@>", {"bla": "big"})  ->  "Blah is big"

Matching is leftmost-shortest, so two placeholders on one line never
swallow each other, and substituted values are not rescanned.
"""

from __future__ import annotations
import re
from functools import lru_cache
from typing import Mapping

DEFAULT_START_MARKER = "<@"
DEFAULT_END_MARKER = "@>"
DEFAULT_NO_MATCH = "NO MATCH"


@lru_cache(maxsize=16)
def _placeholder_pattern(start_marker: str, end_marker: str) -> re.Pattern:
    if not start_marker or not end_marker:
        raise ValueError("placeholder markers must be non-empty")
    return re.compile(re.escape(start_marker) + r"(.*?)" + re.escape(end_marker), re.DOTALL)


def replace_placeholders(
    template: str,
    arguments: Mapping[str, str],
    *,
    start_marker: str = DEFAULT_START_MARKER,
    end_marker: str = DEFAULT_END_MARKER,
    no_match: str = DEFAULT_NO_MATCH,
) -> str:
    """Replace every placeholder token with its argument value.

    Keys missing from ``arguments`` become ``no_match``. A start marker
    with no end marker after it is left in the output as-is.
    """
    pattern = _placeholder_pattern(start_marker, end_marker)
    return pattern.sub(lambda m: arguments.get(m.group(1), no_match), template)


def placeholder_keys(
    template: str,
    *,
    start_marker: str = DEFAULT_START_MARKER,
    end_marker: str = DEFAULT_END_MARKER,
) -> list[str]:
    """Keys referenced by the template, in order of first appearance."""
    pattern = _placeholder_pattern(start_marker, end_marker)
    seen: dict[str, None] = {}
    for m in pattern.finditer(template):
        seen.setdefault(m.group(1), None)
    return list(seen)
