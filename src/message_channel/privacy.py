"""Privacy classifier for message argument keys.

Explicit prefixes win over configured key lists, and the key lists win
over the environment default:

    !!card      -> private
    !password   -> sensitive
    user        -> whatever the environment's lists / default say
"""

from __future__ import annotations
from typing import TYPE_CHECKING

from .types import PRIVATE_PREFIX, SENSITIVE_PREFIX, PrivacyLevel

if TYPE_CHECKING:
    from .channel import ChannelEnvironment


def cleanup_key(key: str) -> str:
    """Strip a leading privacy prefix, returning the bare key."""
    if key.startswith(PRIVATE_PREFIX):
        return key[len(PRIVATE_PREFIX):]
    if key.startswith(SENSITIVE_PREFIX):
        return key[len(SENSITIVE_PREFIX):]
    return key


def classify(key: str, environment: ChannelEnvironment) -> PrivacyLevel:
    """Return the privacy level of an argument key. Total and side-effect free."""
    # "!!" must be tested first, it also starts with "!"
    if key.startswith(PRIVATE_PREFIX):
        return PrivacyLevel.PRIVATE
    if key.startswith(SENSITIVE_PREFIX):
        return PrivacyLevel.SENSITIVE

    bare = cleanup_key(key)
    if bare in environment.public_keys:
        return PrivacyLevel.PUBLIC
    if bare in environment.sensitive_keys:
        return PrivacyLevel.SENSITIVE
    if bare in environment.private_keys:
        return PrivacyLevel.PRIVATE
    return environment.assume_unknown_keys_as
