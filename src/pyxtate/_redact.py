"""Bounded, credential-free rendering of notified payloads.

Payloads are application state and may be large or carry secrets. The notify
DEBUG log only ever sees the string produced by :func:`format_payload`.
"""

from __future__ import annotations

import reprlib
from typing import Any

_MASK = "<redacted>"

_SENSITIVE_KEYS: frozenset[str] = frozenset(
    {"password", "passwd", "secret", "token", "access_token", "refresh_token", "api_key", "authorization", "cookie"}
)


def _is_sensitive(key: Any) -> bool:
    return isinstance(key, str) and key.lower() in _SENSITIVE_KEYS


def _mask(value: Any, depth: int) -> Any:
    # Beyond this depth reprlib elides the contents anyway.
    if depth > 6:
        return value
    if isinstance(value, dict):
        return {k: _MASK if _is_sensitive(k) else _mask(v, depth + 1) for k, v in value.items()}
    if isinstance(value, list):
        return [_mask(item, depth + 1) for item in value]
    return value


def format_payload(data: Any, *, max_string: int = 512) -> str:
    """Return a log-safe ``repr`` of *data*.

    Values under sensitive keys are masked, and strings, containers and
    ``repr`` of other objects are shortened by :mod:`reprlib`.
    """
    limits = reprlib.Repr()
    limits.maxstring = max_string
    limits.maxother = max_string
    limits.maxlevel = 6
    limits.maxdict = 50
    limits.maxlist = 50
    return limits.repr(_mask(data, 0))
