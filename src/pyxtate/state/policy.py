"""Merge-or-replace policy for notified state.

Whether a payload is merged or replaces the stored value is decided by the
shape of the *incoming* payload alone.
"""

from __future__ import annotations

from typing import Any


def is_plain_record(value: Any) -> bool:
    """Return True for plain key/value records.

    Only exact ``dict`` instances count. Subclasses such as ``Counter`` or
    ``OrderedDict``, ``None``, lists, tuples, dataclass and pydantic instances
    and other ``Mapping`` implementations are opaque values.
    """
    return type(value) is dict


def merge_state(current: Any, incoming: Any) -> Any:
    """Compute the state that results from notifying *incoming*.

    Records are shallow-merged over the current record, keys in *incoming*
    winning. Anything else replaces the current value wholesale.
    """
    if not is_plain_record(incoming):
        return incoming
    # A non-record current value contributes nothing to the merge.
    base = current if is_plain_record(current) else {}
    return {**base, **incoming}


def is_meaningful(value: Any) -> bool:
    """Return True if *value* is worth replaying to a new subscriber."""
    if value is None:
        return False
    return not (is_plain_record(value) and not value)
