"""Registry keys and normalized notification records.

Every registry operation resolves its ``(event_name, slice_name)`` arguments
into a :class:`StateKey` first. Only the store is allowed to act on them.
"""

from __future__ import annotations

from datetime import UTC, datetime
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


class RegistryVariant(StrEnum):
    FLAT = "flat"
    SLICED = "sliced"


class StateKey(BaseModel):
    """The double key addressing one state entry and its callback set."""

    model_config = ConfigDict(frozen=True, strict=True)

    event_name: str = Field(..., description="Event (channel) name")
    slice_name: str = Field(..., description="Slice within the event")

    @field_validator("event_name")
    @classmethod
    def _require_event_name(cls, value: str) -> str:
        if not value:
            raise ValueError("event_name must be non-empty")
        return value


class Notification(BaseModel):
    """A completed notify call, as seen by ``on_notify`` observers."""

    model_config = ConfigDict(frozen=True)

    key: StateKey
    caller: str
    data: Any = Field(default=None, description="Payload as passed to notify")
    state: Any = Field(default=None, description="Stored state after merge-or-replace")
    listeners: int = 0
    observed_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
