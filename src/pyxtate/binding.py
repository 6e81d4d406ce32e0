"""Scoped bindings between UI components and a notification registry.

A component acquires a :class:`Subscription` when it becomes active and
releases it when it goes away. While acquired, ``subscription.state`` mirrors
the registry and ``on_change`` is called (typically to re-render) on every
notification for the bound key.
"""

from __future__ import annotations

import contextlib
import logging
from collections.abc import Callable, Iterator
from typing import Any

from pyxtate.state.store import NotificationRegistry, get_registry

_logger = logging.getLogger(__name__)

DEFAULT_CALLER = "use_notifier"


class Subscription:
    """A component's handle on one registry key.

    Usage::

        with Subscription(registry, "counter", {"count": 0}, on_change=render) as sub:
            sub.notify({"count": sub.state["count"] + 1})
    """

    def __init__(
        self,
        registry: NotificationRegistry | None,
        event_name: str,
        initial_state: Any = None,
        slice_name: str | None = None,
        *,
        caller: str = DEFAULT_CALLER,
        on_change: Callable[[Any], None] | None = None,
    ) -> None:
        self._registry = registry if registry is not None else get_registry()
        self._event_name = event_name
        self._initial_state = initial_state
        self._slice_name = slice_name
        self._caller = caller
        self._on_change = on_change
        self._active = False
        self.state: Any = initial_state
        # unsubscribe matches by reference; keep one bound method for both calls.
        self._callback = self._handle_update

    @property
    def active(self) -> bool:
        return self._active

    @property
    def event_name(self) -> str:
        return self._event_name

    @property
    def slice_name(self) -> str | None:
        return self._slice_name

    def _handle_update(self, data: Any) -> None:
        self.state = data
        if self._on_change is not None:
            self._on_change(data)

    def acquire(self) -> Subscription:
        """Seed ``state`` from the registry and start listening."""
        if self._active:
            return self
        previous = self._registry.get_state(self._event_name, self._slice_name)
        self.state = previous if previous is not None else self._initial_state
        self._registry.listen(self._event_name, self._callback, self._initial_state, self._slice_name)
        self._active = True
        _logger.debug(
            "Subscription acquired event=%r slice=%r caller=%r", self._event_name, self._slice_name, self._caller
        )
        return self

    def release(self) -> None:
        """Stop listening. Safe to call more than once."""
        if not self._active:
            return
        self._active = False
        self._registry.unsubscribe(self._event_name, self._callback, self._slice_name)
        _logger.debug(
            "Subscription released event=%r slice=%r caller=%r", self._event_name, self._slice_name, self._caller
        )

    def notify(self, data: Any, event_name: str | None = None) -> None:
        """Publish *data* under this subscription's slice and caller label."""
        target = self._event_name if event_name is None else event_name
        self._registry.notify(target, data, self._slice_name, self._caller)

    def __enter__(self) -> Subscription:
        return self.acquire()

    def __exit__(self, *exc: Any) -> None:
        self.release()


@contextlib.contextmanager
def bind_state(
    registry: NotificationRegistry | None,
    event_name: str,
    initial_state: Any = None,
    slice_name: str | None = None,
    *,
    caller: str = DEFAULT_CALLER,
    on_change: Callable[[Any], None] | None = None,
) -> Iterator[Subscription]:
    """Acquire a :class:`Subscription` for the duration of a ``with`` block.

    ``registry=None`` binds to the process-wide default registry.
    """
    subscription = Subscription(
        registry,
        event_name,
        initial_state,
        slice_name,
        caller=caller,
        on_change=on_change,
    )
    subscription.acquire()
    try:
        yield subscription
    finally:
        subscription.release()
