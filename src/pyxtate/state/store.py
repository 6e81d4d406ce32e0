"""In-memory notification registry.

This is the only component allowed to merge notified state and fan it out
to listeners.
"""

from __future__ import annotations

import copy
import logging
from collections.abc import Callable
from typing import Any

from pydantic import ValidationError

from pyxtate._redact import format_payload
from pyxtate.config import NotifierConfig
from pyxtate.exceptions import XtateInvalidArgumentError, XtateNotFoundError
from pyxtate.state.events import Notification, RegistryVariant, StateKey
from pyxtate.state.policy import is_meaningful, merge_state

_logger = logging.getLogger(__name__)

Listener = Callable[[Any], None]


class NotificationRegistry:
    """Listeners and merged state, keyed by event and slice.

    Both registry variants share this class. A ``FLAT`` registry stores every
    event under one implicit slice and replays meaningful state to new
    listeners; a ``SLICED`` registry partitions each event into named slices
    and only delivers future notifications.

    Usage::

        registry = NotificationRegistry()
        registry.listen("cart", on_cart, {"items": 0})
        registry.notify("cart", {"items": 1}, caller="checkout")
    """

    def __init__(
        self,
        config: NotifierConfig | None = None,
        *,
        variant: RegistryVariant | str | None = None,
        on_notify: Callable[[Notification], None] | None = None,
    ) -> None:
        self._config = config or NotifierConfig()
        self._variant = RegistryVariant(variant) if variant is not None else self._config.variant
        self._on_notify = on_notify
        # event -> slice -> state / callbacks. Callbacks are keyed by id() so
        # unhashable callables work and removal is by reference.
        self._state: dict[str, dict[str, Any]] = {}
        self._listeners: dict[str, dict[str, dict[int, Listener]]] = {}

    @property
    def config(self) -> NotifierConfig:
        return self._config

    @property
    def variant(self) -> RegistryVariant:
        return self._variant

    # ------------------------------------------------------------------
    # Key resolution
    # ------------------------------------------------------------------

    def _resolve_slice(self, event_name: Any, slice_name: str | None) -> str:
        if slice_name is None:
            return self._config.default_slice
        if self._variant is RegistryVariant.FLAT:
            raise XtateInvalidArgumentError(
                f"Flat registry does not support slices (got slice {slice_name!r} for event {event_name!r})",
                event_name=event_name,
            )
        return slice_name

    def _key(self, event_name: Any, slice_name: str | None) -> StateKey:
        resolved = self._resolve_slice(event_name, slice_name)
        try:
            return StateKey(event_name=event_name, slice_name=resolved)
        except ValidationError as exc:
            fields = {err["loc"][0] for err in exc.errors() if err.get("loc")}
            what = "event name" if "event_name" in fields else "slice name"
            value = event_name if what == "event name" else resolved
            raise XtateInvalidArgumentError(f"Invalid {what}: {value!r}", event_name=event_name) from exc

    # ------------------------------------------------------------------
    # Public operations
    # ------------------------------------------------------------------

    def notify(
        self,
        event_name: str,
        data: Any,
        slice_name: str | None = None,
        caller: str | None = None,
    ) -> None:
        """Merge *data* into the key's state and call every listener with it."""
        key = self._key(event_name, slice_name)
        caller = caller or self._config.default_caller

        slices = self._listeners.get(key.event_name)
        if slices is None:
            _logger.warning("No listeners for event: %r called by %r.", key.event_name, caller)
            return

        callbacks = slices.get(key.slice_name)
        if callbacks is None:
            _logger.warning(
                "No listeners found for slice: %r of event: %r called by %r.",
                key.slice_name,
                key.event_name,
                caller,
            )
            return

        states = self._state[key.event_name]
        state = merge_state(states.get(key.slice_name), data)
        states[key.slice_name] = state

        # Listeners may (un)subscribe while we fan out.
        snapshot = tuple(callbacks.values())

        if _logger.isEnabledFor(logging.DEBUG):
            payload = (
                format_payload(data, max_string=self._config.log_max_string)
                if self._config.log_payloads
                else "<omitted>"
            )
            _logger.debug(
                "Notify called for %r slice=%r by %r listeners=%d, data: %s",
                key.event_name,
                key.slice_name,
                caller,
                len(snapshot),
                payload,
            )

        for callback in snapshot:
            callback(state)

        if self._on_notify is not None:
            try:
                self._on_notify(
                    Notification(key=key, caller=caller, data=data, state=state, listeners=len(snapshot))
                )
            except Exception:
                _logger.debug("on_notify observer failed", exc_info=True)

    def listen(
        self,
        event_name: str,
        callback: Listener,
        initial_state: Any = None,
        slice_name: str | None = None,
    ) -> None:
        """Register *callback* for the key, creating the key on first use.

        ``initial_state`` seeds the key only when it does not exist yet;
        ``None`` seeds an empty record.
        """
        key = self._key(event_name, slice_name)
        if not callable(callback):
            raise XtateInvalidArgumentError(
                f"Invalid parameters for event: {key.event_name!r} (callback is not callable)",
                event_name=key.event_name,
            )

        slices = self._listeners.setdefault(key.event_name, {})
        states = self._state.setdefault(key.event_name, {})
        if key.slice_name not in slices:
            states[key.slice_name] = {} if initial_state is None else initial_state
            slices[key.slice_name] = {}

        slices[key.slice_name][id(callback)] = callback

        if self._variant is RegistryVariant.FLAT and is_meaningful(states[key.slice_name]):
            self.notify(key.event_name, states[key.slice_name])

    def unsubscribe(
        self,
        event_name: str,
        callback: Listener,
        slice_name: str | None = None,
    ) -> None:
        """Remove exactly *callback* from the key's listeners.

        Raises :class:`XtateNotFoundError` if the event was never listened to.
        """
        key = self._key(event_name, slice_name)
        slices = self._listeners.get(key.event_name)
        if slices is None:
            raise XtateNotFoundError(
                f"No listeners found for event: {key.event_name!r} to unsubscribe.",
                event_name=key.event_name,
            )

        callbacks = slices.get(key.slice_name)
        if callbacks is None or callbacks.pop(id(callback), None) is None:
            _logger.warning(
                "Cannot unsubscribe a non-existent listener for event %r slice %r.",
                key.event_name,
                key.slice_name,
            )

    def get_state(self, event_name: str, slice_name: str | None = None, default: Any = None) -> Any:
        """Return the stored state for the key, or *default* if it was never listened to."""
        if not isinstance(event_name, str):
            return default
        states = self._state.get(event_name)
        if states is None:
            return default
        return states.get(self._resolve_slice(event_name, slice_name), default)

    def is_registered(self, event_name: str, slice_name: str | None = None) -> bool:
        if not isinstance(event_name, str):
            return False
        slices = self._listeners.get(event_name)
        return slices is not None and self._resolve_slice(event_name, slice_name) in slices

    def listener_count(self, event_name: str, slice_name: str | None = None) -> int:
        if not self.is_registered(event_name, slice_name):
            return 0
        return len(self._listeners[event_name][self._resolve_slice(event_name, slice_name)])

    def snapshot(self) -> dict[str, Any]:
        """Deep copy of all stored state.

        Sliced registries return ``{event: {slice: state}}``; flat registries
        return ``{event: state}``.
        """
        if self._variant is RegistryVariant.FLAT:
            default_slice = self._config.default_slice
            return {event: copy.deepcopy(states[default_slice]) for event, states in self._state.items()}
        return copy.deepcopy(self._state)


_default_registry: NotificationRegistry | None = None


def get_registry(config: NotifierConfig | None = None) -> NotificationRegistry:
    """Return the process-wide default registry, creating it on first use.

    ``config`` is only honoured by the call that creates the registry;
    otherwise it comes from :meth:`NotifierConfig.from_env`.
    """
    global _default_registry
    if _default_registry is None:
        _default_registry = NotificationRegistry(config or NotifierConfig.from_env())
    elif config is not None and config != _default_registry.config:
        _logger.warning("Default registry already exists; ignoring config %r", config)
    return _default_registry


def set_registry(registry: NotificationRegistry) -> None:
    """Install *registry* as the process-wide default."""
    global _default_registry
    _default_registry = registry


def reset_registry() -> None:
    """Forget the process-wide default; the next ``get_registry`` builds a new one."""
    global _default_registry
    _default_registry = None
