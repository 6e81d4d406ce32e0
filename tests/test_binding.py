from __future__ import annotations

from typing import Any

import pytest

from pyxtate.binding import Subscription, bind_state
from pyxtate.exceptions import XtateInvalidArgumentError
from pyxtate.state.events import RegistryVariant
from pyxtate.state.store import NotificationRegistry, reset_registry, set_registry


@pytest.fixture(autouse=True)
def _fresh_default_registry() -> Any:
    reset_registry()
    yield
    reset_registry()


def test_subscription_seeds_from_initial_state() -> None:
    registry = NotificationRegistry()

    with Subscription(registry, "counter", {"count": 0}, "test") as sub:
        assert sub.active
        assert sub.state == {"count": 0}
        assert registry.listener_count("counter", "test") == 1

    assert not sub.active
    assert registry.listener_count("counter", "test") == 0


def test_subscription_seeds_from_existing_registry_state() -> None:
    registry = NotificationRegistry()
    registry.listen("counter", lambda data: None, {"count": 0}, "test")
    registry.notify("counter", {"count": 4}, "test")

    with bind_state(registry, "counter", {"count": 0}, "test") as sub:
        assert sub.state == {"count": 4}


def test_notify_updates_state_and_triggers_rerender() -> None:
    registry = NotificationRegistry()
    renders: list[Any] = []

    with bind_state(registry, "counter", {"count": 0}, "test", on_change=renders.append) as sub:
        sub.notify({"count": sub.state["count"] + 1})
        sub.notify({"count": sub.state["count"] + 1})

        assert sub.state == {"count": 2}
        assert renders == [{"count": 1}, {"count": 2}]


def test_two_components_on_different_slices() -> None:
    registry = NotificationRegistry()

    with (
        bind_state(registry, "eventName", {"count": 0}, "test", caller="Test") as counter,
        bind_state(registry, "eventName", {"x": 0}, "x", caller="Test") as b_state,
    ):
        registry.notify("eventName", {"count": counter.state["count"] + 1}, "test", "Test")
        registry.notify("eventName", {"x": b_state.state["x"] + 2}, "x", "Test")

        assert counter.state == {"count": 1}
        assert b_state.state == {"x": 2}


def test_release_on_exception() -> None:
    registry = NotificationRegistry()

    with pytest.raises(RuntimeError):
        with bind_state(registry, "counter", {"count": 0}) as sub:
            raise RuntimeError("component crashed")

    assert not sub.active
    assert registry.listener_count("counter") == 0


def test_released_subscription_stops_receiving_updates() -> None:
    registry = NotificationRegistry()
    renders: list[Any] = []
    sub = Subscription(registry, "counter", {"count": 0}, on_change=renders.append).acquire()
    keepalive = Subscription(registry, "counter", {"count": 0}).acquire()

    sub.release()
    sub.release()
    registry.notify("counter", {"count": 9})

    assert renders == []
    assert sub.state == {"count": 0}
    assert keepalive.state == {"count": 9}


def test_remount_sees_state_published_while_unmounted() -> None:
    registry = NotificationRegistry()
    with bind_state(registry, "counter", {"count": 0}):
        pass

    registry.notify("counter", {"count": 5})

    with bind_state(registry, "counter", {"count": 0}) as sub:
        assert sub.state == {"count": 5}


def test_acquire_is_idempotent() -> None:
    registry = NotificationRegistry()
    renders: list[Any] = []
    sub = Subscription(registry, "counter", {"count": 0}, on_change=renders.append)

    sub.acquire()
    sub.acquire()
    registry.notify("counter", {"count": 1})

    assert renders == [{"count": 1}]


def test_flat_binding_receives_replay_on_acquire() -> None:
    registry = NotificationRegistry(variant=RegistryVariant.FLAT)
    renders: list[Any] = []

    with bind_state(registry, "A", 0, on_change=renders.append) as sub:
        sub.notify(sub.state + 1)

        assert renders == [0, 1]
        assert sub.state == 1


def test_notify_to_other_event() -> None:
    registry = NotificationRegistry()
    other: list[Any] = []
    registry.listen("other", other.append, {}, "s")

    with bind_state(registry, "counter", {}, "s") as sub:
        sub.notify({"ping": True}, event_name="other")

    assert other == [{"ping": True}]


def test_binding_defaults_to_process_registry() -> None:
    registry = NotificationRegistry()
    set_registry(registry)

    with bind_state(None, "counter", {"count": 0}) as sub:
        sub.notify({"count": 1})

    assert registry.get_state("counter") == {"count": 1}


def test_notify_with_empty_event_name_is_rejected() -> None:
    registry = NotificationRegistry()

    with bind_state(registry, "counter", {"count": 0}) as sub:
        with pytest.raises(XtateInvalidArgumentError):
            sub.notify({"count": 1}, event_name="")

        assert sub.state == {"count": 0}
