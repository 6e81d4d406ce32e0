"""Custom exception hierarchy for pyxtate."""

from __future__ import annotations


class XtateError(Exception):
    """Base exception for all pyxtate errors."""


class XtateConfigError(XtateError):
    """Invalid or missing configuration."""


class XtateInvalidArgumentError(XtateError, ValueError):
    """An operation was called with an invalid event name or callback.

    Raised before the registry is touched, so a failed call never leaves
    partial state behind.
    """

    def __init__(self, message: str, *, event_name: object = None) -> None:
        self.event_name = event_name
        super().__init__(message)


class XtateNotFoundError(XtateError, LookupError):
    """No listeners were ever registered for the event.

    Only ``unsubscribe`` raises this; notifying an unknown event is a
    logged no-op instead.
    """

    def __init__(self, message: str, *, event_name: str = "") -> None:
        self.event_name = event_name
        super().__init__(message)
