"""pyxtate - process-wide publish/subscribe state container."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("pyxtate")
except PackageNotFoundError:
    __version__ = "0+local"
from pyxtate.binding import Subscription, bind_state
from pyxtate.config import NotifierConfig
from pyxtate.exceptions import (
    XtateConfigError,
    XtateError,
    XtateInvalidArgumentError,
    XtateNotFoundError,
)
from pyxtate.state.events import Notification, RegistryVariant, StateKey
from pyxtate.state.policy import is_plain_record, merge_state
from pyxtate.state.store import NotificationRegistry, get_registry, reset_registry, set_registry

__all__ = [
    "__version__",
    "Notification",
    "NotificationRegistry",
    "NotifierConfig",
    "RegistryVariant",
    "StateKey",
    "Subscription",
    "XtateConfigError",
    "XtateError",
    "XtateInvalidArgumentError",
    "XtateNotFoundError",
    "bind_state",
    "get_registry",
    "is_plain_record",
    "merge_state",
    "reset_registry",
    "set_registry",
]
