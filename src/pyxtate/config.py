"""Registry configuration for pyxtate."""

from __future__ import annotations

import dataclasses
import os
from typing import Any

from pyxtate.exceptions import XtateConfigError
from pyxtate.state.events import RegistryVariant


def _env_bool(value: str | None, default: bool) -> bool:
    if value is None:
        return default
    normalized = value.strip().lower()
    if normalized in {"1", "true", "yes", "y", "on"}:
        return True
    if normalized in {"0", "false", "no", "n", "off"}:
        return False
    return default


@dataclasses.dataclass(frozen=True)
class NotifierConfig:
    """Registry configuration.

    Parameters
    ----------
    variant : RegistryVariant
        ``SLICED`` keys state by event then slice. ``FLAT`` keeps a single
        implicit slice per event and replays stored state to new listeners.
    default_slice : str
        Slice used when an operation is called without ``slice_name``.
    default_caller : str
        Caller label used in diagnostics when ``notify`` gets none.
    log_payloads : bool
        Include (redacted) payloads in the DEBUG notify log.
    log_max_string : int
        Strings in logged payloads are truncated to this many characters.
    """

    variant: RegistryVariant = RegistryVariant.SLICED
    default_slice: str = "default"
    default_caller: str = "notifier_default"
    log_payloads: bool = True
    log_max_string: int = 512

    def __post_init__(self) -> None:
        try:
            variant = RegistryVariant(self.variant)
        except ValueError as exc:
            raise XtateConfigError(f"Unknown registry variant: {self.variant!r}") from exc
        # Frozen: normalise plain strings to the enum in place.
        object.__setattr__(self, "variant", variant)
        if not isinstance(self.default_slice, str):
            raise XtateConfigError("default_slice must be a string")
        if self.log_max_string <= 0:
            raise XtateConfigError("log_max_string must be positive")

    @classmethod
    def from_env(cls, **overrides: Any) -> NotifierConfig:
        """Create configuration from environment variables.

        Reads ``XTATE_VARIANT``, ``XTATE_DEFAULT_SLICE``,
        ``XTATE_DEFAULT_CALLER``, ``XTATE_LOG_PAYLOADS`` and
        ``XTATE_LOG_MAX_STRING``. Explicit keyword arguments override
        environment values.
        """
        env = os.environ

        _ENV_CONFIG_MAP = {
            "XTATE_VARIANT": "variant",
            "XTATE_DEFAULT_SLICE": "default_slice",
            "XTATE_DEFAULT_CALLER": "default_caller",
        }
        config_kwargs: dict[str, Any] = {}
        for env_key, field_name in _ENV_CONFIG_MAP.items():
            val = env.get(env_key)
            if val is not None:
                config_kwargs[field_name] = val.strip() if field_name == "variant" else val

        if "log_payloads" not in overrides:
            config_kwargs["log_payloads"] = _env_bool(env.get("XTATE_LOG_PAYLOADS"), True)

        max_env = env.get("XTATE_LOG_MAX_STRING")
        if max_env is not None and "log_max_string" not in overrides:
            try:
                config_kwargs["log_max_string"] = int(max_env)
            except ValueError as exc:
                raise XtateConfigError(f"XTATE_LOG_MAX_STRING is not an integer: {max_env!r}") from exc

        config_kwargs.update(overrides)

        return cls(**config_kwargs)
