"""Client configuration for pyhapanel."""

from __future__ import annotations

import dataclasses
import os
from typing import Any

from pyhapanel._constants import DEFAULT_BASE_URL, RESPONSE_BUFFER_SIZE
from pyhapanel.exceptions import PanelConfigError


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
class PanelConfig:
    """Engine configuration.

    Parameters
    ----------
    token : str
        Long-lived access token sent as ``Authorization: Bearer <token>``.
    base_url : str
        API root of the remote state store, without trailing slash.
        Service calls go to ``<base_url>/services/...`` and state
        queries to ``<base_url>/states/...``.
    request_timeout : float
        Seconds before a command or poll request is abandoned.
    startup_delay : float
        Seconds to wait before the first poll cycle.
    poll_gap : float
        Seconds between two device polls within one cycle.
    poll_interval : float
        Seconds between the end of one poll cycle and the start of the next.
    lock_timeout : float
        Bounded wait for the UI lock when applying a polled snapshot.
        On timeout the snapshot is dropped and the next cycle retries.
    response_buffer_size : int
        Capacity in bytes of the poll response buffer.  Larger responses
        are truncated.
    api_trace_enabled : bool
        Log redacted request headers and bodies at DEBUG level.
    """

    token: str
    base_url: str = DEFAULT_BASE_URL
    request_timeout: float = 5.0
    startup_delay: float = 5.0
    poll_gap: float = 0.2
    poll_interval: float = 10.0
    lock_timeout: float = 0.1
    response_buffer_size: int = RESPONSE_BUFFER_SIZE
    api_trace_enabled: bool = False

    def __post_init__(self) -> None:
        if not self.token or not self.token.strip():
            raise PanelConfigError("token must be non-empty")
        if not self.base_url or not self.base_url.strip():
            raise PanelConfigError("base_url must be non-empty")
        # Frozen dataclass: normalise via object.__setattr__.
        object.__setattr__(self, "base_url", self.base_url.strip().rstrip("/"))
        if self.response_buffer_size < 2:
            raise PanelConfigError(f"response_buffer_size must be at least 2, got {self.response_buffer_size}")
        if self.request_timeout <= 0:
            raise PanelConfigError(f"request_timeout must be positive, got {self.request_timeout}")
        for name in ("startup_delay", "poll_gap", "poll_interval", "lock_timeout"):
            value = getattr(self, name)
            if value < 0:
                raise PanelConfigError(f"{name} must not be negative, got {value}")

    @classmethod
    def from_env(cls, **overrides: Any) -> PanelConfig:
        """Create configuration from environment variables.

        Reads ``HAPANEL_TOKEN`` and optional ``HAPANEL_*`` variables.
        Explicit keyword arguments override environment values.

        Parameters
        ----------
        **overrides
            Explicit field values that take precedence over env vars.

        Returns
        -------
        PanelConfig
            Populated configuration.
        """
        env = os.environ

        config_kwargs: dict[str, Any] = {}

        _ENV_STR_MAP = {
            "HAPANEL_TOKEN": "token",
            "HAPANEL_BASE_URL": "base_url",
        }
        for env_key, field_name in _ENV_STR_MAP.items():
            val = env.get(env_key)
            if val is not None:
                config_kwargs[field_name] = val

        _ENV_FLOAT_MAP = {
            "HAPANEL_REQUEST_TIMEOUT": "request_timeout",
            "HAPANEL_STARTUP_DELAY": "startup_delay",
            "HAPANEL_POLL_GAP": "poll_gap",
            "HAPANEL_POLL_INTERVAL": "poll_interval",
            "HAPANEL_LOCK_TIMEOUT": "lock_timeout",
        }
        for env_key, field_name in _ENV_FLOAT_MAP.items():
            val = env.get(env_key)
            if val is not None and field_name not in overrides:
                try:
                    config_kwargs[field_name] = float(val)
                except ValueError as exc:
                    raise PanelConfigError(f"{env_key} must be a number, got {val!r}") from exc

        size_env = env.get("HAPANEL_RESPONSE_BUFFER_SIZE")
        if size_env is not None and "response_buffer_size" not in overrides:
            try:
                config_kwargs["response_buffer_size"] = int(size_env)
            except ValueError as exc:
                raise PanelConfigError(f"HAPANEL_RESPONSE_BUFFER_SIZE must be an integer, got {size_env!r}") from exc

        if "api_trace_enabled" not in overrides:
            config_kwargs["api_trace_enabled"] = _env_bool(
                env.get("HAPANEL_API_TRACE_ENABLED"),
                False,
            )

        config_kwargs.update(overrides)

        if "token" not in config_kwargs:
            raise PanelConfigError("HAPANEL_TOKEN is not set")

        return cls(**config_kwargs)
