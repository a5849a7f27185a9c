"""Client configuration for shopsync."""

from __future__ import annotations

import dataclasses
import os
from datetime import timedelta, timezone, tzinfo
from typing import Any

from shopsync._constants import (
    BASE_URL,
    DEFAULT_DEBOUNCE_DELAY,
    DEFAULT_NOTIFICATION_PAGE_SIZE,
    DEFAULT_PAGE_SIZE,
    DEFAULT_PRODUCT_PAGE_SIZE,
    DEFAULT_UNIT_PAGE_SIZE,
    DEFAULT_UTC_OFFSET_HOURS,
)
from shopsync.exceptions import ShopSyncConfigError


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
class ShopSyncConfig:
    """Client configuration.

    Parameters
    ----------
    base_url : str
        API base URL, without a trailing slash.
    page_size : int
        Page size for shift and order listings.
    notification_page_size : int
        Page size for the notification feed.
    product_page_size : int
        Page size for the product listing.
    unit_page_size : int
        Page size for the per-product unit lookups.
    debounce_delay : float
        Quiet period in seconds before a search input triggers a request.
    request_timeout : float
        Total timeout in seconds for a single HTTP request.
    utc_offset_hours : float
        Offset of the shop's local time from UTC. Display strings are
        produced and parsed in this zone.
    revert_on_sync_failure : bool
        Roll optimistic edits back when the confirming call fails. When
        ``False`` the local edit is kept and the failure is only logged.
    """

    base_url: str = BASE_URL
    page_size: int = DEFAULT_PAGE_SIZE
    notification_page_size: int = DEFAULT_NOTIFICATION_PAGE_SIZE
    product_page_size: int = DEFAULT_PRODUCT_PAGE_SIZE
    unit_page_size: int = DEFAULT_UNIT_PAGE_SIZE
    debounce_delay: float = DEFAULT_DEBOUNCE_DELAY
    request_timeout: float = 15.0
    utc_offset_hours: float = DEFAULT_UTC_OFFSET_HOURS
    revert_on_sync_failure: bool = False

    def __post_init__(self) -> None:
        for name in ("page_size", "notification_page_size", "product_page_size", "unit_page_size"):
            if getattr(self, name) <= 0:
                raise ShopSyncConfigError(f"{name} must be positive, got {getattr(self, name)}")
        if self.debounce_delay < 0:
            raise ShopSyncConfigError(f"debounce_delay must not be negative, got {self.debounce_delay}")
        if self.request_timeout <= 0:
            raise ShopSyncConfigError(f"request_timeout must be positive, got {self.request_timeout}")
        object.__setattr__(self, "base_url", self.base_url.rstrip("/"))

    @property
    def local_timezone(self) -> tzinfo:
        """Fixed-offset zone used for display strings."""
        return timezone(timedelta(hours=self.utc_offset_hours))

    @classmethod
    def from_env(cls, **overrides: Any) -> ShopSyncConfig:
        """Create configuration from environment variables.

        Reads optional ``SHOPSYNC_*`` variables. Explicit keyword arguments
        override environment values.

        Parameters
        ----------
        **overrides
            Explicit field values that take precedence over env vars.

        Returns
        -------
        ShopSyncConfig
            Populated configuration.
        """
        env = os.environ
        config_kwargs: dict[str, Any] = {}

        base_url = env.get("SHOPSYNC_BASE_URL")
        if base_url is not None:
            config_kwargs["base_url"] = base_url

        _ENV_INT_MAP = {
            "SHOPSYNC_PAGE_SIZE": "page_size",
            "SHOPSYNC_NOTIFICATION_PAGE_SIZE": "notification_page_size",
            "SHOPSYNC_PRODUCT_PAGE_SIZE": "product_page_size",
            "SHOPSYNC_UNIT_PAGE_SIZE": "unit_page_size",
        }
        _ENV_FLOAT_MAP = {
            "SHOPSYNC_DEBOUNCE_DELAY": "debounce_delay",
            "SHOPSYNC_REQUEST_TIMEOUT": "request_timeout",
            "SHOPSYNC_UTC_OFFSET_HOURS": "utc_offset_hours",
        }
        try:
            for env_key, field_name in _ENV_INT_MAP.items():
                val = env.get(env_key)
                if val is not None and field_name not in overrides:
                    config_kwargs[field_name] = int(val)
            for env_key, field_name in _ENV_FLOAT_MAP.items():
                val = env.get(env_key)
                if val is not None and field_name not in overrides:
                    config_kwargs[field_name] = float(val)
        except ValueError as exc:
            raise ShopSyncConfigError(f"Invalid numeric environment value: {exc}") from exc

        if "revert_on_sync_failure" not in overrides:
            config_kwargs["revert_on_sync_failure"] = _env_bool(
                env.get("SHOPSYNC_REVERT_ON_SYNC_FAILURE"),
                False,
            )

        config_kwargs.update(overrides)

        return cls(**config_kwargs)
