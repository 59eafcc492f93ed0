# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Configuration helpers for apibridge."""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import TYPE_CHECKING

from .version import __version__

if TYPE_CHECKING:
    from .models.profile import TransportProfile

DEFAULT_USER_AGENT = f"apibridge/{__version__}"
DEFAULT_ASYNC_WORKERS = 256


def _float_env(name: str, default: float) -> float:
    try:
        value = os.getenv(name)
        return float(value) if value is not None else default
    except ValueError:
        return default


def _int_env(name: str, default: int) -> int:
    try:
        value = os.getenv(name)
        return int(value) if value is not None else default
    except ValueError:
        return default


def _bool_env(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


@dataclass
class ApiSettings:
    """Global transport defaults and the mocking switch."""

    connect_timeout_ms: int = 5000
    read_timeout_ms: int = 30000
    max_connections: int = 100
    max_connections_per_route: int = 20
    max_retry_attempts: int = 3
    retry_delay_ms: int = 1000
    backoff_factor: float = 2.0
    enable_logging: bool = True
    enable_mocking: bool = False
    user_agent: str = DEFAULT_USER_AGENT
    verify_ssl: bool = True
    async_workers: int = DEFAULT_ASYNC_WORKERS

    @classmethod
    def from_env(cls) -> ApiSettings:
        """Create settings from environment variables (evaluated at call time)."""
        return cls(
            connect_timeout_ms=_int_env("APIBRIDGE_CONNECT_TIMEOUT_MS", cls.connect_timeout_ms),
            read_timeout_ms=_int_env("APIBRIDGE_READ_TIMEOUT_MS", cls.read_timeout_ms),
            max_connections=_int_env("APIBRIDGE_MAX_CONNECTIONS", cls.max_connections),
            max_connections_per_route=_int_env("APIBRIDGE_MAX_CONNECTIONS_PER_ROUTE", cls.max_connections_per_route),
            max_retry_attempts=_int_env("APIBRIDGE_MAX_RETRY_ATTEMPTS", cls.max_retry_attempts),
            retry_delay_ms=_int_env("APIBRIDGE_RETRY_DELAY_MS", cls.retry_delay_ms),
            backoff_factor=_float_env("APIBRIDGE_RETRY_BACKOFF", cls.backoff_factor),
            enable_logging=_bool_env("APIBRIDGE_ENABLE_LOGGING", cls.enable_logging),
            enable_mocking=_bool_env("APIBRIDGE_ENABLE_MOCKING", cls.enable_mocking),
            user_agent=os.getenv("APIBRIDGE_USER_AGENT", cls.user_agent),
            verify_ssl=_bool_env("APIBRIDGE_VERIFY_SSL", cls.verify_ssl),
            async_workers=_int_env("APIBRIDGE_ASYNC_WORKERS", cls.async_workers),
        )

    def default_profile(self) -> TransportProfile:
        """Return the global-default TransportProfile with every field populated."""
        from .models.profile import TransportProfile

        return TransportProfile(
            name="default",
            connect_timeout_ms=self.connect_timeout_ms,
            read_timeout_ms=self.read_timeout_ms,
            max_connections=self.max_connections,
            max_connections_per_route=self.max_connections_per_route,
            max_retry_attempts=self.max_retry_attempts,
            retry_delay_ms=self.retry_delay_ms,
            enable_logging=self.enable_logging,
        )


def load_api_settings() -> ApiSettings:
    """Load API settings from environment with sensible defaults."""
    return ApiSettings.from_env()
