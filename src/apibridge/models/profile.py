# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Transport profile: the timeout / pool / retry settings a transport is built from."""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass, replace
from typing import TYPE_CHECKING, Any

from ..errors import ConfigurationError

if TYPE_CHECKING:
    from ..config import ApiSettings

logger = logging.getLogger(__name__)

SHORT_CONNECT_TIMEOUT_MS = 1000
SHORT_READ_TIMEOUT_MS = 2000
HIGH_MAX_CONNECTIONS = 1000


@dataclass(frozen=True)
class TransportProfile:
    """
    Immutable transport settings.

    Fields left as None fall back to the global ApiSettings when the profile
    is resolved, so a profile only needs to name what it overrides.
    """

    name: str = "unnamed"
    connect_timeout_ms: int | None = None
    read_timeout_ms: int | None = None
    max_connections: int | None = None
    max_connections_per_route: int | None = None
    max_retry_attempts: int | None = None
    retry_delay_ms: int | None = None
    enable_logging: bool | None = None

    def resolve(self, settings: ApiSettings) -> TransportProfile:
        """Return a copy with every unset field filled from ``settings``."""
        defaults = settings.default_profile()
        overrides = {key: value for key, value in asdict(self).items() if value is not None}
        return replace(defaults, **overrides)

    def with_overrides(self, **changes: Any) -> TransportProfile:
        return replace(self, **changes)

    def validate(self, settings: ApiSettings) -> TransportProfile:
        """
        Resolve against ``settings`` and check pool/timeout invariants.

        Raises ConfigurationError naming the violated invariant; suspicious but
        legal values only produce warnings.
        """
        resolved = self.resolve(settings)
        name = resolved.name

        for field_name in ("connect_timeout_ms", "read_timeout_ms", "max_connections", "max_connections_per_route"):
            value = getattr(resolved, field_name)
            if value <= 0:
                raise ConfigurationError(f"Profile '{name}': {field_name} must be positive (got {value})")
        for field_name in ("max_retry_attempts", "retry_delay_ms"):
            value = getattr(resolved, field_name)
            if value < 0:
                raise ConfigurationError(f"Profile '{name}': {field_name} must be >= 0 (got {value})")

        if resolved.max_connections_per_route > resolved.max_connections:
            raise ConfigurationError(
                f"Profile '{name}': max_connections_per_route ({resolved.max_connections_per_route}) "
                f"exceeds max_connections ({resolved.max_connections})"
            )

        if resolved.connect_timeout_ms < SHORT_CONNECT_TIMEOUT_MS:
            logger.warning("Profile '%s' has very short connect timeout: %sms", name, resolved.connect_timeout_ms)
        if resolved.read_timeout_ms < SHORT_READ_TIMEOUT_MS:
            logger.warning("Profile '%s' has very short read timeout: %sms", name, resolved.read_timeout_ms)
        if resolved.max_connections > HIGH_MAX_CONNECTIONS:
            logger.warning("Profile '%s' has very high max connections: %s", name, resolved.max_connections)

        return resolved


__all__ = ["TransportProfile"]
