# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Built-in transport profiles and the URL patterns they serve."""

from __future__ import annotations

from ..models.profile import TransportProfile
from .registry import ProfileRegistry

PAYMENT_API = TransportProfile(
    name="payment-api",
    connect_timeout_ms=2000,
    read_timeout_ms=5000,
    max_connections=50,
    max_connections_per_route=10,
    enable_logging=True,
)

BATCH_API = TransportProfile(
    name="batch-api",
    connect_timeout_ms=10000,
    read_timeout_ms=300000,
    max_connections=10,
    max_connections_per_route=2,
    enable_logging=False,
)

EXTERNAL_API = TransportProfile(
    name="external-api",
    connect_timeout_ms=5000,
    read_timeout_ms=30000,
    max_connections=20,
    max_connections_per_route=5,
    enable_logging=True,
)

HIGH_VOLUME_API = TransportProfile(
    name="high-volume-api",
    connect_timeout_ms=3000,
    read_timeout_ms=15000,
    max_connections=100,
    max_connections_per_route=20,
    enable_logging=False,
)

FAST_API = TransportProfile(name="fast-api", connect_timeout_ms=2000, read_timeout_ms=5000, max_retry_attempts=1, retry_delay_ms=500)
SLOW_API = TransportProfile(name="slow-api", connect_timeout_ms=10000, read_timeout_ms=120000, max_retry_attempts=5, retry_delay_ms=2000)

# Registration order matters: the first matching wildcard wins.
DEFAULT_URL_PROFILES: tuple[tuple[str, TransportProfile], ...] = (
    ("https://payment.gateway.com/*", PAYMENT_API),
    ("https://*/payment/*", PAYMENT_API),
    ("https://batch.processor.com/*", BATCH_API),
    ("https://*/batch/*", BATCH_API),
    ("https://*.external.com/*", EXTERNAL_API),
    ("https://partner-*.com/*", EXTERNAL_API),
    ("https://high-volume.api.com/*", HIGH_VOLUME_API),
    ("https://*/stream/*", HIGH_VOLUME_API),
)

PRESET_PROFILES: dict[str, TransportProfile] = {
    profile.name: profile for profile in (PAYMENT_API, BATCH_API, EXTERNAL_API, HIGH_VOLUME_API, FAST_API, SLOW_API)
}


def register_default_profiles(registry: ProfileRegistry) -> None:
    """Install the built-in URL mappings into ``registry``."""
    for pattern, profile in DEFAULT_URL_PROFILES:
        registry.register_profile(pattern, profile)


__all__ = [
    "BATCH_API",
    "DEFAULT_URL_PROFILES",
    "EXTERNAL_API",
    "FAST_API",
    "HIGH_VOLUME_API",
    "PAYMENT_API",
    "PRESET_PROFILES",
    "SLOW_API",
    "register_default_profiles",
]
