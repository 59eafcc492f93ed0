# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""URL-pattern to transport registry."""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from contextlib import suppress
from typing import Any

from ..config import ApiSettings, load_api_settings
from ..errors import ConfigurationError
from ..http.client import Transport, create_transport
from ..models.profile import TransportProfile
from .patterns import PatternTable

logger = logging.getLogger(__name__)

TransportFactory = Callable[[TransportProfile, ApiSettings], Transport]


def _require_pattern(pattern: str) -> None:
    if not pattern or not pattern.strip():
        raise ConfigurationError("URL pattern must be a non-empty string")


def _close_quietly(transport: Any, pattern: str) -> None:
    close = getattr(transport, "close", None)
    if not callable(close):
        return
    try:
        close()
    except Exception as exc:  # noqa: BLE001
        logger.warning("Failed to release transport for pattern %s: %s", pattern, exc)


class ProfileRegistry:
    """
    Resolves a request URL to the transport that should carry it.

    Lookup goes through three tiers, strictly in this order:

    1. transports registered directly with ``register_transport``
    2. transports built from profiles registered with ``register_profile``
    3. the process-wide default transport

    Inside a tier the exact-match-then-first-wildcard rule applies, so a
    wildcard in tier 1 still beats an exact match in tier 2.
    """

    def __init__(
        self,
        settings: ApiSettings | None = None,
        *,
        transport_factory: TransportFactory | None = None,
        default_transport: Transport | None = None,
    ):
        self.settings = settings or load_api_settings()
        self._transport_factory = transport_factory or create_transport
        self._transports: PatternTable[Transport] = PatternTable()
        self._profile_transports: PatternTable[tuple[TransportProfile, Transport]] = PatternTable()
        self._default_transport = default_transport
        self._default_lock = threading.Lock()

    def register_profile(self, pattern: str, profile: TransportProfile) -> Transport:
        """Validate ``profile``, build its transport once and cache it under ``pattern``."""
        _require_pattern(pattern)
        resolved = profile.validate(self.settings)
        transport = self._transport_factory(resolved, self.settings)
        previous = self._profile_transports.put(pattern, (resolved, transport))
        if previous is not None:
            _close_quietly(previous[1], pattern)
        logger.info("Registered profile '%s' for URL pattern: %s", resolved.name, pattern)
        return transport

    def register_transport(self, pattern: str, transport: Transport) -> None:
        """Store a pre-built transport; the caller owns its configuration."""
        _require_pattern(pattern)
        self._transports.put(pattern, transport)
        logger.info("Registered custom transport for URL pattern: %s", pattern)

    def remove_profile(self, pattern: str) -> bool:
        entry = self._profile_transports.pop(pattern)
        if entry is None:
            return False
        _close_quietly(entry[1], pattern)
        logger.info("Removed profile '%s' for URL pattern: %s", entry[0].name, pattern)
        return True

    def remove_transport(self, pattern: str) -> bool:
        transport = self._transports.pop(pattern)
        if transport is None:
            return False
        _close_quietly(transport, pattern)
        logger.info("Removed custom transport for URL pattern: %s", pattern)
        return True

    def clear(self) -> None:
        for pattern, (_, transport) in self._profile_transports.snapshot().items():
            _close_quietly(transport, pattern)
        for pattern, transport in self._transports.snapshot().items():
            _close_quietly(transport, pattern)
        self._profile_transports.clear()
        self._transports.clear()
        logger.info("Cleared all transport registrations")

    def profiles(self) -> dict[str, TransportProfile]:
        return {pattern: profile for pattern, (profile, _) in self._profile_transports.snapshot().items()}

    def transports(self) -> dict[str, Transport]:
        return self._transports.snapshot()

    @property
    def default_transport(self) -> Transport:
        with self._default_lock:
            if self._default_transport is None:
                self._default_transport = self._transport_factory(self.settings.default_profile(), self.settings)
            return self._default_transport

    def resolve_transport(self, url: str) -> Transport:
        return self.resolve(url)[1]

    def resolve(self, url: str) -> tuple[str, Transport]:
        """
        Return ``(source, transport)`` for ``url``.

        ``source`` is ``"transport:<pattern>"``, ``"profile:<pattern>"`` or
        ``"default"`` and exists for logging and ``--explain`` output.
        """
        if not url:
            return "default", self.default_transport

        match = self._transports.lookup(url)
        if match is not None:
            logger.debug("Using custom transport %s for URL: %s", match[0], url)
            return f"transport:{match[0]}", match[1]

        profile_match = self._profile_transports.lookup(url)
        if profile_match is not None:
            pattern, (profile, transport) = profile_match
            logger.debug("Using profile '%s' (%s) for URL: %s", profile.name, pattern, url)
            return f"profile:{pattern}", transport

        logger.debug("Using default transport for URL: %s", url)
        return "default", self.default_transport

    def profile_for(self, transport: Transport) -> TransportProfile:
        """Profile a transport was built from, or the global default for foreign transports."""
        profile = getattr(transport, "profile", None)
        if isinstance(profile, TransportProfile):
            return profile
        return self.settings.default_profile()

    def summary(self) -> dict[str, Any]:
        return {
            "profile_mappings": {pattern: profile.name for pattern, profile in self.profiles().items()},
            "custom_transports": self._transports.patterns(),
            "total_registrations": len(self._profile_transports) + len(self._transports),
        }

    def close(self) -> None:
        self.clear()
        with self._default_lock:
            if self._default_transport is not None:
                with suppress(Exception):
                    self._default_transport.close()
                self._default_transport = None


__all__ = ["ProfileRegistry", "TransportFactory"]
