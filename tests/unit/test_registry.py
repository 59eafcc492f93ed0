# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

import logging

import pytest

from apibridge.config import ApiSettings
from apibridge.errors import ConfigurationError
from apibridge.http.adapters import StubTransport
from apibridge.http.httpx_client import HttpxTransport
from apibridge.models.profile import TransportProfile
from apibridge.routing import DEFAULT_URL_PROFILES, ProfileRegistry, register_default_profiles
from apibridge.routing.presets import BATCH_API, PAYMENT_API


class ProfileStub(StubTransport):
    def __init__(self, profile: TransportProfile):
        super().__init__(name=profile.name)
        self.profile = profile


def _factory(built):
    def factory(profile, settings):  # noqa: ARG001
        transport = ProfileStub(profile)
        built.append(transport)
        return transport

    return factory


def _registry(built=None):
    built = [] if built is None else built
    return ProfileRegistry(ApiSettings(), transport_factory=_factory(built))


def test_profile_transport_is_built_once_and_reused():
    built = []
    registry = _registry(built)
    transport = registry.register_profile("https://payment.gateway.com/*", PAYMENT_API)
    assert len(built) == 1
    assert registry.resolve_transport("https://payment.gateway.com/a") is transport
    assert registry.resolve_transport("https://payment.gateway.com/b") is transport
    assert len(built) == 1


def test_prebuilt_transport_beats_profile_even_when_registered_later():
    registry = _registry()
    registry.register_profile("https://api.example.com/*", PAYMENT_API)
    custom = StubTransport(name="custom")
    registry.register_transport("https://api.example.com/*", custom)
    assert registry.resolve_transport("https://api.example.com/x") is custom
    source, _ = registry.resolve("https://api.example.com/x")
    assert source == "transport:https://api.example.com/*"


def test_wildcard_in_prebuilt_tier_beats_exact_profile_match():
    registry = _registry()
    exact = registry.register_profile("https://api.example.com/exact", PAYMENT_API)
    custom = StubTransport(name="custom")
    registry.register_transport("https://api.example.com/*", custom)
    assert registry.resolve_transport("https://api.example.com/exact") is custom
    registry.remove_transport("https://api.example.com/*")
    assert registry.resolve_transport("https://api.example.com/exact") is exact


def test_exact_profile_match_beats_earlier_wildcard():
    registry = _registry()
    wildcard = registry.register_profile("https://api.example.com/*", BATCH_API)
    exact = registry.register_profile("https://api.example.com/exact", PAYMENT_API)
    assert registry.resolve_transport("https://api.example.com/exact") is exact
    assert registry.resolve_transport("https://api.example.com/other") is wildcard


def test_unmatched_url_uses_lazily_built_default():
    built = []
    registry = _registry(built)
    assert built == []
    source, transport = registry.resolve("https://nowhere.example.org/x")
    assert source == "default"
    assert transport.profile.name == "default"
    assert registry.resolve_transport("") is transport
    assert len(built) == 1


def test_explicit_default_transport_is_used():
    default = StubTransport(name="default")
    registry = ProfileRegistry(ApiSettings(), default_transport=default)
    assert registry.resolve_transport("https://x.com") is default


def test_invalid_profile_raises_and_caches_nothing():
    built = []
    registry = _registry(built)
    bad = TransportProfile(name="bad", max_connections=5, max_connections_per_route=10)
    with pytest.raises(ConfigurationError, match="max_connections_per_route"):
        registry.register_profile("https://bad.example.com/*", bad)
    assert registry.profiles() == {}
    assert built == []
    source, _ = registry.resolve("https://bad.example.com/x")
    assert source == "default"


@pytest.mark.parametrize(
    "profile",
    [
        TransportProfile(name="zero-connect", connect_timeout_ms=0),
        TransportProfile(name="neg-read", read_timeout_ms=-1),
        TransportProfile(name="zero-pool", max_connections=0),
        TransportProfile(name="neg-retry", max_retry_attempts=-1),
    ],
)
def test_non_positive_values_are_rejected(profile):
    with pytest.raises(ConfigurationError):
        _registry().register_profile("https://x.com/*", profile)


def test_suspicious_profile_only_warns(caplog):
    registry = _registry()
    profile = TransportProfile(name="twitchy", connect_timeout_ms=500, read_timeout_ms=1000, max_connections=2000)
    with caplog.at_level(logging.WARNING):
        registry.register_profile("https://twitchy.com/*", profile)
    messages = " ".join(record.getMessage() for record in caplog.records)
    assert "very short connect timeout" in messages
    assert "very short read timeout" in messages
    assert "very high max connections" in messages


def test_profile_fields_fall_back_to_settings():
    settings = ApiSettings(max_retry_attempts=7, retry_delay_ms=250)
    registry = ProfileRegistry(settings, transport_factory=_factory([]))
    transport = registry.register_profile("https://x.com/*", PAYMENT_API)
    assert transport.profile.max_retry_attempts == 7
    assert transport.profile.retry_delay_ms == 250
    assert transport.profile.connect_timeout_ms == 2000
    assert registry.profile_for(transport).name == "payment-api"


def test_profile_for_foreign_transport_is_global_default():
    registry = _registry()
    assert registry.profile_for(StubTransport()).name == "default"


def test_reregistering_closes_replaced_transport():
    built = []
    registry = _registry(built)
    first = registry.register_profile("https://x.com/*", PAYMENT_API)
    second = registry.register_profile("https://x.com/*", BATCH_API)
    assert first.closed is True
    assert second.closed is False
    assert registry.profiles() == {"https://x.com/*": BATCH_API.resolve(registry.settings)}


def test_remove_and_clear_close_transports():
    registry = _registry()
    profile_transport = registry.register_profile("https://a.com/*", PAYMENT_API)
    custom = StubTransport()
    registry.register_transport("https://b.com/*", custom)
    assert registry.remove_profile("https://a.com/*") is True
    assert registry.remove_profile("https://a.com/*") is False
    assert profile_transport.closed is True

    other = registry.register_profile("https://c.com/*", PAYMENT_API)
    registry.clear()
    assert other.closed is True
    assert custom.closed is True
    assert registry.profiles() == {}
    assert registry.transports() == {}


def test_close_failure_is_logged_not_raised(caplog):
    class BrokenClose(StubTransport):
        def close(self) -> None:
            raise RuntimeError("boom")

    registry = _registry()
    registry.register_transport("https://x.com/*", BrokenClose())
    with caplog.at_level(logging.WARNING):
        assert registry.remove_transport("https://x.com/*") is True
    assert "Failed to release transport" in caplog.text


def test_default_profiles_are_installed_in_order():
    registry = _registry()
    register_default_profiles(registry)
    assert list(registry.profiles()) == [pattern for pattern, _ in DEFAULT_URL_PROFILES]
    assert registry.profile_for(registry.resolve_transport("https://payment.gateway.com/charge")).name == "payment-api"
    assert registry.profile_for(registry.resolve_transport("https://api.acme.com/batch/run")).name == "batch-api"
    assert registry.profile_for(registry.resolve_transport("https://partner-acme.com/orders")).name == "external-api"
    assert registry.profile_for(registry.resolve_transport("https://cdn.example.com/stream/1")).name == "high-volume-api"


def test_summary_lists_registrations():
    registry = _registry()
    registry.register_profile("https://a.com/*", PAYMENT_API)
    registry.register_transport("https://b.com/*", StubTransport())
    summary = registry.summary()
    assert summary["profile_mappings"] == {"https://a.com/*": "payment-api"}
    assert summary["custom_transports"] == ["https://b.com/*"]
    assert summary["total_registrations"] == 2


def test_default_factory_builds_httpx_transport():
    registry = ProfileRegistry(ApiSettings())
    try:
        transport = registry.register_profile("https://payment.gateway.com/*", PAYMENT_API)
        assert isinstance(transport, HttpxTransport)
        assert transport.profile.read_timeout_ms == 5000
        assert transport.retry_config.max_attempts == 4
    finally:
        registry.close()


@pytest.mark.parametrize("pattern", ["", "   "])
def test_blank_pattern_is_rejected_before_building(pattern):
    built = []
    registry = _registry(built)
    with pytest.raises(ConfigurationError, match="non-empty"):
        registry.register_profile(pattern, TransportProfile(name="x"))
    with pytest.raises(ConfigurationError):
        registry.register_transport(pattern, StubTransport())
    assert built == []
    assert registry.profiles() == {}
    assert registry.transports() == {}
