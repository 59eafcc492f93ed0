# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

import logging
import socket
import ssl

import httpx

from apibridge import config
from apibridge.config import DEFAULT_USER_AGENT, ApiSettings
from apibridge.errors import (
    ApiError,
    ConfigurationError,
    ErrorCategory,
    SerializationError,
    TransportError,
    categorize_exception,
    error_category_to_reason,
)
from apibridge.log import setup_logging


def test_api_settings_env_overrides(monkeypatch):
    monkeypatch.setenv("APIBRIDGE_CONNECT_TIMEOUT_MS", "1500")
    monkeypatch.setenv("APIBRIDGE_READ_TIMEOUT_MS", "2500")
    monkeypatch.setenv("APIBRIDGE_MAX_CONNECTIONS", "40")
    monkeypatch.setenv("APIBRIDGE_MAX_CONNECTIONS_PER_ROUTE", "8")
    monkeypatch.setenv("APIBRIDGE_MAX_RETRY_ATTEMPTS", "0")
    monkeypatch.setenv("APIBRIDGE_RETRY_DELAY_MS", "10")
    monkeypatch.setenv("APIBRIDGE_RETRY_BACKOFF", "1.5")
    monkeypatch.setenv("APIBRIDGE_ENABLE_LOGGING", "false")
    monkeypatch.setenv("APIBRIDGE_ENABLE_MOCKING", "on")
    monkeypatch.setenv("APIBRIDGE_USER_AGENT", "CustomAgent/1.0")
    monkeypatch.setenv("APIBRIDGE_VERIFY_SSL", "0")
    monkeypatch.setenv("APIBRIDGE_ASYNC_WORKERS", "512")

    settings = config.load_api_settings()

    assert settings.connect_timeout_ms == 1500
    assert settings.read_timeout_ms == 2500
    assert settings.max_connections == 40
    assert settings.max_connections_per_route == 8
    assert settings.max_retry_attempts == 0
    assert settings.retry_delay_ms == 10
    assert settings.backoff_factor == 1.5
    assert settings.enable_logging is False
    assert settings.enable_mocking is True
    assert settings.user_agent == "CustomAgent/1.0"
    assert settings.verify_ssl is False
    assert settings.async_workers == 512


def test_api_settings_invalid_env_fall_back(monkeypatch):
    monkeypatch.setenv("APIBRIDGE_CONNECT_TIMEOUT_MS", "fast")
    monkeypatch.setenv("APIBRIDGE_MAX_CONNECTIONS", "")
    monkeypatch.setenv("APIBRIDGE_RETRY_BACKOFF", "-")

    settings = config.load_api_settings()

    assert settings.connect_timeout_ms == ApiSettings.connect_timeout_ms
    assert settings.max_connections == ApiSettings.max_connections
    assert settings.backoff_factor == ApiSettings.backoff_factor
    assert DEFAULT_USER_AGENT in settings.user_agent


def test_load_api_settings_reads_env_at_call_time(monkeypatch):
    monkeypatch.setenv("APIBRIDGE_READ_TIMEOUT_MS", "7000")
    assert config.load_api_settings().read_timeout_ms == 7000
    monkeypatch.setenv("APIBRIDGE_READ_TIMEOUT_MS", "8000")
    assert config.load_api_settings().read_timeout_ms == 8000


def test_default_profile_mirrors_settings():
    profile = ApiSettings(connect_timeout_ms=1111, enable_logging=False).default_profile()
    assert profile.name == "default"
    assert profile.connect_timeout_ms == 1111
    assert profile.enable_logging is False
    assert profile.max_connections_per_route == 20


def test_categorize_exception_variants():
    request = httpx.Request("GET", "https://example.com")
    assert categorize_exception(httpx.ReadTimeout("slow", request=request)) is ErrorCategory.TIMEOUT
    assert categorize_exception(socket.gaierror("dns")) is ErrorCategory.DNS_ERROR
    assert categorize_exception(ssl.SSLError("bad cert")) is ErrorCategory.SSL_ERROR
    assert categorize_exception(httpx.ConnectError("refused", request=request)) is ErrorCategory.CONNECTION_ERROR
    assert categorize_exception(ConnectionResetError("reset")) is ErrorCategory.CONNECTION_ERROR
    assert categorize_exception(ValueError("other")) is ErrorCategory.UNKNOWN_ERROR


def test_connect_error_cause_refines_category():
    request = httpx.Request("GET", "https://example.com")
    try:
        try:
            raise socket.gaierror("name or service not known")
        except socket.gaierror as cause:
            raise httpx.ConnectError("failed", request=request) from cause
    except httpx.ConnectError as exc:
        assert categorize_exception(exc) is ErrorCategory.DNS_ERROR


def test_error_category_reasons():
    assert error_category_to_reason(ErrorCategory.TIMEOUT) == "Network timeout"
    assert error_category_to_reason(None) == ""


def test_error_hierarchy_and_codes():
    assert issubclass(ConfigurationError, ApiError)
    assert TransportError("x").error_code == "TRANSPORT_ERROR"
    assert TransportError("x").category is ErrorCategory.UNKNOWN_ERROR
    assert SerializationError("x").error_code == "SERIALIZATION_ERROR"


def test_setup_logging_uses_env_level(monkeypatch):
    calls = {}
    monkeypatch.setattr(logging, "basicConfig", lambda **kwargs: calls.update(kwargs))
    setup_logging("debug")
    assert calls["level"] == logging.DEBUG
    setup_logging("nonsense")
    assert calls["level"] == logging.WARNING
