# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Error taxonomy and exception helpers.

Only ConfigurationError is meant to reach callers. Transport and serialization
failures are raised inside the execution backends and turned into ApiResponse
fields (sync) or routed to ``ApiCallback.on_exception`` (async).
"""

from __future__ import annotations

import socket
import ssl as ssl_module
from enum import Enum

import httpx

TRANSPORT_ERROR = "TRANSPORT_ERROR"
HTTP_ERROR = "HTTP_ERROR"
SERIALIZATION_ERROR = "SERIALIZATION_ERROR"
UNEXPECTED_ERROR = "UNEXPECTED_ERROR"
MOCK_NOT_FOUND = "MOCK_NOT_FOUND"
MOCK_CONVERSION_ERROR = "MOCK_CONVERSION_ERROR"


class ErrorCategory(str, Enum):
    TIMEOUT = "TIMEOUT"
    SSL_ERROR = "SSL_ERROR"
    CONNECTION_ERROR = "CONNECTION_ERROR"
    DNS_ERROR = "DNS_ERROR"
    UNKNOWN_ERROR = "UNKNOWN_ERROR"
    NONE = "NONE"


class ApiError(Exception):
    """Base class for apibridge errors."""

    error_code: str = UNEXPECTED_ERROR


class ConfigurationError(ApiError):
    """An invalid TransportProfile or registration; raised at setup time."""

    error_code = "CONFIGURATION_ERROR"


class TransportError(ApiError):
    """The request never produced an HTTP status (refused, DNS, timeout, TLS)."""

    error_code = TRANSPORT_ERROR

    def __init__(self, message: str, category: ErrorCategory = ErrorCategory.UNKNOWN_ERROR, error_type: str | None = None):
        super().__init__(message)
        self.category = category
        self.error_type = error_type


class SerializationError(ApiError):
    """Marshal/unmarshal failure on a request or response body."""

    error_code = SERIALIZATION_ERROR


def categorize_exception(exc: BaseException) -> ErrorCategory:
    """
    Map Python/httpx exceptions to ErrorCategory.
    """
    if isinstance(exc, httpx.TimeoutException):
        return ErrorCategory.TIMEOUT

    if isinstance(exc, (socket.gaierror, socket.herror)):
        return ErrorCategory.DNS_ERROR

    if isinstance(exc, (ssl_module.SSLError, ssl_module.CertificateError)):
        return ErrorCategory.SSL_ERROR

    if isinstance(exc, httpx.ConnectError):
        cause = exc.__cause__ or exc.__context__
        if isinstance(cause, (socket.gaierror, socket.herror)):
            return ErrorCategory.DNS_ERROR
        if isinstance(cause, ssl_module.SSLError):
            return ErrorCategory.SSL_ERROR
        return ErrorCategory.CONNECTION_ERROR

    if isinstance(exc, (httpx.RemoteProtocolError, httpx.NetworkError, httpx.ProxyError)):
        return ErrorCategory.CONNECTION_ERROR

    if isinstance(exc, (ConnectionError, ConnectionRefusedError, ConnectionResetError)):
        return ErrorCategory.CONNECTION_ERROR

    return ErrorCategory.UNKNOWN_ERROR


def error_category_to_reason(category: ErrorCategory | None) -> str:
    """User-facing reason string."""
    mapping = {
        ErrorCategory.TIMEOUT: "Network timeout",
        ErrorCategory.SSL_ERROR: "TLS/certificate issue",
        ErrorCategory.CONNECTION_ERROR: "Network connectivity issue",
        ErrorCategory.DNS_ERROR: "DNS resolution failure",
        ErrorCategory.UNKNOWN_ERROR: "Network error",
        ErrorCategory.NONE: "",
        None: "",
    }
    return mapping.get(category, "Request failed due to network error")


__all__ = [
    "ApiError",
    "ConfigurationError",
    "ErrorCategory",
    "HTTP_ERROR",
    "MOCK_CONVERSION_ERROR",
    "MOCK_NOT_FOUND",
    "SERIALIZATION_ERROR",
    "SerializationError",
    "TRANSPORT_ERROR",
    "TransportError",
    "UNEXPECTED_ERROR",
    "categorize_exception",
    "error_category_to_reason",
]
