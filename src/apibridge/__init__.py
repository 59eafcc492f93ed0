# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""apibridge: REST/SOAP client abstraction with per-URL transport profiles and a mock execution path."""

from .clients import ApiCallback, RestApiClient, SoapApiClient
from .config import ApiSettings, load_api_settings
from .errors import ApiError, ConfigurationError, ErrorCategory, SerializationError, TransportError
from .mock import ApiMockRegistry, CustomApiMock, MockApiService, MockResponse, PaymentApiMock, UserServiceMock
from .models import ApiRequest, ApiResponse, TransportProfile
from .protocol import Protocol, detect_protocol
from .routing import ProfileRegistry, register_default_profiles
from .service import ApiService
from .version import __version__

__all__ = [
    "ApiCallback",
    "ApiError",
    "ApiMockRegistry",
    "ApiRequest",
    "ApiResponse",
    "ApiService",
    "ApiSettings",
    "ConfigurationError",
    "CustomApiMock",
    "ErrorCategory",
    "MockApiService",
    "MockResponse",
    "PaymentApiMock",
    "ProfileRegistry",
    "Protocol",
    "RestApiClient",
    "SerializationError",
    "SoapApiClient",
    "TransportError",
    "TransportProfile",
    "UserServiceMock",
    "__version__",
    "detect_protocol",
    "load_api_settings",
    "register_default_profiles",
]
