# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""HTTP transport exports."""

from .adapters import StubTransport
from .client import Transport, create_default_transport, create_transport
from .headers import has_header, header_value, normalize_headers
from .httpx_client import HttpxTransport, build_httpx_client
from .models import Headers, HttpRequest, HttpResponse, RetryConfig
from .retry import retry_config_for, send_with_retries

__all__ = [
    "Headers",
    "HttpRequest",
    "HttpResponse",
    "HttpxTransport",
    "RetryConfig",
    "StubTransport",
    "Transport",
    "build_httpx_client",
    "create_default_transport",
    "create_transport",
    "has_header",
    "header_value",
    "normalize_headers",
    "retry_config_for",
    "send_with_retries",
]
