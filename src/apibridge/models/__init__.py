# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Dataclass exports for apibridge."""

from ..http.models import Headers, HttpRequest, HttpResponse, RetryConfig
from .profile import TransportProfile
from .request import ALLOWED_METHODS, ApiRequest, RequestBuilder
from .response import ApiResponse, is_success_status

__all__ = [
    "ALLOWED_METHODS",
    "ApiRequest",
    "ApiResponse",
    "Headers",
    "HttpRequest",
    "HttpResponse",
    "RequestBuilder",
    "RetryConfig",
    "TransportProfile",
    "is_success_status",
]
