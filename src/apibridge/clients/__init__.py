# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""REST and SOAP execution backends."""

from .base import ApiCallback, ApiClient
from .rest import RestApiClient
from .soap import SoapApiClient, build_envelope, extract_body

__all__ = [
    "ApiCallback",
    "ApiClient",
    "RestApiClient",
    "SoapApiClient",
    "build_envelope",
    "extract_body",
]
