# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Mock execution path and bundled scenario simulators."""

from .payment import PaymentApiMock, PaymentScenario
from .registry import SCENARIO_HEADER, ApiMockRegistry, CustomApiMock
from .service import MockApiService, MockResponse
from .users import MockUser, UserServiceMock

__all__ = [
    "ApiMockRegistry",
    "CustomApiMock",
    "MockApiService",
    "MockResponse",
    "MockUser",
    "PaymentApiMock",
    "PaymentScenario",
    "SCENARIO_HEADER",
    "UserServiceMock",
]
