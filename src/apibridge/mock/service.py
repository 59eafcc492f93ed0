# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Mock router: answers requests from custom handlers or canned pattern responses."""

from __future__ import annotations

import logging
import threading
from collections import Counter
from dataclasses import dataclass, field
from typing import Any

from ..errors import MOCK_CONVERSION_ERROR, MOCK_NOT_FOUND, SerializationError
from ..models.request import ApiRequest
from ..models.response import ApiResponse
from ..routing.patterns import PatternTable
from ..serialization import convert
from .registry import ApiMockRegistry, CustomApiMock

logger = logging.getLogger(__name__)


@dataclass
class MockResponse:
    """Canned response registered for a URL pattern."""

    status_code: int = 200
    body: Any = None
    headers: dict[str, str] = field(default_factory=dict)
    delay_ms: int = 0

    def add_header(self, name: str, value: str) -> MockResponse:
        self.headers[name] = value
        return self

    def with_delay(self, delay_ms: int) -> MockResponse:
        self.delay_ms = delay_ms
        return self


class MockApiService:
    """
    Test-mode replacement for the transport layer.

    ``execute_mock`` tries custom handlers first (each decides with its own
    ``matches_url``), then generic pattern responses, then answers 404 with
    ``MOCK_NOT_FOUND``. It never raises for an unknown URL.
    """

    def __init__(self, api_mock_registry: ApiMockRegistry | None = None):
        self.api_mock_registry = api_mock_registry if api_mock_registry is not None else ApiMockRegistry()
        self._responses: PatternTable[MockResponse] = PatternTable()
        self._counts: Counter[str] = Counter()
        self._lock = threading.RLock()

    def execute_mock(self, request: ApiRequest, response_type: Any = str) -> ApiResponse[Any]:
        url = request.url
        logger.debug("Executing mock API call for URL: %s", url)
        custom = self.api_mock_registry.find_by_url(url)
        if custom is not None:
            logger.debug("Using custom API mock: %s", custom.identifier)
            self._increment(url)
            return custom.execute(request, response_type)
        return self.execute_general_mock(request, response_type)

    def execute_general_mock(self, request: ApiRequest, response_type: Any = str) -> ApiResponse[Any]:
        url = request.url
        match = self._responses.lookup(url)
        if match is None:
            logger.debug("No mock response registered for URL: %s", url)
            return ApiResponse.error(MOCK_NOT_FOUND, "No mock response configured for this URL", status_code=404)

        pattern, mock = match
        logger.debug("Using mock pattern %s for URL: %s", pattern, url)
        self._increment(url)
        CustomApiMock.simulate_delay(mock.delay_ms)

        response: ApiResponse[Any] = ApiResponse(status_code=mock.status_code, headers=dict(mock.headers))
        try:
            response.body = convert(mock.body, response_type)
        except SerializationError as exc:
            logger.error("Failed to convert mock response body: %s", exc)
            response.mark_as_error(MOCK_CONVERSION_ERROR, "Failed to convert mock response")
        response.set_response_time(mock.delay_ms)
        return response

    def register_mock_response(self, pattern: str, response: MockResponse | int, body: Any = None) -> MockResponse:
        """Register a canned response; ``response`` may be a MockResponse or just a status code."""
        mock = response if isinstance(response, MockResponse) else MockResponse(status_code=int(response), body=body)
        self._responses.put(pattern, mock)
        logger.info("Registered general mock response for URL pattern: %s", pattern)
        return mock

    def register_api_mock(self, mock: CustomApiMock, identifier: str | None = None) -> None:
        self.api_mock_registry.register(identifier or mock.identifier, mock)

    def remove_api_mock(self, identifier: str) -> bool:
        return self.api_mock_registry.remove(identifier) is not None

    def get_api_mock(self, identifier: str) -> CustomApiMock | None:
        return self.api_mock_registry.get(identifier)

    def has_api_mock(self, identifier: str) -> bool:
        return self.api_mock_registry.has(identifier)

    def all_custom_api_mocks(self) -> dict[str, CustomApiMock]:
        return self.api_mock_registry.all()

    def reset_api_mock(self, identifier: str) -> bool:
        mock = self.api_mock_registry.get(identifier)
        if mock is None:
            return False
        mock.reset()
        logger.info("Reset custom API mock: %s", identifier)
        return True

    def reset_all_api_mocks(self) -> None:
        for mock in self.api_mock_registry.all().values():
            mock.reset()
        logger.info("Reset all custom API mocks")

    def clear(self) -> None:
        """Drop custom handlers, generic responses and invocation counts."""
        self._responses.clear()
        self.api_mock_registry.clear()
        with self._lock:
            self._counts.clear()
        logger.info("Cleared all mock responses")

    def clear_general_mock_responses(self) -> None:
        self._responses.clear()
        with self._lock:
            self._counts.clear()
        logger.info("Cleared general mock responses")

    def clear_custom_api_mocks(self) -> None:
        self.api_mock_registry.clear()

    def get_request_count(self, url: str) -> int:
        with self._lock:
            return self._counts.get(url, 0)

    def has_mock_response(self, url: str) -> bool:
        return self.has_custom_api_mock(url) or self.has_general_mock_response(url)

    def has_general_mock_response(self, url: str) -> bool:
        return self._responses.lookup(url) is not None

    def has_custom_api_mock(self, url: str) -> bool:
        return self.api_mock_registry.find_by_url(url) is not None

    def mock_summary(self) -> dict[str, Any]:
        custom = self.api_mock_registry.all()
        with self._lock:
            counts = dict(self._counts)
        return {
            "custom_api_mocks": sorted(custom),
            "general_mock_patterns": self._responses.patterns(),
            "request_counts": counts,
            "total_custom_mocks": len(custom),
            "total_general_mocks": len(self._responses),
        }

    def _increment(self, url: str) -> None:
        with self._lock:
            self._counts[url] += 1


__all__ = ["MockApiService", "MockResponse"]
