# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Custom mock handler contract and the registry that holds handlers."""

from __future__ import annotations

import logging
import threading
import time
from abc import ABC, abstractmethod
from typing import Any

from ..http.headers import header_value
from ..models.request import ApiRequest
from ..models.response import ApiResponse

logger = logging.getLogger(__name__)

SCENARIO_HEADER = "X-Mock-Scenario"


class CustomApiMock(ABC):
    """
    Stateful test double answering every request for one external API.

    Handlers decide for themselves which URLs they own and build the whole
    response, headers included. ``setup_scenarios`` runs once from
    ``__init__``; ``reset`` restores initial state without unregistering.
    """

    identifier: str = ""

    def __init__(self) -> None:
        self.setup_scenarios()

    @abstractmethod
    def matches_url(self, url: str) -> bool: ...

    @abstractmethod
    def execute(self, request: ApiRequest, response_type: Any = str) -> ApiResponse[Any]: ...

    def setup_scenarios(self) -> None:
        return None

    def reset(self) -> None:
        return None

    @staticmethod
    def scenario_hint(request: ApiRequest) -> str | None:
        return header_value(request.headers, SCENARIO_HEADER)

    @staticmethod
    def simulate_delay(delay_ms: int) -> None:
        if delay_ms > 0:
            time.sleep(delay_ms / 1000.0)


class ApiMockRegistry:
    """Identifier -> handler map; URL lookup scans handlers in registration order."""

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._mocks: dict[str, CustomApiMock] = {}

    def register(self, identifier: str, mock: CustomApiMock) -> None:
        with self._lock:
            self._mocks[identifier] = mock
        logger.info("Registered custom mock for API: %s", identifier)

    def get(self, identifier: str) -> CustomApiMock | None:
        with self._lock:
            return self._mocks.get(identifier)

    def has(self, identifier: str) -> bool:
        with self._lock:
            return identifier in self._mocks

    def remove(self, identifier: str) -> CustomApiMock | None:
        with self._lock:
            mock = self._mocks.pop(identifier, None)
        if mock is not None:
            logger.info("Removed custom mock for API: %s", identifier)
        return mock

    def clear(self) -> None:
        with self._lock:
            self._mocks.clear()
        logger.info("Cleared all custom API mocks")

    def all(self) -> dict[str, CustomApiMock]:
        with self._lock:
            return dict(self._mocks)

    def find_by_url(self, url: str) -> CustomApiMock | None:
        for identifier, mock in self.all().items():
            if mock.matches_url(url):
                logger.debug("Found custom mock for API: %s matching URL: %s", identifier, url)
                return mock
        return None

    def __len__(self) -> int:
        with self._lock:
            return len(self._mocks)


__all__ = ["ApiMockRegistry", "CustomApiMock", "SCENARIO_HEADER"]
