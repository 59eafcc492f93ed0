# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""In-process Transport implementations."""

from __future__ import annotations

from .client import Transport
from .models import HttpRequest, HttpResponse


class StubTransport(Transport):
    """Deterministic, programmable Transport for tests and dry runs."""

    def __init__(self, responses: dict[str, HttpResponse] | None = None, name: str = "stub"):
        self._responses = responses or {}
        self.name = name
        self.requests: list[HttpRequest] = []
        self.closed = False

    def add(self, url: str, response: HttpResponse) -> None:
        self._responses[url] = response

    def request(self, request: HttpRequest) -> HttpResponse:
        self.requests.append(request)
        if request.url in self._responses:
            return self._responses[request.url]
        return HttpResponse(ok=False, status_code=None, url=request.url, error_message="No stubbed response configured")

    def close(self) -> None:
        self.closed = True
