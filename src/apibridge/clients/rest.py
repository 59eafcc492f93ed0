# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""REST execution backend."""

from __future__ import annotations

from typing import Any

from ..http.headers import has_header
from ..http.models import HttpRequest, HttpResponse
from ..models.request import ApiRequest
from ..protocol import Protocol
from ..serialization import marshal
from .base import ApiClient

JSON_CONTENT_TYPE = "application/json"


class RestApiClient(ApiClient):
    """Sends JSON bodies; ``ApiRequest.parameters`` become query parameters."""

    protocol = Protocol.REST
    body_format = "json"

    def build_http_request(self, request: ApiRequest) -> HttpRequest:
        headers = dict(request.headers)
        if not has_header(headers, "Content-Type"):
            headers["Content-Type"] = JSON_CONTENT_TYPE
        body = marshal(request.body, "json") if request.body is not None else None
        return HttpRequest(
            url=request.url,
            method=request.method,
            headers=headers,
            body=body,
            params=dict(request.parameters) or None,
        )

    def read_body(self, raw: HttpResponse, response_type: Any) -> Any:
        return self.decode(raw.content, response_type)


__all__ = ["JSON_CONTENT_TYPE", "RestApiClient"]
