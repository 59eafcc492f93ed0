# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Protocol-agnostic request model shared by REST, SOAP and mock execution."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

ALLOWED_METHODS = frozenset({"GET", "POST", "PUT", "DELETE", "PATCH"})


@dataclass
class ApiRequest:
    """
    Normalized API call description.

    A non-empty ``soap_action`` is the strongest SOAP signal the protocol
    detector looks at; REST callers leave it unset.
    """

    url: str
    method: str = "GET"
    headers: dict[str, str] = field(default_factory=dict)
    body: Any = None
    parameters: dict[str, Any] = field(default_factory=dict)
    soap_action: str | None = None

    def __post_init__(self) -> None:
        if not self.url or not str(self.url).strip():
            raise ValueError("ApiRequest.url must be a non-empty string")
        method = str(self.method or "GET").upper()
        if method not in ALLOWED_METHODS:
            raise ValueError(f"Unsupported HTTP method: {self.method!r}")
        self.method = method
        self.headers = dict(self.headers or {})
        self.parameters = dict(self.parameters or {})

    def add_header(self, name: str, value: str) -> ApiRequest:
        self.headers[name] = value
        return self

    def add_parameter(self, name: str, value: Any) -> ApiRequest:
        self.parameters[name] = value
        return self

    @staticmethod
    def builder() -> RequestBuilder:
        return RequestBuilder()


class RequestBuilder:
    """Fluent builder for ApiRequest; validation happens in ``build()``."""

    def __init__(self) -> None:
        self._url: str = ""
        self._method: str = "GET"
        self._headers: dict[str, str] = {}
        self._body: Any = None
        self._parameters: dict[str, Any] = {}
        self._soap_action: str | None = None

    def url(self, url: str) -> RequestBuilder:
        self._url = url
        return self

    def method(self, method: str) -> RequestBuilder:
        self._method = method
        return self

    def header(self, name: str, value: str) -> RequestBuilder:
        self._headers[name] = value
        return self

    def body(self, body: Any) -> RequestBuilder:
        self._body = body
        return self

    def parameter(self, name: str, value: Any) -> RequestBuilder:
        self._parameters[name] = value
        return self

    def soap_action(self, soap_action: str | None) -> RequestBuilder:
        self._soap_action = soap_action
        return self

    def build(self) -> ApiRequest:
        return ApiRequest(
            url=self._url,
            method=self._method,
            headers=dict(self._headers),
            body=self._body,
            parameters=dict(self._parameters),
            soap_action=self._soap_action,
        )


__all__ = ["ALLOWED_METHODS", "ApiRequest", "RequestBuilder"]
