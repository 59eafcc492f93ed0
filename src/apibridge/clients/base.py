# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Shared plumbing for the REST and SOAP execution backends."""

from __future__ import annotations

import logging
import time
from abc import ABC, abstractmethod
from typing import Any, Protocol as TypingProtocol, TypeVar

from ..errors import (
    HTTP_ERROR,
    SERIALIZATION_ERROR,
    TRANSPORT_ERROR,
    ErrorCategory,
    SerializationError,
    TransportError,
)
from ..http.client import Transport
from ..http.models import HttpRequest, HttpResponse
from ..http.retry import send_with_retries
from ..models.request import ApiRequest
from ..models.response import ApiResponse, is_success_status
from ..protocol import Protocol
from ..serialization import Format, unmarshal

logger = logging.getLogger(__name__)

T = TypeVar("T")
T_contra = TypeVar("T_contra", contravariant=True)

LOG_BODY_LIMIT = 2048


class ApiCallback(TypingProtocol[T_contra]):
    """Completion hooks for asynchronous execution; exactly one is called per request."""

    def on_success(self, response: ApiResponse[T_contra]) -> None: ...

    def on_error(self, response: ApiResponse[T_contra]) -> None: ...

    def on_exception(self, exception: BaseException) -> None: ...


def _preview(body: bytes | str | None) -> str:
    if body is None:
        return ""
    text = body.decode("utf-8", errors="replace") if isinstance(body, bytes) else body
    return text if len(text) <= LOG_BODY_LIMIT else text[:LOG_BODY_LIMIT] + "...[truncated]"


class ApiClient(ABC):
    """
    Executes ApiRequests of one protocol over a single transport.

    ``run`` raises TransportError/SerializationError; ``execute`` turns those
    into error responses so synchronous callers never see an exception.
    """

    protocol: Protocol
    body_format: Format = "json"

    def __init__(self, transport: Transport, *, enable_logging: bool = False):
        self.transport = transport
        self.enable_logging = enable_logging

    @abstractmethod
    def build_http_request(self, request: ApiRequest) -> HttpRequest: ...

    @abstractmethod
    def read_body(self, raw: HttpResponse, response_type: Any) -> Any: ...

    def supports_protocol(self, protocol: str | Protocol) -> bool:
        return str(getattr(protocol, "value", protocol)).upper() == self.protocol.value

    def run(self, request: ApiRequest, response_type: Any = str) -> ApiResponse[Any]:
        started = time.monotonic()
        http_request = self.build_http_request(request)
        raw = self.send(http_request)
        response = self.to_response(raw, response_type)
        response.set_response_time((time.monotonic() - started) * 1000)
        return response

    def execute(self, request: ApiRequest, response_type: Any = str) -> ApiResponse[Any]:
        started = time.monotonic()
        try:
            return self.run(request, response_type)
        except TransportError as exc:
            logger.error("%s call to %s failed: %s", self.protocol.value, request.url, exc)
            response: ApiResponse[Any] = ApiResponse.error(TRANSPORT_ERROR, str(exc))
        except SerializationError as exc:
            logger.error("%s body conversion for %s failed: %s", self.protocol.value, request.url, exc)
            response = ApiResponse.error(SERIALIZATION_ERROR, str(exc))
        response.set_response_time((time.monotonic() - started) * 1000)
        return response

    def send(self, http_request: HttpRequest) -> HttpResponse:
        if self.enable_logging:
            self._log_request(http_request)
        started = time.monotonic()
        raw = send_with_retries(self.transport, http_request)
        elapsed_ms = (time.monotonic() - started) * 1000
        if not raw.ok or raw.status_code is None:
            category = raw.meta.get("error_category", ErrorCategory.UNKNOWN_ERROR)
            if self.enable_logging:
                logger.error("Request failed: %s %s, Error: %s", http_request.method, http_request.url, raw.error_message)
            raise TransportError(raw.error_message or "Transport failure", category=category, error_type=raw.error_type)
        if self.enable_logging:
            self._log_response(raw, elapsed_ms)
        return raw

    def to_response(self, raw: HttpResponse, response_type: Any) -> ApiResponse[Any]:
        response: ApiResponse[Any] = ApiResponse(
            status_code=raw.status_code or 0,
            status_message=raw.reason,
            headers=dict(raw.headers),
            raw_response=raw.text or None,
        )
        if is_success_status(raw.status_code):
            response.body = self.read_body(raw, response_type)
            return response
        if response_type is str:
            response.body = raw.text
        response.mark_as_error(HTTP_ERROR, f"HTTP {raw.status_code} {raw.reason or ''}".strip())
        return response

    def decode(self, payload: bytes | str | None, response_type: Any) -> Any:
        return unmarshal(payload, response_type, self.body_format)

    def _log_request(self, request: HttpRequest) -> None:
        if logger.isEnabledFor(logging.DEBUG):
            logger.debug("HTTP REQUEST %s %s headers=%s body=%s", request.method, request.url, request.headers, _preview(request.body))
        else:
            logger.info("HTTP %s %s", request.method, request.url)

    def _log_response(self, response: HttpResponse, elapsed_ms: float) -> None:
        if logger.isEnabledFor(logging.DEBUG):
            logger.debug(
                "HTTP RESPONSE %s %s headers=%s duration=%dms body=%s",
                response.status_code,
                response.reason or "",
                response.headers,
                elapsed_ms,
                _preview(response.text),
            )
        else:
            logger.info("HTTP Response: %s in %dms", response.status_code, elapsed_ms)


__all__ = ["ApiCallback", "ApiClient"]
