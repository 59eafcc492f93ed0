# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""High-level dispatch facade: protocol detection, transport resolution, mock routing."""

from __future__ import annotations

import logging
from concurrent.futures import Future, ThreadPoolExecutor
from contextlib import suppress
from typing import Any

from .clients.base import ApiCallback, ApiClient
from .clients.rest import RestApiClient
from .clients.soap import SoapApiClient
from .config import DEFAULT_ASYNC_WORKERS, ApiSettings, load_api_settings
from .errors import SerializationError, TransportError
from .http.client import Transport
from .mock.service import MockApiService
from .models.request import ApiRequest, RequestBuilder
from .models.response import ApiResponse
from .protocol import Protocol, detect_protocol
from .routing.registry import ProfileRegistry

logger = logging.getLogger(__name__)

_CLIENTS: dict[Protocol, type[ApiClient]] = {
    Protocol.REST: RestApiClient,
    Protocol.SOAP: SoapApiClient,
}


class ApiService:
    """
    Single entry point for REST and SOAP calls.

    Synchronous ``execute_*`` methods never raise for transport, HTTP or body
    conversion failures; callers check ``response.success`` instead. Passing
    ``transport`` skips URL resolution. With mocking enabled every path is
    answered by the MockApiService and no network traffic happens.
    """

    def __init__(
        self,
        settings: ApiSettings | None = None,
        *,
        registry: ProfileRegistry | None = None,
        mock_service: MockApiService | None = None,
        executor: ThreadPoolExecutor | None = None,
        mocking: bool | None = None,
    ):
        self.settings = settings or load_api_settings()
        self.registry = registry or ProfileRegistry(self.settings)
        self.mocking = self.settings.enable_mocking if mocking is None else mocking
        if self.mocking and mock_service is None:
            mock_service = MockApiService()
        self.mock_service = mock_service
        self._executor = executor
        self._owns_executor = executor is None
        self.async_workers = self.settings.async_workers if self.settings.async_workers > 0 else DEFAULT_ASYNC_WORKERS

    @property
    def executor(self) -> ThreadPoolExecutor:
        if self._executor is None:
            self._executor = ThreadPoolExecutor(max_workers=self.async_workers, thread_name_prefix="apibridge")
        return self._executor

    def execute_rest(self, request: ApiRequest, response_type: Any = str, transport: Transport | None = None) -> ApiResponse[Any]:
        return self._execute(request, response_type, Protocol.REST, transport)

    def execute_soap(self, request: ApiRequest, response_type: Any = str, transport: Transport | None = None) -> ApiResponse[Any]:
        return self._execute(request, response_type, Protocol.SOAP, transport)

    def execute_auto(self, request: ApiRequest, response_type: Any = str, transport: Transport | None = None) -> ApiResponse[Any]:
        return self._execute(request, response_type, detect_protocol(request), transport)

    def execute_async(
        self,
        request: ApiRequest,
        response_type: Any,
        callback: ApiCallback[Any],
        transport: Transport | None = None,
        *,
        protocol: Protocol | None = None,
    ) -> Future[ApiResponse[Any] | None]:
        """
        Run the call on the shared worker pool and report through ``callback``.

        Exactly one of ``on_success``, ``on_error`` or ``on_exception`` runs on
        a pool thread. The returned future resolves to the response, or None
        when ``on_exception`` was used.
        """
        chosen = protocol or detect_protocol(request)
        return self.executor.submit(self._run_async, request, response_type, callback, chosen, transport)

    def execute_rest_async(
        self, request: ApiRequest, response_type: Any, callback: ApiCallback[Any], transport: Transport | None = None
    ) -> Future[ApiResponse[Any] | None]:
        return self.execute_async(request, response_type, callback, transport, protocol=Protocol.REST)

    def execute_soap_async(
        self, request: ApiRequest, response_type: Any, callback: ApiCallback[Any], transport: Transport | None = None
    ) -> Future[ApiResponse[Any] | None]:
        return self.execute_async(request, response_type, callback, transport, protocol=Protocol.SOAP)

    def client_for(self, protocol: Protocol, url: str, transport: Transport | None = None) -> ApiClient:
        """Build the protocol backend for ``url``, logging as the resolved profile dictates."""
        if transport is None:
            source, transport = self.registry.resolve(url)
            logger.debug("Resolved %s to %s", url, source)
        enable_logging = bool(self.registry.profile_for(transport).enable_logging)
        return _CLIENTS[protocol](transport, enable_logging=enable_logging)

    def rest_request(self) -> RequestBuilder:
        return ApiRequest.builder().method("GET")

    def soap_request(self) -> RequestBuilder:
        return ApiRequest.builder().method("POST")

    def configuration_summary(self) -> dict[str, Any]:
        summary: dict[str, Any] = {
            "mocking": self.mocking,
            "default_profile": self.registry.settings.default_profile().name,
            **self.registry.summary(),
        }
        if self.mock_service is not None:
            summary["mocks"] = self.mock_service.mock_summary()
        return summary

    def is_healthy(self) -> bool:
        if self.mocking:
            return self.mock_service is not None
        try:
            return self.registry.default_transport is not None
        except Exception as exc:  # noqa: BLE001
            logger.error("Health check failed: %s", exc)
            return False

    def close(self) -> None:
        if self._executor is not None and self._owns_executor:
            self._executor.shutdown(wait=True)
            self._executor = None
        with suppress(Exception):
            self.registry.close()

    def __enter__(self) -> ApiService:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:  # noqa: ANN001
        self.close()

    def _execute(self, request: ApiRequest, response_type: Any, protocol: Protocol, transport: Transport | None) -> ApiResponse[Any]:
        if self.mocking and self.mock_service is not None:
            return self.mock_service.execute_mock(request, response_type)
        return self.client_for(protocol, request.url, transport).execute(request, response_type)

    def _run_async(
        self,
        request: ApiRequest,
        response_type: Any,
        callback: ApiCallback[Any],
        protocol: Protocol,
        transport: Transport | None,
    ) -> ApiResponse[Any] | None:
        try:
            if self.mocking and self.mock_service is not None:
                response = self.mock_service.execute_mock(request, response_type)
            else:
                response = self.client_for(protocol, request.url, transport).run(request, response_type)
        except (TransportError, SerializationError) as exc:
            logger.error("Async %s call to %s failed: %s", protocol.value, request.url, exc)
            callback.on_exception(exc)
            return None
        except Exception as exc:  # noqa: BLE001
            logger.error("Unexpected error in async %s call to %s: %s", protocol.value, request.url, exc)
            callback.on_exception(exc)
            return None

        if response.has_error():
            callback.on_error(response)
        else:
            callback.on_success(response)
        return response


__all__ = ["ApiService", "DEFAULT_ASYNC_WORKERS"]
