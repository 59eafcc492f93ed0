# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

import threading
import time

import pytest

from apibridge.config import ApiSettings
from apibridge.errors import MOCK_NOT_FOUND, SerializationError, TransportError
from apibridge.http import HttpRequest, HttpResponse, StubTransport
from apibridge.mock import MockApiService
from apibridge.models import ApiRequest, TransportProfile
from apibridge.routing import ProfileRegistry
from apibridge.service import ApiService


class RecordingCallback:
    def __init__(self):
        self.done = threading.Event()
        self.outcome = None
        self.value = None
        self.thread = None

    def _finish(self, outcome, value):
        self.outcome = outcome
        self.value = value
        self.thread = threading.current_thread()
        self.done.set()

    def on_success(self, response):
        self._finish("success", response)

    def on_error(self, response):
        self._finish("error", response)

    def on_exception(self, exception):
        self._finish("exception", exception)


class ProfileStub(StubTransport):
    def __init__(self, profile, responses=None):
        super().__init__(responses, name=profile.name)
        self.profile = profile


def _ok(text, status=200):
    return HttpResponse(ok=True, status_code=status, reason="OK", text=text, content=text.encode())


@pytest.fixture
def service():
    stubs = {}

    def factory(profile, settings):  # noqa: ARG001
        stub = ProfileStub(profile)
        stubs[profile.name] = stub
        return stub

    settings = ApiSettings(enable_mocking=False, max_retry_attempts=0)
    registry = ProfileRegistry(settings, transport_factory=factory)
    svc = ApiService(settings, registry=registry)
    svc.stubs = stubs
    yield svc
    svc.close()


def test_execute_rest_uses_resolved_profile_transport(service):
    transport = service.registry.register_profile("https://api.example.com/*", TransportProfile(name="api"))
    transport.add("https://api.example.com/items", _ok('{"count": 2}'))
    response = service.execute_rest(ApiRequest(url="https://api.example.com/items"), dict)
    assert response.success is True
    assert response.body == {"count": 2}
    assert transport.requests[0].headers["Content-Type"] == "application/json"


def test_explicit_transport_bypasses_resolution(service):
    registered = service.registry.register_profile("https://api.example.com/*", TransportProfile(name="api"))
    override = StubTransport({"https://api.example.com/x": _ok("override")})
    response = service.execute_rest(ApiRequest(url="https://api.example.com/x"), transport=override)
    assert response.body == "override"
    assert registered.requests == []


def test_unmatched_url_falls_back_to_default_transport(service):
    default = service.registry.default_transport
    default.add("https://elsewhere.org/", _ok("fallback"))
    assert service.execute_rest(ApiRequest(url="https://elsewhere.org/")).body == "fallback"


def test_execute_auto_routes_by_detected_protocol(service):
    transport = StubTransport(
        {
            "https://ws.example.com": _ok("<soap:Envelope xmlns:soap='http://schemas.xmlsoap.org/soap/envelope/'/>"),
            "https://api.example.com": _ok("{}"),
        }
    )
    service.execute_auto(ApiRequest(url="https://ws.example.com", soap_action="Ping"), transport=transport)
    service.execute_auto(ApiRequest(url="https://api.example.com"), transport=transport)
    soap_sent, rest_sent = transport.requests
    assert soap_sent.method == "POST"
    assert soap_sent.headers["SOAPAction"] == "Ping"
    assert rest_sent.headers["Content-Type"] == "application/json"


def test_execute_soap_forces_soap(service):
    transport = StubTransport({"https://ws.example.com": _ok("<ok/>")})
    response = service.execute_soap(ApiRequest(url="https://ws.example.com", body="<Ping/>"), transport=transport)
    assert response.success is True
    assert "<soap:Body><Ping/></soap:Body>" in transport.requests[0].body.decode()


def test_sync_transport_failure_never_raises(service):
    response = service.execute_rest(ApiRequest(url="https://unreachable.example.com"), transport=StubTransport())
    assert response.success is False
    assert response.error_code == "TRANSPORT_ERROR"


def test_async_success_runs_on_pool_thread(service):
    transport = StubTransport({"https://api.example.com": _ok('{"ok": true}')})
    callback = RecordingCallback()
    future = service.execute_async(ApiRequest(url="https://api.example.com"), dict, callback, transport)
    response = future.result(timeout=5)
    assert callback.done.wait(5)
    assert callback.outcome == "success"
    assert callback.value is response
    assert response.body == {"ok": True}
    assert callback.thread is not threading.current_thread()


def test_async_http_error_goes_to_on_error(service):
    transport = StubTransport({"https://api.example.com": _ok("missing", status=404)})
    callback = RecordingCallback()
    service.execute_async(ApiRequest(url="https://api.example.com"), str, callback, transport).result(timeout=5)
    assert callback.outcome == "error"
    assert callback.value.status_code == 404


def test_async_transport_failure_goes_to_on_exception(service):
    callback = RecordingCallback()
    future = service.execute_rest_async(ApiRequest(url="https://down.example.com"), str, callback, StubTransport())
    assert future.result(timeout=5) is None
    assert callback.outcome == "exception"
    assert isinstance(callback.value, TransportError)


def test_async_serialization_failure_goes_to_on_exception(service):
    transport = StubTransport({"https://api.example.com": _ok("not json")})
    callback = RecordingCallback()
    service.execute_async(ApiRequest(url="https://api.example.com"), dict, callback, transport).result(timeout=5)
    assert callback.outcome == "exception"
    assert isinstance(callback.value, SerializationError)


def test_async_unexpected_error_goes_to_on_exception(service):
    class Exploding(StubTransport):
        def request(self, request: HttpRequest) -> HttpResponse:
            raise RuntimeError("kaboom")

    callback = RecordingCallback()
    service.execute_soap_async(ApiRequest(url="https://ws.example.com"), str, callback, Exploding()).result(timeout=5)
    assert callback.outcome == "exception"
    assert "kaboom" in str(callback.value)


def test_mocking_routes_every_path_to_mock_service(monkeypatch):
    monkeypatch.setattr(time, "sleep", lambda _: None)
    mocks = MockApiService()
    mocks.register_mock_response("https://api.example.com/users/*", 200, {"id": "any", "name": "Mock User"})
    with ApiService(ApiSettings(), mock_service=mocks, mocking=True) as svc:
        request = ApiRequest(url="https://api.example.com/users/456")
        assert "Mock User" in svc.execute_rest(request).body
        assert svc.execute_soap(request, dict).body == {"id": "any", "name": "Mock User"}
        missing = svc.execute_auto(ApiRequest(url="https://api.example.com/other"))
        assert missing.status_code == 404
        assert missing.error_code == MOCK_NOT_FOUND

        callback = RecordingCallback()
        svc.execute_async(request, dict, callback).result(timeout=5)
        assert callback.outcome == "success"
    assert mocks.get_request_count("https://api.example.com/users/456") == 3


def test_mocking_enabled_from_settings_creates_mock_service():
    with ApiService(ApiSettings(enable_mocking=True)) as svc:
        assert svc.mocking is True
        assert isinstance(svc.mock_service, MockApiService)
        assert svc.is_healthy() is True
        assert svc.execute_rest(ApiRequest(url="https://nothing.example.com")).error_code == MOCK_NOT_FOUND


def test_request_builders():
    with ApiService(ApiSettings()) as svc:
        assert svc.rest_request().url("https://x.com").build().method == "GET"
        assert svc.soap_request().url("https://x.com").build().method == "POST"


def test_configuration_summary(service):
    service.registry.register_profile("https://api.example.com/*", TransportProfile(name="api"))
    summary = service.configuration_summary()
    assert summary["mocking"] is False
    assert summary["default_profile"] == "default"
    assert summary["profile_mappings"] == {"https://api.example.com/*": "api"}
    assert "mocks" not in summary
    assert service.is_healthy() is True


def test_async_pool_size_follows_settings():
    with ApiService(ApiSettings(async_workers=500), mocking=False) as api:
        assert api.executor._max_workers == 500
    with ApiService(ApiSettings(async_workers=0), mocking=False) as api:
        assert api.async_workers == ApiSettings.async_workers


def test_many_slow_async_calls_do_not_queue():
    started = threading.Barrier(40, timeout=5)

    class Gate:
        def request(self, request):
            started.wait()
            return _ok("done")

        def close(self):
            pass

    with ApiService(ApiSettings(max_retry_attempts=0), mocking=False) as api:
        callbacks = [RecordingCallback() for _ in range(40)]
        futures = [api.execute_async(ApiRequest(url="https://slow.example.com"), str, cb, Gate()) for cb in callbacks]
        for future in futures:
            future.result(timeout=10)
    assert all(cb.outcome == "success" for cb in callbacks)
