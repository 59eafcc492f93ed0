# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""In-memory user service simulator with CRUD and auth endpoints."""

from __future__ import annotations

import json
import logging
import re
import threading
import time
import uuid
from dataclasses import dataclass, replace
from typing import Any

from ..errors import SerializationError
from ..models.request import ApiRequest
from ..models.response import ApiResponse
from ..serialization import convert
from .registry import CustomApiMock

logger = logging.getLogger(__name__)

USER_SERVICE_BASE_URL = "https://user-service.example.com"
SERVICE_HEADER_VALUE = "Mock-Service-v1.0"
USER_PATH = re.compile(r"/users/(\d+)")
SIMULATED_RESPONSE_TIME_MS = 100


@dataclass(frozen=True)
class MockUser:
    id: str
    email: str
    first_name: str
    last_name: str = ""
    status: str = "active"

    def to_dict(self) -> dict[str, str]:
        return {
            "id": self.id,
            "email": self.email,
            "firstName": self.first_name,
            "lastName": self.last_name,
            "status": self.status,
        }


@dataclass(frozen=True)
class UserScenario:
    name: str
    status_code: int
    message: str


SEED_USERS = (
    MockUser("1", "john.doe@example.com", "John", "Doe", "active"),
    MockUser("2", "jane.smith@example.com", "Jane", "Smith", "active"),
    MockUser("3", "bob.wilson@example.com", "Bob", "Wilson", "inactive"),
    MockUser("999", "test.user@example.com", "Test", "User", "suspended"),
)


class _Outcome:
    """Status, body and optional error collected while routing one request."""

    def __init__(self, status_code: int = 200, body: Any = None):
        self.status_code = status_code
        self.body = body
        self.error_code: str | None = None
        self.error_message: str | None = None

    def fail(self, status_code: int, error_code: str, message: str, body_message: str | None = None) -> _Outcome:
        self.status_code = status_code
        self.error_code = error_code
        self.error_message = message
        self.body = _error_body(status_code, body_message or message)
        return self


def _error_body(status_code: int, message: str) -> dict[str, Any]:
    return {"error": True, "statusCode": status_code, "message": message, "timestamp": int(time.time() * 1000)}


def _parse_user_payload(body: Any) -> dict[str, Any]:
    if isinstance(body, dict):
        return body
    if isinstance(body, bytes):
        body = body.decode("utf-8")
    if isinstance(body, str):
        parsed = json.loads(body)
        if isinstance(parsed, dict):
            return parsed
    raise ValueError("Invalid request body format")


class UserServiceMock(CustomApiMock):
    """
    Answers everything under ``https://user-service.example.com``.

    ``/users`` supports list, get, create, update and delete against an
    in-memory table seeded with users 1, 2, 3 and 999; ``reset`` restores the
    seed data. ``/auth/login`` and ``/auth/logout`` accept POST. An
    ``X-Mock-Scenario`` header naming an error scenario short-circuits the
    ``/users`` routes with ``USER_SERVICE_ERROR``.
    """

    identifier = "user-service"

    def __init__(self) -> None:
        self.scenarios: dict[str, UserScenario] = {}
        self._lock = threading.RLock()
        self._users: dict[str, MockUser] = {}
        self._next_id = 1
        super().__init__()
        self._seed()

    def matches_url(self, url: str) -> bool:
        return USER_SERVICE_BASE_URL in url

    def setup_scenarios(self) -> None:
        for scenario in (
            UserScenario("success", 200, "Operation successful"),
            UserScenario("user_not_found", 404, "User not found"),
            UserScenario("validation_error", 400, "Validation failed"),
            UserScenario("unauthorized", 401, "Unauthorized access"),
            UserScenario("forbidden", 403, "Access forbidden"),
            UserScenario("server_error", 500, "Internal server error"),
        ):
            self.scenarios[scenario.name] = scenario
        logger.info("User Service mock scenarios ready: %s", ", ".join(self.scenarios))

    def reset(self) -> None:
        self._seed()
        logger.info("User Service mock data reset")

    def users(self) -> dict[str, MockUser]:
        with self._lock:
            return dict(self._users)

    def execute(self, request: ApiRequest, response_type: Any = str) -> ApiResponse[Any]:
        endpoint = request.url.replace(USER_SERVICE_BASE_URL, "", 1).split("?", 1)[0]
        method = request.method.upper()
        logger.debug("User Service mock executing: %s %s", method, endpoint)

        response: ApiResponse[Any] = ApiResponse()
        if endpoint.startswith("/users"):
            outcome = self._handle_users(request, endpoint, method)
        elif endpoint.startswith("/auth"):
            outcome = self._handle_auth(endpoint, method)
        else:
            response.status_code = 404
            return response.mark_as_error("ENDPOINT_NOT_FOUND", f"Endpoint not found: {endpoint}")

        response.status_code = outcome.status_code
        if outcome.error_code is not None:
            response.mark_as_error(outcome.error_code, outcome.error_message or "User service error")
        try:
            response.body = convert(outcome.body, response_type)
        except SerializationError as exc:
            logger.error("User Service mock error: %s", exc)
            response.status_code = 500
            response.mark_as_error("USER_MOCK_ERROR", f"Mock execution failed: {exc}")

        response.headers["X-User-Service"] = SERVICE_HEADER_VALUE
        response.headers["X-Request-Id"] = str(uuid.uuid4())
        response.set_response_time(SIMULATED_RESPONSE_TIME_MS)
        return response

    def _seed(self) -> None:
        with self._lock:
            self._users = {user.id: user for user in SEED_USERS}
            self._next_id = max(int(user_id) for user_id in self._users) + 1

    def _handle_users(self, request: ApiRequest, endpoint: str, method: str) -> _Outcome:
        hint = self.scenario_hint(request)
        if hint and hint in self.scenarios:
            scenario = self.scenarios[hint]
            if scenario.status_code >= 400:
                return _Outcome().fail(scenario.status_code, "USER_SERVICE_ERROR", scenario.message)

        if method == "GET":
            return self._get_users(endpoint)
        if method == "POST":
            return self._create_user(request)
        if method == "PUT":
            return self._update_user(request, endpoint)
        if method == "DELETE":
            return self._delete_user(endpoint)
        return _Outcome().fail(405, "METHOD_NOT_ALLOWED", f"Method not allowed: {method}", "Method not allowed")

    def _get_users(self, endpoint: str) -> _Outcome:
        if endpoint == "/users":
            users = self.users()
            return _Outcome(
                200,
                {"users": [user.to_dict() for user in users.values()], "total": len(users), "page": 1, "limit": 10},
            )
        match = USER_PATH.fullmatch(endpoint)
        if match is None:
            return _Outcome().fail(400, "INVALID_ENDPOINT", "Invalid users endpoint", "Invalid endpoint")
        user = self.users().get(match.group(1))
        if user is None:
            return _Outcome().fail(404, "USER_NOT_FOUND", f"User not found: {match.group(1)}", "User not found")
        return _Outcome(200, user.to_dict())

    def _create_user(self, request: ApiRequest) -> _Outcome:
        try:
            data = _parse_user_payload(request.body)
        except ValueError:
            return _Outcome().fail(400, "INVALID_REQUEST", "Invalid request body")
        if "email" not in data or "firstName" not in data:
            return _Outcome().fail(
                400, "VALIDATION_ERROR", "Missing required fields", "Missing required fields: email, firstName"
            )
        with self._lock:
            user_id = str(self._next_id)
            self._next_id += 1
            user = MockUser(user_id, str(data["email"]), str(data["firstName"]), str(data.get("lastName", "")))
            self._users[user_id] = user
        return _Outcome(201, {"user": user.to_dict(), "message": "User created successfully"})

    def _update_user(self, request: ApiRequest, endpoint: str) -> _Outcome:
        match = USER_PATH.fullmatch(endpoint)
        if match is None:
            return _Outcome().fail(400, "INVALID_ENDPOINT", "Invalid update endpoint")
        user_id = match.group(1)
        if user_id not in self.users():
            return _Outcome().fail(404, "USER_NOT_FOUND", "User not found")
        try:
            data = _parse_user_payload(request.body)
        except ValueError:
            return _Outcome().fail(400, "INVALID_REQUEST", "Invalid request body")
        with self._lock:
            existing = self._users.get(user_id)
            if existing is None:
                return _Outcome().fail(404, "USER_NOT_FOUND", "User not found")
            updated = replace(
                existing,
                email=str(data.get("email", existing.email)),
                first_name=str(data.get("firstName", existing.first_name)),
                last_name=str(data.get("lastName", existing.last_name)),
                status=str(data.get("status", existing.status)),
            )
            self._users[user_id] = updated
        return _Outcome(200, {"user": updated.to_dict(), "message": "User updated successfully"})

    def _delete_user(self, endpoint: str) -> _Outcome:
        match = USER_PATH.fullmatch(endpoint)
        if match is None:
            return _Outcome().fail(400, "INVALID_ENDPOINT", "Invalid delete endpoint")
        user_id = match.group(1)
        with self._lock:
            removed = self._users.pop(user_id, None)
        if removed is None:
            return _Outcome().fail(404, "USER_NOT_FOUND", "User not found")
        return _Outcome(200, {"message": "User deleted successfully", "userId": user_id})

    def _handle_auth(self, endpoint: str, method: str) -> _Outcome:
        now = int(time.time() * 1000)
        if endpoint == "/auth/login" and method == "POST":
            return _Outcome(
                200,
                {"token": f"mock_jwt_token_{now}", "expiresIn": 3600, "refreshToken": f"mock_refresh_token_{now}"},
            )
        if endpoint == "/auth/logout" and method == "POST":
            return _Outcome(200, {"message": "Logout successful"})
        return _Outcome().fail(404, "ENDPOINT_NOT_FOUND", "Auth endpoint not found")


__all__ = ["MockUser", "UserScenario", "UserServiceMock", "SEED_USERS"]
