# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Protocol-agnostic response model."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Generic, TypeVar

T = TypeVar("T")


def is_success_status(status_code: int | None) -> bool:
    return status_code is not None and 200 <= status_code < 300


@dataclass
class ApiResponse(Generic[T]):
    """
    Result of a REST, SOAP or mock call.

    ``success`` is derived from ``status_code`` and is read-only. Once
    ``mark_as_error`` has been called the response stays failed, even if the
    status code is set to a 2xx value afterwards.
    """

    status_code: int = 0
    status_message: str | None = None
    headers: dict[str, str] = field(default_factory=dict)
    body: T | None = None
    error_code: str | None = None
    error_message: str | None = None
    response_time_ms: int = 0
    raw_response: str | None = None
    _failed: bool = field(default=False, init=False, repr=False)

    @property
    def success(self) -> bool:
        return not self._failed and self.error_message is None and is_success_status(self.status_code)

    def has_error(self) -> bool:
        return not self.success or self.error_message is not None

    def mark_as_error(self, error_code: str | None, error_message: str) -> ApiResponse[T]:
        self._failed = True
        self.error_code = error_code
        self.error_message = error_message
        return self

    def set_response_time(self, elapsed_ms: float) -> None:
        self.response_time_ms = max(0, int(elapsed_ms))

    @classmethod
    def error(cls, error_code: str, error_message: str, *, status_code: int = 0) -> ApiResponse[Any]:
        response: ApiResponse[Any] = cls(status_code=status_code)
        return response.mark_as_error(error_code, error_message)

    def to_dict(self) -> dict[str, Any]:
        return {
            "status_code": self.status_code,
            "status_message": self.status_message,
            "success": self.success,
            "headers": dict(self.headers),
            "body": self.body,
            "error_code": self.error_code,
            "error_message": self.error_message,
            "response_time_ms": self.response_time_ms,
        }


__all__ = ["ApiResponse", "is_success_status"]
