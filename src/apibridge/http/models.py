# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Wire-level request/response models exchanged with Transport implementations."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from ..models.profile import TransportProfile

Headers = dict[str, str]


@dataclass
class HttpRequest:
    """Normalized request representation consumed by Transport implementations."""

    url: str
    method: str = "GET"
    headers: Headers | None = None
    body: bytes | str | None = None
    params: dict[str, Any] | None = None


@dataclass
class HttpResponse:
    """
    Raw transport result.

    ``ok`` is False only for transport-level failures; those never carry a
    ``status_code``. HTTP error statuses come back with ``ok=True``.
    """

    ok: bool
    status_code: int | None = None
    reason: str | None = None
    headers: Headers = field(default_factory=dict)
    text: str = ""
    content: bytes = b""
    url: str | None = None
    error_message: str | None = None
    error_type: str | None = None
    meta: dict[str, Any] = field(default_factory=dict)


@dataclass
class RetryConfig:
    """Retry policy for transport failures derived from a TransportProfile."""

    max_attempts: int = 1
    backoff_factor: float = 2.0
    initial_delay: float = 1.0

    @classmethod
    def from_profile(cls, profile: TransportProfile, backoff_factor: float = 2.0) -> RetryConfig:
        """Build a retry config from a resolved profile (retries are on top of the first attempt)."""
        return cls(
            max_attempts=max(1, (profile.max_retry_attempts or 0) + 1),
            backoff_factor=backoff_factor,
            initial_delay=(profile.retry_delay_ms or 0) / 1000.0,
        )
