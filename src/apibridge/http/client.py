# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Transport abstraction and factory."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

from ..config import ApiSettings, load_api_settings
from .models import HttpRequest, HttpResponse

if TYPE_CHECKING:
    from ..models.profile import TransportProfile


class Transport(Protocol):
    """Minimal protocol for issuing HTTP requests over one connection pool."""

    def request(self, request: HttpRequest) -> HttpResponse: ...

    def close(self) -> None:  # pragma: no cover - optional for adapters
        ...


def create_transport(profile: TransportProfile, settings: ApiSettings | None = None) -> Transport:
    """Factory for the default httpx-backed transport built from a resolved profile."""
    from .httpx_client import HttpxTransport

    settings = settings or load_api_settings()
    return HttpxTransport(profile.resolve(settings), settings)


def create_default_transport(settings: ApiSettings | None = None) -> Transport:
    settings = settings or load_api_settings()
    return create_transport(settings.default_profile(), settings)
