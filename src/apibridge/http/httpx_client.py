# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""httpx-backed Transport implementation."""

from __future__ import annotations

from typing import TYPE_CHECKING

import httpx

from ..config import ApiSettings, load_api_settings
from ..errors import categorize_exception
from .client import Transport
from .models import HttpRequest, HttpResponse, RetryConfig

if TYPE_CHECKING:
    from ..models.profile import TransportProfile


def build_httpx_client(profile: TransportProfile, settings: ApiSettings) -> httpx.Client:
    """Create an httpx.Client whose pool and timeouts follow ``profile``."""
    connect = profile.connect_timeout_ms / 1000.0
    read = profile.read_timeout_ms / 1000.0
    # httpx pools per client, not per host; the per-route limit caps idle keep-alive connections.
    limits = httpx.Limits(
        max_connections=profile.max_connections,
        max_keepalive_connections=profile.max_connections_per_route,
    )
    return httpx.Client(
        timeout=httpx.Timeout(connect=connect, read=read, write=read, pool=connect),
        limits=limits,
        verify=settings.verify_ssl,
    )


class HttpxTransport(Transport):
    """Synchronous httpx transport bound to one resolved TransportProfile."""

    def __init__(self, profile: TransportProfile, settings: ApiSettings | None = None, client: httpx.Client | None = None):
        self.settings = settings or load_api_settings()
        self.profile = profile.resolve(self.settings)
        self.retry_config = RetryConfig.from_profile(self.profile, backoff_factor=self.settings.backoff_factor)
        self._client = client or build_httpx_client(self.profile, self.settings)

    @property
    def name(self) -> str:
        return self.profile.name

    def request(self, request: HttpRequest) -> HttpResponse:
        headers = dict(request.headers or {})
        headers.setdefault("User-Agent", self.settings.user_agent)

        try:
            resp = self._client.request(
                request.method,
                request.url,
                headers=headers,
                content=request.body,
                params=request.params or None,
            )
            return HttpResponse(
                ok=True,
                status_code=resp.status_code,
                reason=resp.reason_phrase,
                headers=dict(resp.headers),
                text=resp.text,
                content=resp.content,
                url=str(resp.url),
                meta={"transport": self.profile.name},
            )
        except Exception as exc:  # noqa: BLE001
            return HttpResponse(
                ok=False,
                url=request.url,
                error_message=str(exc),
                error_type=type(exc).__name__,
                meta={"transport": self.profile.name, "error_category": categorize_exception(exc)},
            )

    def close(self) -> None:
        self._client.close()

    def __repr__(self) -> str:  # pragma: no cover - debug helper
        return f"{self.__class__.__name__}(profile={self.profile.name!r})"
