# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Retry helper for Transport implementations."""

from __future__ import annotations

import logging
import time

from .client import Transport
from .models import HttpRequest, HttpResponse, RetryConfig

logger = logging.getLogger(__name__)


def retry_config_for(transport: Transport) -> RetryConfig:
    """Use the transport's own policy when it carries one, else a single attempt."""
    config = getattr(transport, "retry_config", None)
    return config if isinstance(config, RetryConfig) else RetryConfig()


def send_with_retries(
    transport: Transport,
    request: HttpRequest,
    *,
    retry_config: RetryConfig | None = None,
) -> HttpResponse:
    """Execute a request with basic retry/backoff semantics."""
    cfg = retry_config or retry_config_for(transport)

    attempt = 0
    delay = cfg.initial_delay
    last_response: HttpResponse | None = None

    while attempt < cfg.max_attempts:
        try:
            response = transport.request(request)
        except Exception as exc:  # noqa: BLE001
            response = HttpResponse(
                ok=False,
                url=request.url,
                error_message=str(exc),
                error_type=exc.__class__.__name__,
            )
        last_response = response

        if response.ok:
            if attempt:
                response.meta["retry_count"] = attempt
            return response

        # Only retry transport-level failures (no status code).
        if response.status_code is not None:
            if attempt:
                response.meta.setdefault("retry_count", attempt)
            return response

        attempt += 1
        logger.warning("%s %s failed on attempt %d: %s", request.method, request.url, attempt, response.error_message)
        if attempt >= cfg.max_attempts:
            logger.error("%s %s failed after %d attempts, giving up", request.method, request.url, attempt)
            break
        if delay > 0:
            time.sleep(delay)
        delay *= cfg.backoff_factor

    if last_response is not None:
        last_response.meta.setdefault("retry_count", attempt)
        last_response.meta.setdefault("retry_exhausted", True)
        return last_response

    return HttpResponse(ok=False, url=request.url, meta={"retry_count": attempt, "retry_exhausted": True})
