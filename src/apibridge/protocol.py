# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""REST vs SOAP classification for outgoing requests."""

from __future__ import annotations

from enum import Enum

from .http.headers import header_value
from .models.request import ApiRequest

SOAP_CONTENT_TYPES = ("text/xml", "application/soap+xml")
SOAP_BODY_MARKER = "Envelope"


class Protocol(str, Enum):
    REST = "REST"
    SOAP = "SOAP"


def _body_text(body: object) -> str | None:
    if isinstance(body, str):
        return body
    if isinstance(body, (bytes, bytearray, memoryview)):
        return bytes(body).decode("utf-8", errors="replace")
    return None


def detect_protocol(request: ApiRequest) -> Protocol:
    """
    Classify ``request`` as SOAP or REST; the first matching check wins.

    1. a non-blank ``soap_action``
    2. a Content-Type of text/xml or application/soap+xml
    3. a textual body containing "Envelope"

    Check 3 is a plain substring test, so a JSON payload that merely contains
    the word "Envelope" is classified as SOAP. This is a known false positive.
    """
    if request.soap_action and request.soap_action.strip():
        return Protocol.SOAP

    content_type = (header_value(request.headers, "Content-Type") or "").lower()
    if any(marker in content_type for marker in SOAP_CONTENT_TYPES):
        return Protocol.SOAP

    text = _body_text(request.body)
    if text is not None and SOAP_BODY_MARKER in text:
        return Protocol.SOAP

    return Protocol.REST


__all__ = ["Protocol", "SOAP_BODY_MARKER", "SOAP_CONTENT_TYPES", "detect_protocol"]
