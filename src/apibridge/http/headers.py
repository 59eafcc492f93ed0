# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Header lookup utilities.

HTTP header field names are case-insensitive (RFC 9110), but ApiRequest keeps
headers exactly as the caller spelled them, so lookups go through these helpers.
"""

from __future__ import annotations

from collections.abc import Mapping


def normalize_headers(headers: Mapping[object, object] | None) -> dict[str, str]:
    """Return a lowercase-keyed copy of a header mapping."""
    if not headers:
        return {}
    out: dict[str, str] = {}
    for key, value in headers.items():
        if key is None:
            continue
        name = str(key).strip().lower()
        if not name:
            continue
        out[name] = "" if value is None else str(value)
    return out


def header_value(headers: Mapping[object, object] | None, name: str, default: str | None = None) -> str | None:
    """
    Return a header value using case-insensitive key matching.

    Fast-paths the exact and common casings before falling back to a full scan.
    """
    if not headers or not name:
        return default

    lower = str(name).lower()
    for key in (name, lower, lower.title()):
        if key in headers:
            value = headers.get(key)
            return default if value is None else str(value).strip()

    for key, value in headers.items():
        if key is None:
            continue
        if str(key).lower() == lower:
            return default if value is None else str(value).strip()

    return default


def has_header(headers: Mapping[object, object] | None, name: str) -> bool:
    return header_value(headers, name) is not None


__all__ = ["has_header", "header_value", "normalize_headers"]
