# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""URL pattern matching and transport resolution."""

from .patterns import PatternTable, is_wildcard, matches, resolve
from .presets import DEFAULT_URL_PROFILES, PRESET_PROFILES, register_default_profiles
from .registry import ProfileRegistry

__all__ = [
    "DEFAULT_URL_PROFILES",
    "PRESET_PROFILES",
    "PatternTable",
    "ProfileRegistry",
    "is_wildcard",
    "matches",
    "register_default_profiles",
    "resolve",
]
