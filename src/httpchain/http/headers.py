# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Header utilities.

HTTP header field names are case-insensitive (RFC 9110) but requests and responses keep
plain dicts, so lookups and merges here match names without regard to case while keeping
the casing the caller wrote.
"""

from __future__ import annotations

from collections.abc import Mapping


def header_value(headers: Mapping[str, str] | None, name: str, default: str = "") -> str:
    """
    Return a header value using case-insensitive key matching.

    Fast-paths the exact key before falling back to a full scan.
    """
    if not headers or not name:
        return default

    if name in headers:
        value = headers[name]
        return default if value is None else str(value).strip()

    lower = name.lower()
    for key, value in headers.items():
        if str(key).lower() == lower:
            return default if value is None else str(value).strip()

    return default


def set_header(headers: dict[str, str], name: str, value: str) -> None:
    """Set ``name`` in place, dropping any existing entry that differs only in case."""
    lower = name.lower()
    for key in [key for key in headers if key.lower() == lower]:
        del headers[key]
    headers[name] = value


def merge_headers(*layers: Mapping[str, str] | None) -> dict[str, str]:
    """
    Merge header mappings left to right into a new dict.

    Later layers win, including over names that only differ in case, so
    ``merge_headers(defaults, overrides)`` lets caller-supplied headers take precedence.
    """
    merged: dict[str, str] = {}
    for layer in layers:
        if not layer:
            continue
        for name, value in layer.items():
            if name is None:
                continue
            set_header(merged, str(name), "" if value is None else str(value))
    return merged


__all__ = ["header_value", "merge_headers", "set_header"]
