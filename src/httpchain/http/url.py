# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Base URL parsing and request target resolution."""

from __future__ import annotations

from urllib.parse import SplitResult, urljoin, urlsplit

from ..errors import InvalidURLError


def _split(url: str) -> SplitResult:
    try:
        parts = urlsplit(url)
        # Accessing the port validates it (e.g. "http://h:notaport/").
        parts.port
    except ValueError as exc:
        raise InvalidURLError(url, str(exc)) from exc
    return parts


def is_absolute(url: str) -> bool:
    """Return True when ``url`` carries both a scheme and a host."""
    parts = urlsplit(str(url or ""))
    return bool(parts.scheme and parts.netloc)


def parse_base_url(url: str) -> str:
    """
    Validate a base URL and return it unchanged.

    The base must be absolute; keep a trailing slash on it if relative targets should
    land below its last path segment (``http://h/api/`` + ``user`` -> ``http://h/api/user``).
    """
    raw = str(url or "").strip()
    if not raw:
        raise InvalidURLError(raw, "empty base URL")
    parts = _split(raw)
    if not parts.scheme or not parts.netloc:
        raise InvalidURLError(raw, "base URL must be absolute")
    return raw


def resolve_url(target: str, base_url: str | None = None) -> str:
    """
    Resolve a request target to an absolute URL.

    Relative targets are joined onto ``base_url`` following RFC 3986 reference resolution.
    Without a base URL the target itself must be absolute.
    """
    raw = str(target or "").strip()
    parts = _split(raw)
    if parts.scheme and parts.netloc:
        return raw
    if parts.scheme and not parts.netloc:
        raise InvalidURLError(raw, "missing host")
    if base_url is None:
        if not raw:
            raise InvalidURLError(raw, "empty URL")
        raise InvalidURLError(raw, "relative URL without a base URL")
    return urljoin(base_url, raw)


__all__ = ["is_absolute", "parse_base_url", "resolve_url"]
