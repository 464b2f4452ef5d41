# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""
Interceptor composition.

An interceptor wraps the rest of the chain: it receives the request plus a ``next``
handler, may change the request before forwarding it, may skip forwarding entirely, and
may inspect or replace what comes back. Composing ``[I1, I2, I3]`` yields one interceptor
that runs I1, I2, I3 on the way in and I3, I2, I1 on the way out.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Callable, Iterable
from dataclasses import replace
from urllib.parse import urlsplit

from .headers import set_header
from .models import HttpRequest, HttpResponse

Handler = Callable[[HttpRequest], HttpResponse]
Interceptor = Callable[[HttpRequest, Handler], HttpResponse]

logger = logging.getLogger(__name__)


def passthrough(request: HttpRequest, handler: Handler) -> HttpResponse:
    """Interceptor that forwards the request untouched."""
    return handler(request)


def _link(interceptor: Interceptor, next_handler: Handler) -> Handler:
    def handle(request: HttpRequest) -> HttpResponse:
        return interceptor(request, next_handler)

    return handle


def compose_interceptors(interceptors: Iterable[Interceptor]) -> Interceptor:
    """
    Combine interceptors into a single interceptor with onion-style nesting.

    The nested handlers are folded from the terminal handler outward on each call, so the
    composed interceptor holds nothing but the (immutable) sequence it was built from.
    """
    chain = tuple(interceptors)
    if not chain:
        return passthrough

    def composed(request: HttpRequest, handler: Handler) -> HttpResponse:
        next_handler = handler
        for interceptor in reversed(chain):
            next_handler = _link(interceptor, next_handler)
        return next_handler(request)

    return composed


def header_interceptor(name: str, value: str) -> Interceptor:
    """Build an interceptor that sets ``name: value`` on every outgoing request."""

    def intercept(request: HttpRequest, handler: Handler) -> HttpResponse:
        headers = dict(request.headers)
        set_header(headers, name, value)
        return handler(replace(request, headers=headers))

    return intercept


def _format_headers(headers: dict[str, str]) -> str:
    return "".join(f"{key}: {value}\r\n" for key, value in headers.items())


def dump_request(request: HttpRequest) -> str:
    """Render a request roughly the way it goes out on the wire."""
    parts = urlsplit(request.url)
    target = parts.path or "/"
    if parts.query:
        target = f"{target}?{parts.query}"
    headers = {"Host": parts.netloc, **request.headers}
    body = (request.body or b"").decode("utf-8", errors="replace")
    return f"{request.method} {target} HTTP/1.1\r\n{_format_headers(headers)}\r\n{body}"


def dump_response(response: HttpResponse) -> str:
    """Render a response status line, headers and (buffered) body."""
    return f"HTTP/1.1 {response.status_code}\r\n{_format_headers(response.headers)}\r\n{response.text}"


def dump_interceptor(request: HttpRequest, handler: Handler) -> HttpResponse:
    """Log a dump of each request and response at DEBUG level.

    Dumping a response buffers its body; it stays readable for the caller.
    """
    if not logger.isEnabledFor(logging.DEBUG):
        return handler(request)
    logger.debug("%r", dump_request(request))
    response = handler(request)
    try:
        logger.debug("%r", dump_response(response))
    except Exception:
        response.close()
        raise
    return response


_NAN_VALUE = re.compile(rb":(\s*)NaN\b")


def nan_to_null_interceptor(request: HttpRequest, handler: Handler) -> HttpResponse:
    """
    Replace ``NaN`` values with ``null`` in response bodies.

    {"name":NaN} is not JSON; {"name":null} is.
    """
    response = handler(request)
    try:
        body = response.read()
    except Exception:
        response.close()
        raise
    rewritten = _NAN_VALUE.sub(rb":\1null", body)
    if rewritten != body:
        response.replace_body(rewritten)
    return response


__all__ = [
    "Handler",
    "Interceptor",
    "compose_interceptors",
    "dump_interceptor",
    "dump_request",
    "dump_response",
    "header_interceptor",
    "nan_to_null_interceptor",
    "passthrough",
]
