# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Exception taxonomy.

Failures fall into four kinds that callers can tell apart:

- construction: ``InvalidURLError``, ``RequestEncodeError`` (nothing was sent)
- transport: whatever the transport raises, propagated unchanged
  (``RequestCancelledError`` when the request context was cancelled up front,
  ``DeadlineExceededError`` when its deadline had already passed)
- classification: ``ErrorResponse`` for any non-2xx status
- decode: ``DecodeError`` for an unparsable or truncated success body

``StreamConsumedError`` flags a second read of a response body that was already streamed.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .http.models import HttpRequest, HttpResponse


class HttpChainError(Exception):
    """Base class for errors raised by httpchain itself."""


class InvalidURLError(HttpChainError, ValueError):
    """A base URL or request target could not be parsed or resolved."""

    def __init__(self, url: str, reason: str):
        self.url = url
        self.reason = reason
        super().__init__(f"invalid URL {url!r}: {reason}")


class RequestEncodeError(HttpChainError):
    """A request body could not be serialized to JSON."""


class RequestCancelledError(HttpChainError):
    """The request context was cancelled before the request was sent."""


class DeadlineExceededError(RequestCancelledError):
    """The request context deadline passed before the request was sent."""


class StreamConsumedError(HttpChainError):
    """An unbuffered response body was read after it had been streamed or discarded."""


class DecodeError(HttpChainError):
    """A non-empty success body could not be decoded into the destination."""

    def __init__(self, message: str, *, status_code: int | None = None, body: bytes = b""):
        self.status_code = status_code
        self.body = body
        super().__init__(message)


class ErrorResponse(HttpChainError):
    """A completed response whose status code is outside 200-299."""

    def __init__(
        self,
        response: HttpResponse,
        message: str = "",
        request_id: str | None = None,
    ):
        self.response = response
        self.message = message
        self.request_id = request_id
        super().__init__(str(self))

    @property
    def request(self) -> HttpRequest | None:
        return self.response.request

    @property
    def status_code(self) -> int:
        return self.response.status_code

    @property
    def method(self) -> str:
        request = self.response.request
        return request.method if request is not None else ""

    @property
    def url(self) -> str:
        request = self.response.request
        if request is not None:
            return request.url
        return self.response.url or ""

    def __str__(self) -> str:
        if self.request_id:
            return f"{self.method} {self.url}: {self.status_code} (request {self.request_id!r}) {self.message}"
        return f"{self.method} {self.url}: {self.status_code} {self.message}"


__all__ = [
    "DeadlineExceededError",
    "DecodeError",
    "ErrorResponse",
    "HttpChainError",
    "InvalidURLError",
    "RequestCancelledError",
    "RequestEncodeError",
    "StreamConsumedError",
]
