# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""HTTP request/response data models shared by transports, interceptors and the client."""

from __future__ import annotations

from collections.abc import Callable, Iterable, Iterator
from dataclasses import dataclass, field, replace
from typing import TYPE_CHECKING, Any

from ..errors import StreamConsumedError

if TYPE_CHECKING:
    from .context import RequestContext

Headers = dict[str, str]


@dataclass
class HttpRequest:
    """Normalized request representation consumed by Transport implementations.

    ``body`` holds already-encoded bytes; the client serializes JSON payloads when the
    request is built so encoding failures surface before anything is sent.
    """

    url: str
    method: str = "GET"
    headers: Headers = field(default_factory=dict)
    body: bytes | None = None
    timeout: float | None = None
    context: RequestContext | None = None

    def with_context(self, context: RequestContext | None) -> HttpRequest:
        """Return a shallow copy bound to ``context``."""
        return replace(self, context=context)

    def with_headers(self, headers: Headers) -> HttpRequest:
        """Return a copy whose headers are ``headers`` layered over the current ones."""
        merged = dict(self.headers)
        merged.update(headers)
        return replace(self, headers=merged)


@dataclass
class HttpResponse:
    """Completed HTTP response.

    The body is exposed as a lazy byte stream until ``read()`` buffers it into
    ``content``. Streaming it with ``iter_bytes()`` consumes it; a later ``read()`` then
    raises StreamConsumedError instead of returning an empty body. ``max_body_bytes`` caps
    what ``read()`` buffers, not what ``iter_bytes()`` streams. ``close()`` releases
    whatever the transport holds open for the body and is safe to call more than once.
    """

    status_code: int
    headers: Headers = field(default_factory=dict)
    content: bytes | None = None
    request: HttpRequest | None = None
    url: str | None = None
    meta: dict[str, Any] = field(default_factory=dict)
    stream: Iterable[bytes] | None = field(default=None, repr=False)
    on_close: Callable[[], None] | None = field(default=None, repr=False)
    max_body_bytes: int | None = field(default=None, repr=False)
    consumed: bool = field(default=False, repr=False)
    closed: bool = field(default=False, repr=False)

    def __post_init__(self) -> None:
        if self.url is None and self.request is not None:
            self.url = self.request.url
        if self.content is None and self.stream is None:
            self.content = b""

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code <= 299

    @property
    def is_buffered(self) -> bool:
        return self.content is not None

    def iter_bytes(self) -> Iterator[bytes]:
        """Yield the body in chunks without buffering it.

        An unbuffered stream can be iterated once; the response is marked consumed as soon
        as this is called.
        """
        if self.content is not None:
            return iter([self.content] if self.content else [])
        if self.consumed:
            raise StreamConsumedError(f"{self.url or ''}: response body was already streamed or discarded")
        stream, self.stream = self.stream, None
        self.consumed = True
        if stream is None:
            return iter([])
        return (chunk for chunk in stream if chunk)

    def read(self) -> bytes:
        """Buffer and return the body, keeping at most ``max_body_bytes`` of it."""
        if self.content is not None:
            return self.content

        limit = self.max_body_bytes
        chunks: list[bytes] = []
        read = 0
        truncated = False
        for chunk in self.iter_bytes():
            if limit is not None and read + len(chunk) > limit:
                chunks.append(chunk[: limit - read])
                read = limit
                truncated = True
                break
            chunks.append(chunk)
            read += len(chunk)

        self.content = b"".join(chunks)
        if limit is not None:
            self.meta["body_truncated"] = truncated
            self.meta["body_bytes_read"] = read
            self.meta["body_bytes_limit"] = limit
        return self.content

    @property
    def text(self) -> str:
        return self.read().decode("utf-8", errors="replace")

    def replace_body(self, content: bytes) -> None:
        """Swap the body for a buffered one and keep ``Content-Length`` consistent."""
        self.stream = None
        self.content = content
        for key in list(self.headers):
            if key.lower() == "content-length":
                del self.headers[key]
        self.headers["Content-Length"] = str(len(content))

    def close(self) -> None:
        if self.closed:
            return
        self.closed = True
        if self.content is None:
            self.consumed = True
            self.stream = None
        callback, self.on_close = self.on_close, None
        if callback is not None:
            callback()


__all__ = ["Headers", "HttpRequest", "HttpResponse"]
