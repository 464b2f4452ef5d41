# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Transport abstraction, the httpx-backed default and a programmable stub."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import replace
from typing import Protocol, Union

import httpx

from ..config import ClientSettings, load_client_settings
from ..errors import DeadlineExceededError, RequestCancelledError
from .models import HttpRequest, HttpResponse


class Transport(Protocol):
    """Sends one request and returns the response, raising on transport failure."""

    def send(self, request: HttpRequest) -> HttpResponse: ...

    def close(self) -> None:  # pragma: no cover - optional for adapters
        ...


class HttpxTransport(Transport):
    """Synchronous httpx client wrapper.

    Response bodies are streamed; the caller owns the returned response and must close it
    to hand the connection back to the pool. ``max_body_bytes`` bounds what ``read()``
    buffers; streaming the body to a sink is not capped.
    """

    def __init__(self, settings: ClientSettings | None = None, client: httpx.Client | None = None):
        self.settings = settings or load_client_settings()
        self._client = client or httpx.Client(
            follow_redirects=self.settings.allow_redirects,
            timeout=self.settings.timeout,
            verify=self.settings.verify_ssl,
        )

    def _resolve_timeout(self, request: HttpRequest) -> float:
        remaining = request.context.remaining_timeout() if request.context is not None else None
        if remaining is not None and remaining <= 0:
            raise DeadlineExceededError(f"{request.method} {request.url}: request deadline exceeded")
        if request.timeout is not None:
            return request.timeout
        if remaining is not None:
            return remaining
        return self.settings.timeout

    def _body_limit(self) -> int:
        max_body_bytes = self.settings.max_body_bytes
        if max_body_bytes <= 0:
            max_body_bytes = 16 * 1024 * 1024
        return max_body_bytes

    def send(self, request: HttpRequest) -> HttpResponse:
        if request.context is not None and request.context.cancelled:
            raise RequestCancelledError(f"{request.method} {request.url}: request cancelled")

        httpx_request = self._client.build_request(
            request.method,
            request.url,
            headers=request.headers,
            content=request.body,
            timeout=self._resolve_timeout(request),
        )
        resp = self._client.send(httpx_request, stream=True)

        return HttpResponse(
            status_code=resp.status_code,
            headers=dict(resp.headers),
            request=request,
            url=str(resp.url),
            meta={"http_version": resp.http_version},
            stream=resp.iter_bytes(),
            on_close=resp.close,
            max_body_bytes=self._body_limit(),
        )

    def close(self) -> None:
        self._client.close()


StubResult = Union[HttpResponse, BaseException, Callable[[HttpRequest], HttpResponse]]


class StubTransport(Transport):
    """Deterministic, programmable Transport for tests.

    Registered responses act as templates: each send returns a fresh copy bound to the
    request, so one registration can serve many calls. Exceptions are raised as transport
    failures and callables are invoked with the request.
    """

    def __init__(self, responses: dict[str, StubResult] | None = None):
        self._responses: dict[str, StubResult] = dict(responses or {})
        self.requests: list[HttpRequest] = []
        self.sent: list[HttpResponse] = []
        self.closed = False

    def add(self, url: str, response: StubResult) -> None:
        self._responses[url] = response

    def send(self, request: HttpRequest) -> HttpResponse:
        self.requests.append(request)
        result = self._responses.get(request.url)
        if result is None:
            response = HttpResponse(status_code=404, content=b"No stubbed response configured", request=request)
        elif isinstance(result, BaseException):
            raise result
        elif isinstance(result, HttpResponse):
            response = replace(
                result,
                headers=dict(result.headers),
                content=result.read(),
                request=request,
                url=result.url or request.url,
                meta=dict(result.meta),
                stream=None,
                on_close=None,
                consumed=False,
                closed=False,
            )
        else:
            response = result(request)
        self.sent.append(response)
        return response

    def close(self) -> None:
        self.closed = True


__all__ = ["HttpxTransport", "StubResult", "StubTransport", "Transport"]
