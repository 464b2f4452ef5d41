# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""High-level client: request construction, execution through the interceptor chain, decoding."""

from __future__ import annotations

import json
import logging
from collections.abc import Iterable, Mapping
from contextlib import suppress
from typing import Any

from .config import ClientSettings, load_client_settings
from .errors import RequestEncodeError
from .http.adapters import InterceptingTransport
from .http.classify import check_response
from .http.context import RequestContext, get_request_context
from .http.decode import decode_into
from .http.headers import merge_headers, set_header
from .http.interceptors import Interceptor
from .http.models import HttpRequest, HttpResponse
from .http.transport import HttpxTransport, Transport
from .http.url import parse_base_url, resolve_url

logger = logging.getLogger(__name__)

JSON_CONTENT_TYPE = "application/json"


class Client:
    """
    HTTP client with a base URL, default headers and an interceptor chain.

    Every request goes through an InterceptingTransport wrapping ``transport`` (an
    httpx-backed one by default). Options are validated as they are applied; the first
    invalid one aborts construction.

    ``execute`` may be called from many threads at once. ``set_header``,
    ``set_authorization`` and ``add_interceptor`` must not run concurrently with requests
    in flight; configure the client before sharing it.
    """

    def __init__(
        self,
        transport: Transport | None = None,
        *,
        base_url: str | None = None,
        user_agent: str | None = None,
        authorization: str | None = None,
        authorization_scheme: str | None = None,
        headers: Mapping[str, str] | None = None,
        interceptors: Iterable[Interceptor] = (),
        settings: ClientSettings | None = None,
    ):
        self.settings = settings or load_client_settings()

        raw_base_url = base_url if base_url is not None else self.settings.base_url
        self.base_url: str | None = parse_base_url(raw_base_url) if raw_base_url is not None else None

        self.headers: dict[str, str] = {"User-Agent": self.settings.user_agent}
        if self.settings.authorization:
            self.headers["Authorization"] = self.settings.authorization
        if user_agent is not None:
            self.set_header("User-Agent", user_agent)
        if authorization is not None:
            self.set_authorization(authorization, authorization_scheme)
        for name, value in (headers or {}).items():
            self.set_header(name, value)

        if transport is None:
            transport = HttpxTransport(self.settings)
        if isinstance(transport, InterceptingTransport):
            self._transport = transport
        else:
            self._transport = InterceptingTransport(transport)
        self.add_interceptor(*interceptors)

    @property
    def transport(self) -> InterceptingTransport:
        return self._transport

    def set_header(self, name: str, value: str) -> None:
        set_header(self.headers, name, value)

    def set_authorization(self, value: str, scheme: str | None = None) -> None:
        """Set the default Authorization header, as ``"<scheme> <value>"`` when a scheme is given."""
        self.set_header("Authorization", f"{scheme} {value}" if scheme else value)

    def add_interceptor(self, *interceptors: Interceptor) -> None:
        if interceptors:
            self._transport.add_interceptor(*interceptors)

    def build_request(
        self,
        method: str,
        target: str,
        body: Any = None,
        *,
        headers: Mapping[str, str] | None = None,
        timeout: float | None = None,
    ) -> HttpRequest:
        """
        Build a request without sending it.

        ``target`` is resolved against the base URL when it is relative. A non-None
        ``body`` is JSON-encoded and marked ``application/json``. Default headers are
        applied first and ``headers`` override them.

        Raises:
            InvalidURLError: ``target`` is malformed, or relative with no base URL.
            RequestEncodeError: ``body`` is not JSON-serializable.
        """
        url = resolve_url(target, self.base_url)
        request_headers = merge_headers(self.headers)

        payload: bytes | None = None
        if body is not None:
            try:
                payload = json.dumps(body).encode("utf-8")
            except (TypeError, ValueError) as exc:
                raise RequestEncodeError(f"cannot encode {type(body).__name__} body as JSON: {exc}") from exc
            set_header(request_headers, "Content-Type", JSON_CONTENT_TYPE)

        return HttpRequest(
            url=url,
            method=method.upper(),
            headers=merge_headers(request_headers, headers),
            body=payload,
            timeout=timeout,
        )

    def execute(
        self,
        request: HttpRequest,
        destination: Any = None,
        *,
        context: RequestContext | None = None,
    ) -> HttpResponse:
        """
        Send ``request`` through the interceptor chain and decode the response.

        ``context`` (or the request's own context, or the ambient one) is bound to the
        request so every interceptor and the transport see the same cancellation token.
        Transport exceptions propagate unchanged. A non-2xx status raises ErrorResponse,
        which keeps the response. On success the body is decoded into ``destination``
        (see ``decode_into``). The response body is closed on every path. The returned
        response keeps the body buffered only when it was decoded into a structured
        destination; a streamed body copied to a sink or left undecoded is consumed and
        ``read()`` raises StreamConsumedError.
        """
        if context is None:
            context = request.context or get_request_context()
        if request.context is not context:
            request = request.with_context(context)

        response = self._transport.send(request)
        try:
            logger.debug("%s %s -> %s", request.method, request.url, response.status_code)
            check_response(response)
            decode_into(response, destination)
        finally:
            response.close()
        return response

    def request(
        self,
        method: str,
        target: str,
        body: Any = None,
        destination: Any = None,
        *,
        headers: Mapping[str, str] | None = None,
        context: RequestContext | None = None,
    ) -> HttpResponse:
        request = self.build_request(method, target, body, headers=headers)
        return self.execute(request, destination, context=context)

    def get(self, target: str, destination: Any = None, **kwargs: Any) -> HttpResponse:
        return self.request("GET", target, None, destination, **kwargs)

    def post(self, target: str, body: Any = None, destination: Any = None, **kwargs: Any) -> HttpResponse:
        return self.request("POST", target, body, destination, **kwargs)

    def close(self) -> None:
        with suppress(Exception):
            self._transport.close()

    def __enter__(self) -> Client:
        return self

    def __exit__(self, _exc_type, _exc, _tb) -> None:  # noqa: ANN001
        self.close()


def get(url: str, destination: Any = None, *, transport: Transport | None = None) -> HttpResponse:
    """GET an absolute URL with a throwaway default client."""
    with Client(transport) as client:
        return client.get(url, destination)


def post(url: str, body: Any = None, destination: Any = None, *, transport: Transport | None = None) -> HttpResponse:
    """POST a JSON body to an absolute URL with a throwaway default client."""
    with Client(transport) as client:
        return client.post(url, body, destination)


__all__ = ["JSON_CONTENT_TYPE", "Client", "get", "post"]
