# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Transport adapter that routes every request through the interceptor chain."""

from __future__ import annotations

from .interceptors import Interceptor, compose_interceptors
from .models import HttpRequest, HttpResponse
from .transport import Transport


class InterceptingTransport(Transport):
    """
    Drop-in Transport that wraps another one with a composed interceptor chain.

    The wrapped transport's ``send`` is the terminal handler. The registered sequence and
    its composed form are swapped together as one tuple, so a send in flight keeps the
    chain it started with while later sends see every interceptor added since.
    """

    def __init__(self, transport: Transport, interceptors: tuple[Interceptor, ...] = ()):
        self._transport = transport
        chain = tuple(interceptors)
        self._chain: tuple[tuple[Interceptor, ...], Interceptor] = (chain, compose_interceptors(chain))

    @property
    def transport(self) -> Transport:
        return self._transport

    @property
    def interceptors(self) -> tuple[Interceptor, ...]:
        return self._chain[0]

    def add_interceptor(self, *interceptors: Interceptor) -> None:
        """Append interceptors and recompose the chain.

        Not safe to call concurrently with other ``add_interceptor`` calls.
        """
        chain = self._chain[0] + tuple(interceptors)
        self._chain = (chain, compose_interceptors(chain))

    def send(self, request: HttpRequest) -> HttpResponse:
        _, composed = self._chain
        return composed(request, self._transport.send)

    def close(self) -> None:
        close = getattr(self._transport, "close", None)
        if callable(close):
            close()


__all__ = ["InterceptingTransport"]
