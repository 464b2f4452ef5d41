# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""
httpchain package entrypoint.

An HTTP client with base-URL-relative request building, JSON encoding and decoding,
status classification, and a chain of interceptors wrapped around every outgoing call.
The network transport is injectable; httpx is used by default.
"""

from .client import Client, get, post
from .config import DEFAULT_USER_AGENT, ClientSettings, load_client_settings
from .errors import (
    DeadlineExceededError,
    DecodeError,
    ErrorResponse,
    HttpChainError,
    InvalidURLError,
    RequestCancelledError,
    RequestEncodeError,
    StreamConsumedError,
)
from .http import (
    Handler,
    HttpRequest,
    HttpResponse,
    HttpxTransport,
    InterceptingTransport,
    Interceptor,
    RequestContext,
    StubTransport,
    Transport,
    check_response,
    classify_response,
    compose_interceptors,
    dump_interceptor,
    header_interceptor,
    nan_to_null_interceptor,
    passthrough,
    request_context,
)
from .log import setup_logging
from .version import __version__

__all__ = [
    "DEFAULT_USER_AGENT",
    "Client",
    "ClientSettings",
    "DeadlineExceededError",
    "DecodeError",
    "ErrorResponse",
    "Handler",
    "HttpChainError",
    "HttpRequest",
    "HttpResponse",
    "HttpxTransport",
    "InterceptingTransport",
    "Interceptor",
    "InvalidURLError",
    "RequestCancelledError",
    "RequestContext",
    "RequestEncodeError",
    "StreamConsumedError",
    "StubTransport",
    "Transport",
    "__version__",
    "check_response",
    "classify_response",
    "compose_interceptors",
    "dump_interceptor",
    "get",
    "header_interceptor",
    "load_client_settings",
    "nan_to_null_interceptor",
    "passthrough",
    "post",
    "request_context",
    "setup_logging",
]
