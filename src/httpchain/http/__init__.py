# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""HTTP layer exports."""

from .adapters import InterceptingTransport
from .classify import check_response, classify_response
from .context import RequestContext, get_request_context, request_context
from .decode import decode_into
from .headers import header_value, merge_headers, set_header
from .interceptors import (
    Handler,
    Interceptor,
    compose_interceptors,
    dump_interceptor,
    header_interceptor,
    nan_to_null_interceptor,
    passthrough,
)
from .models import Headers, HttpRequest, HttpResponse
from .transport import HttpxTransport, StubTransport, Transport
from .url import parse_base_url, resolve_url

__all__ = [
    "Handler",
    "Headers",
    "HttpRequest",
    "HttpResponse",
    "HttpxTransport",
    "InterceptingTransport",
    "Interceptor",
    "RequestContext",
    "StubTransport",
    "Transport",
    "check_response",
    "classify_response",
    "compose_interceptors",
    "decode_into",
    "dump_interceptor",
    "get_request_context",
    "header_interceptor",
    "header_value",
    "merge_headers",
    "nan_to_null_interceptor",
    "passthrough",
    "parse_base_url",
    "request_context",
    "resolve_url",
    "set_header",
]
