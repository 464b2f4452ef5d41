# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

import threading
import time

import httpx
import pytest

from httpchain.config import ClientSettings
from httpchain.errors import DeadlineExceededError, InvalidURLError, RequestCancelledError, StreamConsumedError
from httpchain.http.context import RequestContext, get_request_context, request_context
from httpchain.http.headers import header_value, merge_headers, set_header
from httpchain.http.models import HttpRequest, HttpResponse
from httpchain.http.transport import HttpxTransport
from httpchain.http.url import is_absolute, parse_base_url, resolve_url


def test_http_response_streams_then_buffers():
    closed = []
    response = HttpResponse(status_code=200, stream=iter([b"he", b"llo"]), on_close=lambda: closed.append(1))
    assert response.is_buffered is False
    assert response.read() == b"hello"
    assert response.text == "hello"
    assert list(response.iter_bytes()) == [b"hello"]
    response.close()
    response.close()
    assert closed == [1]
    assert response.closed is True


def test_http_response_stream_is_single_use():
    response = HttpResponse(status_code=200, stream=iter([b"ab", b"c"]), url="http://x/y")
    assert b"".join(response.iter_bytes()) == b"abc"
    assert response.consumed is True
    with pytest.raises(StreamConsumedError, match="http://x/y"):
        response.read()
    with pytest.raises(StreamConsumedError):
        response.iter_bytes()


def test_closing_unread_stream_discards_body():
    response = HttpResponse(status_code=200, stream=iter([b"body"]))
    response.close()
    with pytest.raises(StreamConsumedError):
        response.read()

    buffered = HttpResponse(status_code=200, content=b"kept")
    buffered.close()
    assert buffered.read() == b"kept"


def test_read_caps_buffered_body_and_records_meta():
    response = HttpResponse(status_code=200, stream=iter([b"abcd", b"efgh"]), max_body_bytes=6)
    assert response.read() == b"abcdef"
    assert response.meta == {"body_truncated": True, "body_bytes_read": 6, "body_bytes_limit": 6}

    exact = HttpResponse(status_code=200, stream=iter([b"abc"]), max_body_bytes=3)
    assert exact.read() == b"abc"
    assert exact.meta["body_truncated"] is False


def test_http_response_defaults():
    request = HttpRequest(url="http://x/y")
    response = HttpResponse(status_code=204, request=request)
    assert response.url == "http://x/y"
    assert response.content == b""
    assert response.ok is True
    assert HttpResponse(status_code=302).ok is False


def test_replace_body_updates_content_length():
    response = HttpResponse(status_code=200, headers={"content-length": "3", "X": "1"}, content=b"abc")
    response.replace_body(b"abcdef")
    assert response.read() == b"abcdef"
    assert response.headers == {"X": "1", "Content-Length": "6"}


def test_request_copies_do_not_share_headers():
    request = HttpRequest(url="http://x", headers={"A": "1"})
    copy = request.with_headers({"B": "2"})
    assert request.headers == {"A": "1"}
    assert copy.headers == {"A": "1", "B": "2"}
    context = RequestContext()
    assert request.with_context(context).context is context
    assert request.context is None


def test_header_helpers_are_case_insensitive():
    headers = {"Content-Type": " application/json "}
    assert header_value(headers, "content-type") == "application/json"
    assert header_value(headers, "missing", "fallback") == "fallback"
    assert header_value(None, "x") == ""

    set_header(headers, "CONTENT-TYPE", "text/plain")
    assert headers == {"CONTENT-TYPE": "text/plain"}

    merged = merge_headers({"User-Agent": "a", "X": "1"}, None, {"user-agent": "b"})
    assert merged == {"X": "1", "user-agent": "b"}


def test_resolve_url_against_base():
    assert resolve_url("user", "http://h/api/") == "http://h/api/user"
    assert resolve_url("/user", "http://h/api/") == "http://h/user"
    assert resolve_url("user", "http://h/api") == "http://h/user"
    assert resolve_url("http://other/x", "http://h/") == "http://other/x"
    assert resolve_url("http://h/user") == "http://h/user"


@pytest.mark.parametrize("target", ["user", "", "mailto:someone", "http://[::1"])
def test_resolve_url_rejects_unresolvable_targets(target):
    with pytest.raises(InvalidURLError):
        resolve_url(target)


def test_parse_base_url_validates():
    assert parse_base_url(" http://h/api/ ") == "http://h/api/"
    assert is_absolute("https://h") is True
    assert is_absolute("/path") is False
    for bad in ("", "/relative", "http://h:99999999/x"):
        with pytest.raises(InvalidURLError):
            parse_base_url(bad)


def test_request_context_layers_and_resets():
    assert get_request_context().timeout is None
    with request_context(timeout=2.0) as outer:
        assert get_request_context() is outer
        with request_context(timeout=None, values={"k": "v"}) as inner:
            assert inner.timeout == 2.0
            assert inner.values == {"k": "v"}
        assert get_request_context() is outer
    assert get_request_context().timeout is None


def test_request_context_cancel_and_deadline():
    context = RequestContext.with_cancel(timeout=60.0, trace="t")
    assert context.cancelled is False
    assert 0 < context.remaining_timeout() <= 60.0
    assert context.values == {"trace": "t"}
    context.cancel()
    assert context.cancelled is True
    assert RequestContext().remaining_timeout() is None


def _transport(handler, settings=None):
    settings = settings or ClientSettings(user_agent="UA/1.0")
    return HttpxTransport(settings, client=httpx.Client(transport=httpx.MockTransport(handler)))


def test_httpx_transport_streams_response():
    captured = {}

    def handler(request: httpx.Request) -> httpx.Response:
        captured["timeout"] = request.extensions.get("timeout")
        captured["body"] = request.content
        return httpx.Response(201, headers={"X-Test": "1"}, content=b"created")

    transport = _transport(handler)
    request = HttpRequest(url="http://example/path", method="POST", headers={"X": "1"}, body=b"payload", timeout=1.2)
    response = transport.send(request)

    assert response.status_code == 201
    assert response.request is request
    assert header_value(response.headers, "X-Test") == "1"
    assert response.is_buffered is False
    assert response.read() == b"created"
    assert response.meta["body_truncated"] is False
    assert captured["body"] == b"payload"
    assert captured["timeout"]["read"] == 1.2
    response.close()
    assert response.closed is True


def test_httpx_transport_truncates_at_max_body_bytes():
    def handler(request: httpx.Request) -> httpx.Response:  # noqa: ARG001
        return httpx.Response(200, content=b"x" * 100)

    transport = _transport(handler, ClientSettings(max_body_bytes=10))
    response = transport.send(HttpRequest(url="http://example/"))

    assert response.read() == b"x" * 10
    assert response.meta["body_truncated"] is True
    assert response.meta["body_bytes_limit"] == 10


def test_httpx_transport_uses_context_deadline_when_request_has_no_timeout():
    captured = {}

    def handler(request: httpx.Request) -> httpx.Response:
        captured["timeout"] = request.extensions.get("timeout")
        return httpx.Response(200)

    transport = _transport(handler)
    context = RequestContext(timeout=30.0)
    transport.send(HttpRequest(url="http://example/", context=context)).close()

    assert 0 < captured["timeout"]["read"] <= 30.0


def test_httpx_transport_refuses_cancelled_context():
    calls = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        return httpx.Response(200)

    context = RequestContext(cancel_event=threading.Event())
    context.cancel()
    with pytest.raises(RequestCancelledError):
        _transport(handler).send(HttpRequest(url="http://example/", context=context))
    assert calls == []


def test_httpx_transport_errors_propagate():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("boom", request=request)

    with pytest.raises(httpx.ConnectError, match="boom"):
        _transport(handler).send(HttpRequest(url="http://example/"))


def test_httpx_transport_default_client_uses_settings(monkeypatch):
    created = {}

    class FakeHttpxClient:
        def __init__(self, follow_redirects, timeout, verify):
            created.update(follow_redirects=follow_redirects, timeout=timeout, verify=verify)

        def close(self):
            created["closed"] = True

    monkeypatch.setattr(httpx, "Client", FakeHttpxClient)
    transport = HttpxTransport(ClientSettings(timeout=3.0, allow_redirects=False, verify_ssl=False))
    transport.close()

    assert created == {"follow_redirects": False, "timeout": 3.0, "verify": False, "closed": True}


def test_httpx_transport_streams_past_body_limit():
    def handler(request: httpx.Request) -> httpx.Response:  # noqa: ARG001
        return httpx.Response(200, content=b"x" * 100)

    transport = _transport(handler, ClientSettings(max_body_bytes=10))
    response = transport.send(HttpRequest(url="http://example/"))

    assert b"".join(response.iter_bytes()) == b"x" * 100
    assert "body_truncated" not in response.meta
    response.close()


def test_httpx_transport_refuses_expired_deadline():
    calls = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        return httpx.Response(200)

    transport = _transport(handler)
    expired = RequestContext(timeout=5.0, created_at=time.monotonic() - 10.0)
    with pytest.raises(DeadlineExceededError, match="deadline exceeded"):
        transport.send(HttpRequest(url="http://example/", context=expired))
    with pytest.raises(RequestCancelledError):
        transport.send(HttpRequest(url="http://example/", timeout=1.0, context=RequestContext(timeout=0.0)))
    assert calls == []
