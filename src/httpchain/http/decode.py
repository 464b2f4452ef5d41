# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Decode-or-copy of success bodies into a caller-supplied destination."""

from __future__ import annotations

import dataclasses
import json
from collections.abc import MutableMapping
from typing import Any

from ..errors import DecodeError
from .models import HttpResponse


def _is_sink(destination: Any) -> bool:
    return callable(getattr(destination, "write", None))


def _load_json(response: HttpResponse) -> tuple[bool, Any]:
    body = response.read()
    if response.meta.get("body_truncated"):
        raise DecodeError(
            f"{_describe(response)}: body truncated at {response.meta.get('body_bytes_limit')} bytes",
            status_code=response.status_code,
            body=body,
        )
    if not body:
        return False, None
    try:
        return True, json.loads(body)
    except ValueError as exc:
        raise DecodeError(
            f"{_describe(response)}: invalid JSON body: {exc}",
            status_code=response.status_code,
            body=body,
        ) from exc


def _describe(response: HttpResponse) -> str:
    request = response.request
    method = request.method if request is not None else ""
    return f"{method} {response.url or ''}".strip()


def _shape_error(response: HttpResponse, expected: str, value: Any) -> DecodeError:
    return DecodeError(
        f"{_describe(response)}: expected a JSON {expected}, got {type(value).__name__}",
        status_code=response.status_code,
        body=response.content or b"",
    )


def _is_settable(destination: Any, name: str) -> bool:
    if name.startswith("_") or not hasattr(destination, name):
        return False
    attribute = getattr(type(destination), name, None)
    if isinstance(attribute, property):
        return attribute.fset is not None
    return not callable(getattr(destination, name))


def _update_object(response: HttpResponse, destination: Any, payload: dict[str, Any]) -> None:
    if dataclasses.is_dataclass(destination):
        names = {f.name for f in dataclasses.fields(destination)}
    else:
        names = {name for name in payload if _is_settable(destination, name)}
    for name, value in payload.items():
        if name not in names:
            continue
        try:
            setattr(destination, name, value)
        except (AttributeError, TypeError) as exc:
            raise DecodeError(
                f"{_describe(response)}: cannot set {name!r} on {type(destination).__name__}: {exc}",
                status_code=response.status_code,
                body=response.content or b"",
            ) from exc


def decode_into(response: HttpResponse, destination: Any) -> None:
    """
    Decode the body of a successful response into ``destination``.

    - ``None``: nothing is read; the body is released when the response is closed.
    - a writable sink (has ``write``): the raw body is copied chunk by chunk.
    - a mutable mapping: updated in place from a JSON object.
    - a list: contents replaced in place from a JSON array.
    - any other object: existing data attributes (or dataclass fields) updated from a
      JSON object; unknown keys, methods and read-only properties are ignored.

    An empty body leaves the destination untouched. A body cut short by the response
    ``max_body_bytes`` limit raises ``DecodeError`` unless it is copied to a sink.
    """
    if destination is None:
        return
    if isinstance(destination, type):
        raise TypeError(f"destination must be an instance, not the class {destination.__name__}")

    if _is_sink(destination):
        for chunk in response.iter_bytes():
            destination.write(chunk)
        return

    has_value, value = _load_json(response)
    if not has_value:
        return

    if isinstance(destination, MutableMapping):
        if not isinstance(value, dict):
            raise _shape_error(response, "object", value)
        destination.update(value)
    elif isinstance(destination, list):
        if not isinstance(value, list):
            raise _shape_error(response, "array", value)
        destination[:] = value
    else:
        if not isinstance(value, dict):
            raise _shape_error(response, "object", value)
        _update_object(response, destination, value)


__all__ = ["decode_into"]
