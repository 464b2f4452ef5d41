# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Turn completed responses into success or a structured ErrorResponse."""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from typing import Any

from ..errors import ErrorResponse
from .headers import header_value
from .models import HttpResponse

logger = logging.getLogger(__name__)

REQUEST_ID_HEADER = "X-Request-Id"
_MESSAGE_KEYS = ("message", "error_message", "error", "detail")
_REQUEST_ID_KEYS = ("request_id", "requestId")


def _first_string(payload: Mapping[str, Any], keys: tuple[str, ...]) -> str:
    for key in keys:
        value = payload.get(key)
        if isinstance(value, str) and value:
            return value
    return ""


def _parse_error_body(body: bytes) -> tuple[str, str]:
    """Return (message, request_id) from a structured error payload, or empty strings."""
    try:
        payload = json.loads(body)
    except ValueError:
        return "", ""
    if not isinstance(payload, Mapping):
        return "", ""
    return _first_string(payload, _MESSAGE_KEYS), _first_string(payload, _REQUEST_ID_KEYS)


def classify_response(response: HttpResponse) -> ErrorResponse | None:
    """Return None for 2xx responses and an ErrorResponse for everything else."""
    if 200 <= response.status_code <= 299:
        return None

    try:
        body = response.read()
    except Exception as exc:  # noqa: BLE001
        logger.debug("Failed to read error body for %s: %s", response.url, exc)
        body = b""

    message, request_id = _parse_error_body(body) if body else ("", "")
    if not message:
        message = body.decode("utf-8", errors="replace")
    if not request_id:
        request_id = header_value(response.headers, REQUEST_ID_HEADER)

    return ErrorResponse(response, message=message, request_id=request_id or None)


def check_response(response: HttpResponse) -> None:
    """Raise the ErrorResponse for a non-2xx response."""
    error = classify_response(response)
    if error is not None:
        raise error


__all__ = ["REQUEST_ID_HEADER", "check_response", "classify_response"]
