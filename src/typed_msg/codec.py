# SPDX-FileCopyrightText: 2026 typed-msg authors
#
# SPDX-License-Identifier: Apache-2.0

"""Envelope codec. Pure functions, no I/O, no state.

Request envelope: ``{"scope", "name", "req"?}``. Response envelope is
exactly one of ``{"success": True, "data"?}``, ``{"success": False,
"message"?}`` or ``{"error": str}``. Decoders look at ``error`` first.
"""

from __future__ import annotations

import enum
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from typed_msg.result import Failure, Result, Success, is_failure

Envelope = dict[str, Any]


class ResponseKind(enum.Enum):
    RESULT = "result"
    ERROR = "error"
    MALFORMED = "malformed"


@dataclass(frozen=True)
class RequestEnvelope:
    """Decoded request address plus payload. ``req`` is None when absent."""

    scope: str
    name: str
    req: Any = None


def encode_request(scope: str, name: str, req: Any = None) -> Envelope:
    envelope: Envelope = {"scope": scope, "name": name}
    if req is not None:
        envelope["req"] = req
    return envelope


def decode_request(envelope: object) -> RequestEnvelope | None:
    """Return the request, or None for traffic that is not ours.

    A shared channel may carry other protocols, so anything without
    string ``scope`` and ``name`` fields is skipped rather than rejected.
    """
    if not isinstance(envelope, Mapping):
        return None
    scope = envelope.get("scope")
    name = envelope.get("name")
    if not isinstance(scope, str) or not isinstance(name, str):
        return None
    return RequestEnvelope(scope=scope, name=name, req=envelope.get("req"))


def encode_result(result: Any) -> Envelope:
    """Flatten a handler outcome into a response envelope.

    Handlers may return a bare payload instead of ``success(payload)``;
    it is treated the same way.
    """
    if is_failure(result):
        return {"success": False, "message": result.message}
    data = result.data if isinstance(result, Success) else result
    if data is None:
        return {"success": True}
    return {"success": True, "data": data}


def encode_error(message: str) -> Envelope:
    return {"error": message}


def response_kind(envelope: object) -> ResponseKind:
    if not isinstance(envelope, Mapping):
        return ResponseKind.MALFORMED
    if "error" in envelope:
        return ResponseKind.ERROR
    if envelope.get("success") is True or envelope.get("success") is False:
        return ResponseKind.RESULT
    return ResponseKind.MALFORMED


def decode_response(envelope: Mapping[str, Any]) -> Result:
    """Rebuild a fresh Success/Failure. Never raises.

    Callers must check :func:`response_kind` first; error and malformed
    envelopes are not results.
    """
    if envelope.get("success") is True:
        return Success(envelope.get("data"))
    message = envelope.get("message")
    if message is None:
        return Failure("")
    if not isinstance(message, str):
        message = str(message)
    return Failure(message)


__all__ = [
    "Envelope",
    "RequestEnvelope",
    "ResponseKind",
    "decode_request",
    "decode_response",
    "encode_error",
    "encode_request",
    "encode_result",
    "response_kind",
]
