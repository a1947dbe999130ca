# SPDX-FileCopyrightText: 2026 typed-msg authors
#
# SPDX-License-Identifier: Apache-2.0

"""Sending side: turn calls into envelopes and responses into Results.

A call resolves with a Success or a Failure whenever the receiver ran a
handler. Everything else (delivery failure, no handler, handler raised,
garbage response) is a MessagingError, which ``on_error`` may turn into
a Failure.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Coroutine
from types import SimpleNamespace
from typing import Any

from typed_msg.codec import (
    ResponseKind,
    decode_response,
    encode_request,
    response_kind,
)
from typed_msg.errors import MessagingError, TransportError
from typed_msg.hooks import NO_HOOKS, Hooks, call_hook
from typed_msg.result import Failure, Result, is_failure
from typed_msg.transport.base import Transport

_log = logging.getLogger(__name__)

MALFORMED_RESPONSE = "malformed response envelope"

Call = Callable[..., Coroutine[Any, Any, Result]]


class Sender:
    """Caller proxy for one scope.

    Names are not checked at runtime; a name nobody handles comes back
    as a MessagingError from the receiver.
    """

    def __init__(
        self,
        transport: Transport,
        scope: str,
        hooks: Hooks | None = None,
    ) -> None:
        self._transport = transport
        self._scope = scope
        self._hooks = hooks or NO_HOOKS

    @property
    def scope(self) -> str:
        return self._scope

    async def call(self, name: str, req: Any = None) -> Result:
        """Send *req* to *name* and return the decoded outcome.

        Raises MessagingError unless ``on_error`` supplies a Failure.
        """
        envelope = encode_request(self._scope, name, req)
        try:
            response = await self._transport.send_message(envelope)
        except TransportError as exc:
            _log.warning("delivery of %s/%s failed: %s", self._scope, name, exc)
            error = MessagingError(self._scope, name, str(exc))
            error.__cause__ = exc
            return self._fail(error)

        kind = response_kind(response)
        if kind is ResponseKind.ERROR:
            error = MessagingError(self._scope, name, str(response["error"]))
            return self._fail(error)
        if kind is ResponseKind.MALFORMED:
            error = MessagingError(self._scope, name, MALFORMED_RESPONSE)
            return self._fail(error)
        return decode_response(response)

    def __getitem__(self, name: str) -> Call:
        """Per-name entry point: ``await sender["getSettings"]()``."""

        async def _call(req: Any = None) -> Result:
            return await self.call(name, req)

        _call.__name__ = name
        _call.__qualname__ = f"{type(self).__name__}.{name}"
        return _call

    def bind(self, *names: str) -> SimpleNamespace:
        """Method table with one coroutine function per declared name."""
        return SimpleNamespace(**{name: self[name] for name in names})

    def _fail(self, error: MessagingError) -> Failure:
        fallback = call_hook("on_error", self._hooks.on_error, error)
        if is_failure(fallback):
            return fallback
        raise error


__all__ = ["MALFORMED_RESPONSE", "Sender"]
