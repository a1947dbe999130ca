# SPDX-FileCopyrightText: 2026 typed-msg authors
#
# SPDX-License-Identifier: Apache-2.0

"""In-process transport with host-channel semantics.

Both ends live on one event loop. Every envelope and reply is cloned on
the way through, so nothing shares identity across the boundary, and
the failure modes of a real host channel are reproduced as
TransportError.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any

from typed_msg.errors import TransportError
from typed_msg.transport.base import MessageListener

_log = logging.getLogger(__name__)

NO_RECEIVER = "Could not establish connection. Receiving end does not exist."
PORT_CLOSED = "The message port closed before a response was received."
TRANSPORT_CLOSED = "transport is closed"

_SCALARS = (str, int, float, bool, type(None), bytes)


class DataCloneError(TransportError):
    """Raised when a value cannot cross the channel."""


def clone(value: Any) -> Any:
    """Structured copy of plain data. Tuples come back as lists.

    Raises DataCloneError for anything else: class instances, functions,
    non-string mapping keys.
    """
    if isinstance(value, _SCALARS):
        return value
    if isinstance(value, list | tuple):
        return [clone(item) for item in value]
    if isinstance(value, dict):
        result: dict[str, Any] = {}
        for key, item in value.items():
            if not isinstance(key, str):
                msg = f"mapping key {key!r} could not be cloned"
                raise DataCloneError(msg)
            result[key] = clone(item)
        return result
    msg = f"{type(value).__name__} object could not be cloned"
    raise DataCloneError(msg)


class LocalTransport:
    """Loopback channel: every listener sees every message.

    The first reply wins; later replies are dropped. ``sender`` is the
    opaque metadata handed to listeners with each message.
    """

    def __init__(self, sender: Any = None) -> None:
        self.sender = sender
        self._listeners: list[MessageListener] = []
        self._pending: set[asyncio.Future[Any]] = set()
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def add_message_listener(self, listener: MessageListener) -> None:
        self._listeners.append(listener)

    async def send_message(self, envelope: dict[str, Any]) -> Any:
        if self._closed:
            raise TransportError(TRANSPORT_CLOSED)
        if not self._listeners:
            raise TransportError(NO_RECEIVER)
        message = clone(envelope)
        future: asyncio.Future[Any] = asyncio.get_running_loop().create_future()

        def reply(response: dict[str, Any]) -> None:
            # Clone before checking so a bad payload raises in the replier.
            copied = clone(response)
            if not future.done():
                future.set_result(copied)

        claimed = False
        for listener in list(self._listeners):
            try:
                if listener(clone(message), self.sender, reply):
                    claimed = True
            except Exception:
                _log.exception("message listener failed")
        if not claimed and not future.done():
            raise TransportError(PORT_CLOSED)

        self._pending.add(future)
        try:
            return await future
        finally:
            self._pending.discard(future)

    def close(self) -> None:
        """Tear the channel down. In-flight calls fail with TransportError."""
        self._closed = True
        for future in list(self._pending):
            if not future.done():
                future.set_exception(TransportError(PORT_CLOSED))
        self._pending.clear()
