# SPDX-FileCopyrightText: 2026 typed-msg authors
#
# SPDX-License-Identifier: Apache-2.0

"""Composition root binding message scopes to one transport."""

from __future__ import annotations

import logging
import weakref
from typing import Any

from typed_msg.dispatcher import Dispatcher, Receiver
from typed_msg.hooks import Hooks
from typed_msg.registry import Handler, HandlerRegistry
from typed_msg.sender import Sender
from typed_msg.transport.base import Transport

_log = logging.getLogger(__name__)

# transport -> scopes with an installed dispatcher.
_installed: weakref.WeakKeyDictionary[Any, set[str]] = weakref.WeakKeyDictionary()


def _note_scope(transport: Transport, scope: str) -> None:
    try:
        scopes = _installed.setdefault(transport, set())
    except TypeError:
        # Not weak-referenceable; duplicates go unnoticed.
        return
    if scope in scopes:
        _log.warning(
            "another receiver for scope %s on this transport; "
            "duplicate handler names will not be detected",
            scope,
        )
    scopes.add(scope)


class Messaging:
    """Owns the per-scope registries and dispatchers for one transport.

    A scope gets exactly one Dispatcher, created on first use and
    installed as a transport listener, so a (scope, name) pair can only
    ever have one handler no matter how many times ``receiver`` is
    called. Hooks are shared by every sender and receiver created here.
    """

    def __init__(self, transport: Transport, hooks: Hooks | None = None) -> None:
        self._transport = transport
        self._hooks = hooks
        self._receivers: dict[str, Receiver] = {}

    @property
    def transport(self) -> Transport:
        return self._transport

    @property
    def hooks(self) -> Hooks | None:
        return self._hooks

    def receiver(self, scope: str) -> Receiver:
        """Return the receiver for *scope*, installing it on first use."""
        receiver = self._receivers.get(scope)
        if receiver is None:
            receiver = create_receiver(self._transport, scope, self._hooks)
            self._receivers[scope] = receiver
            _log.debug("receiver installed for scope %s", scope)
        return receiver

    def sender(self, scope: str) -> Sender:
        return create_sender(self._transport, scope, self._hooks)

    def register_handler(self, scope: str, name: str, handler: Handler) -> None:
        """Register *handler* at (scope, name). ConfigurationError on duplicates."""
        self.receiver(scope).on(name, handler)

    def scopes(self) -> list[str]:
        """Scopes with an installed receiver, in installation order."""
        return list(self._receivers)


def create_receiver(
    transport: Transport, scope: str, hooks: Hooks | None = None
) -> Receiver:
    """Build a standalone receiver with its own registry and listen on *transport*.

    Two standalone receivers for the same scope would both answer, so a
    second one on the same transport is logged as a warning; use
    :class:`Messaging` to get one registry per scope.
    """
    _note_scope(transport, scope)
    dispatcher = Dispatcher(HandlerRegistry(scope), hooks)
    transport.add_message_listener(dispatcher.listen)
    return Receiver(dispatcher)


def create_sender(
    transport: Transport, scope: str, hooks: Hooks | None = None
) -> Sender:
    return Sender(transport, scope, hooks)


__all__ = ["Messaging", "create_receiver", "create_sender"]
