# SPDX-FileCopyrightText: 2026 typed-msg authors
#
# SPDX-License-Identifier: Apache-2.0

"""Per-scope handler registry. Append-only, one handler per name."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

from typed_msg.errors import ConfigurationError, HandlerMissingError

# (req, sender) -> result, or an awaitable of one.
Handler = Callable[[Any, Any], Any]


class HandlerRegistry:
    """Maps message names to handlers within one scope.

    Written during setup only. Dispatch reads it concurrently, which is
    safe because nothing writes after setup and there is no unregister.
    """

    def __init__(self, scope: str) -> None:
        self._scope = scope
        self._handlers: dict[str, Handler] = {}

    @property
    def scope(self) -> str:
        return self._scope

    def register(self, name: str, handler: Handler) -> None:
        """Store *handler* under *name*.

        Raises ConfigurationError if the name is already taken, so a
        duplicate is caught before any message is dispatched to it.
        """
        if name in self._handlers:
            msg = f"handler already registered (scope: {self._scope}, name: {name})"
            raise ConfigurationError(msg)
        self._handlers[name] = handler

    def lookup(self, name: str) -> Handler | None:
        return self._handlers.get(name)

    def require(self, name: str) -> Handler:
        """Like lookup, but raises HandlerMissingError when absent."""
        handler = self._handlers.get(name)
        if handler is None:
            raise HandlerMissingError(name)
        return handler

    def names(self) -> list[str]:
        """Registered names in registration order."""
        return list(self._handlers)

    def __contains__(self, name: object) -> bool:
        return name in self._handlers

    def __len__(self) -> int:
        return len(self._handlers)
