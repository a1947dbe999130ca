# SPDX-FileCopyrightText: 2026 typed-msg authors
#
# SPDX-License-Identifier: Apache-2.0

"""Optional observation hooks and the isolation wrapper around them."""

from __future__ import annotations

import asyncio
import inspect
import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from typed_msg.errors import MessagingError
from typed_msg.result import Failure

_log = logging.getLogger(__name__)

# Async hook tails run detached; keep them referenced until done.
_detached: set[asyncio.Future[Any]] = set()


@dataclass(frozen=True)
class RequestContext:
    """Seen by on_request, before the handler runs."""

    scope: str
    name: str
    req: Any = None


@dataclass(frozen=True)
class ResponseContext:
    """Seen by on_response. ``res`` is the handler's value before encoding."""

    scope: str
    name: str
    req: Any
    res: Any


@dataclass(frozen=True)
class Hooks:
    """Hook configuration. Every hook is optional.

    ``on_error`` may return a Failure to resolve the failed call with it
    instead of raising. Return values of the other hooks are ignored.
    """

    on_error: Callable[[MessagingError], Failure | None] | None = None
    on_request: Callable[[RequestContext], Any] | None = None
    on_response: Callable[[ResponseContext], Any] | None = None


NO_HOOKS = Hooks()


def call_hook(label: str, hook: Callable[..., Any] | None, *args: Any) -> Any:
    """Run one hook best-effort and return what it returned.

    Exceptions are logged and turned into None. An awaitable result is
    scheduled but not awaited; the caller never waits on a hook.
    """
    if hook is None:
        return None
    try:
        value = hook(*args)
    except Exception:
        _log.exception("%s hook failed", label)
        return None
    if inspect.isawaitable(value):
        _detach(label, value)
        return None
    return value


def _detach(label: str, awaitable: Any) -> None:
    future = asyncio.ensure_future(awaitable)
    _detached.add(future)

    def _done(fut: asyncio.Future[Any]) -> None:
        _detached.discard(fut)
        if fut.cancelled():
            return
        exc = fut.exception()
        if exc is not None:
            _log.error("%s hook failed", label, exc_info=exc)

    future.add_done_callback(_done)


__all__ = [
    "NO_HOOKS",
    "Hooks",
    "RequestContext",
    "ResponseContext",
    "call_hook",
]
