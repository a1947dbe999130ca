# SPDX-FileCopyrightText: 2026 typed-msg authors
#
# SPDX-License-Identifier: Apache-2.0

"""Receiving side: match inbound envelopes to handlers and reply.

One Dispatcher per scope. Per accepted message:

    lookup -> on_request -> invoke -> encode -> reply -> on_response

A missing handler or a raising handler short-circuits to an
``{"error": ...}`` reply and skips the hooks that follow.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
from collections.abc import Callable
from typing import Any

from typed_msg.codec import (
    RequestEnvelope,
    decode_request,
    encode_error,
    encode_result,
)
from typed_msg.errors import DispatchError, HandlerExecutionError
from typed_msg.hooks import (
    NO_HOOKS,
    Hooks,
    RequestContext,
    ResponseContext,
    call_hook,
)
from typed_msg.registry import Handler, HandlerRegistry
from typed_msg.transport.base import Reply

_log = logging.getLogger(__name__)

# (name, scope) -> None. Sees every accepted message, handled or not.
AnyObserver = Callable[[str, str], Any]


def describe_exception(exc: BaseException) -> str:
    """Render an exception for an error envelope: ``Type: message``."""
    kind = type(exc).__name__
    try:
        text = str(exc)
    except Exception:
        return kind
    return f"{kind}: {text}" if text else kind


class Dispatcher:
    """Transport listener bound to one scope and one registry.

    Dispatches run as independent tasks; nothing is queued or
    serialised between them.
    """

    def __init__(self, registry: HandlerRegistry, hooks: Hooks | None = None) -> None:
        self._registry = registry
        self._hooks = hooks or NO_HOOKS
        self._observers: list[AnyObserver] = []
        self._tasks: set[asyncio.Task[None]] = set()

    @property
    def scope(self) -> str:
        return self._registry.scope

    @property
    def registry(self) -> HandlerRegistry:
        return self._registry

    def add_observer(self, observer: AnyObserver) -> None:
        self._observers.append(observer)

    def listen(self, envelope: Any, sender: Any, reply: Reply) -> bool:
        """Transport listener. True means a reply will follow later."""
        request = decode_request(envelope)
        if request is None or request.scope != self.scope:
            return False
        task = asyncio.ensure_future(self.dispatch(request, sender, reply))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return True

    async def dispatch(
        self, request: RequestEnvelope, sender: Any, reply: Reply
    ) -> None:
        """Run one accepted request to completion.

        Exactly one reply goes out per accepted request. Any failure is
        answered with an error envelope; cancellation is answered the
        same way and then re-raised.
        """
        replied = False

        def send(response: dict[str, Any]) -> bool:
            nonlocal replied
            replied = True
            return self._reply(reply, response, request)

        try:
            await self._run(request, sender, send)
        except Exception as exc:
            _log.exception("dispatch of %s/%s failed", request.scope, request.name)
            if not replied:
                send(encode_error(describe_exception(exc)))
        except BaseException as exc:
            if not replied:
                send(encode_error(describe_exception(exc)))
            raise

    async def _run(
        self,
        request: RequestEnvelope,
        sender: Any,
        send: Callable[[dict[str, Any]], bool],
    ) -> None:
        for observer in self._observers:
            call_hook("on_any", observer, request.name, request.scope)

        try:
            result = await self._invoke(request, sender)
        except DispatchError as exc:
            send(encode_error(str(exc)))
            return

        try:
            response = encode_result(result)
        except Exception as exc:
            _log.warning(
                "could not encode result of %s/%s", request.scope, request.name
            )
            send(encode_error(describe_exception(exc)))
            return
        if not send(response):
            return

        call_hook(
            "on_response",
            self._hooks.on_response,
            ResponseContext(request.scope, request.name, request.req, result),
        )

    async def _invoke(self, request: RequestEnvelope, sender: Any) -> Any:
        handler: Handler = self._registry.require(request.name)
        call_hook(
            "on_request",
            self._hooks.on_request,
            RequestContext(request.scope, request.name, request.req),
        )
        try:
            result = handler(request.req, sender)
            if inspect.isawaitable(result):
                result = await result
        except Exception as exc:
            _log.warning(
                "handler %s/%s raised", request.scope, request.name, exc_info=True
            )
            raise HandlerExecutionError(describe_exception(exc)) from exc
        return result

    def _reply(
        self, reply: Reply, response: dict[str, Any], request: RequestEnvelope
    ) -> bool:
        """Send *response*; fall back to an error envelope if it cannot go.

        Returns True only if *response* itself was delivered.
        """
        try:
            reply(response)
        except Exception as exc:
            _log.warning(
                "reply to %s/%s failed", request.scope, request.name, exc_info=True
            )
            if "error" in response:
                return False
            try:
                reply(encode_error(describe_exception(exc)))
            except Exception:
                _log.exception(
                    "error reply to %s/%s failed", request.scope, request.name
                )
            return False
        return True


class Receiver:
    """Handler-author facade over a Dispatcher."""

    def __init__(self, dispatcher: Dispatcher) -> None:
        self._dispatcher = dispatcher

    @property
    def scope(self) -> str:
        return self._dispatcher.scope

    @property
    def dispatcher(self) -> Dispatcher:
        return self._dispatcher

    def on(self, name: str, handler: Handler) -> None:
        """Register the one handler for *name* in this scope.

        Raises ConfigurationError if *name* already has a handler.
        """
        self._dispatcher.registry.register(name, handler)

    def on_any(self, observer: AnyObserver) -> None:
        """Observe every accepted message as ``observer(name, scope)``.

        Observers run in registration order before handler lookup.
        """
        self._dispatcher.add_observer(observer)


__all__ = ["AnyObserver", "Dispatcher", "Receiver", "describe_exception"]
