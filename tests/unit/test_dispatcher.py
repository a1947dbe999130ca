# SPDX-FileCopyrightText: 2026 typed-msg authors
#
# SPDX-License-Identifier: Apache-2.0

"""Tests for the receiving-side dispatcher, driven without a transport."""

import asyncio
from typing import Any

import pytest

from typed_msg import (
    ConfigurationError,
    HandlerRegistry,
    Hooks,
    RequestContext,
    ResponseContext,
    failure,
    success,
)
from typed_msg.codec import RequestEnvelope
from typed_msg.dispatcher import Dispatcher, Receiver, describe_exception

# -- Fakes -----------------------------------------------------------------


class ReplyRecorder:
    """Collects replies and lets a test await the first one."""

    def __init__(self) -> None:
        self.replies: list[dict[str, Any]] = []
        self._got = asyncio.Event()

    def __call__(self, response: dict[str, Any]) -> None:
        self.replies.append(response)
        self._got.set()

    async def first(self) -> dict[str, Any]:
        await asyncio.wait_for(self._got.wait(), timeout=1)
        return self.replies[0]


class HookRecorder:
    """Records hook calls in order, alongside handler events."""

    def __init__(self, events: list[str]) -> None:
        self.events = events
        self.requests: list[RequestContext] = []
        self.responses: list[ResponseContext] = []

    def on_request(self, ctx: RequestContext) -> None:
        self.events.append("on_request")
        self.requests.append(ctx)

    def on_response(self, ctx: ResponseContext) -> None:
        self.events.append("on_response")
        self.responses.append(ctx)

    def hooks(self) -> Hooks:
        return Hooks(on_request=self.on_request, on_response=self.on_response)


def _dispatcher(
    handlers: dict[str, Any], hooks: Hooks | None = None, scope: str = "tabs"
) -> Dispatcher:
    registry = HandlerRegistry(scope)
    for name, handler in handlers.items():
        registry.register(name, handler)
    return Dispatcher(registry, hooks)


# -- listen ------------------------------------------------------------------


class TestListen:
    @pytest.mark.asyncio
    async def test_accepts_own_scope(self) -> None:
        d = _dispatcher({"openTab": lambda req, sender: success({"tabId": 1})})
        reply = ReplyRecorder()
        assert d.listen({"scope": "tabs", "name": "openTab"}, None, reply) is True
        assert await reply.first() == {"success": True, "data": {"tabId": 1}}

    @pytest.mark.asyncio
    async def test_ignores_other_scope(self) -> None:
        d = _dispatcher({"openTab": lambda req, sender: success()})
        reply = ReplyRecorder()
        assert d.listen({"scope": "storage", "name": "openTab"}, None, reply) is False
        await asyncio.sleep(0)
        assert reply.replies == []

    @pytest.mark.asyncio
    async def test_ignores_untyped(self) -> None:
        d = _dispatcher({})
        reply = ReplyRecorder()
        assert d.listen({"type": "ping"}, None, reply) is False
        assert d.listen("ping", None, reply) is False
        await asyncio.sleep(0)
        assert reply.replies == []


# -- dispatch --------------------------------------------------------------


class TestDispatch:
    @pytest.mark.asyncio
    async def test_sync_handler(self) -> None:
        d = _dispatcher({"getCurrentTab": lambda req, sender: success(sender)})
        reply = ReplyRecorder()
        await d.dispatch(RequestEnvelope("tabs", "getCurrentTab"), {"id": 4}, reply)
        assert reply.replies == [{"success": True, "data": {"id": 4}}]

    @pytest.mark.asyncio
    async def test_async_handler(self) -> None:
        async def open_tab(req: Any, sender: Any) -> Any:
            await asyncio.sleep(0)
            return success({"url": req["url"]})

        d = _dispatcher({"openTab": open_tab})
        reply = ReplyRecorder()
        await d.dispatch(
            RequestEnvelope("tabs", "openTab", {"url": "https://a"}), None, reply
        )
        assert reply.replies == [{"success": True, "data": {"url": "https://a"}}]

    @pytest.mark.asyncio
    async def test_business_failure(self) -> None:
        d = _dispatcher({"openTab": lambda req, sender: failure("cannot open")})
        reply = ReplyRecorder()
        await d.dispatch(RequestEnvelope("tabs", "openTab"), None, reply)
        assert reply.replies == [{"success": False, "message": "cannot open"}]

    @pytest.mark.asyncio
    async def test_missing_handler(self) -> None:
        events: list[str] = []
        rec = HookRecorder(events)
        d = _dispatcher({}, rec.hooks())
        reply = ReplyRecorder()
        await d.dispatch(RequestEnvelope("tabs", "openTab"), None, reply)
        assert reply.replies == [{"error": "no handler for openTab"}]
        assert events == []

    @pytest.mark.asyncio
    async def test_handler_raises(self) -> None:
        events: list[str] = []
        rec = HookRecorder(events)

        def boom(req: Any, sender: Any) -> Any:
            events.append("handler")
            raise RuntimeError("boom")

        d = _dispatcher({"openTab": boom}, rec.hooks())
        reply = ReplyRecorder()
        await d.dispatch(RequestEnvelope("tabs", "openTab"), None, reply)
        assert reply.replies == [{"error": "RuntimeError: boom"}]
        # on_request fired, on_response skipped.
        assert events == ["on_request", "handler"]

    @pytest.mark.asyncio
    async def test_async_handler_raises(self) -> None:
        async def boom(req: Any, sender: Any) -> Any:
            await asyncio.sleep(0)
            raise ValueError("async boom")

        d = _dispatcher({"openTab": boom})
        reply = ReplyRecorder()
        await d.dispatch(RequestEnvelope("tabs", "openTab"), None, reply)
        assert reply.replies == [{"error": "ValueError: async boom"}]

    @pytest.mark.asyncio
    async def test_handler_error_with_unprintable_message(self) -> None:
        class Unprintable(Exception):
            def __str__(self) -> str:
                raise ValueError("cannot render")

        def boom(req: Any, sender: Any) -> Any:
            raise Unprintable()

        d = _dispatcher({"openTab": boom})
        reply = ReplyRecorder()
        await d.dispatch(RequestEnvelope("tabs", "openTab"), None, reply)
        assert reply.replies == [{"error": "Unprintable"}]

    @pytest.mark.asyncio
    async def test_cancelled_handler_still_replies(self) -> None:
        async def cancelled(req: Any, sender: Any) -> Any:
            await asyncio.sleep(0)
            raise asyncio.CancelledError()

        d = _dispatcher({"openTab": cancelled})
        reply = ReplyRecorder()
        with pytest.raises(asyncio.CancelledError):
            await d.dispatch(RequestEnvelope("tabs", "openTab"), None, reply)
        assert reply.replies == [{"error": "CancelledError"}]

    @pytest.mark.asyncio
    async def test_cancelled_dispatch_task_replies(self) -> None:
        started = asyncio.Event()

        async def hang(req: Any, sender: Any) -> Any:
            started.set()
            await asyncio.Event().wait()

        d = _dispatcher({"hang": hang})
        reply = ReplyRecorder()
        assert d.listen({"scope": "tabs", "name": "hang"}, None, reply) is True
        await started.wait()
        (task,) = tuple(d._tasks)
        task.cancel()
        assert await reply.first() == {"error": "CancelledError"}
        await asyncio.sleep(0)
        assert task.cancelled()

    @pytest.mark.asyncio
    async def test_hook_order(self) -> None:
        events: list[str] = []
        rec = HookRecorder(events)

        def handler(req: Any, sender: Any) -> Any:
            events.append("handler")
            return success(req)

        def reply(response: dict[str, Any]) -> None:
            events.append("reply")

        d = _dispatcher({"echo": handler}, rec.hooks())
        await d.dispatch(RequestEnvelope("tabs", "echo", {"x": 1}), None, reply)
        assert events == ["on_request", "handler", "reply", "on_response"]
        assert rec.requests == [RequestContext("tabs", "echo", {"x": 1})]
        # res is the value the handler returned, not the envelope.
        assert rec.responses == [
            ResponseContext("tabs", "echo", {"x": 1}, success({"x": 1}))
        ]

    @pytest.mark.asyncio
    async def test_raising_hooks_do_not_change_reply(self) -> None:
        def bad_hook(ctx: Any) -> None:
            raise RuntimeError("hook bug")

        hooks = Hooks(on_request=bad_hook, on_response=bad_hook)
        d = _dispatcher({"get": lambda req, sender: success(5)}, hooks)
        reply = ReplyRecorder()
        await d.dispatch(RequestEnvelope("tabs", "get"), None, reply)
        assert reply.replies == [{"success": True, "data": 5}]

    @pytest.mark.asyncio
    async def test_reply_failure_falls_back_to_error(self) -> None:
        replies: list[dict[str, Any]] = []
        events: list[str] = []
        rec = HookRecorder(events)

        def reply(response: dict[str, Any]) -> None:
            if "data" in response:
                raise TypeError("not cloneable")
            replies.append(response)

        d = _dispatcher({"get": lambda req, sender: success(1)}, rec.hooks())
        await d.dispatch(RequestEnvelope("tabs", "get"), None, reply)
        assert replies == [{"error": "TypeError: not cloneable"}]
        assert "on_response" not in events

    @pytest.mark.asyncio
    async def test_concurrent_dispatches_independent(self) -> None:
        release = asyncio.Event()

        async def slow(req: Any, sender: Any) -> Any:
            await release.wait()
            return success("slow")

        def fast(req: Any, sender: Any) -> Any:
            return success("fast")

        d = _dispatcher({"slow": slow, "fast": fast})
        slow_reply = ReplyRecorder()
        fast_reply = ReplyRecorder()
        d.listen({"scope": "tabs", "name": "slow"}, None, slow_reply)
        d.listen({"scope": "tabs", "name": "fast"}, None, fast_reply)
        assert await fast_reply.first() == {"success": True, "data": "fast"}
        assert slow_reply.replies == []
        release.set()
        assert await slow_reply.first() == {"success": True, "data": "slow"}


# -- Receiver ----------------------------------------------------------------


class TestReceiver:
    def test_on_registers(self) -> None:
        receiver = Receiver(_dispatcher({}))
        receiver.on("openTab", lambda req, sender: success())
        assert "openTab" in receiver.dispatcher.registry
        assert receiver.scope == "tabs"

    def test_on_duplicate(self) -> None:
        receiver = Receiver(_dispatcher({}))
        receiver.on("openTab", lambda req, sender: success())
        with pytest.raises(ConfigurationError):
            receiver.on("openTab", lambda req, sender: success())

    @pytest.mark.asyncio
    async def test_on_any_sees_every_accepted_message(self) -> None:
        seen: list[tuple[str, str]] = []
        receiver = Receiver(_dispatcher({"known": lambda req, sender: success()}))
        receiver.on_any(lambda name, scope: seen.append((name, scope)))
        receiver.on_any(lambda name, scope: seen.append(("second", name)))
        d = receiver.dispatcher
        await d.dispatch(RequestEnvelope("tabs", "known"), None, ReplyRecorder())
        await d.dispatch(RequestEnvelope("tabs", "unknown"), None, ReplyRecorder())
        assert seen == [
            ("known", "tabs"),
            ("second", "known"),
            ("unknown", "tabs"),
            ("second", "unknown"),
        ]

    @pytest.mark.asyncio
    async def test_on_any_failure_is_isolated(self) -> None:
        def broken(name: str, scope: str) -> None:
            raise RuntimeError("observer bug")

        receiver = Receiver(_dispatcher({"known": lambda req, sender: success(1)}))
        receiver.on_any(broken)
        reply = ReplyRecorder()
        request = RequestEnvelope("tabs", "known")
        await receiver.dispatcher.dispatch(request, None, reply)
        assert reply.replies == [{"success": True, "data": 1}]


def test_describe_exception() -> None:
    assert describe_exception(RuntimeError("boom")) == "RuntimeError: boom"
    assert describe_exception(KeyError()) == "KeyError"


def test_describe_exception_unprintable() -> None:
    class Unprintable(Exception):
        def __str__(self) -> str:
            raise ValueError("cannot render")

    assert describe_exception(Unprintable()) == "Unprintable"
