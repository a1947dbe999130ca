# SPDX-FileCopyrightText: 2026 typed-msg authors
#
# SPDX-License-Identifier: Apache-2.0

"""Hooks that record message traffic to an EventLog."""

from typed_msg.codec import encode_result
from typed_msg.errors import MessagingError
from typed_msg.hooks import Hooks, RequestContext, ResponseContext
from typed_msg.logging.event_log import EventLog


def event_log_hooks(log: EventLog) -> Hooks:
    """Build Hooks writing ``request``, ``response`` and ``error`` events.

    Responses are logged in their wire shape. The error hook returns
    None, so a MessagingError still reaches the caller. Each write is
    fsynced on the event loop, blocking it until the disk catches up.
    """

    def on_request(ctx: RequestContext) -> None:
        log.log("request", {"scope": ctx.scope, "name": ctx.name, "req": ctx.req})

    def on_response(ctx: ResponseContext) -> None:
        log.log(
            "response",
            {
                "scope": ctx.scope,
                "name": ctx.name,
                "req": ctx.req,
                "res": encode_result(ctx.res),
            },
        )

    def on_error(error: MessagingError) -> None:
        log.log(
            "error",
            {"scope": error.scope, "name": error.name, "message": error.message},
        )

    return Hooks(on_error=on_error, on_request=on_request, on_response=on_response)
