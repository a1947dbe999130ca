# SPDX-FileCopyrightText: 2026 typed-msg authors
#
# SPDX-License-Identifier: Apache-2.0

"""Host transport protocol: the interface every message channel implements."""

from collections.abc import Callable
from typing import Any, Protocol, runtime_checkable

# Deliver the single response for one inbound message.
Reply = Callable[[dict[str, Any]], None]

# (envelope, sender, reply) -> True if the listener will reply later.
MessageListener = Callable[[Any, Any, Reply], bool]


@runtime_checkable
class Transport(Protocol):
    """A deliver-once, single-response channel for plain data.

    Values crossing it are cloned: no shared identity, no class
    instances. Delivery problems surface as TransportError from
    send_message.
    """

    async def send_message(self, envelope: dict[str, Any]) -> Any:
        """Deliver *envelope* and return the receiver's response envelope."""
        ...

    def add_message_listener(self, listener: MessageListener) -> None:
        """Install a listener called once per inbound message.

        The listener returns True to announce that it will call
        ``reply`` after a suspension.
        """
        ...
