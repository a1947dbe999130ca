# SPDX-FileCopyrightText: 2026 typed-msg authors
#
# SPDX-License-Identifier: Apache-2.0

"""Typed request/response messaging over single-shot clone-only transports."""

from typed_msg.dispatcher import Dispatcher, Receiver
from typed_msg.errors import (
    ConfigurationError,
    HandlerExecutionError,
    HandlerMissingError,
    MessagingError,
    TransportError,
)
from typed_msg.hooks import Hooks, RequestContext, ResponseContext
from typed_msg.messaging import Messaging, create_receiver, create_sender
from typed_msg.registry import HandlerRegistry
from typed_msg.result import (
    Failure,
    Result,
    Success,
    failure,
    is_failure,
    is_success,
    success,
)
from typed_msg.sender import Sender
from typed_msg.transport import LocalTransport, Transport

__all__ = [
    "ConfigurationError",
    "Dispatcher",
    "Failure",
    "HandlerExecutionError",
    "HandlerMissingError",
    "HandlerRegistry",
    "Hooks",
    "LocalTransport",
    "Messaging",
    "MessagingError",
    "Receiver",
    "RequestContext",
    "ResponseContext",
    "Result",
    "Sender",
    "Success",
    "Transport",
    "TransportError",
    "create_receiver",
    "create_sender",
    "failure",
    "is_failure",
    "is_success",
    "success",
]
