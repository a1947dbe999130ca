# SPDX-FileCopyrightText: 2026 typed-msg authors
#
# SPDX-License-Identifier: Apache-2.0

from typed_msg.errors import TransportError
from typed_msg.transport.base import MessageListener, Reply, Transport
from typed_msg.transport.local import DataCloneError, LocalTransport, clone

__all__ = [
    "DataCloneError",
    "LocalTransport",
    "MessageListener",
    "Reply",
    "Transport",
    "TransportError",
    "clone",
]
