# SPDX-FileCopyrightText: 2026 typed-msg authors
#
# SPDX-License-Identifier: Apache-2.0

"""Exception taxonomy.

Only ConfigurationError and MessagingError reach user code. The dispatch
errors are converted to ``{"error": ...}`` envelopes on the receiving
side, and TransportError is raised by transports and reclassified by the
sender.
"""


class ConfigurationError(Exception):
    """Raised at setup time when a (scope, name) already has a handler."""


class DispatchError(Exception):
    """Receiver-side failure that is answered with an error envelope."""


class HandlerMissingError(DispatchError):
    """Raised when no handler is registered for an incoming name."""

    def __init__(self, name: str) -> None:
        super().__init__(f"no handler for {name}")
        self.name = name


class HandlerExecutionError(DispatchError):
    """Raised when a handler blew up. Chained from the original exception."""


class TransportError(Exception):
    """The host channel failed to deliver a message or its reply."""


class MessagingError(Exception):
    """Transport- or dispatch-level failure seen by the caller.

    Never a Failure: ``is_failure`` is False for every MessagingError.
    """

    def __init__(self, scope: str, name: str, message: str) -> None:
        super().__init__(message)
        self.scope = scope
        self.name = name
        self.message = message

    def __str__(self) -> str:
        return f"{self.message} (scope: {self.scope}, name: {self.name})"


__all__ = [
    "ConfigurationError",
    "DispatchError",
    "HandlerExecutionError",
    "HandlerMissingError",
    "MessagingError",
    "TransportError",
]
