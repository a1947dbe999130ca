# SPDX-FileCopyrightText: 2026 typed-msg authors
#
# SPDX-License-Identifier: Apache-2.0

"""Success/Failure outcome values returned by handlers and seen by callers.

Results never cross the wire as objects. The codec flattens them to a
``success`` discriminant and rebuilds fresh instances on the other side,
so classification is a local ``isinstance`` check.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, ClassVar, TypeAlias


@dataclass(frozen=True)
class Success:
    """Successful outcome. ``data`` is None when there is no payload."""

    success: ClassVar[bool] = True

    data: Any = None


@dataclass(frozen=True)
class Failure:
    """Business failure reported on purpose by a handler."""

    success: ClassVar[bool] = False

    message: str = ""


Result: TypeAlias = Success | Failure


def success(data: Any = None) -> Success:
    """Wrap *data* (or nothing) as a Success."""
    return Success(data)


def failure(message: object = None) -> Failure:
    """Build a Failure. Exceptions and other objects are stringified."""
    if message is None:
        return Failure("")
    return Failure(str(message))


def is_failure(value: object) -> bool:
    """True only for Failure instances built in this process."""
    return isinstance(value, Failure)


def is_success(value: object) -> bool:
    """Anything that is not a Failure counts as a success, raw payloads too."""
    return not is_failure(value)
