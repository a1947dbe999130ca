# SPDX-FileCopyrightText: 2026 typed-msg authors
#
# SPDX-License-Identifier: Apache-2.0

"""Append-only JSONL log of message traffic with durable writes."""

import json
import os
from datetime import UTC, datetime
from pathlib import Path
from types import TracebackType
from typing import Any


def now_iso() -> str:
    return datetime.now(UTC).isoformat()


def _full_write(fd: int, data: bytes) -> None:
    """Write all bytes, retrying on short writes."""
    while data:
        n = os.write(fd, data)
        data = data[n:]


class EventLog:
    """Structured event log, one JSON object per line.

    Entries look like ``{**context, "ts": ..., "event": ..., "data": ...}``.
    Context keys never override ``ts`` or ``event``. Each entry is
    fsynced before log() returns.
    """

    def __init__(self, path: Path, context: dict[str, str] | None = None) -> None:
        self._path = path
        self._context = context or {}
        self._fd: int | None = None

    @property
    def path(self) -> Path:
        return self._path

    def open(self) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._fd = os.open(
            self._path,
            os.O_WRONLY | os.O_CREAT | os.O_APPEND,
            0o644,
        )

    def __enter__(self) -> "EventLog":
        self.open()
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        self.close()

    def log(self, event: str, data: dict[str, Any] | None = None) -> None:
        """Append one event. Durable on return."""
        if self._fd is None:
            msg = "EventLog not open"
            raise RuntimeError(msg)
        entry: dict[str, Any] = {**self._context, "ts": now_iso(), "event": event}
        if data is not None:
            entry["data"] = data
        line = (json.dumps(entry, separators=(",", ":"), default=str) + "\n").encode()
        _full_write(self._fd, line)
        os.fsync(self._fd)

    def close(self) -> None:
        if self._fd is not None:
            os.close(self._fd)
            self._fd = None


def read_log(path: Path) -> list[dict[str, Any]]:
    """Parse a log file. A torn trailing line from a crash is skipped."""
    if not path.exists():
        return []
    entries: list[dict[str, Any]] = []
    content = path.read_bytes()
    lines = content.split(b"\n")
    # Everything after the last newline is an incomplete write.
    for raw in lines[:-1]:
        if raw:
            entries.append(json.loads(raw))
    return entries


__all__ = ["EventLog", "read_log"]
