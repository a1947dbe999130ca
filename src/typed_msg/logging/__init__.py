# SPDX-FileCopyrightText: 2026 typed-msg authors
#
# SPDX-License-Identifier: Apache-2.0

from typed_msg.logging.event_log import EventLog, read_log
from typed_msg.logging.hooks import event_log_hooks

__all__ = ["EventLog", "event_log_hooks", "read_log"]
