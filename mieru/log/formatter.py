"""Formatters that turn log entries into bytes."""

from __future__ import annotations

import abc
from datetime import datetime
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from mieru.log.entry import Entry

FIELD_KEY_MSG = "msg"
FIELD_KEY_LEVEL = "level"
FIELD_KEY_TIME = "time"
FIELD_KEY_FUNC = "func"
FIELD_KEY_FILE = "file"

# A fixed string printed at the beginning of each daemon log line.
LOG_PREFIX = ""


class Formatter(abc.ABC):
    """Turns an entry into the bytes written to the log output."""

    @abc.abstractmethod
    def format(self, entry: Entry) -> bytes:
        """Serialize ``entry``."""


def _target_buffer(entry: Entry) -> bytearray:
    return entry.buffer if entry.buffer is not None else bytearray()


class CliFormatter(Formatter):
    """Prints only the message, suited to command output."""

    def format(self, entry: Entry) -> bytes:
        buf = _target_buffer(entry)
        buf.extend(entry.message.encode())
        buf.extend(b"\n")
        return bytes(buf)


def _rfc3339(when: datetime) -> str:
    if when.tzinfo is None:
        when = when.astimezone()
    base = when.strftime("%Y-%m-%dT%H:%M:%S")
    offset = when.utcoffset()
    if not offset:
        return base + "Z"
    total = int(offset.total_seconds())
    sign = "+" if total >= 0 else "-"
    hours, minutes = divmod(abs(total) // 60, 60)
    return f"{base}{sign}{hours:02d}:{minutes:02d}"


class DaemonFormatter(Formatter):
    """Prints time, level, message, caller and sorted fields on one line."""

    def __init__(self, no_timestamp: bool = False) -> None:
        self.no_timestamp = no_timestamp

    def format(self, entry: Entry) -> bytes:
        user_data = dict(entry.data)
        has_caller = entry.has_caller()

        ordered_keys = []
        if not self.no_timestamp:
            ordered_keys.append(FIELD_KEY_TIME)
        ordered_keys += [FIELD_KEY_LEVEL, FIELD_KEY_MSG]
        file_info = func_info = ""
        if has_caller:
            file_info = f"{entry.caller.file}:{entry.caller.line}"
            func_info = entry.caller.function
            ordered_keys += [FIELD_KEY_FILE, FIELD_KEY_FUNC]
        ordered_keys += sorted(user_data)

        buf = _target_buffer(entry)
        buf.extend(LOG_PREFIX.encode())
        for key in ordered_keys:
            if key == FIELD_KEY_TIME:
                value = _rfc3339(entry.time)
            elif key == FIELD_KEY_LEVEL:
                value = str(entry.level).upper()
            elif key == FIELD_KEY_MSG:
                value = entry.message
            elif key == FIELD_KEY_FILE and has_caller:
                value = file_info
            elif key == FIELD_KEY_FUNC and has_caller:
                value = func_info
            else:
                value = f"{key}={user_data.get(key)}"
            if buf:
                buf.extend(b" ")
            buf.extend(value.encode())
        buf.extend(b"\n")
        return bytes(buf)


class NilFormatter(Formatter):
    """Produces no output, which disables logging."""

    def format(self, entry: Entry) -> bytes:
        return b""