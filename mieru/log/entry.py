"""Log entries and the buffer pool used while formatting them."""

from __future__ import annotations

import functools
import io
import json
import os
import sys
import threading
import traceback
import types
from collections import deque
from dataclasses import dataclass
from datetime import datetime
from typing import Any

from mieru.log.levels import Level

# The key used by ``with_error``.
ERROR_KEY = "error"

Fields = dict[str, Any]

_PACKAGE_DIR = os.path.dirname(os.path.abspath(__file__))

_FUNCTION_TYPES = (
    types.FunctionType,
    types.BuiltinFunctionType,
    types.MethodType,
    types.BuiltinMethodType,
    functools.partial,
)


class BufferPool:
    """A pool of reusable byte buffers."""

    def __init__(self) -> None:
        self._free: deque[bytearray] = deque()
        self._lock = threading.Lock()

    def get(self) -> bytearray:
        with self._lock:
            if self._free:
                return self._free.pop()
        return bytearray()

    def put(self, buf: bytearray) -> None:
        with self._lock:
            self._free.append(buf)


_default_pool: BufferPool = BufferPool()


def set_buffer_pool(pool: BufferPool) -> None:
    """Replace the pool used by loggers that have none of their own."""
    global _default_pool
    _default_pool = pool


@dataclass(frozen=True)
class Caller:
    """Where a log call came from."""

    file: str
    line: int
    function: str


class PanicError(Exception):
    """Raised after an entry is logged at panic level."""

    def __init__(self, entry: Entry) -> None:
        super().__init__(entry.message)
        self.entry = entry


def _in_log_package(filename: str) -> bool:
    directory = os.path.dirname(os.path.abspath(filename))
    return directory == _PACKAGE_DIR


def _get_caller() -> Caller | None:
    """Return the first frame on the stack outside the log package."""
    for summary in reversed(traceback.extract_stack()):
        if not _in_log_package(summary.filename):
            return Caller(
                file=summary.filename,
                line=summary.lineno or 0,
                function=summary.name,
            )
    return None


def _render(msg: Any, args: tuple) -> str:
    text = msg if isinstance(msg, str) else str(msg)
    return text % args if args else text


def _emit(out: Any, payload: bytes) -> None:
    if isinstance(out, io.TextIOBase):
        out.write(payload.decode("utf-8", errors="replace"))
    else:
        out.write(payload)


class Entry:
    """A log record with fields, bound to a logger.

    The logger provides ``formatter``, ``out``, ``report_caller``,
    ``buffer_pool``, a ``mutex`` context manager, ``is_level_enabled()``
    and ``exit()``.
    """

    def __init__(self, logger: Any) -> None:
        self.logger = logger
        self.data: Fields = {}
        self.time: datetime | None = None
        self.level: Level = Level.PANIC
        self.caller: Caller | None = None
        self.message: str = ""
        self.buffer: bytearray | None = None
        self.context: Any = None
        self.field_error: str = ""

    def _derive(self, data: Fields, when: datetime | None, context: Any, field_error: str) -> Entry:
        entry = Entry(self.logger)
        entry.data = data
        entry.time = when
        entry.context = context
        entry.field_error = field_error
        return entry

    def dup(self) -> Entry:
        """Return a copy with its own field dictionary."""
        return self._derive(dict(self.data), self.time, self.context, self.field_error)

    def to_bytes(self) -> bytes:
        """Return this entry as the logger's formatter renders it."""
        return self.logger.formatter.format(self)

    def has_caller(self) -> bool:
        return (
            self.logger is not None
            and bool(self.logger.report_caller)
            and self.caller is not None
        )

    def with_error(self, err: BaseException) -> Entry:
        return self.with_field(ERROR_KEY, err)

    def with_context(self, ctx: Any) -> Entry:
        return self._derive(dict(self.data), self.time, ctx, self.field_error)

    def with_field(self, key: str, value: Any) -> Entry:
        return self.with_fields({key: value})

    def with_fields(self, fields: Fields) -> Entry:
        data = dict(self.data)
        field_error = self.field_error
        for key, value in fields.items():
            if isinstance(value, _FUNCTION_TYPES):
                message = f"can not add field {json.dumps(key, ensure_ascii=False)}"
                field_error = f"{self.field_error}, {message}" if field_error else message
            else:
                data[key] = value
        return self._derive(data, self.time, self.context, field_error)

    def with_time(self, when: datetime) -> Entry:
        return self._derive(dict(self.data), when, self.context, self.field_error)

    def _buffer_pool(self) -> BufferPool:
        pool = getattr(self.logger, "buffer_pool", None)
        return pool if pool is not None else _default_pool

    def _log(self, level: Level, msg: str) -> None:
        entry = self.dup()
        if entry.time is None:
            entry.time = datetime.now().astimezone()
        entry.level = level
        entry.message = msg

        logger = entry.logger
        with logger.mutex:
            report_caller = logger.report_caller
            pool = entry._buffer_pool()
        if report_caller:
            entry.caller = _get_caller()

        buf = pool.get()
        buf.clear()
        entry.buffer = buf
        try:
            entry._write()
        finally:
            entry.buffer = None
            buf.clear()
            pool.put(buf)

        if level <= Level.PANIC:
            raise PanicError(entry)

    def _write(self) -> None:
        logger = self.logger
        with logger.mutex:
            try:
                serialized = logger.formatter.format(self)
            except Exception as exc:  # a broken formatter must not break the caller
                print(f"Failed to obtain reader, {exc}", file=sys.stderr)
                return
            try:
                _emit(logger.out, serialized)
            except (OSError, ValueError, TypeError) as exc:
                print(f"Failed to write to log, {exc}", file=sys.stderr)

    def log(self, level: Level, msg: Any, *args: Any) -> None:
        """Log ``msg % args`` at ``level`` if the logger allows it."""
        if self.logger.is_level_enabled(level):
            self._log(level, _render(msg, args))

    def trace(self, msg: Any, *args: Any) -> None:
        self.log(Level.TRACE, msg, *args)

    def debug(self, msg: Any, *args: Any) -> None:
        self.log(Level.DEBUG, msg, *args)

    def info(self, msg: Any, *args: Any) -> None:
        self.log(Level.INFO, msg, *args)

    def print(self, msg: Any, *args: Any) -> None:
        self.info(msg, *args)

    def warn(self, msg: Any, *args: Any) -> None:
        self.log(Level.WARN, msg, *args)

    def warning(self, msg: Any, *args: Any) -> None:
        self.warn(msg, *args)

    def error(self, msg: Any, *args: Any) -> None:
        self.log(Level.ERROR, msg, *args)

    def fatal(self, msg: Any, *args: Any) -> None:
        """Log at fatal level, then ask the logger to exit with status 1."""
        self.log(Level.FATAL, msg, *args)
        self.logger.exit(1)

    def panic(self, msg: Any, *args: Any) -> None:
        """Log at panic level and raise :class:`PanicError`."""
        self.log(Level.PANIC, msg, *args)