"""A logger that builds entries and writes them through a formatter."""

from __future__ import annotations

import sys
import threading
from datetime import datetime
from typing import Any, Callable

from mieru.log.entry import BufferPool, Entry, Fields
from mieru.log.formatter import CliFormatter, Formatter
from mieru.log.levels import Level


class _MutexWrap:
    """A lock used as a context manager that can be switched off."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._held = threading.local()
        self.disabled = False

    def __enter__(self) -> _MutexWrap:
        acquired = not self.disabled
        if acquired:
            self._lock.acquire()
        stack = getattr(self._held, "stack", None)
        if stack is None:
            stack = self._held.stack = []
        stack.append(acquired)
        return self

    def __exit__(self, *exc_info: Any) -> None:
        if self._held.stack.pop():
            self._lock.release()

    def disable(self) -> None:
        self.disabled = True


class Logger:
    """Writes entries at or above its level to ``out`` via ``formatter``."""

    def __init__(
        self,
        out: Any = None,
        formatter: Formatter | None = None,
        level: Level = Level.INFO,
        report_caller: bool = False,
        exit_func: Callable[[int], Any] | None = None,
        buffer_pool: BufferPool | None = None,
    ) -> None:
        self.mutex = _MutexWrap()
        self._out = out if out is not None else sys.stderr
        self._formatter = formatter if formatter is not None else CliFormatter()
        self.level = Level(level)
        self._report_caller = report_caller
        self.exit_func = exit_func if exit_func is not None else sys.exit
        self._buffer_pool = buffer_pool

    @property
    def out(self) -> Any:
        return self._out

    @out.setter
    def out(self, value: Any) -> None:
        with self.mutex:
            self._out = value

    @property
    def formatter(self) -> Formatter:
        return self._formatter

    @formatter.setter
    def formatter(self, value: Formatter) -> None:
        with self.mutex:
            self._formatter = value

    @property
    def report_caller(self) -> bool:
        return self._report_caller

    @report_caller.setter
    def report_caller(self, value: bool) -> None:
        with self.mutex:
            self._report_caller = value

    @property
    def buffer_pool(self) -> BufferPool | None:
        """The pool used to format entries; ``None`` means the shared pool."""
        return self._buffer_pool

    @buffer_pool.setter
    def buffer_pool(self, value: BufferPool | None) -> None:
        with self.mutex:
            self._buffer_pool = value

    def _new_entry(self) -> Entry:
        return Entry(self)

    def with_field(self, key: str, value: Any) -> Entry:
        return self._new_entry().with_field(key, value)

    def with_fields(self, fields: Fields) -> Entry:
        return self._new_entry().with_fields(fields)

    def with_error(self, err: BaseException) -> Entry:
        return self._new_entry().with_error(err)

    def with_context(self, ctx: Any) -> Entry:
        return self._new_entry().with_context(ctx)

    def with_time(self, when: datetime) -> Entry:
        return self._new_entry().with_time(when)

    def log(self, level: Level, msg: Any, *args: Any) -> None:
        """Log ``msg % args`` at ``level`` if the level is enabled."""
        if self.is_level_enabled(level):
            self._new_entry().log(level, msg, *args)

    def trace(self, msg: Any, *args: Any) -> None:
        self.log(Level.TRACE, msg, *args)

    def debug(self, msg: Any, *args: Any) -> None:
        self.log(Level.DEBUG, msg, *args)

    def info(self, msg: Any, *args: Any) -> None:
        self.log(Level.INFO, msg, *args)

    def print(self, msg: Any, *args: Any) -> None:
        self._new_entry().print(msg, *args)

    def warn(self, msg: Any, *args: Any) -> None:
        self.log(Level.WARN, msg, *args)

    def warning(self, msg: Any, *args: Any) -> None:
        self.warn(msg, *args)

    def error(self, msg: Any, *args: Any) -> None:
        self.log(Level.ERROR, msg, *args)

    def fatal(self, msg: Any, *args: Any) -> None:
        """Log at fatal level, then exit with status 1."""
        self.log(Level.FATAL, msg, *args)
        self.exit(1)

    def panic(self, msg: Any, *args: Any) -> None:
        """Log at panic level; raises :class:`~mieru.log.entry.PanicError`."""
        self.log(Level.PANIC, msg, *args)

    def exit(self, code: int) -> None:
        if self.exit_func is None:
            self.exit_func = sys.exit
        self.exit_func(code)

    def set_no_lock(self) -> None:
        """Stop locking around writes, for outputs safe to share."""
        self.mutex.disable()

    def is_level_enabled(self, level: Level) -> bool:
        return self.level >= level