"""The process-wide standard logger and shortcuts to it."""

from __future__ import annotations

import sys
from datetime import datetime
from typing import Any

from mieru.log.entry import ERROR_KEY, Entry, Fields
from mieru.log.formatter import CliFormatter, Formatter
from mieru.log.levels import Level
from mieru.log.logger import Logger

_std = Logger(out=sys.stdout, formatter=CliFormatter())

_LEVELS_BY_NAME = {
    "FATAL": Level.FATAL,
    "ERROR": Level.ERROR,
    "WARN": Level.WARN,
    "INFO": Level.INFO,
    "DEBUG": Level.DEBUG,
    "TRACE": Level.TRACE,
}


def standard_logger() -> Logger:
    return _std


def set_output(out: Any) -> None:
    _std.out = out


def set_formatter(formatter: Formatter) -> None:
    _std.formatter = formatter


def set_report_caller(include: bool) -> None:
    _std.report_caller = include


def set_level(level: str) -> None:
    """Set the level by name; unknown names are ignored."""
    chosen = _LEVELS_BY_NAME.get(level.upper())
    if chosen is not None:
        _std.level = chosen


def get_level() -> Level:
    return _std.level


def is_level_enabled(level: Level) -> bool:
    return _std.is_level_enabled(level)


def with_error(err: BaseException) -> Entry:
    return _std.with_field(ERROR_KEY, err)


def with_context(ctx: Any) -> Entry:
    return _std.with_context(ctx)


def with_field(key: str, value: Any) -> Entry:
    return _std.with_field(key, value)


def with_fields(fields: Fields) -> Entry:
    return _std.with_fields(fields)


def with_time(when: datetime) -> Entry:
    return _std.with_time(when)


def trace(msg: Any, *args: Any) -> None:
    _std.trace(msg, *args)


def debug(msg: Any, *args: Any) -> None:
    _std.debug(msg, *args)


def info(msg: Any, *args: Any) -> None:
    _std.info(msg, *args)


def print(msg: Any, *args: Any) -> None:  # noqa: A001
    _std.print(msg, *args)


def warn(msg: Any, *args: Any) -> None:
    _std.warn(msg, *args)


def warning(msg: Any, *args: Any) -> None:
    _std.warning(msg, *args)


def error(msg: Any, *args: Any) -> None:
    _std.error(msg, *args)


def fatal(msg: Any, *args: Any) -> None:
    """Log at fatal level, then exit with status 1."""
    _std.fatal(msg, *args)


def panic(msg: Any, *args: Any) -> None:
    """Log at panic level and raise :class:`~mieru.log.entry.PanicError`."""
    _std.panic(msg, *args)