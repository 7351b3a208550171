"""Logging severity levels."""

from __future__ import annotations

import enum


class Level(enum.IntEnum):
    """Severity of a log entry; a lower value is more severe."""

    PANIC = 0
    FATAL = 1
    ERROR = 2
    WARN = 3
    INFO = 4
    DEBUG = 5
    TRACE = 6

    def __str__(self) -> str:
        return _NAMES[self]


_NAMES = {
    Level.PANIC: "panic",
    Level.FATAL: "fatal",
    Level.ERROR: "error",
    Level.WARN: "warning",
    Level.INFO: "info",
    Level.DEBUG: "debug",
    Level.TRACE: "trace",
}

_PARSE_TABLE = {
    "panic": Level.PANIC,
    "fatal": Level.FATAL,
    "error": Level.ERROR,
    "warn": Level.WARN,
    "warning": Level.WARN,
    "info": Level.INFO,
    "debug": Level.DEBUG,
    "trace": Level.TRACE,
}

ALL_LEVELS = tuple(Level)


def parse_level(text: str) -> Level:
    """Return the level named by ``text``, ignoring case."""
    try:
        return _PARSE_TABLE[text.lower()]
    except KeyError:
        raise ValueError(f"not a valid log level: {text!r}") from None