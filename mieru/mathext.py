"""Small numeric helpers that work on any ordered, subtractable values."""

from __future__ import annotations

from typing import Any


def mid(a: Any, b: Any, c: Any) -> Any:
    """Return the median of three values."""
    return sorted((a, b, c))[1]


def within_range(value: Any, target: Any, margin: Any) -> bool:
    """Return True if ``value`` lies within ``[target - margin, target + margin]``."""
    return mid(value, target - margin, target + margin) == value