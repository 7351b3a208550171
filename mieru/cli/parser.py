"""Matching of command line arguments to registered commands."""

from __future__ import annotations

import json
import sys
from dataclasses import dataclass
from typing import Any, Callable, Sequence

Validator = Callable[[list[str]], Any]
Callback = Callable[[list[str]], Any]


class CommandError(Exception):
    """A command line that cannot be run as given."""


def _quote(text: str) -> str:
    return json.dumps(text, ensure_ascii=False)


def exact_match(args: Sequence[str], want: Sequence[str]) -> bool:
    """Return True if ``args`` starts with ``want``; an empty string matches anything."""
    if len(args) < len(want):
        return False
    return all(w == "" or a == w for a, w in zip(args, want))


def check_no_extra_args(args: Sequence[str], length: int) -> None:
    """Raise :class:`CommandError` if ``args`` has more than ``length`` items."""
    if len(args) > length:
        prefix = " ".join(args[:length])
        unexpected = " ".join(args[length:])
        raise CommandError(f"unexpected arguments {_quote(unexpected)} after {_quote(prefix)}")


@dataclass(frozen=True)
class _Hook:
    matches: tuple[str, ...]
    validator: Validator | None
    callback: Callback


class CommandRegistry:
    """Registered commands, tried in the order they were added."""

    def __init__(self, binary_name: str = "mieru") -> None:
        self.binary_name = binary_name
        self._hooks: list[_Hook] = []

    def register(
        self,
        matches: Sequence[str],
        validator: Validator | None,
        callback: Callback,
    ) -> None:
        """Add a command.

        ``matches`` must prefix the arguments for the command to be chosen; an
        empty string matches any argument. ``validator`` raises to reject the
        arguments; ``callback`` does the work.
        """
        self._hooks.append(_Hook(tuple(matches), validator, callback))

    def parse_and_execute(self, args: Sequence[str] | None = None) -> None:
        """Run the first command matching ``args`` (``sys.argv`` by default)."""
        argv = list(sys.argv if args is None else args)
        for hook in self._hooks:
            if not exact_match(argv, hook.matches):
                continue
            if hook.validator is not None:
                hook.validator(argv)
            hook.callback(argv)
            return
        cmd = " ".join(argv)
        raise CommandError(
            f"{_quote(cmd)} is not a valid command. "
            f'Run "{self.binary_name} help" to get the list of supported commands'
        )