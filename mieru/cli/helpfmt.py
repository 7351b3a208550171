"""Formatting of command help text."""

from __future__ import annotations

from dataclasses import dataclass, field

from mieru.log import exported as log

_INDENT_CMD = "  "
_INDENT_HELP = "        "


@dataclass(frozen=True)
class HelpCmdEntry:
    """One command and the sentence that explains it."""

    cmd: str
    help: str


@dataclass
class HelpFormatter:
    """Builds the help screen of an application."""

    app_name: str = ""
    entries: list[HelpCmdEntry] = field(default_factory=list)
    advanced: list[HelpCmdEntry] = field(default_factory=list)

    @staticmethod
    def _section(title: str, entries: list[HelpCmdEntry]) -> list[str]:
        if not entries:
            return []
        lines = [title]
        for entry in entries:
            lines += [f"{_INDENT_CMD}{entry.cmd}", f"{_INDENT_HELP}{entry.help}", ""]
        return lines

    def lines(self) -> list[str]:
        """Return the help screen as a list of lines."""
        lines: list[str] = []
        if self.app_name:
            lines += [f"Usage: {self.app_name} <COMMAND> [<ARGS>]", ""]
        lines += self._section("Commands:", self.entries)
        lines += self._section("Commands for developers and experienced users:", self.advanced)
        return lines

    def print(self) -> None:
        """Write the help screen to the standard logger."""
        for line in self.lines():
            log.info("%s", line)