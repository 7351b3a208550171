import io

import pytest

from mieru.cli.helpfmt import HelpCmdEntry, HelpFormatter
from mieru.log import exported as log
from mieru.log.formatter import CliFormatter


@pytest.fixture
def captured():
    logger = log.standard_logger()
    old_out, old_formatter, old_level = logger.out, logger.formatter, logger.level
    buf = io.StringIO()
    log.set_output(buf)
    log.set_formatter(CliFormatter())
    log.set_level("INFO")
    try:
        yield buf
    finally:
        log.set_output(old_out)
        log.set_formatter(old_formatter)
        logger.level = old_level


def test_usage_line_from_app_name():
    lines = HelpFormatter(app_name="mieru").lines()
    assert lines == ["Usage: mieru <COMMAND> [<ARGS>]", ""]


def test_empty_formatter_has_no_lines():
    assert HelpFormatter().lines() == []


def test_entries_section():
    fmt = HelpFormatter(entries=[HelpCmdEntry("help", "Show mieru client help.")])
    assert fmt.lines() == [
        "Commands:",
        "  help",
        "        Show mieru client help.",
        "",
    ]


def test_advanced_section_follows_entries():
    fmt = HelpFormatter(
        app_name="mita",
        entries=[HelpCmdEntry("start", "Start mita server proxy service.")],
        advanced=[HelpCmdEntry("run", "Run mita server in foreground.")],
    )
    lines = fmt.lines()
    commands = lines.index("Commands:")
    advanced = lines.index("Commands for developers and experienced users:")
    assert 0 < commands < advanced
    assert lines[advanced + 1] == "  run"
    assert lines[advanced + 2] == "        Run mita server in foreground."
    assert len(lines) == 2 + 4 + 4


def test_print_writes_every_line(captured):
    fmt = HelpFormatter(
        app_name="mieru",
        entries=[HelpCmdEntry("version", "Show mieru client version.")],
    )
    fmt.print()
    assert captured.getvalue() == "".join(line + "\n" for line in fmt.lines())


def test_print_keeps_percent_signs(captured):
    fmt = HelpFormatter(entries=[HelpCmdEntry("x", "100% done")])
    fmt.print()
    assert "        100% done\n" in captured.getvalue()