import pytest

from mieru.log.levels import ALL_LEVELS, Level, parse_level


@pytest.mark.parametrize(
    "text, expected",
    [
        ("panic", "panic"),
        ("fatal", "fatal"),
        ("error", "error"),
        ("warn", "warning"),
        ("warning", "warning"),
        ("info", "info"),
        ("debug", "debug"),
        ("trace", "trace"),
    ],
)
def test_level_names_match_source_strings(text, expected):
    assert str(parse_level(text)) == expected


@pytest.mark.parametrize("level", list(Level))
def test_round_trip_through_string(level):
    assert parse_level(str(level)) is level


@pytest.mark.parametrize("level", list(Level))
def test_parse_ignores_case(level):
    assert parse_level(str(level).upper()) is level


def test_warn_and_warning_are_the_same_level():
    assert parse_level("warn") is parse_level("warning")
    assert parse_level("warn") is Level.WARN


def test_invalid_level_raises():
    with pytest.raises(ValueError):
        parse_level("verbose")


def test_severity_order():
    names = ["panic", "fatal", "error", "warning", "info", "debug", "trace"]
    parsed = [parse_level(name) for name in names]
    assert parsed == list(ALL_LEVELS)
    assert parsed == sorted(parsed)
    assert parse_level("info") >= parse_level("warn")
    assert not parse_level("info") >= parse_level("debug")