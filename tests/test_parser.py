import pytest

from mieru.cli.parser import CommandError, CommandRegistry, check_no_extra_args, exact_match


@pytest.mark.parametrize(
    "args, want, expected",
    [
        (["mieru", "help"], ["", "help"], True),
        (["/usr/bin/mieru", "help", "x"], ["", "help"], True),
        (["mieru"], ["", "help"], False),
        (["mieru", "start"], ["", "help"], False),
        (["mieru", "apply", "config", "f"], ["", "apply", "config"], True),
        ([], [], True),
    ],
)
def test_exact_match(args, want, expected):
    assert exact_match(args, want) is expected


def test_check_no_extra_args_accepts_exact_length():
    check_no_extra_args(["mieru", "help"], 2)
    with pytest.raises(CommandError):
        check_no_extra_args(["mieru", "help", "now"], 2)


def test_check_no_extra_args_message():
    with pytest.raises(CommandError) as info:
        check_no_extra_args(["mieru", "help", "a", "b"], 2)
    assert str(info.value) == 'unexpected arguments "a b" after "mieru help"'


def test_dispatches_to_matching_command():
    calls = []
    registry = CommandRegistry()
    registry.register(["", "help"], lambda s: check_no_extra_args(s, 2), lambda s: calls.append(("help", s)))
    registry.register(["", "start"], None, lambda s: calls.append(("start", s)))
    registry.parse_and_execute(["mieru", "start"])
    assert calls == [("start", ["mieru", "start"])]


def test_only_first_match_runs():
    calls = []
    registry = CommandRegistry()
    registry.register(["", "get"], None, lambda s: calls.append("first"))
    registry.register(["", "get", "metrics"], None, lambda s: calls.append("second"))
    registry.parse_and_execute(["mieru", "get", "metrics"])
    assert calls == ["first"]


def test_validator_error_stops_callback():
    calls = []

    def validator(s):
        if len(s) < 4:
            raise CommandError("usage: mieru apply config <FILE>. No config file is provided")

    registry = CommandRegistry()
    registry.register(["", "apply", "config"], validator, lambda s: calls.append(s))
    with pytest.raises(CommandError, match="No config file is provided"):
        registry.parse_and_execute(["mieru", "apply", "config"])
    assert calls == []


def test_callback_error_propagates():
    def callback(s):
        raise RuntimeError("boom")

    registry = CommandRegistry()
    registry.register(["", "run"], None, callback)
    with pytest.raises(RuntimeError, match="boom"):
        registry.parse_and_execute(["mieru", "run"])


def test_unknown_command_message_uses_binary_name():
    registry = CommandRegistry("mita")
    registry.register(["", "help"], None, lambda s: None)
    with pytest.raises(CommandError) as info:
        registry.parse_and_execute(["mita", "fly"])
    assert str(info.value) == (
        '"mita fly" is not a valid command. '
        'Run "mita help" to get the list of supported commands'
    )


def test_arguments_passed_as_list():
    received = []
    registry = CommandRegistry()
    registry.register(["", "delete", "user"], None, received.append)
    registry.parse_and_execute(("mita", "delete", "user", "alice", "bob"))
    assert received == [["mita", "delete", "user", "alice", "bob"]]