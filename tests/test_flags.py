import pytest

from drivesync.cli import COMMANDS
from drivesync.errors import InvalidFlag
from drivesync.flags import normalize_invocation, parse_flags

PUSH_FLAGS = COMMANDS["push"].flags
SCHEMAS = {name: spec.flags for name, spec in COMMANDS.items()}


def test_command_table_matches_cli_surface():
    assert list(COMMANDS) == ["init", "pull", "push", "diff", "pub"]
    assert [flag.name for flag in COMMANDS["pull"].flags] == ["r", "no-prompt"]
    assert [flag.name for flag in PUSH_FLAGS] == ["hidden", "r", "no-prompt", "m"]
    assert COMMANDS["init"].flags == COMMANDS["diff"].flags == COMMANDS["pub"].flags == ()


@pytest.mark.parametrize(
    "tokens, expected",
    [
        (["-r=true", "myfile.txt"], ["-r", "myfile.txt"]),
        (["-r=false", "myfile.txt"], ["--no-recursive", "myfile.txt"]),
        (["--r=0"], ["--no-recursive"]),
        (["-no-prompt", "-hidden=T"], ["--no-prompt", "--hidden"]),
        (["--hidden=false", "-m=1", "a", "b"], ["-m", "a", "b"]),
        (["-x", "--", "-r=false"], ["-x", "--", "-r=false"]),
    ],
)
def test_boolean_assignments_become_click_switches(tokens, expected):
    assert parse_flags(PUSH_FLAGS, tokens) == expected


def test_malformed_boolean_is_rejected():
    with pytest.raises(InvalidFlag, match="maybe"):
        parse_flags(PUSH_FLAGS, ["-r=maybe"])


def test_only_the_invoked_command_schema_applies():
    assert normalize_invocation(["-v", "push", "-r=false"], SCHEMAS) == ["-v", "push", "--no-recursive"]
    assert normalize_invocation(["diff", "-r=false"], SCHEMAS) == ["diff", "-r=false"]
    assert normalize_invocation(["--help"], SCHEMAS) == ["--help"]
