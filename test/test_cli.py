"""Test the branchwork command line tool"""
import sys
from subprocess import PIPE, Popen


def branchwork_cli(*args):
    """Run branchwork cli command line and return (decoded) outputs"""
    p = Popen(
        [sys.executable, "-m", "branchwork.cli.main", "--no-colours", *args],
        stdout=PIPE,
        stderr=PIPE,
        stdin=PIPE,
    )
    stdout, stderr = p.communicate()
    return stdout.decode(), stderr.decode(), p.returncode


def test_steps():
    stdout, stderr, code = branchwork_cli("steps", "branchwork.examples.counter")
    assert not code
    assert ";; counter:" in stdout
    assert "on_event" in stdout


def test_run():
    stdout, stderr, code = branchwork_cli(
        "run", "branchwork.examples.counter", "inc", "inc", ":undo", "dec"
    )
    assert not code
    assert stdout.startswith("1\n2\n0\n")
    assert "(root)" in stdout
    assert "dec" in stdout


def test_run_json_events():
    stdout, stderr, code = branchwork_cli(
        "-q", "run", "branchwork.examples.counter", '{"type": "inc"}', ":redo"
    )
    assert not code
    assert stdout == "1\n"


def test_branch_error_reported():
    stdout, stderr, code = branchwork_cli(
        "run", "branchwork.examples.counter", "inc", "explode"
    )
    assert not code
    assert "Unknown event" in stdout


def test_missing_module():
    stdout, stderr, code = branchwork_cli("run", "no_such_module_anywhere", "inc")
    assert code == 1
    assert "Cannot find Python module" in stdout


def test_colour_helpers_without_colours():
    from branchwork.cli import interface as ui

    args = {"--vverbose": False, "--verbose": False, "--quiet": True, "--no-colours": True}
    ui.init(args)
    assert "#1" in str(ui.primary("#1"))
    assert "x" in str(ui.dim("x"))
    assert "y" in str(ui.bad("y"))
