"""Branchwork.

Usage:
  branchwork [options] run MODULE [-p PROGRAM] [--events] [EVENT...]
  branchwork [options] steps MODULE [-p PROGRAM]
  branchwork --version
  branchwork -h | --help

Commands:
  run      Start a driver for a program and dispatch EVENTs into it, in order.
           The special events :undo and :redo move through the history.
  steps    Print the steps of a program.

Arguments:
  MODULE   Python module (dotted name) or .py file holding the program.
  EVENT    An event. JSON values are decoded, anything else is a string.

Options:
  --version       Show version.
  -h, --help      Show this screen.
  -q, --quiet     Be quiet.
  -v, --verbose   Be verbose.
  -V, --vverbose  Be very verbose.
  --no-colours    Disable colours in CLI output.

  --config=CONFIG  Config file to use (default: branchwork.toml, if it exists)

  -p PROGRAM, --program=PROGRAM  Attribute holding the Program (default: program)
  -e, --events                   Print the probe events after running
"""

import asyncio
import json
import logging
import sys
import time
from functools import wraps

from docopt import docopt

from .. import __version__, config
from ..driver import Driver
from ..exceptions import (
    AtEndError,
    AtStartError,
    BranchError,
    UnexpectedError,
    UserResolvableError,
)
from ..load import load_program
from . import interface as ui
from .interface import CROSS, TICK, bad, dim, exit_bug, exit_problem, init, primary

LOG = logging.getLogger(__name__)

UNDO = ":undo"
REDO = ":redo"


def timed(fn):
    """Time execution of fn and print it"""

    @wraps(fn)
    def _wrapped(args, **kwargs):
        start = time.time()
        fn(args, **kwargs)
        end = time.time()
        if not args["--quiet"]:
            sys.stderr.write(str(dim(f"\n-- {end - start:.3f}s\n")))

    return _wrapped


def need_cfg(fn):
    """Exec fn with config"""

    @wraps(fn)
    def _wrapped(args):
        cfg = config.load(args["--config"], required=bool(args["--config"]))
        return fn(args, cfg=cfg)

    return _wrapped


def parse_event(text: str):
    """Decode an event from the command line"""
    try:
        return json.loads(text)
    except json.JSONDecodeError:
        return text


def _get_program(args, cfg):
    name = args["--program"] or cfg.program.name
    sys.path.append(".")
    return load_program(args["MODULE"], name)


async def run_events(driver: Driver, events: list):
    """Dispatch events into driver, handling :undo and :redo"""
    await driver.start()
    for text in events:
        if text == UNDO:
            try:
                driver.undo()
            except AtStartError:
                ui.info(bad(f"{CROSS} nothing to undo"))
        elif text == REDO:
            try:
                driver.redo()
            except AtEndError:
                ui.info(bad(f"{CROSS} nothing to redo"))
        else:
            event = parse_event(text)
            try:
                admitted = await driver.dispatch(event)
            except BranchError as exc:
                ui.info(bad(f"{CROSS} {exc}"))
                continue
            if not admitted:
                ui.info(dim(f"{CROSS} dropped {text}"))


@need_cfg
def _run(args, cfg):
    program = _get_program(args, cfg)

    def sink(payload):
        print(payload)

    driver = Driver(program, sink, config=cfg.driver)
    LOG.info(f"Running {program} ({len(args['EVENT'])} events)...")
    asyncio.run(run_events(driver, args["EVENT"]))

    if not ui.QUIET:
        ui.print_history(driver)
        ui.info(f"{TICK} at " + primary(f"#{driver.current_index}"))
    if args["--events"]:
        ui.print_events(driver.probe)


@need_cfg
def _steps(args, cfg):
    program = _get_program(args, cfg)
    print(program.listing())


@timed
def dispatch(args):
    if args["run"]:
        _run(args)
    elif args["steps"]:
        _steps(args)
    else:
        exit_problem("Invalid command line.", __doc__)


def main():
    args = docopt(__doc__, version=__version__)
    init(args)
    LOG.debug("CLI args: %s", args)

    try:
        dispatch(args)
    except UserResolvableError as exc:
        exit_problem(exc.msg, exc.suggested_fix)
    except UnexpectedError as exc:
        exit_bug(str(exc))


if __name__ == "__main__":
    main()
