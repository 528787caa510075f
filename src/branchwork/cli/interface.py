"""CLI UI related functions"""

import datetime
import logging
import sys
import urllib.parse
from traceback import format_exception, format_stack, format_tb

import colorful as cf
from texttable import Texttable

TICK = "✔"
CROSS = "✘"

UI_COLORS = {
    # --
    "teal": "#027777",
    "grey": "#777777",
    "magenta": "#9510ED",
    "red": "#991010",
}


# Flags that modify interface displays
QUIET = False
VERBOSE = False


def init(args):
    """Initialise the UI, including logging"""

    if args["--vverbose"]:
        level = "DEBUG"
    elif args["--verbose"]:
        level = "INFO"
    else:
        level = None

    global QUIET
    global VERBOSE
    QUIET = args["--quiet"]
    VERBOSE = args["--verbose"] or args["--vverbose"]

    root_logger = logging.getLogger("branchwork")

    # The palette must exist even when disabled, for the colour helpers
    cf.use_palette(UI_COLORS)
    cf.update_palette(UI_COLORS)

    if not args["--no-colours"]:
        import coloredlogs

        cf.use_true_colors()
        if level:
            coloredlogs.install(
                fmt="[%(asctime)s.%(msecs)03d] %(name)-25s %(message)s",
                datefmt="%H:%M:%S",
                level=level,
                logger=root_logger,
            )
    else:
        cf.disable()
        if level:
            handler = logging.StreamHandler()
            handler.setFormatter(logging.Formatter("%(name)-25s %(message)s"))
            root_logger.addHandler(handler)
            root_logger.setLevel(level)


## String colour modifiers


def dim(string):
    return cf.grey(string)


def bad(string):
    return cf.bold_red(string)


def primary(string):
    return cf.teal(string)


## And printing messages


def info(msg):
    if not QUIET:
        print(msg)


## graceful exits


def exit_problem(problem: str, suggested_fix: str):
    """Exit because of a user-correctable problem"""
    print("\n" + bad(problem))
    if suggested_fix:
        print(suggested_fix)
    if not suggested_fix.endswith("\n"):
        print("")
    sys.exit(1)


def exit_bug(msg):
    """Something broke unexpectedly while running"""
    print(bad("\nUnexpected error.\n" + str(msg)))

    exc_type, exc_value, exc_traceback = sys.exc_info()

    if exc_type and VERBOSE:
        print("\n" + "".join(format_exception(exc_type, exc_value, exc_traceback)))
    elif exc_type:
        print("\n" + "".join(format_tb(exc_traceback, limit=4)))
    else:
        print("\n" + "".join(format_stack(limit=4)))

    print("\nIf this persists, please let us know:")
    params = urllib.parse.urlencode(dict(labels="Type: Bug", title=str(msg)))
    print(dim(f"https://github.com/branchwork/branchwork/issues/new?{params}\n"))

    sys.exit(1)


## Tables


def print_history(driver):
    """Print the history entries, marking the cursor"""
    history = driver.history
    if history is None:
        info(dim("(not started)"))
        return

    table = Texttable(max_width=100)
    alignment = ["r", "l", "l", "r"]
    table.set_cols_align(alignment)
    table.set_header_align(alignment)
    table.header(["", "#", "Label", "Limit"])
    table.set_deco(Texttable.HEADER)
    for idx, node in enumerate(history.entries):
        marker = ">" if idx == history.cursor else ""
        label = "(root)" if idx == 0 else str(node.label)
        table.add_row([marker, idx, label, str(node.limit)])

    print("\n" + table.draw() + "\n")


def print_events(probe):
    """Print probe events, with times relative to the first one"""
    if not probe.events:
        return
    times = [datetime.datetime.fromisoformat(e.time) for e in probe.events]
    lowest_time = min(times)

    print(cf.bold("{:>14}  {}  {}".format("Time", "Branch", "Event")))
    for event, t in zip(probe.events, times):
        offset = str(dim(str(t - lowest_time)))
        data = event.data if len(event.data) else ""
        print(f"{offset:>16}  {event.branch:^6}  {event.event} {data}")
