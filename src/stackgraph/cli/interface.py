"""CLI UI related functions"""

import contextlib
import logging
import sys
from traceback import format_exception, format_tb

import colorful as cf
from texttable import Texttable
from yaspin import yaspin
from yaspin.spinners import Spinners

TICK = "✔"
CROSS = "✘"

UI_COLORS = {
    # --
    "teal": "#027777",
    "grey": "#777777",
    "magenta": "#9510ED",
    "red": "#991010",
}

cf.update_palette(UI_COLORS)


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

    root_logger = logging.getLogger("stackgraph")

    if not args["--no-colours"]:
        import coloredlogs

        cf.use_true_colors()
        cf.use_palette(UI_COLORS)
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
            logging.basicConfig(level=level)
            root_logger.setLevel(level)


## String colour modifiers


def dim(string):
    return cf.grey(string)


def good(string):
    return cf.bold_teal(string)


def bad(string):
    return cf.bold_red(string)


def primary(string):
    return cf.teal(string)


def neutral(string):
    return cf.bold(string)


## And printing messages


def info(msg):
    if not QUIET:
        print(msg)


## graceful exits


def exit_problem(problem: str, suggested_fix: str):
    """Exit because of a user-correctable problem"""
    print("\n" + str(bad(problem)))
    if suggested_fix:
        print(suggested_fix)
    if not suggested_fix.endswith("\n"):
        print("")
    sys.exit(1)


def exit_bug(msg):
    """Something broke unexpectedly while running"""
    print(str(bad("\nUnexpected error.\n" + str(msg))))

    exc_type, exc_value, exc_traceback = sys.exc_info()
    if exc_type:
        if VERBOSE:
            print("\n" + "".join(format_exception(exc_type, exc_value, exc_traceback)))
        else:
            print(str(dim("".join(format_tb(exc_traceback, limit=4)))))

    sys.exit(1)


## UI elements


class DummySpinner:
    """Something that quacks like yaspin, but does nothing"""

    text = ""

    def write(*args):
        pass

    def ok(*args):
        pass

    def fail(*args):
        pass


def spin(text):
    if QUIET or VERBOSE or not sys.stdout.isatty():
        return contextlib.nullcontext(DummySpinner())
    else:
        return yaspin(Spinners.dots, text=str(text))


def table(header: list, rows: list, alignment=None) -> str:
    t = Texttable(max_width=120)
    if alignment:
        t.set_cols_align(alignment)
        t.set_header_align(alignment)
    t.set_deco(Texttable.HEADER)
    t.header(header)
    t.add_rows(rows, header=False)
    return t.draw()
