"""
Logging setup driven by the parsed verbosity.

    invocation = parseargs(sys.argv, program)
    logs.install(invocation.flags)

-q keeps only warnings and errors, the default shows info, -v shows debug
output including the scanner's own trace of every token it classified.
"""
import logging

from rich.console import Console
from rich.logging import RichHandler

from .flags import Verbosity

LEVELS = {
    Verbosity.QUIET: logging.WARNING,
    Verbosity.NORMAL: logging.INFO,
    Verbosity.VERBOSE: logging.DEBUG,
}


def install(flags, /, logger="", *, console=None):
    """
    attach a RichHandler on stderr to logger (the root logger by default) at
    the level matching flags.verbosity, replacing any handler installed by a
    previous call. Returns the configured logger.
    """
    logger = logging.getLogger(logger)
    for handler in list(logger.handlers):
        if getattr(handler, "_runargs", False):
            logger.removeHandler(handler)

    handler = RichHandler(console=console or Console(stderr=True), show_path=False, markup=False)
    handler._runargs = True
    handler.setFormatter(logging.Formatter("%(message)s"))
    logger.addHandler(handler)
    logger.setLevel(LEVELS[flags.verbosity])
    return logger


__all__ = (
    "LEVELS",
    "install",
)
