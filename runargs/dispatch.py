"""
Flag dispatch table and the resolver chain of the startup scan.

Every recognized runtime flag is an entry bound to a handler:

    @entry("-q", "--quiet")
    def _quiet(scan, suffix): ...

Handlers receive the in-flight Scan and whatever was attached to the flag
after its key ("-nl4" → "4"), and return how many following argv slots they
consumed (0 or 1). Presence-only entries match their exact spelling only; any
attached suffix makes them "not mine". -s returns Unset when its body names no
config var, which hands the token on like any other unknown flag.

The scan asks each resolver in RESOLVERS, in order, to take the current token.
A resolver returns the consumed count, or Unset when the token is not its
business:

    known flag  →  config var (--name / -s)  →  forward or reject
"""
import logging
import os
from typing import NamedTuple, Callable

from .env import define_env_var
from .faults import InvalidArgumentError, MissingValueError, FaultCode
from .flags import Verbosity, parse_num_locales
from .tokens import TokenKind
from .utils import Unset

log = logging.getLogger(__name__)

COMMAND_LINE = "<command-line arg>"


class Scan:
    """
    mutable state of one pass over argv.

    attributes
    - argv: the raw argument vector (argv[0] is the program name).
    - index: the cursor; starts at 1 and only moves forward.
    - flags: RuntimeFlags in its build phase.
    - forwarder: the Forwarder collecting the embedded program's argv.
    - bridge: the ConfigBridge to the config engine.
    - environ: mapping receiving -E assignments.
    - faults: non-fatal faults recorded so far.
    """

    def __init__(self, argv, flags, forwarder, bridge, *, environ=os.environ, report=Unset):
        self.argv = argv
        self.index = 1
        self.flags = flags
        self.forwarder = forwarder
        self.bridge = bridge
        self.environ = environ
        self.faults = []
        self._report = report

    @property
    def token(self):
        return self.argv[self.index]

    @property
    def lineno(self):
        return self.index

    @property
    def filename(self):
        return COMMAND_LINE

    def value(self, suffix, flag, metavar):
        """
        return (value, consumed) for a valued flag: the attached suffix when
        present, otherwise the next argv slot.
        """
        if suffix:
            return suffix, 0
        if self.index + 1 >= len(self.argv):
            raise MissingValueError(
                "%s flag is missing %s argument" % (flag, metavar),
                code=FaultCode.MISSING_VALUE,
                lineno=self.lineno,
                filename=self.filename,
                hint="pass the value right after the flag, e.g. %s %s" % (flag, metavar),
            )
        return self.argv[self.index + 1], 1

    def warn(self, warning):
        self.faults.append(warning)
        if self._report:
            self._report(warning)

    def invalid(self):
        return InvalidArgumentError(
            "\"%s\" is not a valid argument" % self.token,
            code=FaultCode.INVALID_ARGUMENT,
            lineno=self.lineno,
            filename=self.filename,
            hint="run the program with --help to see the accepted flags",
        )


class Entry(NamedTuple):
    key: str
    handler: Callable
    exact: bool


TABLE = {}


def entry(*keys, exact=True):
    """
    register the decorated handler under every given spelling.

    keys are "--name" for long flags and "-x" / "-xy" for short ones; short
    keys are indexed by their first letter.
    """
    def wrapper(handler):
        for key in keys:
            index = key if key.startswith("--") else key[:2]
            if index in TABLE:
                raise ValueError("flag %r is already registered" % key)
            TABLE[index] = Entry(key, handler, exact)
        return handler
    return wrapper


@entry("--gdb")
def _gdb(scan, suffix):
    scan.flags.gdb = scan.index
    return 0


@entry("-h", "--help")
def _help(scan, suffix):
    scan.flags.help = True
    scan.forwarder.push(scan.token)
    return 0


@entry("-a", "--about")
def _about(scan, suffix):
    scan.flags.about = True
    return 0


@entry("-v", "--verbose")
def _verbose(scan, suffix):
    scan.flags.verbosity = Verbosity.VERBOSE
    return 0


@entry("-q", "--quiet")
def _quiet(scan, suffix):
    scan.flags.verbosity = Verbosity.QUIET
    return 0


@entry("-b", "--blockreport")
def _blockreport(scan, suffix):
    scan.flags.blockreport = True
    return 0


@entry("-t", "--taskreport")
def _taskreport(scan, suffix):
    scan.flags.taskreport = True
    return 0


@entry("-nl", exact=False)
def _num_locales(scan, suffix):
    value, consumed = scan.value(suffix, "-nl", "<numLocales>")
    parse_num_locales(value, scan.lineno, scan.filename, scan.flags)
    return consumed


@entry("-E", exact=False)
def _environment(scan, suffix):
    value, consumed = scan.value(suffix, "-E", "<name=value>")
    if warning := define_env_var(value, scan.lineno, scan.filename, environ=scan.environ):
        scan.warn(warning)
    return consumed


@entry("-f", exact=False)
def _config_file(scan, suffix):
    value, consumed = scan.value(suffix, "-f", "<filename>")
    scan.bridge.load(value, scan.lineno, scan.filename)
    return consumed


@entry("-s", exact=False)
def _config_var(scan, suffix):
    if not suffix:
        raise scan.invalid()
    return scan.bridge.assign(suffix, scan.argv, scan.index, scan.lineno, scan.filename)


def resolve_flag(scan, token):
    if token.kind is TokenKind.LONG:
        found = TABLE.get("--" + token.name)
        suffix = ""
    elif token.kind is TokenKind.SHORT:
        found = TABLE.get("-" + token.name)
        raw = scan.token
        if found is None or not raw.startswith(found.key):
            return Unset
        suffix = raw[len(found.key):]
    else:
        return Unset
    if found is None or (found.exact and suffix):
        return Unset
    log.debug("runtime flag %r at position %d", found.key, scan.index)
    return found.handler(scan, suffix)


def resolve_config(scan, token):
    if token.kind is not TokenKind.LONG:
        return Unset
    # a bare '--' only gets here when the program takes no arguments
    if len(scan.token) < 3:
        raise scan.invalid()
    return scan.bridge.assign(token.name, scan.argv, scan.index, scan.lineno, scan.filename)


def resolve_forward(scan, token):
    return scan.forwarder.forward(scan.token, scan.lineno, scan.filename)


RESOLVERS = (
    resolve_flag,
    resolve_config,
    resolve_forward,
)


__all__ = (
    "COMMAND_LINE",
    "Scan",
    "Entry",
    "TABLE",
    "entry",
    "resolve_flag",
    "resolve_config",
    "resolve_forward",
    "RESOLVERS",
)
