"""
Process-wide runtime flags produced by the startup scan.

RuntimeFlags is written only while the scan runs and is frozen afterward, so
everything that starts later (tasking, the launcher, the embedded program)
sees one immutable snapshot:

    with RuntimeFlags() as flags:
        flags.verbosity = Verbosity.VERBOSE   # allowed, still building
    flags.verbosity = Verbosity.QUIET         # AttributeError

Locale-count parsing lives here too because it is the only flag whose value
needs validation of its own.
"""
import re
from contextlib import contextmanager
from enum import IntEnum
from typing import final

from .faults import InvalidArgumentError, FaultCode

_FIELDS = {
    "verbosity": None,      # replaced by Verbosity.NORMAL below
    "blockreport": False,   # report locations of blocked tasks on SIGINT
    "taskreport": False,    # report pending and executing tasks on SIGINT
    "gdb": 0,               # argv index of --gdb, 0 when absent
    "num_locales": None,
    "help": False,
    "about": False,
    "stopped": False,
}

_INT32 = re.compile(r"\s*[+-]?[0-9]+\s*", re.ASCII)


class Verbosity(IntEnum):
    QUIET = 0
    NORMAL = 1
    VERBOSE = 2


_FIELDS["verbosity"] = Verbosity.NORMAL


@final
class RuntimeFlags:
    """
    write-once-then-freeze record of the runtime-control flags.

    build phase
    - RuntimeFlags() is a context manager; the yielded instance accepts writes
      until the 'with' block exits, then every write raises AttributeError.

    fields
    - verbosity: Verbosity (last -q/-v wins)
    - blockreport, taskreport: bool
    - gdb: int, argv index at which --gdb was seen (0 when absent)
    - num_locales: int | None, requested locale count (None means default)
    - help, about: terminal actions requested
    - stopped: the '--' stop marker was consumed
    """
    __slots__ = (*_FIELDS, "__building")

    @contextmanager
    def __new__(cls):
        self = super().__new__(cls)
        object.__setattr__(self, "_RuntimeFlags__building", True)
        for name, default in _FIELDS.items():
            setattr(self, name, default)
        try:
            yield self
        finally:
            object.__setattr__(self, "_RuntimeFlags__building", False)

    @property
    def frozen(self):
        return not self.__building

    def __setattr__(self, name, value, /):
        if not self.__building:
            raise AttributeError("runtime flags are read-only once parsing has finished")
        object.__setattr__(self, name, value)

    def __delattr__(self, name, /):
        raise AttributeError("runtime flags cannot be deleted")

    def __rich_repr__(self):
        for name in _FIELDS:
            yield name, getattr(self, name)

    def __repr__(self):
        return "runtime-flags(%s)" % ", ".join("%s=%r" % pair for pair in self.__rich_repr__())

    def __init_subclass__(cls, **options):
        raise TypeError("type 'RuntimeFlags' is not an acceptable base type")


def _precise_int32(text):
    """
    strict signed 32-bit parse.

    returns (value, invalid) where invalid holds the offending characters, or
    the whole text when the shape is wrong without any foreign character
    (e.g. "+-3", "3 4"). value is None whenever the parse failed.
    """
    if _INT32.fullmatch(text):
        value = int(text)
        if -2 ** 31 <= value < 2 ** 31:
            return value, ""
        return None, text.strip()
    invalid = "".join(dict.fromkeys(char for char in text if char not in "0123456789+- \t"))
    return None, invalid or text


def parse_num_locales(text, lineno, filename, flags):
    """
    validate a -nl value and store it on flags.num_locales.

    the flag is left untouched when validation fails.
    """
    value, invalid = _precise_int32(text)
    if value is None:
        raise InvalidArgumentError(
            "\"%s\" is not a valid number of locales" % text,
            code=FaultCode.INVALID_ARGUMENT,
            lineno=lineno,
            filename=filename,
            hint="pass a whole number such as -nl 4" + (" (found %r)" % invalid if invalid != text else ""),
            invalid=invalid,
        )
    if value < 1:
        raise InvalidArgumentError(
            "Number of locales must be greater than 0",
            code=FaultCode.INVALID_ARGUMENT,
            lineno=lineno,
            filename=filename,
            hint="pass a positive count such as -nl 1",
        )
    flags.num_locales = value
    return value


def require_num_locales(flags):
    """
    return the requested locale count, failing when none was given.

    meant for launchers that cannot fall back to a default count.
    """
    if not flags.num_locales:
        raise InvalidArgumentError(
            "Specify number of locales via -nl <#> or --numLocales=<#>",
            code=FaultCode.INVALID_ARGUMENT,
        )
    return flags.num_locales


__all__ = (
    "Verbosity",
    "RuntimeFlags",
    "parse_num_locales",
    "require_num_locales",
)
