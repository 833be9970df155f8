"""
Runargs faults (errors and warnings) and rendering.

Scope
- FaultCode: stable numeric identifiers for every startup fault. Codes are
  grouped by domain so logs and searches stay predictable.
- RuntimeFault / StartupWarning: base types that carry a message plus options
  (lineno, filename, code, hint, ...) and know how to render themselves.
- trigger(): central entry point to surface any fault.

Rendering
- Every message is attributed the way a compiler attributes a diagnostic:
    <command-line arg>:3: error[21113]: -nl flag is missing <numLocales> argument
     → pass the value right after the flag, e.g. -nl <numLocales>
  where 3 is the 1-based position of the offending token in argv, or the line
  number inside a config file when the fault comes from one.

Integration
- The scanner builds faults and calls trigger(fault, **options).
- In shell mode errors are printed with rich and the process exits with status
  1; warnings are printed and parsing goes on.
- Outside shell mode errors are raised and warnings go through warnings.warn,
  which is what the test-suite and embedding hosts rely on.
"""
import copy
import sys
import warnings
from collections import defaultdict
from enum import IntEnum
from types import MappingProxyType

from rich.console import Console, Group
from rich.text import Text

from .utils import Unset

console = Console(stderr=True)


class FaultCode(IntEnum):
    """
    canonical fault codes for startup argument handling.

    grouping
    - arguments (2111x)
      • INVALID_ARGUMENT, UNEXPECTED_FLAG, MISSING_VALUE
    - config vars (2112x)
      • UNKNOWN_CONFIG_VAR, AMBIGUOUS_CONFIG_VAR, INVALID_CONFIG_VALUE, CONFIG_FILE
    - warnings (22xxx)
      • ENVIRONMENT_SET
    """
    # --- argument errors (211xx) ---
    INVALID_ARGUMENT            = 21111
    UNEXPECTED_FLAG             = 21112
    MISSING_VALUE               = 21113

    # --- config var errors (211xx) ---
    UNKNOWN_CONFIG_VAR          = 21121
    AMBIGUOUS_CONFIG_VAR        = 21122
    INVALID_CONFIG_VALUE        = 21123
    CONFIG_FILE                 = 21124

    # --- warnings (22xxx) ---
    ENVIRONMENT_SET             = 22111

    def normalize(self):
        """
        return a host-normalized string for this code.

        the host application can provide a __codes__ mapping in __main__
        to override numeric ids with friendlier labels.
        """
        return str(getattr(__import__("__main__"), "__codes__", {}).get(self, self.value))


def _render(fault, kind):
    main = __import__("__main__")

    styles = defaultdict(str, {
        "location": "bold #E6E6F0",
        "error": "bold #FF4DA6",
        "warning": "bold #FFB400",
        "code": "bold #00E5FF",
        "message": "#C8C8D0",
        "hint-arrow": "#9CE19C dim",
        "hint": "italic #9CE19C",
    } | getattr(main, "__styles__", {}))

    colorful = fault.options.get("colorful", True)

    def text(fragment, style=""):
        if not fragment:
            return Text("")
        return Text(str(fragment), styles[style] if colorful else "")

    location = []
    if fault.filename is not Unset:
        location.append(str(fault.filename))
    if fault.lineno:
        location.append(str(fault.lineno))

    header = Text.assemble(
        text(":".join(location) + ": " if location else "", "location"),
        text(kind, kind),
        text("[%s]" % fault.code.normalize() if fault.code is not Unset else "", "code"),
        ": ",
        text(fault.message, "message"),
    )
    if not fault.hint:
        return header
    return Group(header, Text.assemble(text(" → ", "hint-arrow"), text(fault.hint, "hint")))


class RuntimeFault(Exception):
    """
    base type for every fatal startup fault.

    options
    - lineno: 1-based argv position (or config-file line) of the offending input.
    - filename: "<command-line arg>" or the config-file path.
    - code: the FaultCode of the fault.
    - hint: one short actionable sentence.
    - shell/colorful: reporting behavior, merged in by trigger().
    """

    def __init__(self, message=Unset, /, **options):
        assert isinstance(message, str | Unset)
        super().__init__(message)
        self.message = message
        self.options = MappingProxyType(options)

    @property
    def lineno(self):
        return self.options.get("lineno", 0)

    @property
    def filename(self):
        return self.options.get("filename", Unset)

    @property
    def code(self):
        return self.options.get("code", Unset)

    @property
    def hint(self):
        return self.options.get("hint")

    def __str__(self):
        return str(self.message)

    def __rich__(self):
        return _render(self, "error")

    def __trigger__(self) -> None:
        if not self.options.get("shell"):
            raise self from None
        console.print(self)
        sys.exit(1)

    def __replace__(self, *unused, **overrides):
        assert not unused, "positional arguments are not allowed"
        return type(self)(self.message, **{**self.options, **overrides})


class InvalidArgumentError(RuntimeFault): ...
class UnexpectedFlagError(InvalidArgumentError): ...
class MissingValueError(RuntimeFault): ...
class UnknownConfigVarError(RuntimeFault): ...
class AmbiguousConfigVarError(RuntimeFault): ...
class InvalidConfigValueError(InvalidArgumentError): ...
class ConfigFileError(RuntimeFault): ...


class StartupWarning(Warning):
    """
    base type for non-fatal startup faults.

    shares the option contract of RuntimeFault; triggering never stops the scan.
    """

    def __init__(self, message=Unset, /, **options):
        assert isinstance(message, str | Unset)
        super().__init__(message)
        self.message = message
        self.options = MappingProxyType(options)

    lineno = RuntimeFault.lineno
    filename = RuntimeFault.filename
    code = RuntimeFault.code
    hint = RuntimeFault.hint

    def __str__(self):
        return str(self.message)

    def __rich__(self):
        return _render(self, "warning")

    def __trigger__(self) -> None:
        if not self.options.get("shell"):
            return warnings.warn(self, stacklevel=3)
        console.print(self)

    def __replace__(self, *unused, **overrides):
        assert not unused, "positional arguments are not allowed"
        return type(self)(self.message, **{**self.options, **overrides})


class EnvironmentSetWarning(StartupWarning): ...


def trigger(fault, /, **options):
    """
    surface a fault with the given runtime options.

    contract
    - fault must provide __trigger__ and __replace__ methods (see base classes).
    - options are merged into the fault via copy.replace(fault, **options).
    - in shell mode rendering happens on the rich stderr console; otherwise
      errors are raised and warnings are emitted through the warnings module.
    """
    if (
        not hasattr(fault, "__trigger__") or
        not callable(fault.__trigger__) or
        not hasattr(fault, "__replace__") or
        not callable(fault.__replace__)
    ):
        raise TypeError("trigger() argument must have a __trigger__ and __replace__ methods")
    copy.replace(fault, **options).__trigger__()


__all__ = (
    "FaultCode",
    "RuntimeFault",
    "InvalidArgumentError",
    "UnexpectedFlagError",
    "MissingValueError",
    "UnknownConfigVarError",
    "AmbiguousConfigVarError",
    "InvalidConfigValueError",
    "ConfigFileError",
    "StartupWarning",
    "EnvironmentSetWarning",
    "trigger",
)
