r"""
Config variables: declaration, storage, config files, and the bridge the
startup scan uses to reach them.

Overview
- ConfigVar[_T]: a named, typed value the embedded program exposes for
  override with -s<name>=<value>, --<name>=<value> or a -f<file>.
- configvar(...): decorator that binds a callback run whenever the variable is
  assigned, mirroring how handlers are bound to argument specs.
- ConfigEngine: the narrow contract the scanner relies on
  (settable / set_value / parse_file / describe).
- ConfigRegistry: the default in-memory ConfigEngine.
- ConfigBridge: turns a flag body into a set_value() call and reports how many
  argv slots it consumed.

Names
- Variables live in a module namespace ("main" unless told otherwise). A body
  may qualify the module as "module.name=value"; an unqualified name must be
  unique across modules or the lookup fails as ambiguous.

Config files
- Whitespace-separated name=value assignments, shell-style quoting, '#'
  comments, for example:

      # tuning
      n=4000  main.label="first run"
      Built-in.dataParTasksPerLocale=2

Quick example:
    >>> registry = ConfigRegistry()
    >>> @registry.configvar("n", type=int, default=100, descr="problem size")
    ... def on_n(value): ...
    >>> registry.set_value("n", "4000", Unset, 1, "<command-line arg>")
    >>> registry.get("n")
    4000
"""
import logging
import re
import shlex
from collections.abc import Iterable
from typing import NamedTuple, Protocol

from .faults import *
from .utils import *

log = logging.getLogger(__name__)

DEFAULT_MODULE = "main"


def _boolean(text, /):
    """
    strict boolean converter; bool("false") is True, which is never what a
    command line means.
    """
    match str(text).strip().lower():
        case "true" | "1" | "yes" | "on":
            return True
        case "false" | "0" | "no" | "off":
            return False
    raise ValueError("expected true or false")


class ConfigVar[_T]:
    """
    Named, typed config variable specification.

    Properties
    - name: identifier (letters, digits, underscores; no leading digit).
    - module: namespace the variable belongs to.
    - type: converter applied to the raw string on assignment (bool is read
      strictly: true/false/1/0/yes/no/on/off).
    - default: value reported until the variable is assigned.
    - descr: short description for help.
    - private: hidden from help and from command-line assignment.
    """

    __introspectable__ = (
        "name",
        "module",
        "type",
        "default",
        "descr",
        "private",
    )

    def __new__(
            cls,
            name,
            /,
            type=str,
            default=None,
            *,
            module=DEFAULT_MODULE,
            descr=Unset,
            private=False,
    ):
        if not isinstance(name, str):
            raise TypeError("config var name must be a string")
        elif not re.fullmatch(r"(?!\d)\w+", name := name.strip()):
            raise ValueError("config var name must be an identifier")

        if not isinstance(module, str):
            raise TypeError("config var 'module' must be a string")
        elif not (module := module.strip()) or set(module) & set(".= \t"):
            raise ValueError("config var 'module' must be a non-empty name without dots")

        if not callable(type):
            raise TypeError("config var 'type' must be callable")

        if not isinstance(descr, str | Unset):
            raise TypeError("config var 'descr' must be a string")
        elif isinstance(descr, str) and not (descr := descr.strip()):
            raise ValueError("config var 'descr' cannot be empty")

        self = super().__new__(cls)
        self._name = name
        self._module = module
        self._type = _boolean if type is bool else type
        self._default = default
        self._descr = coalesce(descr)
        self._private = bool(private)
        self._callback = Unset  # Bound by @configvar later.
        return self

    name = mirror("name")
    module = mirror("module")
    type = mirror("type")
    default = mirror("default")
    descr = mirror("descr")
    private = mirror("private")

    @property
    def qualname(self):
        return "%s.%s" % (self._module, self._name)

    def __call__(self, value, /):
        if self._callback is Unset:
            return
        return self._callback(value)

    def __rich_repr__(self):
        for name in type(self).__introspectable__:
            yield name, getattr(self, name)

    def __repr__(self):
        return "config-var(%s)" % ", ".join("%s=%r" % pair for pair in self.__rich_repr__())


class ConfigDescriptor(NamedTuple):
    """one row of the config variable table shown by --help."""
    module: str
    name: str
    value: object
    descr: str | None


class ConfigEngine(Protocol):
    def settable(self, name: str, module: str | UnsetType, lineno: int, filename: str) -> bool: ...
    def set_value(self, name: str, value: str, module: str | UnsetType, lineno: int, filename: str) -> None: ...
    def parse_file(self, path: str, lineno: int, filename: str) -> None: ...
    def describe(self) -> Iterable[ConfigDescriptor]: ...


class ConfigRegistry:
    """
    default in-memory config engine.

    variables are keyed by (module, name) and kept in declaration order, which
    is also the order help shows them in.
    """

    def __init__(self, variables=()):
        self._variables = {}
        self._values = {}
        for variable in variables:
            self.declare(variable)

    def declare(self, variable, /, *args, **kwargs):
        """
        register a ConfigVar, or build one from ConfigVar(...) arguments.
        """
        if not isinstance(variable, ConfigVar):
            variable = ConfigVar(variable, *args, **kwargs)
        elif args or kwargs:
            raise TypeError("declare() takes no extra arguments when given a config var")
        key = (variable.module, variable.name)
        if key in self._variables:
            raise ValueError("config var %r is already declared" % variable.qualname)
        self._variables[key] = variable
        self._values[key] = variable.default
        return variable

    def configvar(self, *args, **kwargs):
        """
        decorator form of declare(): the decorated function runs with the
        converted value every time the variable is assigned.

            @registry.configvar("n", type=int, default=100)
            def on_n(value): ...
        """
        variable = self.declare(*args, **kwargs)

        @rename("configvar")
        def wrapper(callback, /):
            if not callable(callback):
                raise TypeError("@configvar() must be applied to a callable")
            if variable._callback is not Unset:
                raise TypeError("@configvar() must be applied only once")
            variable._callback = callback
            return variable

        return wrapper

    def lookup(self, name, module=Unset, *, lineno=0, filename=Unset):
        """
        find a variable by name, optionally qualified by module.

        returns None when nothing matches; raises AmbiguousConfigVarError when
        an unqualified name is declared in more than one module.
        """
        if module:
            return self._variables.get((module, name))
        matches = [variable for (_, key), variable in self._variables.items() if key == name]
        if len(matches) > 1:
            raise AmbiguousConfigVarError(
                "Configuration variable \"%s\" is ambiguous" % name,
                code=FaultCode.AMBIGUOUS_CONFIG_VAR,
                lineno=lineno,
                filename=filename,
                hint="qualify it with its module, e.g. %s" % " or ".join(
                    "%s=<value>" % variable.qualname for variable in matches
                ),
            )
        return matches[0] if matches else None

    def get(self, name, module=Unset):
        variable = self.lookup(name, module)
        if variable is None:
            raise KeyError(name)
        return self._values[(variable.module, variable.name)]

    @property
    def values(self):
        return {"%s.%s" % key: value for key, value in self._values.items()}

    def settable(self, name, module, lineno, filename):
        """
        tell whether name can be assigned from the command line; private and
        undeclared variables cannot. An ambiguous unqualified name still
        raises AmbiguousConfigVarError.
        """
        variable = self.lookup(name, module, lineno=lineno, filename=filename)
        return variable is not None and not variable.private

    def set_value(self, name, value, module, lineno, filename):
        variable = self.lookup(name, module, lineno=lineno, filename=filename)
        if variable is None or variable.private:
            raise UnknownConfigVarError(
                "Unknown config var: %s" % ("%s.%s" % (module, name) if module else name),
                code=FaultCode.UNKNOWN_CONFIG_VAR,
                lineno=lineno,
                filename=filename,
                hint="run the program with --help to list its config vars",
                name=name,
            )
        try:
            converted = variable.type(value)
        except (TypeError, ValueError) as exception:
            raise InvalidConfigValueError(
                "\"%s\" is not a valid value for config var %s" % (value, variable.name),
                code=FaultCode.INVALID_CONFIG_VALUE,
                lineno=lineno,
                filename=filename,
                hint=str(exception) or None,
            ) from exception
        log.debug("config var %s = %r", variable.qualname, converted)
        self._values[(variable.module, variable.name)] = converted
        variable(converted)

    def parse_file(self, path, lineno, filename):
        """
        apply every name=value assignment found in path.

        faults inside the file are attributed to the file and its line; a file
        that cannot be opened is attributed to the flag that named it.
        """
        try:
            handle = open(path, "rb")
        except OSError as exception:
            raise ConfigFileError(
                "Unable to open \"%s\": %s" % (path, exception.strerror or exception),
                code=FaultCode.CONFIG_FILE,
                lineno=lineno,
                filename=filename,
                hint="check the path given to -f",
            ) from None
        with handle:
            for number, raw in enumerate(handle, 1):
                try:
                    words = shlex.split(raw.decode("utf-8"), comments=True)
                except UnicodeDecodeError as exception:
                    raise ConfigFileError(
                        "config file line is not valid UTF-8 (byte %d)" % (exception.start + 1),
                        code=FaultCode.CONFIG_FILE,
                        lineno=number,
                        filename=path,
                        hint="save the config file as UTF-8",
                    ) from None
                except ValueError as exception:
                    raise ConfigFileError(
                        "%s in config file" % exception,
                        code=FaultCode.CONFIG_FILE,
                        lineno=number,
                        filename=path,
                    ) from None
                for word in words:
                    name, separator, value = word.partition("=")
                    if not separator or not name:
                        raise ConfigFileError(
                            "\"%s\" is not a valid config var assignment" % word,
                            code=FaultCode.CONFIG_FILE,
                            lineno=number,
                            filename=path,
                            hint="write assignments as name=value",
                        )
                    module, _, name = name.rpartition(".")
                    self.set_value(name, value, module or Unset, number, path)

    def describe(self):
        rows = []
        for (module, name), variable in self._variables.items():
            if variable.private:
                continue
            rows.append(ConfigDescriptor(module, name, self._values[(module, name)], variable.descr))
        # group by module, keeping the first-declared module first
        order = list(dict.fromkeys(row.module for row in rows))
        return sorted(rows, key=lambda row: order.index(row.module))

    def __contains__(self, name):
        try:
            return self.lookup(name) is not None
        except AmbiguousConfigVarError:
            return True

    def __len__(self):
        return len(self._variables)


class ConfigBridge:
    """
    hands flag bodies to a ConfigEngine.

    assign() accepts "name=value", "module.name=value" or a bare "name" whose
    value is the next argv slot, and returns the number of slots it consumed
    (0 or 1) so the scanner can advance its cursor uniformly. A name the engine
    does not know is not a config var at all: assign() returns Unset and the
    token goes on to the forwarder.
    """

    def __init__(self, engine):
        self._engine = engine

    @property
    def engine(self):
        return self._engine

    def assign(self, body, argv, index, lineno, filename):
        """
        set the variable named by body and return the consumed count, or
        Unset when the engine has no such variable (the token is then an
        ordinary flag, left to the forwarder).
        """
        name, separator, value = body.partition("=")
        module, _, name = name.rpartition(".")
        if not self._engine.settable(name, module or Unset, lineno, filename):
            log.debug("%r is not a config var", body)
            return Unset
        consumed = 0
        if not separator:
            if index + 1 >= len(argv):
                raise self._missing(name, lineno, filename)
            value = argv[index + 1]
            consumed = 1
        if not value:
            raise self._missing(name, lineno, filename)
        self._engine.set_value(name, value, module or Unset, lineno, filename)
        return consumed

    def load(self, path, lineno, filename):
        log.debug("loading config file %r", path)
        self._engine.parse_file(path, lineno, filename)

    @staticmethod
    def _missing(name, lineno, filename):
        return MissingValueError(
            "Configuration variable \"%s\" is missing its initialization value" % name,
            code=FaultCode.MISSING_VALUE,
            lineno=lineno,
            filename=filename,
            hint="use --%s=<value> or -s%s=<value>" % (name, name),
        )


__all__ = (
    "DEFAULT_MODULE",
    "ConfigVar",
    "ConfigDescriptor",
    "ConfigEngine",
    "ConfigRegistry",
    "ConfigBridge",
)
