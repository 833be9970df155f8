"""
Help rendering for the runtime flags and the program's config variables.

Layout (colors aside):

    FLAGS:
    ======
      -h, --help             : print this message
      ...
      -nl <n>                : run program using n locales
                               (equivalent to setting the numLocales config const)
      ...

    CONFIG VAR FLAGS:
    =================
      -s, --<cfgVar>=<val>   : set the value of a config var
      -f<filename>           : read in a file of config var assignments

    CONFIG VARS:
    ============
    main config vars:
         n: 100
      name: world

A header is printed each time the category changes from the previous row, so
the static table keeps each category contiguous.

Customization
- Define a mapping named __styles__ in __main__ to override any palette entry
  (header, rule, flag, description, module, config-var, value).
"""
from collections import defaultdict
from enum import Enum
from typing import NamedTuple

from rich.console import Console
from rich.text import Text

from .utils import Unset, coalesce


class Category(Enum):
    GENERAL = "FLAGS"
    CONFIG_VAR = "CONFIG VAR FLAGS"


class FlagDescriptor(NamedTuple):
    flag: str
    descr: str
    category: Category


FLAGS = (
    FlagDescriptor("-h, --help", "print this message", Category.GENERAL),
    FlagDescriptor("-a, --about", "print compilation information", Category.GENERAL),
    FlagDescriptor("-nl <n>", "run program using n locales", Category.GENERAL),
    FlagDescriptor("", "(equivalent to setting the numLocales config const)", Category.GENERAL),
    FlagDescriptor("-q, --quiet", "run program in quiet mode", Category.GENERAL),
    FlagDescriptor("-v, --verbose", "run program in verbose mode", Category.GENERAL),
    FlagDescriptor("-b, --blockreport", "report location of blocked threads on SIGINT", Category.GENERAL),
    FlagDescriptor("-t, --taskreport", "report list of pending and executing tasks on SIGINT", Category.GENERAL),
    FlagDescriptor("--gdb", "run program in gdb", Category.GENERAL),
    FlagDescriptor("-E<name=value>", "set the value of an environment variable", Category.GENERAL),

    FlagDescriptor("-s, --<cfgVar>=<val>", "set the value of a config var", Category.CONFIG_VAR),
    FlagDescriptor("-f<filename>", "read in a file of config var assignments", Category.CONFIG_VAR),
)


def _styler(colorful):
    styles = defaultdict(str, {
        "header": "bold #FFFFFF",
        "rule": "#4B5563",
        "flag": "bold #00E6FF",
        "description": "#9CA3AF",
        "module": "bold #22C55E",
        "config-var": "bold #FFD600",
        "value": "#E5E7EB",
    } | getattr(__import__("__main__"), "__styles__", {}))

    def styler(style):
        return styles[style] if colorful else ""
    return styler


def _header(console, title, styler):
    console.print(Text(title + ":", styler("header")), soft_wrap=True)
    console.print(Text("=" * (len(title) + 1), styler("rule")), soft_wrap=True)


def render_flags(console=Unset, /, table=FLAGS, *, colorful=True):
    """
    print the static runtime-flag table.

    every row is padded to the longest flag text of the whole table; the
    described-only row (empty flag text) drops the ': ' separator.
    """
    console = coalesce(console, Console())
    styler = _styler(colorful)
    width = max((len(descriptor.flag) for descriptor in table), default=0)

    last = Unset
    for descriptor in table:
        if descriptor.category is not last:
            console.print()
            _header(console, descriptor.category.value, styler)
            last = descriptor.category
        console.print(Text.assemble(
            "  ",
            (descriptor.flag.ljust(width), styler("flag")),
            "  : " if descriptor.flag else "    ",
            (descriptor.descr, styler("description")),
        ), soft_wrap=True)
    console.print()


def render_config_vars(engine, console=Unset, /, *, colorful=True):
    """
    print the program's config variables with their current values, grouped
    by module; names are right-aligned to the longest one.
    """
    console = coalesce(console, Console())
    styler = _styler(colorful)
    rows = list(engine.describe())
    width = max((len(row.name) for row in rows), default=0)

    _header(console, "CONFIG VARS", styler)
    module = Unset
    for row in rows:
        if row.module != module:
            console.print(Text.assemble((row.module, styler("module")), " config vars:"), soft_wrap=True)
            module = row.module
        line = Text.assemble(
            "  ",
            (row.name.rjust(width), styler("config-var")),
            ": ",
            (str(row.value), styler("value")),
        )
        if row.descr:
            line.append("  (%s)" % row.descr, styler("description"))
        console.print(line, soft_wrap=True)


def render_help(program, engine, console=Unset, /, *, colorful=True):
    """
    full --help output: the program's own help first, then both tables.
    """
    console = coalesce(console, Console())
    program.help()
    render_flags(console, colorful=colorful)
    render_config_vars(engine, console, colorful=colorful)


__all__ = (
    "Category",
    "FlagDescriptor",
    "FLAGS",
    "render_flags",
    "render_config_vars",
    "render_help",
)
