"""
The embedded program as seen by the startup scan.

A Program bundles the three things the runtime needs from the program it
starts: whether it consumes command-line arguments of its own, how to print
its "about" information, and any help text of its own to print before the
runtime tables.

    program = Program("hello", "1.2.0", accepts=True)

    @program.about
    def about():
        print("hello 1.2.0, built on a rainy day")
"""
import os.path
import sys

from rich.console import Console
from rich.text import Text

from .utils import *


class Program:
    """
    Embedded-program descriptor.

    Parameters
    - name: str, shown by the default about-printer. Defaults to __prog__ in
      __main__, then to the basename of sys.argv[0].
    - version: str, shown by the default about-printer.
    - about: callable printing compilation/about information.
    - help: callable printing program-specific help before the runtime tables.
    - accepts: the program consumes its own arguments; unrecognized tokens are
      forwarded to it instead of rejected, and '--' stops runtime parsing.
    """

    __introspectable__ = (
        "name",
        "version",
        "accepts",
    )

    def __new__(cls, name=Unset, /, version=Unset, *, about=Unset, help=Unset, accepts=False):
        if not isinstance(name, str | Unset):
            raise TypeError("program 'name' must be a string")
        elif isinstance(name, str) and not (name := name.strip()):
            raise ValueError("program 'name' cannot be empty")

        if not isinstance(version, str | Unset):
            raise TypeError("program 'version' must be a string")

        for label, callback in (("about", about), ("help", help)):
            if callback is not Unset and not callable(callback):
                raise TypeError("program '%s' must be callable" % label)

        self = super().__new__(cls)
        self._name = coalesce(name, getattr(
            __import__("__main__"), "__prog__", os.path.basename(sys.argv[0]) if sys.argv and sys.argv[0] else "program"
        ))
        self._version = coalesce(version)
        self._accepts = bool(accepts)
        self._about = about
        self._help = help
        return self

    name = mirror("name")
    version = mirror("version")
    accepts = mirror("accepts")

    def about(self, callback=Unset, /):
        """
        print about information, or, given a callable, install it as the
        about-printer (usable as a decorator).
        """
        if callback is not Unset:
            if not callable(callback):
                raise TypeError("@about must be applied to a callable")
            self._about = callback
            return callback
        if self._about is not Unset:
            return self._about()
        line = Text.assemble((self._name, "bold"))
        if self._version:
            line.append(" version %s" % self._version)
        Console().print(line, soft_wrap=True)

    def help(self, callback=Unset, /):
        """
        print program-specific help, or install the callable that does.
        """
        if callback is not Unset:
            if not callable(callback):
                raise TypeError("@help must be applied to a callable")
            self._help = callback
            return callback
        if self._help is not Unset:
            return self._help()

    def __rich_repr__(self):
        for name in type(self).__introspectable__:
            yield name, getattr(self, name)

    def __repr__(self):
        return "program(%s)" % ", ".join("%s=%r" % pair for pair in self.__rich_repr__())


__all__ = ("Program",)
