"""
Runargs parser: the startup scan that runs before the embedded program.

What this module provides
- Parser: walks argv once, left to right, classifying each token and handing
  it to the first resolver that claims it (runtime flag, config var, or the
  forwarder), then runs the terminal actions.
- parseargs(...): one-call convenience around Parser.
- Invocation: the result, i.e. the frozen RuntimeFlags, the forwarded argv
  and the non-fatal faults recorded on the way.

Terminal actions
- about wins over help: when both are requested, the about-printer runs and
  the process exits before help is rendered.
- help only takes effect when the program takes no arguments of its own;
  otherwise '-h'/'--help' is simply forwarded for the program to handle.
- both exit the process with status 0.

Faults
- the first fatal fault stops the scan. In shell mode it is printed on stderr
  and the process exits with status 1; otherwise it is raised.

Quick start
    from runargs import Program, ConfigRegistry, parseargs

    registry = ConfigRegistry()
    registry.declare("n", int, 100)

    invocation = parseargs(sys.argv, Program("hello"), registry)
    if invocation.flags.verbosity is Verbosity.VERBOSE: ...
"""
import logging
import os
import sys
from typing import NamedTuple

from .config import ConfigRegistry, ConfigBridge
from .dispatch import Scan, RESOLVERS
from .faults import RuntimeFault, trigger
from .flags import RuntimeFlags
from .forwarder import Forwarder
from .help import render_help
from .program import Program
from .tokens import TokenKind, classify
from .utils import *

log = logging.getLogger(__name__)


class Invocation(NamedTuple):
    flags: RuntimeFlags
    argv: tuple[str, ...]
    faults: tuple = ()


class Parser:
    """
    Startup argument scanner bound to one program and one config engine.

    Parameters
    - program: Program (or any object with accepts/about()/help()).
    - config: the ConfigEngine receiving -s/--name=/-f assignments. A fresh,
      empty ConfigRegistry when omitted.
    - environ: mapping receiving -E assignments (os.environ by default).
    - shell: print faults and exit instead of raising (True by default).
    - colorful: colorize faults and help.
    """

    def __init__(self, program=Unset, /, config=Unset, *, environ=Unset, shell=True, colorful=True):
        self.program = coalesce(program, Program())
        self.config = coalesce(config, ConfigRegistry())
        self.environ = coalesce(environ, os.environ)
        self.shell = bool(shell)
        self.colorful = bool(colorful)

    def report(self, fault):
        trigger(fault, shell=self.shell, colorful=self.colorful)

    def parse(self, argv):
        """
        scan argv (argv[0] being the program name) and return an Invocation.

        never returns when a terminal action runs or, in shell mode, when a
        fatal fault is found.
        """
        argv = list(argv)
        forwarder = Forwarder(self.program.accepts)

        with RuntimeFlags() as flags:
            scan = Scan(argv, flags, forwarder, ConfigBridge(self.config), environ=self.environ, report=self.report)
            try:
                self._scan(scan)
            except RuntimeFault as fault:
                self.report(fault)
                raise  # only reached when the reporter returns

        invocation = Invocation(flags, forwarder.argv, tuple(scan.faults))
        log.debug("parsed %r", invocation)

        if flags.about:
            self.program.about()
            sys.exit(0)

        if flags.help and not self.program.accepts:
            render_help(self.program, self.config, colorful=self.colorful)
            sys.exit(0)

        return invocation

    def _scan(self, scan):
        while scan.index < len(scan.argv):
            token = classify(scan.token, accepts=scan.forwarder.accepts, stopped=scan.flags.stopped)
            match token.kind:
                case TokenKind.STOP:
                    scan.flags.stopped = True
                    consumed = 0
                case TokenKind.INVALID:
                    raise scan.invalid()
                case TokenKind.FORWARD:
                    consumed = scan.forwarder.forward(scan.token, scan.lineno, scan.filename)
                case _:
                    for resolver in RESOLVERS:
                        if (consumed := resolver(scan, token)) is not Unset:
                            break
            scan.index += 1 + consumed


def parseargs(argv=Unset, program=Unset, /, config=Unset, **options):
    """
    parse argv (sys.argv when omitted) for program and return an Invocation.

    options are forwarded to Parser (environ, shell, colorful).
    """
    return Parser(program, config, **options).parse(coalesce(argv, sys.argv))


__all__ = (
    "Invocation",
    "Parser",
    "parseargs",
)
