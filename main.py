import sys

from rich.pretty import pprint

from runargs import *
from runargs import logs

registry = ConfigRegistry()
registry.declare("n", int, 100, descr="problem size")
registry.declare("label", str, "world")
registry.declare("check", bool, True, module="Verify")

program = Program("hello", "0.0.0")


if __name__ == '__main__':
    invocation = parseargs(sys.argv, program, registry)
    logs.install(invocation.flags)
    pprint(invocation)
    pprint(registry.values)
