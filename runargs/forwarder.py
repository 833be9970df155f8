"""
The forwarded argument vector handed to the embedded program.
"""
import logging

from .faults import UnexpectedFlagError, FaultCode

log = logging.getLogger(__name__)


class Forwarder:
    """
    append-only argument vector for the embedded program.

    forward() applies the accept-or-reject policy: a program that declares it
    takes no arguments of its own gets an UnexpectedFlagError instead. push()
    appends unconditionally and is used for tokens the runtime itself decides
    to pass along (the help flags).
    """

    def __init__(self, accepts):
        self._accepts = bool(accepts)
        self._argv = []

    @property
    def accepts(self):
        return self._accepts

    @property
    def argv(self):
        return tuple(self._argv)

    def push(self, token):
        log.debug("forwarding %r", token)
        self._argv.append(token)

    def forward(self, token, lineno, filename):
        if not self._accepts:
            raise UnexpectedFlagError(
                "Unexpected flag:  \"%s\"" % token,
                code=FaultCode.UNEXPECTED_FLAG,
                lineno=lineno,
                filename=filename,
                hint="this program takes no arguments of its own; run it with --help to see the runtime flags",
                token=token,
            )
        self.push(token)
        return 0

    def __len__(self):
        return len(self._argv)

    def __iter__(self):
        return iter(self._argv)

    def __repr__(self):
        return "forwarder(accepts=%r, argv=%r)" % (self._accepts, self._argv)


__all__ = ("Forwarder",)
