"""
Token classification for the startup scan.

classify() looks at one argv slot and tells the scanner what family it belongs
to; it never decides whether a flag is known (that is the dispatch table's job).

    >>> classify("--quiet", accepts=False, stopped=False)
    Token(kind=<TokenKind.LONG: 'long'>, name='quiet', suffix='')
    >>> classify("-nl4", accepts=False, stopped=False)
    Token(kind=<TokenKind.SHORT: 'short'>, name='n', suffix='l4')
"""
from enum import Enum
from typing import NamedTuple


class TokenKind(Enum):
    FORWARD = "forward"   # hand to the embedded program (or reject, see Forwarder)
    STOP = "stop"         # the '--' marker of a program that accepts arguments
    LONG = "long"         # --name
    SHORT = "short"       # -x[suffix]
    INVALID = "invalid"   # too short to be anything


class Token(NamedTuple):
    kind: TokenKind
    name: str = ""
    suffix: str = ""


def classify(token, *, accepts, stopped):
    """
    classify a raw argv slot.

    parameters
    - token: the raw string.
    - accepts: the embedded program consumes arguments of its own.
    - stopped: a '--' marker was already consumed.

    rules (first match wins)
    1. accepts and (stopped or len < 2) → FORWARD (e.g. a bare '-').
    2. accepts and token == '--'        → STOP.
    3. len < 2                          → INVALID.
    4. '--name'                         → LONG, name after the dashes.
    5. '-x...'                          → SHORT, keyed on x, rest is the suffix.
    6. anything else                    → FORWARD.
    """
    if accepts and (stopped or len(token) < 2):
        return Token(TokenKind.FORWARD)
    if accepts and token == "--":
        return Token(TokenKind.STOP)
    if len(token) < 2:
        return Token(TokenKind.INVALID)
    if token.startswith("--"):
        return Token(TokenKind.LONG, token[2:])
    if token.startswith("-"):
        return Token(TokenKind.SHORT, token[1], token[2:])
    return Token(TokenKind.FORWARD)


__all__ = (
    "TokenKind",
    "Token",
    "classify",
)
