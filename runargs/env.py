"""
Environment-variable injection for the -E flag.
"""
import logging
import os

from .faults import InvalidArgumentError, EnvironmentSetWarning, FaultCode

log = logging.getLogger(__name__)


def define_env_var(text, lineno, filename, *, environ=os.environ):
    """
    split "name=value" and set it in environ unless name is already present.

    returns
    - None when the variable was set or left alone because it already exists.
    - an EnvironmentSetWarning when the underlying set failed; the caller
      reports it and keeps parsing.

    raises
    - InvalidArgumentError when text has no '='.
    """
    name, separator, value = text.partition("=")
    if not separator:
        raise InvalidArgumentError(
            "-E argument must be of the form name=value",
            code=FaultCode.INVALID_ARGUMENT,
            lineno=lineno,
            filename=filename,
            hint="for example: -E %s=<value>" % (text or "NAME"),
        )
    if name in environ:
        log.debug("leaving existing environment variable %r untouched", name)
        return None
    try:
        environ[name] = value
    except (OSError, ValueError) as exception:
        return EnvironmentSetWarning(
            "Cannot setenv(\"%s\"): %s" % (name, exception),
            code=FaultCode.ENVIRONMENT_SET,
            lineno=lineno,
            filename=filename,
            hint="the variable was not set; parsing continues",
            exception=exception,
        )
    log.debug("set environment variable %r", name)
    return None


__all__ = ("define_env_var",)
