"""
-E environment injection tests.

Conventions
- Test method names follow CamelCase per project convention.
- A plain dict stands in for os.environ so the process environment is never
  touched.
"""

from __future__ import annotations

import errno
import unittest
from unittest import TestCase

from runargs.env import define_env_var
from runargs.faults import EnvironmentSetWarning, FaultCode, InvalidArgumentError


class FailingEnviron(dict):
    def __setitem__(self, key, value):
        raise OSError(errno.ENOMEM, "Cannot allocate memory")


class TestDefineEnvVar(TestCase):
    """Behavioral tests for define_env_var()."""

    def testSetsMissingVariable(self):
        environ = {}
        self.assertIsNone(define_env_var("HOME_DIR=/tmp/x", 1, "<command-line arg>", environ=environ))
        self.assertEqual(environ, {"HOME_DIR": "/tmp/x"})

    def testSplitsOnFirstEquals(self):
        environ = {}
        define_env_var("OPTS=a=b", 1, "<command-line arg>", environ=environ)
        self.assertEqual(environ["OPTS"], "a=b")

    def testEmptyValueAllowed(self):
        environ = {}
        define_env_var("EMPTY=", 1, "<command-line arg>", environ=environ)
        self.assertEqual(environ["EMPTY"], "")

    def testExistingVariableIsNotOverwritten(self):
        environ = {"FOO": "original"}
        self.assertIsNone(define_env_var("FOO=bar", 1, "<command-line arg>", environ=environ))
        self.assertEqual(environ["FOO"], "original")

    def testMissingEqualsIsInvalid(self):
        with self.assertRaises(InvalidArgumentError) as context:
            define_env_var("FOO", 4, "<command-line arg>", environ={})
        self.assertEqual(context.exception.message, "-E argument must be of the form name=value")
        self.assertEqual(context.exception.lineno, 4)

    def testFailedSetReturnsWarning(self):
        warning = define_env_var("FOO=bar", 2, "<command-line arg>", environ=FailingEnviron())
        self.assertIsInstance(warning, EnvironmentSetWarning)
        self.assertIs(warning.code, FaultCode.ENVIRONMENT_SET)
        self.assertTrue(warning.message.startswith("Cannot setenv(\"FOO\"): "))
        self.assertEqual(warning.lineno, 2)


if __name__ == "__main__":
    unittest.main()
