"""
Config variable registry and bridge tests.

Scope
- Declaration validation, lookup (including module qualification and
  ambiguity), typed assignment, config files, callbacks, and the bridge's
  consumed-slot accounting.

Conventions
- Test method names follow CamelCase per project convention.
"""

from __future__ import annotations

import os
import tempfile
import unittest
from unittest import TestCase

from runargs.config import ConfigBridge, ConfigRegistry, ConfigVar
from runargs.faults import (
    AmbiguousConfigVarError,
    ConfigFileError,
    InvalidConfigValueError,
    MissingValueError,
    UnknownConfigVarError,
)
from runargs.utils import Unset

CLI = "<command-line arg>"


class TestConfigVar(TestCase):
    """Validation tests for ConfigVar."""

    def testDefaults(self):
        variable = ConfigVar("n")
        self.assertEqual(variable.module, "main")
        self.assertIs(variable.type, str)
        self.assertIsNone(variable.default)
        self.assertIsNone(variable.descr)
        self.assertFalse(variable.private)
        self.assertEqual(variable.qualname, "main.n")

    def testRejectsBadNames(self):
        for name in ("1abc", "a-b", "", "a.b"):
            with self.subTest(name=name):
                with self.assertRaises(ValueError):
                    ConfigVar(name)
        with self.assertRaises(TypeError):
            ConfigVar(3)

    def testRejectsBadModule(self):
        with self.assertRaises(ValueError):
            ConfigVar("n", module="a.b")
        with self.assertRaises(ValueError):
            ConfigVar("n", module="  ")

    def testRejectsNonCallableType(self):
        with self.assertRaises(TypeError):
            ConfigVar("n", type=3)

    def testRejectsEmptyDescription(self):
        with self.assertRaises(ValueError):
            ConfigVar("n", descr=" ")

    def testPropertiesAreReadOnly(self):
        variable = ConfigVar("n", int, 1)
        with self.assertRaises(AttributeError):
            variable.name = "m"


class TestConfigRegistry(TestCase):
    """Behavioral tests for ConfigRegistry."""

    def setUp(self):
        self.registry = ConfigRegistry()
        self.registry.declare("n", int, 100, descr="problem size")
        self.registry.declare("label", str, "world")
        self.registry.declare("check", bool, True, module="Verify")

    def testDeclareRejectsDuplicates(self):
        with self.assertRaises(ValueError):
            self.registry.declare("n", int, 1)
        # same name, different module is fine
        self.registry.declare("n", int, 1, module="Other")

    def testDefaultsAreReported(self):
        self.assertEqual(self.registry.values, {"main.n": 100, "main.label": "world", "Verify.check": True})

    def testSetValueConverts(self):
        self.registry.set_value("n", "4000", Unset, 1, CLI)
        self.assertEqual(self.registry.get("n"), 4000)

    def testBooleanIsStrict(self):
        self.registry.set_value("check", "false", Unset, 1, CLI)
        self.assertIs(self.registry.get("check"), False)
        with self.assertRaises(InvalidConfigValueError):
            self.registry.set_value("check", "maybe", Unset, 1, CLI)

    def testQualifiedLookup(self):
        self.registry.set_value("check", "0", "Verify", 1, CLI)
        self.assertIs(self.registry.get("check", "Verify"), False)
        with self.assertRaises(UnknownConfigVarError):
            self.registry.set_value("check", "0", "main", 1, CLI)

    def testUnknownVariable(self):
        with self.assertRaises(UnknownConfigVarError) as context:
            self.registry.set_value("nosuch", "1", Unset, 3, CLI)
        self.assertEqual(context.exception.message, "Unknown config var: nosuch")
        self.assertEqual(context.exception.lineno, 3)

    def testInvalidValueLeavesOldValue(self):
        with self.assertRaises(InvalidConfigValueError) as context:
            self.registry.set_value("n", "abc", Unset, 2, CLI)
        self.assertEqual(context.exception.message, "\"abc\" is not a valid value for config var n")
        self.assertEqual(self.registry.get("n"), 100)

    def testAmbiguousVariable(self):
        self.registry.declare("n", int, 1, module="Other")
        with self.assertRaises(AmbiguousConfigVarError):
            self.registry.set_value("n", "5", Unset, 1, CLI)
        self.registry.set_value("n", "5", "Other", 1, CLI)
        self.assertEqual(self.registry.get("n", "Other"), 5)
        self.assertEqual(self.registry.get("n", "main"), 100)

    def testPrivateVariablesAreHidden(self):
        self.registry.declare("secret", int, 7, private=True)
        with self.assertRaises(UnknownConfigVarError):
            self.registry.set_value("secret", "8", Unset, 1, CLI)
        self.assertNotIn("secret", [row.name for row in self.registry.describe()])

    def testDescribeGroupsByModule(self):
        self.registry.declare("extra", int, 0)
        rows = self.registry.describe()
        self.assertEqual([(row.module, row.name) for row in rows], [
            ("main", "n"), ("main", "label"), ("main", "extra"), ("Verify", "check"),
        ])
        self.assertEqual(rows[0].descr, "problem size")

    def testContains(self):
        self.assertIn("n", self.registry)
        self.assertNotIn("nosuch", self.registry)
        self.assertEqual(len(self.registry), 3)

    def testConfigVarCallback(self):
        seen = []

        @self.registry.configvar("size", type=int, default=1)
        def on_size(value):
            seen.append(value)

        self.assertIsInstance(on_size, ConfigVar)
        self.registry.set_value("size", "12", Unset, 1, CLI)
        self.assertEqual(seen, [12])

    def testConfigVarCallbackMustBeCallable(self):
        with self.assertRaises(TypeError):
            self.registry.configvar("size", type=int)(3)


class TestConfigFile(TestCase):
    """Tests for ConfigRegistry.parse_file()."""

    def setUp(self):
        self.registry = ConfigRegistry()
        self.registry.declare("n", int, 100)
        self.registry.declare("label", str, "world")
        self.registry.declare("check", bool, True, module="Verify")

    def write(self, content):
        handle = tempfile.NamedTemporaryFile("w", suffix=".cfg", delete=False, encoding="utf-8")
        self.addCleanup(os.unlink, handle.name)
        with handle:
            handle.write(content)
        return handle.name

    def testAppliesAssignments(self):
        path = self.write("# tuning\nn=42 label=\"hello world\"\n\nVerify.check=false  # off\n")
        self.registry.parse_file(path, 2, CLI)
        self.assertEqual(self.registry.values, {"main.n": 42, "main.label": "hello world", "Verify.check": False})

    def testBadAssignmentIsAttributedToFile(self):
        path = self.write("n=1\nlabel=x oops\n")
        with self.assertRaises(ConfigFileError) as context:
            self.registry.parse_file(path, 2, CLI)
        self.assertEqual(context.exception.filename, path)
        self.assertEqual(context.exception.lineno, 2)
        # assignments before the fault stay applied
        self.assertEqual(self.registry.get("n"), 1)

    def testUnknownVariableIsAttributedToFile(self):
        path = self.write("\n\nnosuch=3\n")
        with self.assertRaises(UnknownConfigVarError) as context:
            self.registry.parse_file(path, 2, CLI)
        self.assertEqual(context.exception.filename, path)
        self.assertEqual(context.exception.lineno, 3)

    def testUnbalancedQuote(self):
        path = self.write("label=\"open\n")
        with self.assertRaises(ConfigFileError):
            self.registry.parse_file(path, 2, CLI)

    def testInvalidUtf8IsAttributedToFileLine(self):
        handle = tempfile.NamedTemporaryFile("wb", suffix=".cfg", delete=False)
        self.addCleanup(os.unlink, handle.name)
        with handle:
            handle.write(b"n=1\nlabel=\xff\xfe\n")
        with self.assertRaises(ConfigFileError) as context:
            self.registry.parse_file(handle.name, 2, CLI)
        self.assertEqual(context.exception.filename, handle.name)
        self.assertEqual(context.exception.lineno, 2)
        self.assertEqual(self.registry.get("n"), 1)

    def testUtf8ValuesAreDecoded(self):
        path = self.write("label=\"héllo wörld\"\n")
        self.registry.parse_file(path, 2, CLI)
        self.assertEqual(self.registry.get("label"), "héllo wörld")

    def testMissingFileIsAttributedToFlag(self):
        with self.assertRaises(ConfigFileError) as context:
            self.registry.parse_file(os.path.join(tempfile.gettempdir(), "runargs-missing.cfg"), 5, CLI)
        self.assertEqual(context.exception.filename, CLI)
        self.assertEqual(context.exception.lineno, 5)


class TestConfigBridge(TestCase):
    """Tests for ConfigBridge.assign()/load()."""

    def setUp(self):
        self.registry = ConfigRegistry()
        self.registry.declare("n", int, 100)
        self.registry.declare("check", bool, True, module="Verify")
        self.bridge = ConfigBridge(self.registry)

    def testInlineValueConsumesNothing(self):
        self.assertEqual(self.bridge.assign("n=5", ["prog", "--n=5"], 1, 1, CLI), 0)
        self.assertEqual(self.registry.get("n"), 5)

    def testDetachedValueConsumesNextSlot(self):
        self.assertEqual(self.bridge.assign("n", ["prog", "--n", "7"], 1, 1, CLI), 1)
        self.assertEqual(self.registry.get("n"), 7)

    def testQualifiedName(self):
        self.bridge.assign("Verify.check=no", ["prog", "--Verify.check=no"], 1, 1, CLI)
        self.assertIs(self.registry.get("check"), False)

    def testEmptyInlineValueIsMissing(self):
        with self.assertRaises(MissingValueError) as context:
            self.bridge.assign("n=", ["prog", "--n="], 1, 1, CLI)
        self.assertEqual(
            context.exception.message, "Configuration variable \"n\" is missing its initialization value"
        )

    def testNoNextSlotIsMissing(self):
        with self.assertRaises(MissingValueError):
            self.bridge.assign("n", ["prog", "--n"], 1, 1, CLI)

    def testEngineIsExposed(self):
        self.assertIs(self.bridge.engine, self.registry)

    def testUnknownNameIsNotConsumed(self):
        self.assertIs(self.bridge.assign("output=x", ["prog", "--output=x"], 1, 1, CLI), Unset)
        self.assertIs(self.bridge.assign("output", ["prog", "--output", "x"], 1, 1, CLI), Unset)
        self.assertIs(self.bridge.assign("main.check=0", ["prog", "--main.check=0"], 1, 1, CLI), Unset)
        self.assertIs(self.registry.get("check"), True)

    def testEmptyDetachedValueIsMissing(self):
        with self.assertRaises(MissingValueError):
            self.bridge.assign("n", ["prog", "--n", ""], 1, 1, CLI)
        self.assertEqual(self.registry.get("n"), 100)

    def testAmbiguousNameRaises(self):
        self.registry.declare("n", int, 1, module="Other")
        with self.assertRaises(AmbiguousConfigVarError):
            self.bridge.assign("n=5", ["prog", "--n=5"], 1, 1, CLI)


if __name__ == "__main__":
    unittest.main()
