"""
Arguments module behavioral tests (Arg descriptors).

Scope
- Validate named constructors (with_value, with_default_value, without_value).
- Validate metadata constraints (name normalization and reserved names, kind resolution,
  descr defaults to None but explicit None rejected, no None default, no default on flags).
- Validate default acceptance, canonical value/default text and Display forms.

Conventions
- Test method names follow CamelCase per project convention.
- Never pass explicit None for an optional parameter; omit instead.
"""

from __future__ import annotations

import unittest
from unittest import TestCase

from parg import Arg, Kind, u8, f64
from parg.faults import DefaultTypeMismatchError, MissingValueKindError, FaultCode


class TestArgConstruction(TestCase):
    """Behavioral tests for descriptor construction."""

    def testWithValue(self):
        a = Arg.with_value("threshold", Kind.U8, True)
        self.assertEqual(a.name, "threshold")
        self.assertIs(a.kind, Kind.U8)
        self.assertTrue(a.required)
        self.assertTrue(a.takes_value)
        self.assertFalse(a.has_default())
        self.assertIsNone(a.default)

    def testWithDefaultValue(self):
        a = Arg.with_default_value("thread", Kind.U8, 42)
        self.assertFalse(a.required)
        self.assertTrue(a.has_default())
        self.assertEqual(a.default, 42)

    def testWithoutValue(self):
        a = Arg.without_value("verbose")
        self.assertIsNone(a.kind)
        self.assertFalse(a.takes_value)
        self.assertFalse(a.required)

    def testNativeTypeResolvesToKind(self):
        self.assertIs(Arg.with_value("ratio", f64).kind, Kind.F64)
        self.assertIs(Arg.with_value("name", str).kind, Kind.STRING)

    def testBuiltinIntIsNotAKind(self):
        with self.assertRaises(TypeError):
            Arg.with_value("count", int)

    def testLeadingDashesStripped(self):
        self.assertEqual(Arg.without_value("--verbose").name, "verbose")

    def testNameValidation(self):
        with self.assertRaises(TypeError):
            Arg.without_value(5)
        with self.assertRaises(ValueError):
            Arg.without_value("  ")
        with self.assertRaises(ValueError):
            Arg.without_value("--")
        with self.assertRaises(ValueError):
            Arg.without_value("two words")
        with self.assertRaises(ValueError):
            Arg.without_value("key=value")

    def testHelpIsReserved(self):
        with self.assertRaises(ValueError):
            Arg.without_value("help")
        with self.assertRaises(ValueError):
            Arg.with_value("HELP", Kind.STRING)

    def testDescrDefaultsToNone(self):
        self.assertIsNone(Arg.without_value("verbose").descr)

    def testDescrExplicitNoneRejected(self):
        with self.assertRaises(TypeError):
            Arg.without_value("verbose", descr=None)

    def testDescrEmptyRejected(self):
        with self.assertRaises(ValueError):
            Arg.without_value("verbose", descr="   ")

    def testDefaultExplicitNoneRejected(self):
        with self.assertRaises(TypeError):
            Arg.with_default_value("thread", Kind.U8, None)

    def testFlagCannotHaveDefault(self):
        with self.assertRaises(TypeError):
            Arg("verbose", None, True)

    def testFreshStateIsUnseen(self):
        a = Arg.with_value("threshold", Kind.U8)
        self.assertFalse(a.seen)
        self.assertIsNone(a.value)

    def testReprListsMetadata(self):
        text = repr(Arg.with_default_value("thread", Kind.U8, 42, descr="workers"))
        self.assertTrue(text.startswith("arg("))
        self.assertIn("name='thread'", text)
        self.assertIn("descr='workers'", text)


class TestArgDefaults(TestCase):
    """Behavioral tests for default acceptance and text forms."""

    def testAcceptDefaultCoercesToNativeType(self):
        a = Arg.with_default_value("thread", Kind.U8, 42)
        a.accept_default()
        self.assertEqual(a.value, 42)
        self.assertIs(type(a.value), u8)

    def testAcceptDefaultRejectsMismatch(self):
        a = Arg.with_default_value("thread", Kind.U8, 300)
        with self.assertRaises(DefaultTypeMismatchError) as context:
            a.accept_default()
        self.assertEqual(context.exception.options["code"], FaultCode.DEFAULT_TYPE_MISMATCH)
        self.assertIn("thread", str(context.exception))

    def testAcceptDefaultRejectsWrongFamily(self):
        a = Arg.with_default_value("ratio", Kind.F64, "1.5")
        with self.assertRaises(DefaultTypeMismatchError):
            a.accept_default()

    def testAcceptDefaultWithoutDefault(self):
        a = Arg.with_value("threshold", Kind.U8)
        with self.assertRaises(DefaultTypeMismatchError):
            a.accept_default()

    def testAcceptDefaultOnFlag(self):
        a = Arg.without_value("verbose")
        with self.assertRaises(MissingValueKindError):
            a.accept_default()

    def testFormatDefault(self):
        self.assertEqual(Arg.with_default_value("thread", Kind.U8, 42).format_default(), "42")
        self.assertEqual(Arg.with_default_value("on", Kind.BOOL, False).format_default(), "false")
        self.assertEqual(Arg.with_default_value("ratio", Kind.F64, 1).format_default(), "1.0")
        self.assertEqual(Arg.with_value("threshold", Kind.U8).format_default(), "")
        self.assertEqual(Arg.without_value("verbose").format_default(), "")

    def testDisplayForms(self):
        a = Arg.with_default_value("thread", Kind.U8, 42)
        self.assertEqual(str(a), "--thread=None")
        a.accept_default()
        self.assertEqual(str(a), "--thread=42")
        self.assertEqual(a.format_value(), "42")
        self.assertEqual(str(Arg.without_value("verbose")), "--verbose")


if __name__ == "__main__":
    unittest.main()
