"""
Faults module behavioral tests (taxonomy, rendering, trigger, host hooks).

Scope
- Validate the fault hierarchy used by parse/validation/retrieval.
- Validate rich rendering (header, message, hint; plain and fancy).
- Validate trigger(): raise vs. shell exit for errors, warnings vs. console for warnings.
- Validate host hooks in __main__ (__codes__, __docs__, __prog__).

Conventions
- Test method names follow CamelCase per project convention.
"""

from __future__ import annotations

import io
import types
import unittest
from unittest import TestCase, mock

from rich.console import Console

from parg.faults import (
    FaultCode,
    ArgumentException,
    ParseError,
    ValidationError,
    RetrievalError,
    HelpRequested,
    ConversionError,
    MissingRequiredError,
    TypeMismatchError,
    ArgumentWarning,
    RepeatedArgumentWarning,
    trigger,
    getdoc,
)


def render(renderable):
    console = Console(file=io.StringIO(), width=200)
    console.print(renderable)
    return console.file.getvalue()


class TestTaxonomy(TestCase):
    """Behavioral tests for the fault hierarchy."""

    def testFamilies(self):
        self.assertTrue(issubclass(ConversionError, ParseError))
        self.assertTrue(issubclass(HelpRequested, ParseError))
        self.assertTrue(issubclass(MissingRequiredError, ValidationError))
        self.assertTrue(issubclass(TypeMismatchError, RetrievalError))
        self.assertTrue(issubclass(ParseError, ArgumentException))
        self.assertTrue(issubclass(RepeatedArgumentWarning, ArgumentWarning))
        self.assertTrue(issubclass(RepeatedArgumentWarning, Warning))

    def testHelpRequestedHasEmptyMessage(self):
        self.assertEqual(str(HelpRequested()), "")

    def testMessageAndOptions(self):
        fault = ConversionError("bad value", code=FaultCode.CONVERSION_FAILED, token="x")
        self.assertEqual(str(fault), "bad value")
        self.assertEqual(fault.options["token"], "x")
        with self.assertRaises(TypeError):
            fault.options["token"] = "y"

    def testCodesAreGrouped(self):
        self.assertEqual(FaultCode.CONVERSION_FAILED // 100, 211)
        self.assertEqual(FaultCode.MISSING_REQUIRED // 100, 212)
        self.assertEqual(FaultCode.TYPE_MISMATCH // 100, 213)
        self.assertEqual(FaultCode.REPEATED_ARGUMENT // 1000, 22)


class TestRendering(TestCase):
    """Behavioral tests for rich rendering."""

    def testPlainRendering(self):
        fault = MissingRequiredError(
            "argument '--x' is required",
            title="missing required argument",
            code=FaultCode.MISSING_REQUIRED,
            hint="add '--x'",
        )
        output = render(fault)
        self.assertIn("21201", output)
        self.assertIn("Missing Required Argument", output)
        self.assertIn("argument '--x' is required", output)
        self.assertIn("→ add '--x'", output)
        self.assertIn("[ parg —", output)

    def testFancyRendering(self):
        fault = MissingRequiredError("argument '--x' is required", code=FaultCode.MISSING_REQUIRED, fancy=True)
        output = render(fault)
        self.assertIn("╭", output)
        self.assertIn("argument '--x' is required", output)

    def testHostOverrides(self):
        main = types.ModuleType("__main__")
        main.__prog__ = "host"
        main.__codes__ = {FaultCode.MISSING_REQUIRED: "E-REQ"}
        main.__docs__ = {FaultCode.MISSING_REQUIRED: "see the manual"}
        with mock.patch.dict("sys.modules", {"__main__": main}):
            output = render(MissingRequiredError("gone", code=FaultCode.MISSING_REQUIRED))
            self.assertEqual(FaultCode.MISSING_REQUIRED.normalize(), "E-REQ")
            self.assertEqual(getdoc(FaultCode.MISSING_REQUIRED), "see the manual")
        self.assertIn("[ host — E-REQ", output)

    def testDefaultHooks(self):
        self.assertEqual(FaultCode.TYPE_MISMATCH.normalize(), "21303")
        self.assertIsNone(getdoc(FaultCode.TYPE_MISMATCH))
        with self.assertRaises(TypeError):
            getdoc(21303)


class TestTrigger(TestCase):
    """Behavioral tests for trigger()."""

    def testTriggerRaisesWithMergedOptions(self):
        with self.assertRaises(ConversionError) as context:
            trigger(ConversionError("bad", token="x"), hint="try again")
        self.assertEqual(context.exception.options["hint"], "try again")
        self.assertEqual(context.exception.options["token"], "x")

    def testTriggerShellExits(self):
        console = Console(file=io.StringIO(), width=200)
        with mock.patch("parg.faults.console", console):
            with self.assertRaises(SystemExit) as context:
                trigger(ConversionError("bad", code=FaultCode.CONVERSION_FAILED), shell=True)
        self.assertEqual(context.exception.code, 1)
        self.assertIn("bad", console.file.getvalue())

    def testTriggerHelpShellExitsZero(self):
        with self.assertRaises(SystemExit) as context:
            trigger(HelpRequested(), shell=True)
        self.assertEqual(context.exception.code, 0)

    def testTriggerWarning(self):
        with self.assertWarns(RepeatedArgumentWarning):
            trigger(RepeatedArgumentWarning("twice", code=FaultCode.REPEATED_ARGUMENT))

    def testTriggerWarningShellPrints(self):
        console = Console(file=io.StringIO(), width=200)
        with mock.patch("parg.faults.console", console):
            trigger(RepeatedArgumentWarning("twice", code=FaultCode.REPEATED_ARGUMENT, hint="once"), shell=True)
        self.assertIn("twice", console.file.getvalue())

    def testTriggerRejectsPlainObjects(self):
        with self.assertRaises(TypeError):
            trigger(ValueError("nope"))


if __name__ == "__main__":
    unittest.main()
