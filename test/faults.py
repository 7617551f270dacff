# python
"""
Faults behavioral tests (messages, options, rendering, warnings).

Conventions
- Test method names follow CamelCase per project convention.
- Rendering goes to io.StringIO consoles; nothing is printed to the terminal.
"""

from __future__ import annotations

import io
import unittest
import warnings
from unittest import TestCase
from unittest.mock import patch

from argbind.faults import *


def render(fault, **options):
    file = io.StringIO()
    report(fault, file=file, **options)
    return file.getvalue()


class TestParseException(TestCase):
    def testMessageAndOptions(self):
        fault = UnknownFlagError("flag provided but not defined: -z", code=FaultCode.UNKNOWN_FLAG, flag="z")
        self.assertEqual(str(fault), "flag provided but not defined: -z")
        self.assertEqual(fault.options["flag"], "z")
        with self.assertRaises(TypeError):
            fault.options["flag"] = "y"

    def testHierarchy(self):
        self.assertTrue(issubclass(InvalidValueError, CoercionError))
        self.assertTrue(issubclass(InvalidEnvironmentError, CoercionError))
        for kind in (MalformedFlagError, MissingValueError, MissingEnvironmentError, EmptyEnvironmentError):
            self.assertTrue(issubclass(kind, ParseException))

    def testReplaceKeepsCause(self):
        cause = ValueError("invalid syntax")
        fault = InvalidValueError("invalid value 'x' for flag -n: invalid syntax", title="invalid value")
        fault.__cause__ = cause
        replaced = fault.__replace__(title="bad number")
        self.assertIsInstance(replaced, InvalidValueError)
        self.assertEqual(replaced.options["title"], "bad number")
        self.assertIs(replaced.__cause__, cause)
        self.assertEqual(fault.options["title"], "invalid value")


class TestRendering(TestCase):
    def testPlainReport(self):
        fault = MissingValueError(
            "flag needs an argument: -s",
            title="missing value",
            code=FaultCode.MISSING_VALUE,
            hint="write '-s <value>'",
        )
        output = render(fault, prog="tool", colorful=False)
        self.assertIn("[ tool — 21103 | Missing Value ]", output)
        self.assertIn("flag needs an argument: -s", output)
        self.assertIn("→ write '-s <value>'", output)

    def testTitleDefaultsToClassName(self):
        output = render(UnknownFlagError("flag provided but not defined: -z"), colorful=False)
        self.assertIn("Unknownflagerror", output)

    def testFancyPanel(self):
        output = render(UnknownFlagError("flag provided but not defined: -z"), fancy=True, colorful=False)
        self.assertIn("flag provided but not defined: -z", output)
        self.assertIn("╭", output)

    def testHostCodesAndProgram(self):
        main = __import__("__main__")
        with patch.object(main, "__codes__", {FaultCode.UNKNOWN_FLAG: "E-UNKNOWN"}, create=True), \
                patch.object(main, "__prog__", "host", create=True):
            self.assertEqual(FaultCode.UNKNOWN_FLAG.normalize(), "E-UNKNOWN")
            output = render(UnknownFlagError("x", code=FaultCode.UNKNOWN_FLAG), colorful=False)
        self.assertIn("[ host — E-UNKNOWN |", output)
        self.assertEqual(FaultCode.UNKNOWN_FLAG.normalize(), "21102")

    def testReportRejectsPlainObjects(self):
        with self.assertRaises(TypeError):
            report(ValueError("plain"), file=io.StringIO())


class TestWarnings(TestCase):
    def testWarnEmitsCategory(self):
        with warnings.catch_warnings(record=True) as caught:
            warnings.simplefilter("always")
            warn(EmptyValueWarning("empty value for flag -s", flag="s"))
        self.assertEqual(len(caught), 1)
        self.assertIs(caught[0].category, EmptyValueWarning)
        self.assertEqual(caught[0].message.options["flag"], "s")

    def testWarnRejectsOtherWarnings(self):
        with self.assertRaises(TypeError):
            warn(UserWarning("x"))

    def testWarningRendering(self):
        output = render(EmptyValueWarning("empty value for flag -s", code=FaultCode.EMPTY_INLINE_VALUE), colorful=False)
        self.assertIn("22101", output)
        self.assertIn("empty value for flag -s", output)


class TestGetdoc(TestCase):
    def testMissingDocs(self):
        self.assertIsNone(getdoc(FaultCode.MALFORMED_FLAG))

    def testHostDocs(self):
        main = __import__("__main__")
        with patch.object(main, "__docs__", {FaultCode.MALFORMED_FLAG: "flags start with dashes"}, create=True):
            self.assertEqual(getdoc(FaultCode.MALFORMED_FLAG), "flags start with dashes")

    def testRejectsNonCodes(self):
        with self.assertRaises(TypeError):
            getdoc(21101)


if __name__ == "__main__":
    unittest.main()
