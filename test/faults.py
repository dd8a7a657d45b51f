"""
Faults module tests (rendering, re-targeting, surfacing).

Conventions
- Test method names follow CamelCase per project convention.
"""
import contextlib
import copy
import io
import unittest
import warnings
from unittest import TestCase

from rich.text import Text

from ballast.faults import *


class ConfigurationErrorTest(TestCase):

    def testMessageCarriesLibraryMarker(self):
        error = DuplicateNameError("duplicate positional argument name 'file'")
        self.assertEqual(str(error), "ballast: duplicate positional argument name 'file'")
        self.assertEqual(error.message, "duplicate positional argument name 'file'")

    def testBuiltinBases(self):
        self.assertTrue(issubclass(InvalidNameError, ValueError))
        self.assertTrue(issubclass(UnknownArgumentError, LookupError))
        self.assertTrue(issubclass(ArgumentIndexError, IndexError))
        self.assertTrue(issubclass(ParserStateError, RuntimeError))
        self.assertTrue(issubclass(UnsupportedKindError, TypeError))

    def testNotACommandException(self):
        self.assertFalse(issubclass(ConfigurationError, CommandException))


class CommandExceptionTest(TestCase):

    def testBareReasonWithoutProgram(self):
        fault = UnknownSwitchError("invalid option '-z'")
        self.assertEqual(str(fault), "invalid option '-z'")
        self.assertIsNone(fault.prog)

    def testReplaceAddsProgram(self):
        fault = UnknownSwitchError("invalid option '-z'", code=FaultCode.UNKNOWN_SWITCH)
        replaced = copy.replace(fault, prog="prog")
        self.assertIsInstance(replaced, UnknownSwitchError)
        self.assertEqual(str(replaced), "prog: invalid option '-z'")
        self.assertEqual(replaced.code, FaultCode.UNKNOWN_SWITCH)
        self.assertIsNone(fault.prog)

    def testOptionsAreReadOnly(self):
        fault = MissingCardinalsError("requires positional argument 'file'", prog="prog")
        with self.assertRaises(TypeError):
            fault.options["prog"] = "other"

    def testRichRenderingIsSingleLine(self):
        fault = OutOfRangeError("'count' must be in range [0,255]", prog="prog")
        text = fault.__rich__()
        self.assertIsInstance(text, Text)
        self.assertEqual(text.plain, "prog: 'count' must be in range [0,255]")

    def testTriggerRaises(self):
        with self.assertRaises(DuplicatedSwitchError):
            trigger(DuplicatedSwitchError("'name' specified more than once", prog="prog"))

    def testTriggerInShellModeExits(self):
        stderr = io.StringIO()
        with contextlib.redirect_stderr(stderr), self.assertRaises(SystemExit) as context:
            trigger(OptionValueRequiredError("'name' requires a value", prog="prog", shell=True))
        self.assertEqual(context.exception.code, 1)
        self.assertIn("prog: 'name' requires a value", stderr.getvalue())

    def testTriggerRejectsPlainObjects(self):
        with self.assertRaises(TypeError):
            trigger(ValueError("plain"))

    def testValueFaultHierarchy(self):
        for cls in (InvalidBooleanError, InvalidCharacterError, InvalidIntegralError, InvalidFloatingError):
            self.assertTrue(issubclass(cls, InvalidValueError))
        self.assertTrue(issubclass(OutOfRangeError, CommandException))


class CommandWarningTest(TestCase):

    def testTriggerWarns(self):
        with warnings.catch_warnings(record=True) as caught:
            warnings.simplefilter("always")
            trigger(RedundantDefaultWarning("default for flag 'quiet' is redundant"))
        self.assertEqual(len(caught), 1)
        self.assertIs(caught[0].category, RedundantDefaultWarning)
        self.assertEqual(str(caught[0].message), "ballast: default for flag 'quiet' is redundant")

    def testReplaceKeepsType(self):
        warning = RedundantDefaultWarning("redundant", code=FaultCode.REDUNDANT_DEFAULT)
        replaced = copy.replace(warning, shell=True)
        self.assertIsInstance(replaced, RedundantDefaultWarning)
        self.assertTrue(replaced.options["shell"])
        self.assertEqual(replaced.options["code"], FaultCode.REDUNDANT_DEFAULT)


if __name__ == "__main__":
    unittest.main()
