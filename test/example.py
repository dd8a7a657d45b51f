"""
Tests for the sort-string example program (main.py).
"""
import contextlib
import importlib.util
import io
import pathlib
import unittest
from unittest import TestCase

_spec = importlib.util.spec_from_file_location(
    "sort_string", pathlib.Path(__file__).resolve().parent.parent / "main.py"
)
sort_string = importlib.util.module_from_spec(_spec)
_spec.loader.exec_module(sort_string)


class SortStringTest(TestCase):

    def run_main(self, *argv):
        stdout, stderr = io.StringIO(), io.StringIO()
        with contextlib.redirect_stdout(stdout), contextlib.redirect_stderr(stderr):
            status = sort_string.main(["sort-string", *argv])
        return status, stdout.getvalue(), stderr.getvalue()

    def testSorts(self):
        self.assertEqual(self.run_main("banana"), (0, "aaabnn\n", ""))

    def testFilterAndInvert(self):
        self.assertEqual(self.run_main("banana", "-f", "a", "--invert"), (0, "nnb\n", ""))
        self.assertEqual(self.run_main("-f", "a", "banana", "-f", "n"), (0, "b\n", ""))

    def testRepeat(self):
        self.assertEqual(self.run_main("cab", "-r", "2"), (0, "abcabc\n", ""))
        self.assertEqual(self.run_main("cab", "--repeat", "0"), (0, "", ""))

    def testNegativeRepeatFails(self):
        status, stdout, stderr = self.run_main("cab", "-r", "-1")
        self.assertEqual((status, stdout), (1, ""))
        self.assertIn("sort-string: 'repeat' must be in range [0,4294967295]", stderr)

    def testMissingString(self):
        status, _, stderr = self.run_main("-i")
        self.assertEqual(status, 1)
        self.assertEqual(stderr.strip(), "sort-string: requires positional argument 'string'")

    def testFilterMustBeCharacter(self):
        status, _, stderr = self.run_main("banana", "-f", "an")
        self.assertEqual(status, 1)
        self.assertEqual(stderr.strip(), "sort-string: 'filter' must be a single character")


if __name__ == "__main__":
    unittest.main()
