"""
Tests for the internal helpers (Unset, coalesce, rename, mirror).

Scope
- Unset is a falsy, final singleton that survives copying.
- coalesce only replaces Unset.
- rename sets __name__/__qualname__.
- mirror exposes copies of container fields.
"""
import copy
import unittest
from unittest import TestCase

from ballast.utils import *


class UnsetTest(TestCase):

    def testSingleton(self):
        self.assertIs(UnsetType(), Unset)
        self.assertIs(UnsetType(), UnsetType())

    def testFalsy(self):
        self.assertFalse(Unset)
        self.assertIsNot(Unset, None)

    def testRepr(self):
        self.assertEqual(repr(Unset), "Unset")
        self.assertEqual(str(Unset), "Unset")

    def testCopyPreservesIdentity(self):
        self.assertIs(copy.copy(Unset), Unset)
        self.assertIs(copy.deepcopy(Unset), Unset)
        self.assertIs(copy.deepcopy([Unset])[0], Unset)

    def testNotSubclassable(self):
        with self.assertRaises(TypeError):
            class Subclass(UnsetType):  # NOQA: F-841
                pass

    def testUnionWithTypes(self):
        self.assertTrue(isinstance(Unset, str | Unset))
        self.assertTrue(isinstance("text", Unset | str))
        self.assertFalse(isinstance(1, str | Unset))


class CoalesceTest(TestCase):

    def testReplacesUnset(self):
        self.assertEqual(coalesce(Unset, "fallback"), "fallback")
        self.assertIsNone(coalesce(Unset))

    def testPreservesFalsyValues(self):
        self.assertIsNone(coalesce(None, "fallback"))
        self.assertEqual(coalesce(0, 1), 0)
        self.assertEqual(coalesce("", "fallback"), "")


class RenameTest(TestCase):

    def testDecoratorForm(self):
        @rename("decorated")
        def original():
            pass

        self.assertEqual(original.__name__, "decorated")
        self.assertEqual(original.__qualname__, "decorated")

    def testRejectsBadArguments(self):
        with self.assertRaises(TypeError):
            rename(1)
        with self.assertRaises(TypeError):
            rename("name")(1)


class MirrorTest(TestCase):

    def setUp(self):
        class Record:
            values = mirror("values")
            name = mirror("name")

            def __init__(self):
                self._values = ["a", "b"]
                self._name = "record"

        self.record = Record()

    def testReadsBackingField(self):
        self.assertEqual(self.record.values, ["a", "b"])
        self.assertEqual(self.record.name, "record")

    def testContainersAreCopied(self):
        self.record.values.append("c")
        self.assertEqual(self.record.values, ["a", "b"])

    def testReadOnly(self):
        with self.assertRaises(AttributeError):
            self.record.name = "other"


if __name__ == "__main__":
    unittest.main()
