"""
Tests for the internal helpers shared across argline.

Conventions
- Test method names follow CamelCase per project convention.
"""
import unittest
from unittest import TestCase

from argline.utils import *


class UnsetTest(TestCase):
    """The Unset sentinel: singleton, falsy, sealed."""

    def testSingleton(self):
        self.assertIs(UnsetType(), Unset)

    def testFalsy(self):
        self.assertFalse(Unset)
        self.assertIsNot(Unset, None)

    def testRepr(self):
        self.assertEqual(repr(Unset), "Unset")

    def testUnionInIsinstance(self):
        self.assertTrue(isinstance(Unset, str | Unset))
        self.assertTrue(isinstance("text", str | Unset))
        self.assertFalse(isinstance(3, str | Unset))

    def testCannotSubclass(self):
        with self.assertRaises(TypeError):
            type("Subclass", (UnsetType,), {})


class CoalesceTest(TestCase):

    def testUnsetIsReplaced(self):
        self.assertEqual(coalesce(Unset, "fallback"), "fallback")

    def testFalseyValuesArePreserved(self):
        self.assertIsNone(coalesce(None, "fallback"))
        self.assertEqual(coalesce(0, 1), 0)
        self.assertEqual(coalesce("", "fallback"), "")

    def testDefaultIsNone(self):
        self.assertIsNone(coalesce(Unset))


class RenameTest(TestCase):

    def testFunctionForm(self):
        def function():
            pass

        self.assertIs(rename(function, "renamed"), function)
        self.assertEqual(function.__name__, "renamed")
        self.assertEqual(function.__qualname__, "renamed")

    def testDecoratorForm(self):
        @rename("renamed")
        def function():
            pass

        self.assertEqual(function.__name__, "renamed")

    def testRejectsNonCallable(self):
        with self.assertRaises(TypeError):
            rename(3, "name")

    def testRejectsBadArity(self):
        with self.assertRaises(TypeError):
            rename()


class MirrorTest(TestCase):

    def testExposesCopies(self):
        class Holder:
            items = mirror("items")

            def __init__(self):
                self._items = ["a", "b"]

        holder = Holder()
        self.assertEqual(holder.items, ("a", "b"))
        self.assertIsInstance(holder.items, tuple)
        with self.assertRaises(AttributeError):
            holder.items = ()

    def testMappingsAreCopied(self):
        class Holder:
            table = mirror("table")

            def __init__(self):
                self._table = {"s": "size"}

        holder = Holder()
        holder.table["x"] = "y"
        self.assertEqual(holder.table, {"s": "size"})


class PluralizeTest(TestCase):

    def testSingular(self):
        self.assertEqual(pluralize("switch", 1), "switch")

    def testRegularRules(self):
        self.assertEqual(pluralize("switch"), "switches")
        self.assertEqual(pluralize("parameter", 0), "parameters")
        self.assertEqual(pluralize("entry", 3), "entries")
        self.assertEqual(pluralize("key", 3), "keys")


class OrdinalTest(TestCase):

    def testWords(self):
        self.assertEqual(ordinal(1), "first")
        self.assertEqual(ordinal(3), "third")
        self.assertEqual(ordinal(10), "tenth")

    def testSuffixes(self):
        self.assertEqual(ordinal(21), "21st")
        self.assertEqual(ordinal(22), "22nd")
        self.assertEqual(ordinal(23), "23rd")
        self.assertEqual(ordinal(24), "24th")

    def testTeens(self):
        self.assertEqual(ordinal(11), "11th")
        self.assertEqual(ordinal(12), "12th")
        self.assertEqual(ordinal(113), "113th")


if __name__ == "__main__":
    unittest.main()
