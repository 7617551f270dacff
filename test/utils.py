"""
Tests for the internal utilities.

This module verifies the helpers the binding engine leans on:
- The Unset sentinel: singleton identity, falsy semantics, copying, finality.
- coalesce(): only Unset is replaced.
- rename(): both call forms and their argument checks.
- mirror(): read-only properties returning frozen containers.
- typename(): readable names of type hints.
"""
import copy
import unittest
from datetime import timedelta
from unittest import TestCase

from argbind.coercion import uint
from argbind.utils import *


class UnsetTest(TestCase):
    """
    Test suite for the `Unset` sentinel.
    """

    def testSingleton(self) -> None:
        """
        The constructor returns the module-level instance on every call.
        """
        self.assertIs(UnsetType(), Unset)

    def testFalsyAndRepr(self) -> None:
        self.assertFalse(Unset)
        self.assertEqual(repr(Unset), "Unset")
        self.assertIsNot(Unset, None)

    def testCopyPreservesIdentity(self) -> None:
        self.assertIs(copy.copy(Unset), Unset)
        self.assertIs(copy.deepcopy([Unset])[0], Unset)

    def testFinal(self) -> None:
        """
        The type cannot be subclassed.
        """
        with self.assertRaises(TypeError):
            type("Derived", (UnsetType,), {})

    def testUnionWithTypes(self) -> None:
        self.assertIsInstance("x", str | Unset)
        self.assertIsInstance(Unset, str | Unset)
        self.assertNotIsInstance(1, str | Unset)


class HelpersTest(TestCase):
    def testCoalesce(self) -> None:
        self.assertEqual(coalesce(Unset, "fallback"), "fallback")
        self.assertIsNone(coalesce(None, "fallback"))
        self.assertEqual(coalesce(0, 5), 0)
        self.assertIsNone(coalesce(Unset))

    def testRenameForms(self) -> None:
        def work():
            pass

        self.assertIs(rename(work, "apply"), work)
        self.assertEqual(work.__name__, "apply")

        @rename("other")
        def more():
            pass

        self.assertEqual(more.__qualname__, "other")

    def testRenameErrors(self) -> None:
        with self.assertRaises(TypeError):
            rename(1, "x")
        with self.assertRaises(TypeError):
            rename(len, "x")
        with self.assertRaises(TypeError):
            rename()

    def testMirrorFreezesContainers(self) -> None:
        class Holder:
            items = mirror("items")
            table = mirror("table")

            def __init__(self):
                self._items = ["a", ["b"]]
                self._table = {"k": {1, 2}}

        holder = Holder()
        self.assertEqual(holder.items, ("a", ("b",)))
        self.assertEqual(holder.table, {"k": frozenset({1, 2})})
        with self.assertRaises(AttributeError):
            holder.items = ()

    def testTypename(self) -> None:
        self.assertEqual(typename(int), "int")
        self.assertEqual(typename(uint), "uint")
        self.assertEqual(typename(timedelta), "timedelta")
        self.assertEqual(typename(list[int]), "list[int]")


if __name__ == "__main__":
    unittest.main()
