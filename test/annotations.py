# python
"""
Annotation and binding behavioral tests.

Scope
- Flag / Env construction, sanitization and representation.
- Field discovery from Annotated hints (ClassVar and plain fields skipped).
- Bindings: canonical names, acceptors, counting, duplicate aliases.

Conventions
- Test method names follow CamelCase per project convention.
"""

from __future__ import annotations

import unittest
from typing import Annotated, ClassVar
from unittest import TestCase

from argbind.annotations import Flag, Env, fields, lookup, ensure_structure
from argbind.binding import Acceptor, CountingAcceptor, bind


class Base:
    name: Annotated[str, Flag("n,name")] = ""


class Derived(Base):
    limit: ClassVar[Annotated[int, Flag("l")]] = 3
    count: Annotated[int, Flag("c"), Env("COUNT")] = 0
    token: Annotated[str, Env("TOKEN")] = ""
    untagged: int = 0
    empty: Annotated[str, Flag(" , ")] = ""


class Twice:
    value: Annotated[str, Flag("a"), Flag("b")] = ""


class TestFlag(TestCase):
    def testAliasesSplitAndTrimmed(self):
        flag = Flag("s, string", "long-string,")
        self.assertEqual(flag.aliases, ("s", "string", "long-string"))
        self.assertEqual(flag.canonical, "s")

    def testEmptyFlagHasNoCanonical(self):
        self.assertIsNone(Flag("").canonical)
        self.assertIsNone(Flag().canonical)

    def testInvalidAliases(self):
        for alias in ("-s", "a=b", "two words"):
            with self.subTest(alias=alias):
                with self.assertRaises(ValueError):
                    Flag(alias)
        with self.assertRaises(TypeError):
            Flag(1)

    def testRepeatedAliasesKept(self):
        self.assertEqual(Flag("x,x").aliases, ("x", "x"))

    def testEqualityAndRepr(self):
        self.assertEqual(Flag("a,b"), Flag("a", "b"))
        self.assertEqual(hash(Flag("a,b")), hash(Flag("a", "b")))
        self.assertEqual(repr(Flag("s,string")), "flag(aliases=('s', 'string'))")


class TestEnv(TestCase):
    def testDefaults(self):
        env = Env("ADDR")
        self.assertEqual(env.name, "ADDR")
        self.assertFalse(env.required)
        self.assertFalse(env.notempty)
        self.assertFalse(env.expand)
        self.assertEqual(env.separator, ",")
        self.assertEqual(repr(env.default), "Unset")

    def testInvalidArguments(self):
        with self.assertRaises(TypeError):
            Env(1)
        with self.assertRaises(ValueError):
            Env("  ")
        with self.assertRaises(ValueError):
            Env("A=B")
        with self.assertRaises(TypeError):
            Env("A", default=1)
        with self.assertRaises(TypeError):
            Env("A", default="x", required=True)
        with self.assertRaises(ValueError):
            Env("A", separator="")

    def testRepr(self):
        self.assertEqual(
            repr(Env("ADDR", default=":80")),
            "env(name='ADDR', default=':80', required=False, notempty=False, separator=',', expand=False)"
        )

    def testEquality(self):
        self.assertEqual(Env("A", notempty=True), Env("A", notempty=True))
        self.assertNotEqual(Env("A"), Env("B"))


class TestFields(TestCase):
    def testDiscoveryOrderAndFiltering(self):
        found = list(fields(Derived()))
        self.assertEqual([field.name for field in found], ["name", "count", "token", "empty"])
        self.assertIsNone(found[2].flag)
        self.assertEqual(found[1].env, Env("COUNT"))
        self.assertIs(found[1].hint, int)

    def testDuplicateKindRejected(self):
        with self.assertRaises(TypeError):
            list(fields(Twice()))

    def testLookup(self):
        self.assertIsNone(lookup((), Flag, field="f"))
        self.assertEqual(lookup(("doc", Flag("a")), Flag, field="f"), Flag("a"))

    def testEnsureStructure(self):
        ensure_structure(Derived())
        for target in (Derived, 3, [], None):
            with self.subTest(target=target):
                with self.assertRaises(TypeError):
                    ensure_structure(target)


class TestBindings(TestCase):
    def testCanonicalMap(self):
        bindings = bind(Derived())
        self.assertEqual(bindings.canonical, {"n": "n", "name": "n", "c": "c"})
        self.assertEqual([binding.field for binding in bindings.fields], ["name", "count"])
        self.assertIn("name", bindings)
        self.assertNotIn("token", bindings)

    def testAcceptorStoresValue(self):
        target = Derived()
        bindings = bind(target)
        acceptor = bindings.lookup("name")
        self.assertIsInstance(acceptor, Acceptor)
        acceptor("x")
        self.assertEqual(target.name, "x")
        self.assertIsNone(bindings.lookup("missing"))

    def testCountingWrapsAcceptors(self):
        target = Derived()
        bindings = bind(target, counting=True)
        self.assertIsInstance(bindings.lookup("n"), CountingAcceptor)
        self.assertIsNone(bindings.counts)
        bindings.lookup("name")("a")
        bindings.lookup("n")("b")
        bindings.lookup("c")("4")
        self.assertEqual(bindings.counts, {"n": 2, "c": 1})
        self.assertEqual(target.name, "b")
        self.assertEqual(target.count, 4)

    def testCountsWithoutCounting(self):
        self.assertIsNone(bind(Derived()).counts)


if __name__ == "__main__":
    unittest.main()
