"""
Utility behavioral tests (sentinel, mirrored properties, module globbing).

Conventions
- Test method names follow CamelCase per project convention.
"""
import unittest
from types import MappingProxyType
from unittest import TestCase

from herald.utils import Unset, UnsetType, coalesce, mglob, mirror


class Holder:
    items = mirror("items")
    table = mirror("table")

    def __init__(self):
        self._items = [1, 2]
        self._table = {"a": 1}


class TestSentinel(TestCase):
    def testSingleton(self):
        self.assertIs(UnsetType(), Unset)
        self.assertFalse(Unset)
        self.assertEqual(repr(Unset), "Unset")

    def testUnion(self):
        self.assertIsInstance(Unset, str | Unset)
        self.assertIsInstance("x", str | Unset)

    def testCoalesce(self):
        self.assertEqual(coalesce(Unset, 5), 5)
        self.assertIsNone(coalesce(None, 5))
        self.assertEqual(coalesce(0, 5), 0)

    def testFinal(self):
        with self.assertRaises(TypeError):
            class Subclass(UnsetType):  # NOQA
                pass


class TestMirror(TestCase):
    def testFrozen(self):
        holder = Holder()
        self.assertEqual(holder.items, (1, 2))
        self.assertIsInstance(holder.table, MappingProxyType)
        with self.assertRaises(AttributeError):
            holder.items = ()


class TestModuleGlob(TestCase):
    def testConcreteName(self):
        self.assertEqual(mglob("app.commands"), ["app.commands"])

    def testChildren(self):
        names = mglob("herald.*")
        self.assertIn("herald.commands", names)
        self.assertIn("herald.search", names)
        self.assertNotIn("herald", names)
        self.assertEqual(names, sorted(names))

    def testSegmentWildcards(self):
        self.assertEqual(mglob("herald.re[as]*"), ["herald.readers", "herald.resolver", "herald.results"])

    def testDoubleStar(self):
        self.assertIn("herald", mglob("herald.**"))

    def testUnknownPackage(self):
        self.assertEqual(mglob("herald_missing_package.*"), [])

    def testInvalidPatterns(self):
        with self.assertRaises(ValueError):
            mglob("*.commands")
        with self.assertRaises(ValueError):
            mglob("   ")
        with self.assertRaises(TypeError):
            mglob(5)


if __name__ == "__main__":
    unittest.main()
