"""
Overload search behavioral tests.

Scope
- Candidate ordering among sibling overloads (length, priority, fallback).
- Recursion into nested groups and candidate depth.
- Unknown command faults.

Conventions
- Test method names follow CamelCase per project convention.
"""
import logging
import unittest
from unittest import TestCase

from herald.components import build, command, group
from herald.faults import UnknownCommandError
from herald.modules import ModuleBase
from herald.search import Candidate, search

quiet = logging.getLogger("herald.test.search")
quiet.addHandler(logging.NullHandler())
quiet.propagate = False


class Overloads(ModuleBase):
    @command("cmd", fallback=True)
    def fallback(self): ...

    @command("cmd")
    def two(self, a: int, b: int): ...

    @command("cmd")
    def one(self, a: int): ...


class Prioritized(ModuleBase):
    @command("pick")
    def low(self, value: str): ...

    @command("pick", priority=5)
    def high(self, value: str): ...


@group("g")
class Outer(ModuleBase):
    @command("c")
    def outer(self): ...

    @group("gg")
    class Inner(ModuleBase):
        @command("c")
        def inner(self): ...


class Sibling(ModuleBase):
    @command("g")
    def sibling(self, *, verbose: bool = False): ...


def names(result):
    return [candidate.command.function.__name__ for candidate in result.candidates]


class TestOrdering(TestCase):
    def setUp(self):
        self.components = build(Overloads, Prioritized, logger=quiet).unwrap().components

    def testFewestTokensFirstFallbackLast(self):
        result = search(self.components, "cmd", ["1", "2"])
        self.assertTrue(result.success)
        self.assertEqual(names(result), ["one", "two", "fallback"])

    def testCaseInsensitive(self):
        self.assertEqual(names(search(self.components, "CMD")), ["one", "two", "fallback"])

    def testPriority(self):
        self.assertEqual(names(search(self.components, "pick", ["x"])), ["high", "low"])

    def testCandidates(self):
        candidate, *_ = search(self.components, "cmd").candidates
        self.assertIsInstance(candidate, Candidate)
        self.assertEqual(candidate.depth, 0)


class TestGroups(TestCase):
    def setUp(self):
        self.components = build(Outer, Sibling, logger=quiet).unwrap().components

    def testNestedGroup(self):
        result = search(self.components, "g", ["gg", "c"])
        self.assertEqual(names(result)[0], "inner")
        self.assertEqual(result.candidates[0].depth, 2)

    def testGroupCommand(self):
        result = search(self.components, "g", ["c"])
        self.assertEqual(names(result), ["outer", "sibling"])
        self.assertEqual([candidate.depth for candidate in result.candidates], [1, 0])

    def testSiblingWithoutTokens(self):
        self.assertEqual(names(search(self.components, "g")), ["sibling"])

    def testTypedTokenStopsDescent(self):
        self.assertEqual(names(search(self.components, "g", [5])), ["sibling"])


class TestFaults(TestCase):
    def testUnknownCommand(self):
        components = build(Overloads, logger=quiet).unwrap().components
        result = search(components, "nope")
        self.assertFalse(result.success)
        self.assertIsInstance(result.exception, UnknownCommandError)
        self.assertIn("'nope'", result.message)
        self.assertEqual(result.candidates, ())

    def testGroupWithoutCommand(self):
        components = build(Outer, logger=quiet).unwrap().components
        result = search(components, "g", ["missing"])
        self.assertIsInstance(result.exception, UnknownCommandError)
        self.assertIn("group", result.exception.hint)


if __name__ == "__main__":
    unittest.main()
