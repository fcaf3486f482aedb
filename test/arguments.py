"""
Parameter model behavioral tests.

Scope
- Token windows (required, optional, remainder, complex, named).
- Annotation handling (nullable unions, Annotated markers, unannotated str).
- Build faults (variadics, unions, misplaced remainders, invalid complex
  parameters, missing readers).
- Constructor selection with @primary.

Conventions
- Test method names follow CamelCase per project convention.
"""
import math
import unittest
from typing import Annotated, Optional
from unittest import TestCase

from herald.arguments import (
    Complex,
    ComplexParameter,
    Named,
    Reader,
    Remainder,
    build_parameters,
    primary,
    select_constructor,
    window,
)
from herald.faults import (
    AmbiguousConstructorError,
    InvalidComplexError,
    InvalidParameterError,
    InvalidRemainderError,
    MissingReaderError,
)
from herald.readers import TypeReader, TypeReaders


class Point:
    def __init__(self, x: int, y: int):
        self.x = x
        self.y = y


class Segment:
    def __init__(self, start: Annotated[Point, Complex], end: Annotated[Point, Complex]):
        self.start = start
        self.end = end


class Node:
    def __init__(self, child: Annotated["Node", Complex]):
        self.child = child


class Empty:
    pass


class Labelled:
    def __init__(self, text: Annotated[str, Remainder]):
        self.text = text


class Vector:
    def __init__(self, x, y):
        self.x = x
        self.y = y

    @primary
    @classmethod
    def polar(cls, radius: float, angle: float = 0.0):
        return cls(radius, angle)


class Ambiguous:
    @primary
    @classmethod
    def first(cls, value: int):
        return cls()

    @primary
    @staticmethod
    def second(value: int):
        return Ambiguous()


class UpperReader(TypeReader[str]):
    def __init__(self):
        super().__init__(str)

    def read(self, context, parameter, value):
        return value.upper()


class TestParameters(TestCase):
    def setUp(self):
        self.readers = TypeReaders()

    def build(self, function):
        return build_parameters(function, self.readers, bound=True)

    def testRequiredAndOptional(self):
        def handler(self, name: str, count: int = 3): ...

        name, count = self.build(handler)
        self.assertEqual((name.name, name.type, name.optional), ("name", str, False))
        self.assertEqual((name.min_length, name.max_length), (1, 1))
        self.assertEqual((count.type, count.default, count.optional), (int, 3, True))
        self.assertEqual((count.min_length, count.max_length), (0, 1))
        self.assertIsNone(name.reader)
        self.assertIs(count.reader, self.readers.resolve(int))

    def testUnannotatedIsString(self):
        def handler(self, value): ...

        value, = self.build(handler)
        self.assertIs(value.type, str)

    def testNullable(self):
        def handler(self, first: int | None, second: Optional[int] = None): ...

        first, second = self.build(handler)
        self.assertTrue(first.nullable)
        self.assertIs(first.type, int)
        self.assertFalse(first.optional)
        self.assertTrue(second.nullable)
        self.assertTrue(second.optional)

    def testRemainder(self):
        def handler(self, target: str, text: Annotated[str, Remainder]): ...

        parameters = self.build(handler)
        self.assertTrue(parameters[1].remainder)
        self.assertEqual((parameters[1].min_length, parameters[1].max_length), (1, math.inf))
        self.assertEqual(window(parameters), (2, math.inf))

    def testOptionalRemainder(self):
        def handler(self, text: Annotated[str, Remainder] = ""): ...

        text, = self.build(handler)
        self.assertEqual((text.min_length, text.max_length), (0, math.inf))

    def testNamed(self):
        def handler(self, target: str, *, dry_run: bool = False, verbose: Annotated[bool, Named("v", "--verbose")] = False): ...

        target, dry_run, verbose = self.build(handler)
        self.assertFalse(target.named)
        self.assertTrue(dry_run.named)
        self.assertEqual(dry_run.names, ("dry_run", "dry-run"))
        self.assertEqual(verbose.names, ("v", "verbose"))
        self.assertEqual((verbose.min_length, verbose.max_length), (0, 0))
        self.assertEqual(window([target]), (1, 1))

    def testReaderOverride(self):
        def handler(self, text: Annotated[str, Reader(UpperReader)]): ...

        text, = self.build(handler)
        self.assertIsInstance(text.reader, UpperReader)

    def testComplex(self):
        def handler(self, who: str, to: Annotated[Point, Complex]): ...

        who, to = self.build(handler)
        self.assertIsInstance(to, ComplexParameter)
        self.assertIs(to.constructor, Point)
        self.assertEqual([child.name for child in to.parameters], ["x", "y"])
        self.assertEqual((to.min_length, to.max_length), (2, 2))

    def testNestedComplex(self):
        def handler(self, segment: Annotated[Segment, Complex]): ...

        segment, = self.build(handler)
        self.assertEqual((segment.min_length, segment.max_length), (4, 4))
        self.assertIsInstance(segment.parameters[0], ComplexParameter)

    def testOptionalComplex(self):
        def handler(self, to: Annotated[Point, Complex] = None): ...

        to, = self.build(handler)
        self.assertEqual((to.min_length, to.max_length), (0, 2))

    def testPrimaryConstructor(self):
        def handler(self, vector: Annotated[Vector, Complex]): ...

        vector, = self.build(handler)
        self.assertEqual([child.name for child in vector.parameters], ["radius", "angle"])
        self.assertEqual((vector.min_length, vector.max_length), (1, 2))


class TestFaults(TestCase):
    def setUp(self):
        self.readers = TypeReaders()

    def build(self, function):
        return build_parameters(function, self.readers, bound=True)

    def testVariadicRejected(self):
        def handler(self, *values: str): ...

        with self.assertRaises(InvalidParameterError):
            self.build(handler)

    def testUnionRejected(self):
        def handler(self, value: int | str): ...

        with self.assertRaises(InvalidParameterError):
            self.build(handler)

    def testRemainderMustBeLast(self):
        def handler(self, text: Annotated[str, Remainder], target: str): ...

        with self.assertRaises(InvalidRemainderError):
            self.build(handler)

    def testRemainderMustBeString(self):
        def handler(self, values: Annotated[int, Remainder]): ...

        with self.assertRaises(InvalidRemainderError):
            self.build(handler)

    def testNamedRemainderRejected(self):
        def handler(self, *, text: Annotated[str, Remainder] = ""): ...

        with self.assertRaises(InvalidRemainderError):
            self.build(handler)

    def testRecursiveComplexRejected(self):
        def handler(self, node: Annotated[Node, Complex]): ...

        with self.assertRaises(InvalidComplexError):
            self.build(handler)

    def testEmptyComplexRejected(self):
        def handler(self, empty: Annotated[Empty, Complex]): ...

        with self.assertRaises(InvalidComplexError):
            self.build(handler)

    def testComplexRemainderRejected(self):
        def handler(self, label: Annotated[Labelled, Complex]): ...

        with self.assertRaises(InvalidComplexError):
            self.build(handler)

    def testMissingReader(self):
        def handler(self, values: list): ...

        with self.assertRaises(MissingReaderError):
            self.build(handler)

    def testAmbiguousConstructor(self):
        with self.assertRaises(AmbiguousConstructorError):
            select_constructor(Ambiguous)

    def testSelectConstructorDefaultsToType(self):
        self.assertIs(select_constructor(Point), Point)

    def testMarkerValidation(self):
        with self.assertRaises(TypeError):
            Named()
        with self.assertRaises(ValueError):
            Named("--")
        with self.assertRaises(TypeError):
            Reader(int)


if __name__ == "__main__":
    unittest.main()
