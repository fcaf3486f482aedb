"""
Type reader behavioral tests.

Scope
- Built-in readers (numbers, booleans, ISO dates, durations, colors, enums).
- Failure shape: ConversionError naming type, value and parameter, with the
  original exception chained.
- Registry resolution, bypass types, on-demand enum readers and overrides.

Conventions
- Test method names follow CamelCase per project convention.
"""
import datetime
import enum
import unittest
from decimal import Decimal
from typing import Any
from unittest import IsolatedAsyncioTestCase, TestCase

from rich.color import Color

from herald.arguments import Parameter
from herald.faults import ConversionError, MissingReaderError
from herald.readers import (
    BooleanReader,
    ColorReader,
    ConstructorReader,
    EnumReader,
    TimeDeltaReader,
    TypeReader,
    TypeReaders,
)


class Mode(enum.Enum):
    FAST = "f"
    SLOW = "s"


class ShoutReader(TypeReader[str]):
    def __init__(self):
        super().__init__(str)

    async def read(self, context, parameter, value):
        return value.upper()


class TestConversion(IsolatedAsyncioTestCase):
    def setUp(self):
        self.readers = TypeReaders()

    async def convert(self, type, value):
        result = await self.readers.resolve(type).evaluate(None, Parameter("value", type), value)
        if not result.success:
            raise result.exception
        return result.value

    async def testNumbers(self):
        self.assertEqual(await self.convert(int, "42"), 42)
        self.assertEqual(await self.convert(float, "2.5"), 2.5)
        self.assertEqual(await self.convert(Decimal, "0.1"), Decimal("0.1"))

    async def testFailureShape(self):
        result = await self.readers.resolve(int).evaluate(None, Parameter("count", int), "abc")
        self.assertFalse(result.success)
        self.assertIsInstance(result.exception, ConversionError)
        self.assertIn("int", result.message)
        self.assertIn("'abc'", result.message)
        self.assertIn("'count'", result.message)
        self.assertIsInstance(result.exception.__cause__, ValueError)

    async def testBooleans(self):
        for literal in ("true", "Yes", "y", "ON", "1", "enabled"):
            self.assertIs(await self.convert(bool, literal), True)
        for literal in ("false", "No", "n", "off", "0", "disable"):
            self.assertIs(await self.convert(bool, literal), False)
        with self.assertRaises(ConversionError):
            await self.convert(bool, "maybe")

    async def testIsoDates(self):
        self.assertEqual(
            await self.convert(datetime.datetime, "2024-01-02T03:04:05"),
            datetime.datetime(2024, 1, 2, 3, 4, 5),
        )
        self.assertEqual(await self.convert(datetime.date, "2024-01-02"), datetime.date(2024, 1, 2))
        self.assertEqual(await self.convert(datetime.time, "03:04"), datetime.time(3, 4))
        with self.assertRaises(ConversionError):
            await self.convert(datetime.date, "yesterday")

    async def testCanonicalDurations(self):
        self.assertEqual(await self.convert(datetime.timedelta, "00:05:30"), datetime.timedelta(minutes=5, seconds=30))
        self.assertEqual(await self.convert(datetime.timedelta, "1.12:00"), datetime.timedelta(days=1, hours=12))
        self.assertEqual(await self.convert(datetime.timedelta, "-01:00"), datetime.timedelta(hours=-1))

    async def testHumanDurations(self):
        self.assertEqual(
            await self.convert(datetime.timedelta, "5 minutes and 30 seconds"),
            datetime.timedelta(minutes=5, seconds=30),
        )
        self.assertEqual(await self.convert(datetime.timedelta, "1h30m"), datetime.timedelta(hours=1, minutes=30))
        self.assertEqual(await self.convert(datetime.timedelta, "2 days, 3 hours"), datetime.timedelta(days=2, hours=3))
        self.assertEqual(await self.convert(datetime.timedelta, "2.5 d"), datetime.timedelta(days=2.5))
        self.assertEqual(await self.convert(datetime.timedelta, "1 month"), datetime.timedelta(days=30.437))
        self.assertEqual(await self.convert(datetime.timedelta, "250ms"), datetime.timedelta(milliseconds=250))

    async def testInvalidDurations(self):
        for value in ("", "soon", "5 parsecs", "5 minutes extra", "minutes 5"):
            with self.subTest(value=value), self.assertRaises(ConversionError):
                await self.convert(datetime.timedelta, value)

    async def testHexColors(self):
        self.assertEqual(tuple((await self.convert(Color, "#F0F8FF")).triplet), (240, 248, 255))
        self.assertEqual(tuple((await self.convert(Color, "0xff0000")).triplet), (255, 0, 0))
        # ARGB: the alpha channel is dropped
        self.assertEqual(tuple((await self.convert(Color, "#80F0F8FF")).triplet), (240, 248, 255))

    async def testNamedColors(self):
        for name in ("AliceBlue", "alice blue", "ALICE_BLUE", "alice-blue"):
            with self.subTest(name=name):
                self.assertEqual(tuple((await self.convert(Color, name)).triplet), (240, 248, 255))
        with self.assertRaises(ConversionError) as context:
            await self.convert(Color, "not a color")
        self.assertIn("'not a color'", context.exception.message)

    async def testEnums(self):
        self.assertIs(await self.convert(Mode, "fast"), Mode.FAST)
        self.assertIs(await self.convert(Mode, "SLOW"), Mode.SLOW)
        self.assertIs(await self.convert(Mode, "s"), Mode.SLOW)
        with self.assertRaises(ConversionError):
            await self.convert(Mode, "medium")

    async def testAsyncReader(self):
        result = await ShoutReader().evaluate(None, Parameter("text", str), "hey")
        self.assertEqual(result.value, "HEY")


class TestRegistry(TestCase):
    def testBypassTypes(self):
        readers = TypeReaders()
        self.assertIsNone(readers.resolve(str))
        self.assertIsNone(readers.resolve(object))
        self.assertIsNone(readers.resolve(Any))

    def testDefaults(self):
        readers = TypeReaders()
        self.assertIsInstance(readers.resolve(int), ConstructorReader)
        self.assertIsInstance(readers.resolve(bool), BooleanReader)
        self.assertIsInstance(readers.resolve(datetime.timedelta), TimeDeltaReader)
        self.assertIsInstance(readers.resolve(Color), ColorReader)
        self.assertIn(int, readers)

    def testWithoutDefaults(self):
        readers = TypeReaders(defaults=False)
        self.assertEqual(len(readers), 0)
        with self.assertRaises(MissingReaderError):
            readers.resolve(int)

    def testEnumOnDemand(self):
        readers = TypeReaders()
        reader = readers.resolve(Mode)
        self.assertIsInstance(reader, EnumReader)
        self.assertIs(readers.resolve(Mode), reader)

    def testMissingReader(self):
        with self.assertRaises(MissingReaderError):
            TypeReaders().resolve(list)

    def testLastRegistrationWins(self):
        readers = TypeReaders()
        first = readers.register(ConstructorReader(int))
        second = readers.register(ConstructorReader(int))
        self.assertIsNot(first, second)
        self.assertIs(readers.resolve(int), second)

    def testRegisterReaderType(self):
        readers = TypeReaders(defaults=False)
        readers.register(BooleanReader)
        self.assertIsInstance(readers.resolve(bool), BooleanReader)

    def testRejectsNonReaders(self):
        with self.assertRaises(TypeError):
            TypeReaders().register(int)
        with self.assertRaises(TypeError):
            ConstructorReader("int")


if __name__ == "__main__":
    unittest.main()
