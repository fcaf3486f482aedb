r"""
Herald type readers: string token → typed value.

Contract
- TypeReader[_T].read(context, parameter, value) returns the converted value
  or raises; it may be a plain method or a coroutine.
- TypeReader.evaluate(...) wraps read() and always returns a ConvertResult:
  any exception becomes a ConversionError naming the expected type, the raw
  value and the parameter.

Registry
- TypeReaders maps a target type to its reader. Registration is last-wins,
  so hosts may override built-ins before or after defaults are installed.
- str, object and typing.Any bypass conversion (resolve() returns None).
- enum.Enum subclasses get an EnumReader on demand.

Built-ins
- int, float, complex, Decimal, Fraction, UUID, Path  (ConstructorReader)
- bool                                                  (BooleanReader)
- datetime, date, time (ISO 8601)                       (DateTimeReader, DateReader, TimeReader)
- timedelta: "[-][d.]hh:mm[:ss[.f]]" or "5 minutes and 30 seconds"
- rich.color.Color: "#RRGGBB", "0xRRGGBB" or a known name ("Alice Blue")

Quick example:
    >>> class PlayerReader(TypeReader[Player]):
    ...     def __init__(self):
    ...         super().__init__(Player)
    ...     async def read(self, context, parameter, value):
    ...         return await context.transport.find_player(value)
    ...
    >>> readers = TypeReaders()
    >>> readers.register(PlayerReader())
"""
import builtins
import datetime
import enum
import inspect
import re
import uuid
from abc import abstractmethod
from collections.abc import Mapping
from decimal import Decimal
from fractions import Fraction
from pathlib import Path
from typing import Any, Generic, TypeVar

from rich.color import Color

from .faults import ConversionError, MissingReaderError
from .internals import IntrospectiveABCType
from .palette import palette
from .results import ConvertResult


def _typename(type):
    return getattr(type, "__name__", repr(type))


_T = TypeVar("_T")


class TypeReader(Generic[_T], metaclass=IntrospectiveABCType):
    """
    Base of all readers.

    Parameters
    - type: the target type this reader produces (used as the registry key).
    """
    __introspectable__ = ("type",)

    def __init__(self, type):
        if not isinstance(type, builtins.type):
            raise TypeError(f"{self.__class__.__typename__} 'type' must be a type")
        self._type = type

    @abstractmethod
    def read(self, context, parameter, value):
        """Convert `value`; raise (anything) to signal failure."""

    async def evaluate(self, context, parameter, value):
        try:
            result = self.read(context, parameter, value)
            if inspect.isawaitable(result):
                result = await result
        except Exception as exception:
            error = ConversionError(
                f"expected {_typename(self._type)}, got {value!r} at parameter {parameter.name!r}",
                hint=f"provide a valid {_typename(self._type).lower()} value",
                parameter=parameter.name,
                value=value,
            )
            error.__cause__ = exception
            return ConvertResult.failure(error)
        return ConvertResult(result)


class ConstructorReader(TypeReader):
    """Reader that simply calls the target type with the raw token."""

    def read(self, context, parameter, value):
        return self._type(value)


class BooleanReader(TypeReader[bool]):
    truthy = frozenset({"true", "yes", "y", "on", "1", "enable", "enabled"})
    falsy = frozenset({"false", "no", "n", "off", "0", "disable", "disabled"})

    def __init__(self):
        super().__init__(bool)

    def read(self, context, parameter, value):
        if (value := value.strip().lower()) in self.truthy:
            return True
        elif value in self.falsy:
            return False
        raise ValueError(f"invalid boolean literal: {value!r}")


class DateTimeReader(TypeReader[datetime.datetime]):
    def __init__(self):
        super().__init__(datetime.datetime)

    def read(self, context, parameter, value):
        return datetime.datetime.fromisoformat(value.strip())


class DateReader(TypeReader[datetime.date]):
    def __init__(self):
        super().__init__(datetime.date)

    def read(self, context, parameter, value):
        return datetime.date.fromisoformat(value.strip())


class TimeReader(TypeReader[datetime.time]):
    def __init__(self):
        super().__init__(datetime.time)

    def read(self, context, parameter, value):
        return datetime.time.fromisoformat(value.strip())


class TimeDeltaReader(TypeReader[datetime.timedelta]):
    """
    Duration reader.

    Accepted forms
    - canonical: "[-][d.]hh:mm[:ss[.fraction]]", e.g. "00:05:30", "1.12:00"
    - human: (number)(unit) pairs separated by whitespace, "," or "and",
      e.g. "5 minutes and 30 seconds", "1h30m", "2.5 days".
      The whole input must be consumed and at least one pair must be found.

    A month counts as 30.437 days.
    """
    units = {
        "ms": datetime.timedelta(milliseconds=1),
        "msec": datetime.timedelta(milliseconds=1),
        "millisecond": datetime.timedelta(milliseconds=1),
        "milliseconds": datetime.timedelta(milliseconds=1),
        "s": datetime.timedelta(seconds=1),
        "sec": datetime.timedelta(seconds=1),
        "secs": datetime.timedelta(seconds=1),
        "second": datetime.timedelta(seconds=1),
        "seconds": datetime.timedelta(seconds=1),
        "m": datetime.timedelta(minutes=1),
        "min": datetime.timedelta(minutes=1),
        "mins": datetime.timedelta(minutes=1),
        "minute": datetime.timedelta(minutes=1),
        "minutes": datetime.timedelta(minutes=1),
        "h": datetime.timedelta(hours=1),
        "hr": datetime.timedelta(hours=1),
        "hrs": datetime.timedelta(hours=1),
        "hour": datetime.timedelta(hours=1),
        "hours": datetime.timedelta(hours=1),
        "d": datetime.timedelta(days=1),
        "day": datetime.timedelta(days=1),
        "days": datetime.timedelta(days=1),
        "w": datetime.timedelta(weeks=1),
        "wk": datetime.timedelta(weeks=1),
        "week": datetime.timedelta(weeks=1),
        "weeks": datetime.timedelta(weeks=1),
        "mo": datetime.timedelta(days=30.437),
        "month": datetime.timedelta(days=30.437),
        "months": datetime.timedelta(days=30.437),
    }

    canonical = re.compile(
        r"(?P<sign>-)?(?:(?P<days>\d+)\.)?(?P<hours>\d{1,2}):(?P<minutes>\d{1,2})"
        r"(?::(?P<seconds>\d{1,2}(?:\.\d+)?))?"
    )
    pair = re.compile(r"(\d+(?:\.\d+)?)\s*([a-z]+)(?:\s*(?:,|\band\b))*\s*")

    def __init__(self):
        super().__init__(datetime.timedelta)

    def read(self, context, parameter, value):
        value = value.strip().lower()

        if match := self.canonical.fullmatch(value):
            span = datetime.timedelta(
                days=int(match["days"] or 0),
                hours=int(match["hours"]),
                minutes=int(match["minutes"]),
                seconds=float(match["seconds"] or 0),
            )
            return -span if match["sign"] else span

        span = datetime.timedelta()
        position = 0
        found = False
        while position < len(value):
            if not (match := self.pair.match(value, position)):
                raise ValueError(f"unexpected input at offset {position}: {value[position:]!r}")
            amount, unit = match.groups()
            try:
                span += self.units[unit] * float(amount)
            except KeyError:
                raise ValueError(f"unknown duration unit: {unit!r}") from None
            position = match.end()
            found = True

        if not found:
            raise ValueError("empty duration")
        return span


class ColorReader(TypeReader[Color]):
    """
    Color reader producing rich.color.Color truecolor values.

    "#F0F8FF", "0xF0F8FF", "AliceBlue", "alice blue" and "ALICE_BLUE" all
    read as the same color. An 8-digit hex value is read as ARGB and its
    alpha channel is dropped.
    """

    def __init__(self):
        super().__init__(Color)

    def read(self, context, parameter, value):
        value = value.strip()
        if match := re.fullmatch(r"(?:#|0[xX])(?:[0-9a-fA-F]{2})?([0-9a-fA-F]{6})", value):
            number = int(match[1], 16)
            return Color.from_rgb(number >> 16 & 0xFF, number >> 8 & 0xFF, number & 0xFF)
        return Color.from_rgb(*palette[re.sub(r"[\s_-]+", "", value).lower()])


class EnumReader(TypeReader[enum.Enum]):
    """Reads enum members by name (case-insensitive), then by value."""

    def read(self, context, parameter, value):
        folded = value.strip().casefold()
        for name, member in self._type.__members__.items():
            if name.casefold() == folded:
                return member
        for member in self._type:
            if str(member.value).casefold() == folded:
                return member
        raise ValueError(f"{value!r} is not a member of {self._type.__name__}")


_bypass = (str, object, Any)


class TypeReaders(Mapping, metaclass=IntrospectiveABCType):
    """
    Registry of readers keyed by target type.

    Parameters
    - readers: Iterable[TypeReader] registered after the defaults.
    - defaults: install the built-in readers first (default True).
    """
    __displayable__ = ("types",)

    def __init__(self, readers=(), *, defaults=True):
        self._readers = {}
        if defaults:
            for type in (int, float, complex, Decimal, Fraction, uuid.UUID, Path):
                self.register(ConstructorReader(type))
            for reader in (BooleanReader, DateTimeReader, DateReader, TimeReader, TimeDeltaReader, ColorReader):
                self.register(reader())
        for reader in readers:
            self.register(reader)

    @property
    def types(self):
        return tuple(self._readers)

    def register(self, reader, /):
        """
        Register a reader (instance, or a TypeReader subclass taking no
        arguments); the last registration for a type wins. Returns the reader.
        """
        if isinstance(reader, type) and issubclass(reader, TypeReader):
            reader = reader()
        if not isinstance(reader, TypeReader):
            raise TypeError("register() argument must be a type reader")
        self._readers[reader.type] = reader
        return reader

    def resolve(self, type, /):
        """
        Return the reader for `type`, or None when `type` bypasses conversion.

        Raises MissingReaderError when no reader is known.
        """
        if any(type is bypass for bypass in _bypass):
            return None
        try:
            return self._readers[type]
        except (KeyError, TypeError):
            pass
        if isinstance(type, builtins.type) and issubclass(type, enum.Enum):
            return self._readers.setdefault(type, EnumReader(type))
        raise MissingReaderError(
            f"no type reader is registered for {_typename(type)!r}",
            hint="register one with TypeReaders.register()",
            type=type,
        )

    def __getitem__(self, type, /):
        return self._readers[type]

    def __iter__(self):
        return iter(self._readers)

    def __len__(self):
        return len(self._readers)


__all__ = (
    "TypeReader",
    "ConstructorReader",
    "BooleanReader",
    "DateTimeReader",
    "DateReader",
    "TimeReader",
    "TimeDeltaReader",
    "ColorReader",
    "EnumReader",
    "TypeReaders",
)
