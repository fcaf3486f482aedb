r"""
Herald parameter model.

Overview
- Markers (used inside typing.Annotated)
  • Remainder: the last positional parameter absorbs every remaining token,
    re-joined with single spaces. At most one, always last, str or object.
  • Complex: the parameter's value is built from several tokens by calling
    the type's constructor with the converted children.
  • Reader(reader): per-parameter type reader override.
  • Named(*names): names a keyword-only (named) parameter answers to.

- Decorators
  • @primary: designate the constructor of a type (a classmethod or
    staticmethod) to use instead of the type itself.

- Specs
  • Parameter: one formal parameter (type, nullable, optional, remainder,
    named, reader) with the token window [min_length, max_length] it consumes.
  • ComplexParameter: same shape plus nested child parameters and the
    constructor that builds the value; its window aggregates its children.

Length rules (positional parameters only)
- required        → +1 / +1
- optional        → +0 / +1
- remainder       → +1 (or +0 when optional) / +inf
- complex         → sum of its children (min is 0 when optional)
- named (kw-only) → not counted

Quick example:
    >>> class Point:
    ...     def __init__(self, x: int, y: int): ...
    ...
    >>> def move(self, who: str, to: Annotated[Point, Complex], *, fast: bool = False): ...
    >>> parameters = build_parameters(move, TypeReaders(), bound=True)
    >>> [(p.name, p.min_length, p.max_length) for p in parameters]
    [('who', 1, 1), ('to', 2, 2), ('fast', 0, 0)]
"""
import builtins
import inspect
import math
import types
import typing
from typing import Annotated, Any

from .faults import (
    AmbiguousConstructorError,
    InvalidComplexError,
    InvalidParameterError,
    InvalidRemainderError,
)
from .internals import IntrospectiveType
from .readers import TypeReader
from .utils import Unset


class Marker(metaclass=IntrospectiveType):
    """Bare parameter marker (see Remainder and Complex)."""
    __introspectable__ = ("name",)

    def __init__(self, name):
        self._name = name

    def __repr__(self):
        return self._name


Remainder = Marker("Remainder")
Complex = Marker("Complex")


class Reader(metaclass=IntrospectiveType):
    """Annotated marker overriding the reader used for one parameter."""
    __introspectable__ = ("reader",)

    def __init__(self, reader, /):
        if isinstance(reader, type) and issubclass(reader, TypeReader):
            reader = reader()
        if not isinstance(reader, TypeReader):
            raise TypeError("Reader() argument must be a type reader")
        self._reader = reader


class Named(metaclass=IntrospectiveType):
    """Annotated marker listing the names a named parameter answers to."""
    __introspectable__ = ("names",)

    def __init__(self, *names):
        sanitized = []
        for name in names:
            if not isinstance(name, str):
                raise TypeError("Named() names must be strings")
            elif not (name := name.strip().lstrip("-")):
                raise ValueError("Named() names cannot be empty-strings")
            sanitized.append(name)
        if not sanitized:
            raise TypeError("Named() must specify at least one name")
        self._names = sanitized


def primary(callable, /):
    """
    Mark a classmethod/staticmethod as the designated constructor of its type.

    Stack it above @classmethod:

        @primary
        @classmethod
        def parse(cls, x: int, y: int): ...
    """
    target = callable.__func__ if isinstance(callable, classmethod | staticmethod) else callable
    if not builtins.callable(target):
        raise TypeError("@primary must be applied to a callable")
    target.__primary__ = True
    return callable


def select_constructor(cls, /):
    """
    Return the constructor to use for `cls`: its unique @primary member,
    otherwise the type itself. Raises AmbiguousConstructorError when more
    than one member is marked.
    """
    found = {}
    for base in cls.__mro__:
        if base is object:
            continue
        for name, member in vars(base).items():
            target = member.__func__ if isinstance(member, classmethod | staticmethod) else member
            if getattr(target, "__primary__", False) and name not in found:
                found[name] = base
    if len(found) > 1:
        raise AmbiguousConstructorError(
            f"type {cls.__qualname__!r} marks {len(found)} members as primary constructor: {', '.join(sorted(found))}",
            hint="keep @primary on exactly one constructor",
            type=cls,
        )
    if found:
        return getattr(cls, next(iter(found)))
    return cls


def _signature_target(callable):
    # the function whose signature and annotations describe `callable`;
    # None for classes that accept no arguments at all
    if isinstance(callable, type):
        if callable.__init__ is not object.__init__:
            return callable.__init__, True
        if callable.__new__ is not object.__new__:
            return callable.__new__, True
        return None, True
    return callable, False


def _unwrap(annotation):
    """
    Split an annotation into (type, nullable, metadata).

    Annotated[...] metadata is collected; `X | None` / Optional[X] set the
    nullable flag; an unannotated parameter reads as str.
    """
    metadata = ()
    nullable = False

    for _ in range(2):
        if typing.get_origin(annotation) is Annotated:
            metadata += annotation.__metadata__
            annotation = annotation.__origin__
        if typing.get_origin(annotation) in (typing.Union, types.UnionType):
            arguments = typing.get_args(annotation)
            others = tuple(argument for argument in arguments if argument is not types.NoneType)
            nullable |= len(others) < len(arguments)
            if len(others) != 1:
                return Unset, nullable, metadata
            annotation = others[0]

    if annotation is inspect.Parameter.empty:
        annotation = str
    return annotation, nullable, metadata


class Parameter(metaclass=IntrospectiveType):
    """
    One formal parameter of a command or of a complex constructor.

    Properties
    - name, type, default (Unset when required), nullable, optional,
      remainder, named, names, reader, min_length, max_length.
    """
    __introspectable__ = (
        "name",
        "type",
        "default",
        "nullable",
        "optional",
        "remainder",
        "named",
        "names",
        "reader",
        "min_length",
        "max_length",
    )
    __displayable__ = (
        "name",
        "type",
        "optional",
        "remainder",
        "named",
    )

    def __init__(self, name, type, *, default=Unset, nullable=False, remainder=False, named=False, names=(), reader=None):
        self._name = name
        self._type = type
        self._default = default
        self._nullable = nullable
        self._optional = default is not Unset
        self._remainder = remainder
        self._named = named
        self._names = tuple(names) or (name,)
        self._reader = reader
        self._min_length, self._max_length = self._window()

    def _window(self):
        if self._named:
            return 0, 0
        if self._remainder:
            return int(not self._optional), math.inf
        return int(not self._optional), 1


class ComplexParameter(Parameter):
    """
    A parameter built from nested tokens by its type's selected constructor.
    """
    __introspectable__ = Parameter.__introspectable__ + (
        "parameters",
        "constructor",
    )
    __displayable__ = Parameter.__displayable__ + (
        "parameters",
    )

    def __init__(self, name, type, parameters, constructor, **options):
        self._parameters = tuple(parameters)
        self._constructor = constructor
        super().__init__(name, type, **options)

    def _window(self):
        minimum = sum(parameter.min_length for parameter in self._parameters)
        maximum = sum(parameter.max_length for parameter in self._parameters)
        return (0 if self._optional else minimum), maximum


def build_parameters(callable, readers, /, *, bound=False, trail=()):
    """
    Build the Parameter list of `callable`.

    Parameters
    - callable: a function, a bound method or a type (its __init__ is used).
    - readers: the TypeReaders registry used to resolve leaf readers.
    - bound: skip the first parameter (self) of a plain function.
    - trail: complex types currently being built (recursion guard).

    Raises BuildError subclasses for every invalid declaration.
    """
    target, skip = _signature_target(callable)
    if target is None:
        return []
    skip |= bound
    label = getattr(callable, "__qualname__", repr(callable))

    try:
        signature = inspect.signature(target)
        hints = typing.get_type_hints(target, include_extras=True)
    except (NameError, TypeError, ValueError) as exception:
        error = InvalidParameterError(f"cannot inspect the signature of {label!r}: {exception}", callable=callable)
        error.__cause__ = exception
        raise error

    declared = list(signature.parameters.values())
    if skip and declared and declared[0].kind is not inspect.Parameter.KEYWORD_ONLY:
        declared = declared[1:]

    parameters = []
    for parameter in declared:
        if parameter.kind in (inspect.Parameter.VAR_POSITIONAL, inspect.Parameter.VAR_KEYWORD):
            raise InvalidParameterError(
                f"{label!r} declares a variadic parameter {parameter.name!r}",
                hint="use an Annotated[str, Remainder] parameter to capture the rest of the input",
                callable=callable,
            )

        type, nullable, metadata = _unwrap(hints.get(parameter.name, parameter.annotation))
        if type is Unset:
            raise InvalidParameterError(
                f"parameter {parameter.name!r} of {label!r} uses a union type",
                hint="annotate with a single type (optionally '| None')",
                callable=callable,
            )

        default = Unset if parameter.default is inspect.Parameter.empty else parameter.default
        named = parameter.kind is inspect.Parameter.KEYWORD_ONLY
        remainder = any(marker is Remainder for marker in metadata)
        nested = any(marker is Complex for marker in metadata)
        overrides = [marker.reader for marker in metadata if isinstance(marker, Reader)]
        names = [name for marker in metadata if isinstance(marker, Named) for name in marker.names]
        if named and not names:
            names = list(dict.fromkeys((parameter.name, parameter.name.replace("_", "-"))))

        if remainder and (named or nested):
            raise InvalidRemainderError(
                f"parameter {parameter.name!r} of {label!r} cannot be a remainder",
                hint="only a positional, non-complex parameter may be a remainder",
                callable=callable,
            )
        if remainder and type not in (str, object, Any):
            raise InvalidRemainderError(
                f"remainder parameter {parameter.name!r} of {label!r} must accept a string, not {getattr(type, '__name__', type)!r}",
                hint="annotate it as Annotated[str, Remainder]",
                callable=callable,
            )

        if nested:
            if named or not isinstance(type, builtins.type):
                raise InvalidComplexError(
                    f"complex parameter {parameter.name!r} of {label!r} must be positional and annotated with a class",
                    callable=callable,
                )
            if type in trail:
                raise InvalidComplexError(
                    f"complex parameter {parameter.name!r} of {label!r} recursively contains {type.__qualname__!r}",
                    callable=callable,
                )
            constructor = select_constructor(type)
            children = build_parameters(constructor, readers, trail=trail + (type,))
            if not children:
                raise InvalidComplexError(
                    f"complex parameter {parameter.name!r} of {label!r} has a constructor without parameters",
                    hint="complex types need at least one constructor parameter",
                    callable=callable,
                )
            if any(child.remainder or child.named for child in children):
                raise InvalidComplexError(
                    f"complex parameter {parameter.name!r} of {label!r} cannot contain remainder or named parameters",
                    callable=callable,
                )
            parameters.append(ComplexParameter(
                parameter.name,
                type,
                children,
                constructor,
                default=default,
                nullable=nullable,
                named=named,
                names=names,
            ))
            continue

        reader = overrides[-1] if overrides else readers.resolve(type)
        parameters.append(Parameter(
            parameter.name,
            type,
            default=default,
            nullable=nullable,
            remainder=remainder,
            named=named,
            names=names,
            reader=reader,
        ))

    positionals = [parameter for parameter in parameters if not parameter.named]
    for index, parameter in enumerate(positionals):
        if parameter.remainder and index != len(positionals) - 1:
            raise InvalidRemainderError(
                f"remainder parameter {parameter.name!r} of {label!r} must be the last positional parameter",
                hint="move it to the end of the signature",
                callable=callable,
            )

    return parameters


def window(parameters, /):
    """Aggregate (min_length, max_length) over positional parameters."""
    minimum = sum(parameter.min_length for parameter in parameters)
    maximum = sum(parameter.max_length for parameter in parameters)
    return minimum, maximum


__all__ = (
    "Marker",
    "Remainder",
    "Complex",
    "Reader",
    "Named",
    "primary",
    "select_constructor",
    "Parameter",
    "ComplexParameter",
    "build_parameters",
    "window",
)
