"""
Introspection plumbing shared by the metadata types (parameters, commands,
modules, results, configuration).

IntrospectiveType
- derives __typename__ from the class name ("ComplexParameter" → "complex-parameter"),
- mirrors every name listed in __introspectable__ as a read-only property
  over its "_name" backing field,
- installs a compact __repr__ and a __rich_repr__ driven by __displayable__
  (or __introspectable__ when __displayable__ is Unset).
"""
import functools
import operator
import re
from abc import ABCMeta

from .utils import Unset, coalesce, mirror, rename


class IntrospectiveType(type):
    __introspectable__ = ()
    __displayable__ = Unset

    def __new__(cls, name, bases, namespace, **options):
        self = super().__new__(
            cls,
            name,
            bases,
            namespace | {
                "__typename__": re.sub(r"(?<!^)(?=[A-Z])", r"-", name).lower(),
            } | {
                name: mirror(name) for name in namespace.get("__introspectable__", ())
            },
            **options
        )

        if "__repr__" not in namespace:
            @rename("__repr__")
            def __repr__(self):
                return f"{type(self).__typename__}({', '.join(map(functools.partial(operator.mod, '%s=%r'), self.__rich_repr__()))})"
            self.__repr__ = __repr__

        if "__rich_repr__" not in namespace:
            @rename("__rich_repr__")
            def __rich_repr__(self):
                for name in coalesce(type(self).__displayable__, type(self).__introspectable__):
                    yield name, getattr(self, name)
            self.__rich_repr__ = __rich_repr__

        return self


class IntrospectiveABCType(IntrospectiveType, ABCMeta):
    """Introspective metaclass for abstract contracts (readers, preconditions)."""


__all__ = (
    "IntrospectiveType",
    "IntrospectiveABCType",
)
