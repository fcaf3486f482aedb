"""
Herald utilities (internal helpers, carefully exposed)

Overview
- UnsetType / Unset
  • Singleton sentinel for "value not provided" where None is a meaningful value.

- coalesce(value, default=None)
  • Replace Unset with a concrete default; None/0/""/[] pass through untouched.

- rename("name")
  • Decorator assigning a stable __name__/__qualname__ to generated functions.

- mirror("attr")
  • Read-only property exposing a private backing field (self._attr), frozen
    on the way out (list → tuple, dict → mappingproxy, set → frozenset).

- mglob(pattern)
  • Module globbing: "app.commands.*" / "app.**.handlers" → importable module names.

Names not in __all__ are internal and may change without notice.
"""
import builtins
import fnmatch
import functools
import importlib
import itertools
import pkgutil
from types import MappingProxyType
from typing import final


@final
class UnsetType:
    """
    Sentinel type representing a value that was not provided.

    Boolean-false, distinct from None, one instance per process. Usable in
    isinstance() unions: `isinstance(value, str | Unset)`.
    """

    def __or__(self, other, /):
        try:
            return type(self) | other
        except TypeError:
            return NotImplemented

    def __ror__(self, other, /):
        try:
            return other | type(self)
        except TypeError:
            return NotImplemented

    @functools.cache
    def __new__(cls):
        return super().__new__(cls)

    def __bool__(self):
        return False

    def __repr__(self):
        return "Unset"

    def __init_subclass__(cls, **options):
        raise TypeError("type 'UnsetType' is not an acceptable base type")


def coalesce(object, default=None, /):
    """
    Resolve the Unset sentinel to a concrete default.

    Examples
    - coalesce("name", "fallback") -> "name"
    - coalesce(Unset, "fallback")  -> "fallback"
    - coalesce(None, "fallback")   -> None
    """
    return object if object is not Unset else default


def rename(name, /):
    """Decorator setting __name__ and __qualname__ of the decorated callable."""
    if not isinstance(name, str):
        raise TypeError("@rename() argument must be a string")

    def wrapper(callable):
        if not builtins.callable(callable):
            raise TypeError("@rename() must be applied to a callable")
        callable.__name__ = callable.__qualname__ = name
        return callable

    return wrapper


def _freeze(object):
    # only builtin containers; Color, Text and friends pass through
    if type(object) is list:
        return tuple(object)
    elif type(object) is dict:
        return MappingProxyType(object)
    elif type(object) is set:
        return frozenset(object)
    return object


def mirror(name, /):
    """
    Define a read-only property that mirrors the private attribute "_{name}".

    Builtin containers are handed out frozen so that the component tree built
    at startup cannot be mutated through its public surface.
    """
    if not isinstance(name, str):
        raise TypeError("mirror() argument must be a string")

    @rename(name)
    def getter(self):
        return _freeze(getattr(self, "_" + name))

    return property(getter)


def _match(segments, pattern):
    # '**' spans any number of segments; every other pattern segment matches one
    if not pattern:
        return not segments
    head, *rest = pattern
    if head == "**":
        return any(_match(segments[index:], rest) for index in range(len(segments) + 1))
    return bool(segments) and fnmatch.fnmatchcase(segments[0], head) and _match(segments[1:], rest)


def mglob(source, /):
    """
    Expand a dot-separated module glob into fully-qualified module names.

    Rules
    - '*', '?', '[...]' / '[!...]' match inside one segment; '**' spans segments.
    - the pattern must start with at least one concrete segment, which is
      imported to walk its subpackages.
    - a pattern without wildcards is returned as-is.
    - matches are case-sensitive and returned sorted.
    """
    if not isinstance(source, str):
        raise TypeError("mglob() argument must be a string")
    elif not (source := source.strip()):
        raise ValueError("mglob() argument must be a non-empty string")

    pattern = source.split(".")
    if all(segment.isidentifier() for segment in pattern):
        return [source]

    prefix = list(itertools.takewhile(str.isidentifier, pattern))
    if not prefix:
        raise ValueError("mglob() pattern must start with a concrete package segment")

    try:
        package = importlib.import_module(".".join(prefix))
    except ImportError:
        return []

    names = {package.__name__}
    if hasattr(package, "__path__"):
        names.update(module.name for module in pkgutil.walk_packages(package.__path__, package.__name__ + "."))

    return sorted(name for name in names if _match(name.split("."), pattern))


Unset = UnsetType()


__all__ = (
    # Functions
    "coalesce",
    "rename",
    "mirror",
    "mglob",

    # Types
    "UnsetType",
    "Unset",
)
