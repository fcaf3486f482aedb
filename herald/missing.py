"""
Missing-value marker used by the argument resolver.

When a command is invoked with fewer tokens than it has parameters, the
resolver asks the context for a value for every optional parameter that was
not supplied (see CommandContext.missing). Returning `Missing` means "use the
declared default"; returning anything else self-populates the parameter.

Semantics
- Falsy: bool(Missing) is False.
- Stable string form: repr(Missing) == "Missing" (rich renders it dim).
- Identity: MissingType() always returns the same instance, and copies or
  pickles of it come back as that instance.
"""
import functools

from rich.text import Text


class MissingType:
    """
    Singleton type of the `Missing` marker.

    Subclassing is blocked; MissingType() yields the one instance.
    """

    @functools.cache
    def __new__(cls):
        return super().__new__(cls)

    def __bool__(self):
        return False

    def __rich__(self):
        return Text(repr(self), style="dim")

    def __repr__(self):
        return "Missing"

    def __copy__(self):
        return self

    def __deepcopy__(self, memo, /):
        return self

    def __reduce__(self):
        return "Missing"

    def __init_subclass__(cls, **options):
        raise TypeError("type 'MissingType' is not an acceptable base type")


Missing = MissingType()


__all__ = (
    "MissingType",
    "Missing",
)
