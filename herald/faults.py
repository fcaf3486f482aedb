"""
Herald faults (errors and warnings) and rendering.

Scope
- FaultCode: stable numeric identifiers for every user-facing issue, grouped
  by pipeline stage so logs and searches stay predictable.
- CommandException / CommandWarning: base types carrying message + hint +
  options that know how to render themselves with rich.
- Stage families: SearchError, CheckError, ReadError, ConstructionError and
  ExecuteError are *returned* inside failed results at runtime; BuildError is
  *raised* at startup because it is a programmer error.

UX goals
- Soft but technical language: short titles, one-sentence bodies, a single
  clear hint.
- Lowercased tone with readable styling (overridable per configuration).
"""
from collections import defaultdict
from enum import IntEnum
from types import MappingProxyType

from rich.console import Group
from rich.panel import Panel
from rich.text import Text

from .utils import Unset, coalesce


class FaultCode(IntEnum):
    """
    canonical fault codes used across the dispatcher (stable identifiers).

    grouping
    - search (211xx): UNKNOWN_COMMAND, EMPTY_INPUT, MISSING_PREFIX,
      INVALID_INPUT
    - check (212xx): FAILED_PRECONDITION
    - read (213xx): LENGTH_MISMATCH, UNCONVERTIBLE_VALUE, MISSING_VALUE
    - construction (214xx): UNRESOLVED_DEPENDENCY, INVALID_HANDLER
    - execute (215xx): DELEGATED_ERROR, UNHANDLED_RETURN
    - build (221xx): fatal configuration errors raised at startup
    - warnings (231xx): MISSING_DEPENDENCY

    spacing leaves room for future additions without reshuffling codes.
    """
    # --- search errors (211xx) ---
    UNKNOWN_COMMAND         = 21101
    EMPTY_INPUT             = 21102
    MISSING_PREFIX          = 21103
    INVALID_INPUT           = 21104

    # --- check errors (212xx) ---
    FAILED_PRECONDITION     = 21201

    # --- read errors (213xx) ---
    LENGTH_MISMATCH         = 21301
    UNCONVERTIBLE_VALUE     = 21302
    MISSING_VALUE           = 21303

    # --- construction errors (214xx) ---
    UNRESOLVED_DEPENDENCY   = 21401
    INVALID_HANDLER         = 21402

    # --- execute errors (215xx) ---
    DELEGATED_ERROR         = 21501
    UNHANDLED_RETURN        = 21502

    # --- build errors (221xx) ---
    INVALID_REMAINDER       = 22101
    INVALID_COMPLEX         = 22102
    MISSING_READER          = 22103
    DUPLICATE_ALIAS         = 22104
    AMBIGUOUS_CONSTRUCTOR   = 22105
    INVALID_PARAMETER       = 22106
    INVALID_MODULE          = 22107

    # --- warnings (231xx) ---
    MISSING_DEPENDENCY      = 23101

    def normalize(self, codes=MappingProxyType({}), /):
        """
        return a host-normalized label for this code.

        hosts may remap numeric ids to friendlier labels through the
        configuration's `codes` mapping; otherwise the number is used.
        """
        return str(codes.get(self, self.value))


_error_styles = MappingProxyType({
    # header parts
    "prog-name": "bold #E6E6F0",
    "code": "bold #00E5FF",
    "title": "bold #FF4DA6",

    # body
    "message": "#C8C8D0",
    "hint-arrow": "#9CE19C dim",
    "hint": "italic #9CE19C",
})

_warning_styles = MappingProxyType(dict(_error_styles) | {
    "code": "bold #FFB400",
    "title": "bold #FFC2E0",
    "message": "#D6D6DE",
    "hint-arrow": "#B8EFAF dim",
    "hint": "italic #B8EFAF",
})


def _render(fault, defaults, *, colorful, fancy, prog, styles, codes, width):
    styles = defaultdict(str, defaults | dict(styles))

    def text(fragment, style=""):
        if not fragment:
            return Text("")
        if not colorful:
            return Text(str(fragment))
        return Text(str(fragment), styles[style])

    header = Text.assemble(
        "[ ",
        text(prog, "prog-name"),
        " — ",
        text(fault.code.normalize(codes), "code"),
        " | ",
        text(fault.title.title(), "title"),
        " ]"
    )
    message = text(fault.message, "message")

    body = [message]
    if fault.hint:
        body.append(Text.assemble(text(" → ", "hint-arrow"), text(fault.hint, "hint")))

    if fancy:
        return Panel(Group(*body), title=header, title_align="left", width=width)

    return Group(header, *body)


class _Fault:
    """Shared shape of errors and warnings: message, hint and read-only options."""
    code = Unset
    title = Unset

    def __init__(self, message, /, *, hint=Unset, **options):
        if not isinstance(message, str):
            raise TypeError(f"{type(self).__name__}() message must be a string")
        super().__init__(message)
        self.message = message
        self.hint = coalesce(hint)
        self.options = MappingProxyType(options)

    def __str__(self):
        return self.message


class CommandException(_Fault, Exception):
    code = FaultCode.DELEGATED_ERROR
    title = "command error"

    def render(self, *, colorful=True, fancy=False, prog="herald", styles=MappingProxyType({}), codes=MappingProxyType({}), width=None):
        """
        Build a rich renderable for this error.

        Plain mode yields a header line ("[ prog — code | Title ]"), the
        message and an optional hint; fancy mode wraps message and hint in a
        panel titled with the header.
        """
        return _render(
            self,
            _error_styles,
            colorful=colorful,
            fancy=fancy,
            prog=prog,
            styles=styles,
            codes=codes,
            width=width,
        )

    def __rich__(self):
        return self.render()


# --- search ---

class SearchError(CommandException):
    title = "search failure"


class UnknownCommandError(SearchError):
    code = FaultCode.UNKNOWN_COMMAND
    title = "unknown command"


class EmptyInputError(SearchError):
    code = FaultCode.EMPTY_INPUT
    title = "empty input"


class MissingPrefixError(SearchError):
    code = FaultCode.MISSING_PREFIX
    title = "missing prefix"


class InvalidInputError(SearchError):
    code = FaultCode.INVALID_INPUT
    title = "invalid input"


# --- check ---

class CheckError(CommandException):
    title = "check failure"


class PreconditionError(CheckError):
    code = FaultCode.FAILED_PRECONDITION
    title = "failed precondition"


# --- read ---

class ReadError(CommandException):
    title = "read failure"


class LengthMismatchError(ReadError):
    code = FaultCode.LENGTH_MISMATCH
    title = "length mismatch"


class ConversionError(ReadError):
    code = FaultCode.UNCONVERTIBLE_VALUE
    title = "unconvertible value"


class MissingValueError(ReadError):
    code = FaultCode.MISSING_VALUE
    title = "missing value"


# --- construction ---

class ConstructionError(CommandException):
    title = "construction failure"


class UnresolvedDependencyError(ConstructionError):
    code = FaultCode.UNRESOLVED_DEPENDENCY
    title = "unresolved dependency"


class InvalidHandlerError(ConstructionError):
    code = FaultCode.INVALID_HANDLER
    title = "invalid handler"


# --- execute ---

class ExecuteError(CommandException):
    title = "execute failure"


class DelegatedCommandError(ExecuteError):
    code = FaultCode.DELEGATED_ERROR
    title = "delegated error"


class UnhandledReturnTypeError(ExecuteError):
    code = FaultCode.UNHANDLED_RETURN
    title = "unhandled return"


# --- build (fatal, raised at startup) ---

class BuildError(CommandException):
    title = "build failure"


class InvalidRemainderError(BuildError):
    code = FaultCode.INVALID_REMAINDER
    title = "invalid remainder"


class InvalidComplexError(BuildError):
    code = FaultCode.INVALID_COMPLEX
    title = "invalid complex parameter"


class MissingReaderError(BuildError):
    code = FaultCode.MISSING_READER
    title = "missing reader"


class DuplicateAliasError(BuildError):
    code = FaultCode.DUPLICATE_ALIAS
    title = "duplicate alias"


class AmbiguousConstructorError(BuildError):
    code = FaultCode.AMBIGUOUS_CONSTRUCTOR
    title = "ambiguous constructor"


class InvalidParameterError(BuildError):
    code = FaultCode.INVALID_PARAMETER
    title = "invalid parameter"


class InvalidModuleError(BuildError):
    code = FaultCode.INVALID_MODULE
    title = "invalid module"


# --- warnings ---

class CommandWarning(_Fault, Warning):
    code = FaultCode.MISSING_DEPENDENCY
    title = "command warning"

    def render(self, *, colorful=True, fancy=False, prog="herald", styles=MappingProxyType({}), codes=MappingProxyType({}), width=None):
        return _render(
            self,
            _warning_styles,
            colorful=colorful,
            fancy=fancy,
            prog=prog,
            styles=styles,
            codes=codes,
            width=width,
        )

    def __rich__(self):
        return self.render()


class MissingDependencyWarning(CommandWarning):
    code = FaultCode.MISSING_DEPENDENCY
    title = "missing dependency"


__all__ = (
    "FaultCode",
    "CommandException",
    "SearchError",
    "UnknownCommandError",
    "EmptyInputError",
    "MissingPrefixError",
    "InvalidInputError",
    "CheckError",
    "PreconditionError",
    "ReadError",
    "LengthMismatchError",
    "ConversionError",
    "MissingValueError",
    "ConstructionError",
    "UnresolvedDependencyError",
    "InvalidHandlerError",
    "ExecuteError",
    "DelegatedCommandError",
    "UnhandledReturnTypeError",
    "BuildError",
    "InvalidRemainderError",
    "InvalidComplexError",
    "MissingReaderError",
    "DuplicateAliasError",
    "AmbiguousConstructorError",
    "InvalidParameterError",
    "InvalidModuleError",
    "CommandWarning",
    "MissingDependencyWarning",
)
