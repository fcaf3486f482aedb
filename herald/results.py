"""
Tagged pipeline results.

Every stage of a dispatch produces exactly one result object; a failed result
terminates the pipeline. All results share the same shape (success flag,
message, exception) plus a stage-specific payload.

    Search → Check → Read → Construct → Execute

`BuildResult` and `ConvertResult` follow the same shape for the startup
build pass and for single type-reader conversions.
"""
from enum import IntEnum

from .faults import CommandException
from .internals import IntrospectiveType
from .utils import Unset, coalesce


class Stage(IntEnum):
    SEARCH = 1
    CHECK = 2
    READ = 3
    CONSTRUCT = 4
    EXECUTE = 5


class Result(metaclass=IntrospectiveType):
    """
    Base of all results.

    A result is a success when it carries no exception. Failures always carry
    a CommandException whose message doubles as the result message; the
    original error (if any) is chained as the exception's __cause__.
    """
    __introspectable__ = ("exception",)
    __displayable__ = ("success", "message", "exception")

    stage = Unset

    def __init__(self, *, exception=None):
        if not isinstance(exception, CommandException | None):
            raise TypeError(f"{type(self).__typename__} 'exception' must be a command exception")
        self._exception = exception

    @property
    def success(self):
        return self._exception is None

    @property
    def message(self):
        return self._exception.message if self._exception is not None else None

    def unwrap(self):
        """Return self when successful, otherwise raise the carried exception."""
        if self._exception is not None:
            raise self._exception
        return self

    def __bool__(self):
        return self.success

    @classmethod
    def failure(cls, exception, /, **payload):
        return cls(exception=exception, **payload)


class SearchResult(Result):
    __introspectable__ = ("exception", "candidates")
    __displayable__ = ("success", "message", "candidates")

    stage = Stage.SEARCH

    def __init__(self, candidates=(), *, exception=None):
        super().__init__(exception=exception)
        self._candidates = tuple(candidates)


class CheckResult(Result):
    __introspectable__ = ("exception", "command")
    __displayable__ = ("success", "message", "command")

    stage = Stage.CHECK

    def __init__(self, command=None, *, exception=None):
        super().__init__(exception=exception)
        self._command = command


class ReadResult(Result):
    __introspectable__ = ("exception", "command", "arguments", "keywords")
    __displayable__ = ("success", "message", "command", "arguments", "keywords")

    stage = Stage.READ

    def __init__(self, command=None, arguments=(), keywords=Unset, *, exception=None):
        super().__init__(exception=exception)
        self._command = command
        self._arguments = tuple(arguments)
        self._keywords = dict(coalesce(keywords, {}))


class ConstructionResult(Result):
    __introspectable__ = ("exception", "command", "instance")
    __displayable__ = ("success", "message", "command")

    stage = Stage.CONSTRUCT

    def __init__(self, command=None, instance=None, *, exception=None):
        super().__init__(exception=exception)
        self._command = command
        self._instance = instance


class ExecuteResult(Result):
    """
    Terminal result of a successful pipeline, or of a failing command body.

    `value` holds whatever the command chose to report (None for commands
    that return nothing).
    """
    __introspectable__ = ("exception", "command", "value")
    __displayable__ = ("success", "message", "command", "value")

    stage = Stage.EXECUTE

    def __init__(self, command=None, value=None, *, exception=None):
        super().__init__(exception=exception)
        self._command = command
        self._value = value


class BuildResult(Result):
    __introspectable__ = ("exception", "modules", "components")
    __displayable__ = ("success", "message", "modules")

    def __init__(self, modules=(), components=(), *, exception=None):
        super().__init__(exception=exception)
        self._modules = tuple(modules)
        self._components = tuple(components)


class ConvertResult(Result):
    __introspectable__ = ("exception", "value")
    __displayable__ = ("success", "message", "value")

    stage = Stage.READ

    def __init__(self, value=None, *, exception=None):
        super().__init__(exception=exception)
        self._value = value


__all__ = (
    "Stage",
    "Result",
    "SearchResult",
    "CheckResult",
    "ReadResult",
    "ConstructionResult",
    "ExecuteResult",
    "BuildResult",
    "ConvertResult",
)
