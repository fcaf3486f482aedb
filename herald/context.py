"""
Per-invocation command context.

A CommandContext is created fresh for every dispatch and never shared
between invocations. Hosts subclass it to carry their transport (console,
game player, chat channel) and to override the missing-value hook.
"""
import asyncio

from .internals import IntrospectiveType
from .missing import Missing
from .utils import Unset, coalesce


class CommandContext(metaclass=IntrospectiveType):
    """
    Parameters
    - name: the command name token.
    - parameters: positional tokens (strings, or already-typed objects).
    - named: named parameters parsed from `-x` / `--name` / `--name: value`.
    - prefix: the matched command prefix, if any.
    - raw: the original input.
    - transport: whatever should receive response text.
    - logger: logging.Logger used by every stage (the dispatcher fills in
      its configured logger when None).
    - cancellation: asyncio.Event a command body may observe; the
      dispatcher never sets it.
    """
    __introspectable__ = (
        "name",
        "parameters",
        "named",
        "prefix",
        "raw",
        "transport",
        "cancellation",
    )
    __displayable__ = (
        "name",
        "parameters",
        "named",
        "prefix",
    )

    def __init__(self, name, parameters=(), named=Unset, *, prefix=None, raw=None, transport=None, logger=None, cancellation=Unset):
        if not isinstance(name, str):
            raise TypeError(f"{type(self).__typename__} 'name' must be a string")
        self._name = name
        self._parameters = list(parameters)
        self._named = dict(coalesce(named, {}))
        self._prefix = prefix
        self._raw = coalesce(raw, name)
        self._transport = transport
        self._cancellation = asyncio.Event() if cancellation is Unset else cancellation
        self.logger = logger

    @classmethod
    def from_parse(cls, result, /, **options):
        """Build a context from a ParseResult; `options` reach __init__."""
        return cls(
            result.name,
            result.parameters,
            result.named,
            prefix=result.prefix,
            raw=result.raw,
            **options
        )

    def missing(self, parameter, /):
        """
        Value for an optional parameter the input did not supply.

        Return Missing to use the declared default. Anything else
        self-populates the parameter and must be an instance of its declared
        type (None is accepted for nullable parameters).
        """
        return Missing


__all__ = (
    "CommandContext",
)
