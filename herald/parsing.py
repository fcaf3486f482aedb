r"""
Herald input parser.

Turns one raw line of text (or a pre-tokenized iterable) into a ParseResult:
the command name, the ordered positional parameters, the named parameters
and the matched prefix.

Token rules (left to right, after the name)
- "quoted"            → one value, quotes stripped.
- "opens ... closes"  → one value; the tokens in between are re-joined with
                        single spaces. An unterminated span is flushed at the
                        end of the input.
- --name              → named parameter `name` with a None value.
- --name:             → the *next* value (quoted or not) is stored under
                        `name` instead of being appended to the positionals.
- -abc                → named parameters `a`, `b` and `c`, each None.
                        Negative numbers (-5, -0.25, -1e3) stay positional.
- anything else       → positional value.

There is no escaping of embedded quotes.

Quick example:
    >>> Parser(prefixes=("!",)).parse('!ban "some user" --reason: spam -s')
    parse-result(name='ban', parameters=('some user',), named={'reason': 'spam', 's': None}, prefix='!', ...)
"""
import re
from collections.abc import Iterable

from .faults import EmptyInputError, InvalidInputError, MissingPrefixError
from .internals import IntrospectiveType
from .utils import Unset, coalesce


class ParseResult(metaclass=IntrospectiveType):
    """
    Output of Parser.parse(); consumed by the search stage then discarded.
    """
    __introspectable__ = (
        "name",
        "parameters",
        "named",
        "prefix",
        "raw",
    )

    def __init__(self, name, parameters=(), named=Unset, *, prefix=None, raw=None):
        self._name = name
        self._parameters = list(parameters)
        self._named = dict(coalesce(named, {}))
        self._prefix = prefix
        self._raw = raw


def _negative(token):
    return re.fullmatch(r"-\d*\.?\d+(?:[eE][-+]?\d+)?", token) is not None


class Parser(metaclass=IntrospectiveType):
    """
    Whitespace/quote-aware tokenizer with optional prefix scheme.

    Parameters
    - prefixes: Iterable[str]
      When non-empty, input must start with one of these (first match in
      declaration order wins); the prefix is stripped and reported.
    """
    __introspectable__ = ("prefixes",)

    def __init__(self, prefixes=()):
        if isinstance(prefixes, str) or not isinstance(prefixes, Iterable):
            raise TypeError(f"{type(self).__typename__} 'prefixes' must be an iterable of strings")
        sanitized = []
        for prefix in prefixes:
            if not isinstance(prefix, str):
                raise TypeError(f"{type(self).__typename__} prefixes must be strings")
            elif not (prefix := prefix.strip()):
                raise ValueError(f"{type(self).__typename__} prefixes cannot be empty-strings")
            sanitized.append(prefix)
        self._prefixes = sanitized

    def _strip(self, head):
        if not self._prefixes:
            return head, None
        for prefix in self._prefixes:
            if head.startswith(prefix):
                return head[len(prefix):], prefix
        raise MissingPrefixError(
            f"input must start with one of {', '.join(map(repr, self._prefixes))}",
            hint="prefix the command name, e.g. %r" % (self._prefixes[0] + "help"),
        )

    def parse(self, raw, /):
        """
        Parse a raw line or a token iterable.

        Raises
        - EmptyInputError: when nothing but whitespace (or a bare prefix) is given.
        - MissingPrefixError: when prefixes are configured and none matches.
        - InvalidInputError: when the input is neither a string nor an
          iterable, or when the command name is not a string.
        """
        if isinstance(raw, str):
            head, prefix = self._strip(raw.lstrip())
            tokens = head.split()
        elif isinstance(raw, Iterable):
            tokens = [token.strip() if isinstance(token, str) else token for token in raw]
            tokens = [token for token in tokens if token != ""]
            prefix = None
            if tokens and isinstance(tokens[0], str):
                head, prefix = self._strip(tokens[0])
                tokens[0:1] = head.split()
        else:
            raise InvalidInputError(
                f"input must be a string or an iterable of tokens, got {type(raw).__name__}",
                hint="pass a raw line or a list of tokens",
            )

        if not tokens:
            raise EmptyInputError("no command name was given", hint="type a command name")

        name, *tokens = tokens
        if not isinstance(name, str):
            raise InvalidInputError(
                f"command name must be a string, got {type(name).__name__}",
                hint="pass the command name as the first token",
            )

        parameters = []
        named = {}
        pending = Unset
        span = None

        def emit(value):
            nonlocal pending
            if pending is not Unset:
                named[pending] = value
                pending = Unset
            else:
                parameters.append(value)

        def settle():
            # a pending `--name:` that is not followed by a value
            nonlocal pending
            if pending is not Unset:
                named[pending] = None
                pending = Unset

        for token in tokens:
            if not isinstance(token, str):
                emit(token)
                continue

            if span is not None:
                if token.endswith('"'):
                    span.append(token[:-1])
                    emit(" ".join(span))
                    span = None
                else:
                    span.append(token)
                continue

            if token.startswith('"'):
                if len(token) > 1 and token.endswith('"'):
                    emit(token[1:-1])
                else:
                    span = [token[1:]]
                continue

            if token.startswith("--") and len(token) > 2:
                settle()
                if token.endswith(":"):
                    if key := token[2:-1]:
                        pending = key
                else:
                    named[token[2:]] = None
                continue

            if token.startswith("-") and len(token) > 1 and token[1] != "-" and not _negative(token):
                settle()
                for char in token[1:]:
                    named[char] = None
                continue

            emit(token)

        if span is not None:
            emit(" ".join(span))
        settle()

        return ParseResult(name, parameters, named, prefix=prefix, raw=raw)


__all__ = (
    "ParseResult",
    "Parser",
)
