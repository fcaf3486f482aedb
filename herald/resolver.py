"""
Argument resolver: turns raw tokens into the typed arguments of one command.

Rules
- Length pre-filter: the token count must fall within
  [min_length, max_length] before any reader runs (fallback commands are
  exempt).
- A token exists → convert it (values already of the declared type, and
  str/object parameters, bypass readers; "null"/"nothing"/"none" bind None
  on nullable parameters).
- No token, optional parameter → ask context.missing(parameter): Missing
  means the declared default; a self-populated value must be exactly of the
  declared type.
- No token, required parameter → MissingValueError.
- Remainder → every remaining token joined with single spaces.
- Complex → children resolved recursively from the next tokens, then the
  selected constructor is called with them positionally.
- Named parameters bind from the parsed named parameters; a bool named
  parameter given as a bare flag binds True.
"""
import inspect
from typing import Any

from .arguments import ComplexParameter
from .faults import ConversionError, LengthMismatchError, MissingValueError, ReadError
from .missing import Missing
from .results import ReadResult
from .utils import Unset

_nulls = frozenset({"null", "nothing", "none"})


def _typename(parameter):
    return getattr(parameter.type, "__name__", repr(parameter.type))


async def _convert(context, parameter, value):
    if parameter.nullable and isinstance(value, str) and value.casefold() in _nulls:
        return None
    if isinstance(parameter.type, type) and isinstance(value, parameter.type):
        return value
    if parameter.reader is None:
        return value
    if not isinstance(value, str):
        raise ConversionError(
            f"expected {_typename(parameter)}, got {value!r} at parameter {parameter.name!r}",
            parameter=parameter.name,
            value=value,
        )
    if not (result := await parameter.reader.evaluate(context, parameter, value)).success:
        raise result.exception
    return result.value


async def _missing(context, parameter):
    value = context.missing(parameter)
    if inspect.isawaitable(value):
        value = await value

    if value is Missing:
        return parameter.default
    if value is None and parameter.nullable:
        return None
    if parameter.type in (object, Any) or type(value) is parameter.type:
        return value
    raise ConversionError(
        f"expected {_typename(parameter)}, got a self-populated {type(value).__name__!r} at parameter {parameter.name!r}",
        hint="the context's missing() hook must return Missing or an exact instance of the declared type",
        parameter=parameter.name,
        value=value,
    )


async def _construct(parameter, arguments):
    try:
        value = parameter.constructor(*arguments)
        if inspect.isawaitable(value):
            value = await value
    except Exception as exception:
        error = ConversionError(
            f"cannot construct {_typename(parameter)} at parameter {parameter.name!r}: {exception}",
            parameter=parameter.name,
        )
        error.__cause__ = exception
        raise error
    return value


async def _read_positionals(context, parameters, tokens):
    arguments = []
    for parameter in parameters:
        if parameter.remainder:
            if tokens:
                value = " ".join(map(str, tokens))
                tokens.clear()
                arguments.append(await _convert(context, parameter, value))
            elif parameter.optional:
                arguments.append(await _missing(context, parameter))
            else:
                raise MissingValueError(
                    f"parameter {parameter.name!r} expects the rest of the input",
                    parameter=parameter.name,
                )
            continue

        if isinstance(parameter, ComplexParameter):
            if not tokens and parameter.optional:
                arguments.append(await _missing(context, parameter))
            else:
                children = await _read_positionals(context, parameter.parameters, tokens)
                arguments.append(await _construct(parameter, children))
            continue

        if tokens:
            arguments.append(await _convert(context, parameter, tokens.pop(0)))
        elif parameter.optional:
            arguments.append(await _missing(context, parameter))
        else:
            raise MissingValueError(
                f"missing a value for parameter {parameter.name!r}",
                hint=f"provide a {_typename(parameter).lower()} value",
                parameter=parameter.name,
            )
    return arguments


async def _read_keywords(context, parameters, named):
    keywords = {}
    for parameter in parameters:
        key = next((name for name in parameter.names if name in named), Unset)
        if key is Unset:
            if not parameter.optional:
                raise MissingValueError(
                    f"missing named parameter {'--' + parameter.names[0]!r}",
                    hint=f"pass it as '--{parameter.names[0]}: value'",
                    parameter=parameter.name,
                )
            keywords[parameter.name] = parameter.default
            continue

        if (value := named[key]) is None:
            if parameter.type is bool:
                keywords[parameter.name] = True
            elif parameter.nullable:
                keywords[parameter.name] = None
            else:
                raise MissingValueError(
                    f"named parameter {'--' + key!r} requires a value",
                    hint=f"pass it as '--{key}: value'",
                    parameter=parameter.name,
                )
            continue

        keywords[parameter.name] = await _convert(context, parameter, value)
    return keywords


async def read(context, command, tokens, named, /):
    """
    Resolve the arguments of `command` and return a ReadResult.

    Every ReadError raised while resolving becomes a failed result; readers
    themselves never let exceptions escape (see TypeReader.evaluate).
    """
    tokens = list(tokens)
    if not command.fallback and not command.min_length <= len(tokens) <= command.max_length:
        if len(tokens) < command.min_length:
            message = f"{command.name!r} expects at least {command.min_length} value(s), got {len(tokens)}"
        else:
            message = f"{command.name!r} accepts at most {command.max_length} value(s), got {len(tokens)}"
        return ReadResult.failure(LengthMismatchError(
            message,
            hint="check the number of values passed to the command",
            command=command.name,
            count=len(tokens),
        ), command=command)

    try:
        arguments = await _read_positionals(context, command.positionals, tokens)
        keywords = await _read_keywords(context, command.keywords, named)
    except ReadError as error:
        context.logger.debug("read failed for %r: %s", command.name, error.message)
        return ReadResult.failure(error, command=command)

    return ReadResult(command, arguments, keywords)


__all__ = (
    "read",
)
