"""
Herald preconditions: gates evaluated before argument conversion.

Contract
- Precondition.check(context, command) may return None/True (pass), False
  (fail with the precondition's default message), raise PreconditionError
  (fail with that message) or be a coroutine doing any of these. Any other
  exception is wrapped into a PreconditionError.
- Preconditions are stateless predicates over context + command metadata:
  they must not mutate shared state.

Attachment
    @requires(RequirePrefix("!"))
    class Admin(ModuleBase):
        @command("kick")
        @requires(Predicate(lambda context, command: context.transport.is_admin, "admins only"))
        def kick(self, who: str): ...

Module-level preconditions run before command-level ones, each list in
declaration order; the first failure short-circuits the rest.
"""
import builtins
import inspect
from abc import abstractmethod

from .faults import PreconditionError
from .internals import IntrospectiveABCType
from .results import CheckResult
from .utils import Unset, coalesce


class Precondition(metaclass=IntrospectiveABCType):
    message = "precondition failed"

    @abstractmethod
    def check(self, context, command):
        ...

    def fail(self, message=Unset, /, **options):
        """Abort check() with a PreconditionError (defaults to self.message)."""
        raise PreconditionError(coalesce(message, self.message), precondition=self, **options)

    async def evaluate(self, context, command):
        try:
            outcome = self.check(context, command)
            if inspect.isawaitable(outcome):
                outcome = await outcome
        except PreconditionError as error:
            return CheckResult.failure(error, command=command)
        except Exception as exception:
            error = PreconditionError(str(exception) or self.message, precondition=self)
            error.__cause__ = exception
            return CheckResult.failure(error, command=command)

        if outcome is False:
            return CheckResult.failure(PreconditionError(self.message, precondition=self), command=command)
        return CheckResult(command)


class RequireContext(Precondition):
    """The context must be an instance of the given type."""
    __introspectable__ = ("type",)

    def __init__(self, type, /):
        if not isinstance(type, builtins.type):
            raise TypeError("RequireContext() argument must be a type")
        self._type = type
        self.message = f"this command requires a {type.__name__} context"

    def check(self, context, command):
        return isinstance(context, self._type)


class RequirePrefix(Precondition):
    """The command must have been invoked with one of the given prefixes."""
    __introspectable__ = ("prefixes",)

    def __init__(self, *prefixes):
        if not prefixes or not all(isinstance(prefix, str) and prefix for prefix in prefixes):
            raise TypeError("RequirePrefix() arguments must be non-empty strings")
        self._prefixes = prefixes
        self.message = f"this command must be prefixed with {' or '.join(map(repr, prefixes))}"

    def check(self, context, command):
        return context.prefix in self._prefixes


class Predicate(Precondition):
    """Wraps a plain `callable(context, command)` returning a truthy verdict."""
    __introspectable__ = ("callable",)

    def __init__(self, callable, message=Unset, /):
        if not builtins.callable(callable):
            raise TypeError("Predicate() first argument must be callable")
        self._callable = callable
        self.message = coalesce(message, self.message)

    async def check(self, context, command):
        outcome = self._callable(context, command)
        if inspect.isawaitable(outcome):
            outcome = await outcome
        return outcome is None or bool(outcome)


def requires(*preconditions):
    """
    Attach preconditions to a ModuleBase subclass or a command method.

    Stacked decorators keep top-to-bottom declaration order.
    """
    for precondition in preconditions:
        if not isinstance(precondition, Precondition):
            raise TypeError("@requires() arguments must be preconditions")

    def wrapper(target, /):
        existing = target.__dict__.get("__preconditions__", ()) if isinstance(target, type) else getattr(target, "__preconditions__", ())
        target.__preconditions__ = tuple(preconditions) + tuple(existing)
        return target

    return wrapper


async def check(context, command, cache, /):
    """
    Evaluate every precondition of `command` and return a CheckResult.

    `cache` is a per-invocation dict: module-level outcomes are stored under
    (precondition, module) so later candidates of the same module reuse them.
    """
    for precondition in command.module.preconditions:
        key = (precondition, command.module)
        if key not in cache:
            cache[key] = await precondition.evaluate(context, command)
        if not (result := cache[key]).success:
            context.logger.debug("module precondition %r rejected %r", precondition, command.name)
            return CheckResult.failure(result.exception, command=command)

    for precondition in command.checks:
        if not (result := await precondition.evaluate(context, command)).success:
            context.logger.debug("precondition %r rejected %r", precondition, command.name)
            return result

    return CheckResult(command)


__all__ = (
    "Precondition",
    "RequireContext",
    "RequirePrefix",
    "Predicate",
    "requires",
    "check",
)
