"""
Herald dispatcher: the pipeline orchestrator.

    Search → Check → Read → Construct → Execute

Each stage produces a tagged result; a failed result is terminal and is
handed to on_result() without running later stages. The overload loop is
the one exception: candidates from the search stage are tried in order
(Check + Read) until one passes.

Overview
- Dispatcher(*sources, configuration=..., **options)
  • Builds the module tree once (build errors are raised here), then serves
    any number of concurrent executions. The tree is never mutated after
    construction.

- Dispatcher.dispatch(prompt, **context_options)
  • Parse a raw line (or token iterable) into a fresh CommandContext and
    execute it.

- Dispatcher.execute(context)
  • Run the pipeline for an already built context.
  • Approach.AWAIT: returns the final result.
  • Approach.DISCARD: returns the asyncio.Task running the pipeline.

- invoke(dispatcher, prompt)
  • Synchronous runner for scripts and consoles (asyncio.run).

Hooks (override in subclasses)
- on_result(context, result): receives every final result. Default: log it
  and, in shell mode, render failures to the console.
- on_missing_dependency(context, dependency): an optional handler
  dependency could not be resolved. Default: warn.

Quick example:
    >>> class Greeter(ModuleBase):
    ...     @command("hello")
    ...     def hello(self, who: str = "world"):
    ...         self.respond(f"hello {who}")
    ...
    >>> invoke(Dispatcher(Greeter), "hello there")
"""
import asyncio
import builtins
import inspect
import sys
import warnings

from .components import Command, ReturnKind, build
from .configuration import Approach, Configuration
from .context import CommandContext
from .faults import (
    DelegatedCommandError,
    InvalidHandlerError,
    LengthMismatchError,
    MissingDependencyWarning,
    SearchError,
    UnresolvedDependencyError,
)
from .internals import IntrospectiveType
from .parsing import Parser
from .preconditions import check
from .resolver import read
from .results import ConstructionResult, ExecuteResult, Result, SearchResult
from .search import search
from .services import Services
from .utils import Unset


async def _settle(value):
    if inspect.isawaitable(value):
        return await value
    return value


class Dispatcher(metaclass=IntrospectiveType):
    __introspectable__ = (
        "configuration",
        "modules",
        "components",
    )
    __displayable__ = (
        "configuration",
        "components",
    )

    def __init__(self, *sources, configuration=Unset, **options):
        if configuration is Unset:
            configuration = Configuration(**options)
        elif not isinstance(configuration, Configuration):
            raise TypeError(f"{type(self).__typename__} 'configuration' must be a configuration")
        elif options:
            configuration = configuration.__replace__(**options)

        built = build(*sources, readers=configuration.readers, logger=configuration.logger).unwrap()
        self._configuration = configuration
        self._modules = list(built.modules)
        self._components = list(built.components)
        self._parser = Parser(configuration.prefixes)
        self._tasks = set()

    @property
    def tasks(self):
        """Pipelines still running in discard mode."""
        return frozenset(self._tasks)

    async def dispatch(self, prompt, /, *, factory=CommandContext, **options):
        """
        Parse `prompt` and execute it.

        Parameters
        - prompt: str | Iterable
          A raw line, or tokens (non-string items are kept as already-typed
          positional values).
        - factory: CommandContext subclass used to build the context.
        - options: forwarded to the context constructor (transport, ...).

        Returns
        - The final result, or the running task in discard mode. Parse
          failures (empty input, missing prefix, malformed tokens) are failed
          SearchResults.
        """
        try:
            parsed = self._parser.parse(prompt)
        except SearchError as error:
            context = factory("", raw=prompt, **options)
            if context.logger is None:
                context.logger = self._configuration.logger
            context.logger.debug("parse failed: %s", error.message)
            result = SearchResult.failure(error)
            await self._report(context, result)
            return result

        return await self.execute(factory.from_parse(parsed, **options))

    async def execute(self, context, /):
        if not isinstance(context, CommandContext):
            raise TypeError("execute() argument must be a command context")
        if context.logger is None:
            context.logger = self._configuration.logger

        if self._configuration.approach is Approach.DISCARD:
            task = asyncio.create_task(self._run(context), name=f"herald:{context.name}")
            self._tasks.add(task)
            task.add_done_callback(self._tasks.discard)
            return task

        return await self._run(context)

    async def _run(self, context):
        try:
            result = await self._pipeline(context)
        except Exception as exception:
            context.logger.exception("unexpected failure while dispatching %r", context.name)
            error = DelegatedCommandError(
                f"unexpected {type(exception).__name__} while dispatching {context.name!r}",
                hint="this is a bug in a hook or a reader, see the logs",
            )
            error.__cause__ = exception
            result = ExecuteResult.failure(error)

        await self._report(context, result)
        return result

    async def _report(self, context, result):
        try:
            await _settle(self.on_result(context, result))
        except Exception:
            context.logger.exception("on_result() failed for %r", context.name)

    async def _pipeline(self, context):
        logger = context.logger

        logger.debug("searching %r", context.name)
        searched = search(self._components, context.name, context.parameters)
        if not searched.success:
            return searched

        cache = {}
        rejected = None
        unread = None
        for candidate in searched.candidates:
            command = candidate.command
            logger.debug("trying %r", command)

            checked = await check(context, command, cache)
            if not checked.success:
                if rejected is None:
                    rejected = checked
                continue

            resolved = await read(context, command, context.parameters[candidate.depth:], context.named)
            if not resolved.success:
                # a window mismatch only means the overload does not apply
                if not self._configuration.cascade and not isinstance(resolved.exception, LengthMismatchError):
                    return resolved
                if unread is None:
                    unread = resolved
                continue

            logger.debug("constructing %s", command.module.type.__qualname__)
            constructed = await self.construct(context, command)
            if not constructed.success:
                return constructed

            logger.debug("executing %r", command)
            return await self.run(context, constructed.instance, resolved)

        # the closest miss: a candidate that passed its checks but not its read
        return unread if unread is not None else rejected

    def _inject(self, context, command, dependency):
        kind = dependency.type
        if not isinstance(kind, builtins.type):
            return Unset
        if issubclass(kind, CommandContext) and isinstance(context, kind):
            return context
        if kind is Command:
            return command
        if kind is Services:
            return self._configuration.services
        return self._configuration.services.resolve(kind, Unset)

    async def construct(self, context, command, /):
        """
        Build a fresh handler instance for `command`.

        Returns a ConstructionResult; unresolved required dependencies and
        raising constructors are failures, never exceptions.
        """
        module = command.module
        arguments = []
        keywords = {}
        for dependency in module.dependencies:
            if (value := self._inject(context, command, dependency)) is Unset:
                if not (dependency.optional or dependency.nullable):
                    return ConstructionResult.failure(UnresolvedDependencyError(
                        f"cannot resolve {dependency.name!r} for {module.type.__qualname__!r}",
                        hint="register a matching service in the configuration",
                        dependency=dependency,
                    ), command=command)
                value = dependency.default if dependency.optional else None
                await _settle(self.on_missing_dependency(context, dependency))

            if dependency.positional:
                arguments.append(value)
            else:
                keywords[dependency.name] = value

        try:
            instance = await _settle(module.constructor(*arguments, **keywords))
        except Exception as exception:
            error = InvalidHandlerError(
                f"constructing {module.type.__qualname__!r} raised {type(exception).__name__}: {exception}",
                type=module.type,
            )
            error.__cause__ = exception
            return ConstructionResult.failure(error, command=command)

        if not isinstance(instance, module.type):
            return ConstructionResult.failure(InvalidHandlerError(
                f"the constructor of {module.type.__qualname__!r} returned a {type(instance).__name__!r}",
                hint="a @primary constructor must return an instance of its class",
                type=module.type,
            ), command=command)

        instance.context = context
        instance.command = command
        instance.services = self._configuration.services
        instance.console = self._configuration.console
        return ConstructionResult(command, instance)

    async def run(self, context, instance, resolved, /):
        """
        Execute the command body on `instance` with the arguments of `resolved`.

        Return values
        - None → successful ExecuteResult.
        - a Result → returned as is.
        - anything else → instance.unhandled(value).
        Exceptions raised by hooks or the body become DelegatedCommandError
        failures with the exception chained.
        """
        command = resolved.command
        try:
            await _settle(instance.before_execute())
            value = command.function(instance, *resolved.arguments, **resolved.keywords)
            match command.returns:
                case ReturnKind.AWAITABLE:
                    value = await value
                case ReturnKind.VOID:
                    await _settle(value)
                    value = None
                case _:
                    value = await _settle(value)
            await _settle(instance.after_execute())

            if value is None:
                return ExecuteResult(command)
            if isinstance(value, Result):
                return value
            outcome = await _settle(instance.unhandled(value))
        except Exception as exception:
            context.logger.debug("%r raised %s", command.name, type(exception).__name__)
            error = DelegatedCommandError(
                str(exception) or f"{command.name!r} raised {type(exception).__name__}",
                command=command.name,
            )
            error.__cause__ = exception
            return ExecuteResult.failure(error, command=command)

        return outcome if isinstance(outcome, Result) else ExecuteResult(command, outcome)

    def on_result(self, context, result, /):
        configuration = self._configuration
        if result.success:
            context.logger.debug("%r completed", context.name)
            return

        stage = result.stage.name.lower() if result.stage else "dispatch"
        context.logger.info("%r failed at %s: %s", context.name, stage, result.message)
        if configuration.shell:
            configuration.console.print(result.exception.render(
                colorful=configuration.colorful,
                fancy=configuration.fancy,
                prog=configuration.prog,
                styles=configuration.styles,
                codes=configuration.codes,
            ))

    def on_missing_dependency(self, context, dependency, /):
        configuration = self._configuration
        fallback = dependency.default if dependency.optional else None
        warning = MissingDependencyWarning(
            f"no service matches {dependency.name!r}, using {fallback!r}",
            hint="register a matching service to silence this warning",
            dependency=dependency,
        )
        context.logger.warning("%s", warning.message)
        if configuration.shell:
            configuration.console.print(warning.render(
                colorful=configuration.colorful,
                fancy=configuration.fancy,
                prog=configuration.prog,
                styles=configuration.styles,
                codes=configuration.codes,
            ))
        else:
            warnings.warn(warning, stacklevel=2)

    def __invoke__(self, prompt=Unset):
        """
        Dispatch `prompt` synchronously (sys.argv[1:] when Unset).

        In discard mode the scheduled task is awaited before returning, so
        scripts always get the final result back.
        """
        if prompt is Unset:
            prompt = sys.argv[1:]

        async def main():
            outcome = await self.dispatch(prompt)
            if isinstance(outcome, asyncio.Task):
                outcome = await outcome
            return outcome

        return asyncio.run(main())


def invoke(dispatcher, prompt=Unset, /):
    """
    Convenience runner for dispatchers.

    Parameters
    - dispatcher: an object implementing __invoke__(prompt).
    - prompt:
      • Unset: read sys.argv[1:].
      • str: a raw line.
      • Iterable: pre-tokenized input.
    """
    if hasattr(dispatcher, "__invoke__") and callable(dispatcher.__invoke__):
        return dispatcher.__invoke__(prompt)

    target = "argument" if prompt is Unset else "first argument"
    raise TypeError(f"invoke() {target} must implement __invoke__ method") from None


__all__ = (
    "Dispatcher",
    "invoke",
)
