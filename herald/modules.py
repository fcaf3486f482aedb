"""
Handler base class.

Commands are methods of ModuleBase subclasses. A fresh instance is built for
every invocation (never pooled), receives its per-invocation state, and is
dropped once the command has run.

    class Greeter(ModuleBase):
        @command("hello", "hi")
        def hello(self, who: str = "world"):
            self.respond(f"hello {who}")
"""
from rich.console import Console

from .faults import DelegatedCommandError, UnhandledReturnTypeError
from .results import ExecuteResult


class ModuleBase:
    """
    Attributes set by the dispatcher before the command body runs
    - context: the CommandContext of this invocation.
    - command: the Command being executed.
    - services: the Services the handler was built from.
    - console: the configured rich console (used by respond()).

    Hooks (sync or async)
    - before_execute(): runs before the body.
    - after_execute(): runs after the body, only when it did not raise.
    - unhandled(value): interprets unrecognized return values.
    """
    context = None
    command = None
    services = None
    console = None

    def before_execute(self):
        pass

    def after_execute(self):
        pass

    def respond(self, message, /):
        """
        Default response hook: print `message` on the configured console.

        Hosts override this to route text to their own transport.
        """
        (self.console or Console()).print(message)

    def success(self, value=None, /):
        return ExecuteResult(self.command, value)

    def error(self, message, /, **options):
        return ExecuteResult.failure(DelegatedCommandError(message, **options), command=self.command)

    def unhandled(self, value, /):
        """
        Called for return values that are neither None nor a Result.

        The default rejects them; override to accept (e.g. respond() with
        strings) and return a Result.
        """
        return ExecuteResult.failure(UnhandledReturnTypeError(
            f"command {self.command.name!r} returned an unhandled {type(value).__name__!r} value",
            hint="return None or a result, or override unhandled()",
            value=value,
        ), command=self.command)


__all__ = (
    "ModuleBase",
)
