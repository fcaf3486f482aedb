import asyncio
import logging
import sys
from datetime import timedelta
from typing import Annotated

from rich.color import Color
from rich.console import Console
from rich.logging import RichHandler
from rich.pretty import pprint
from rich.style import Style
from rich.text import Text

from herald import *

console = Console()


class ConsoleContext(CommandContext):
    """Context of the interactive console: responses go to the terminal."""

    def missing(self, parameter, /):
        if parameter.name == "who":
            return self.transport.get("user", Missing)
        return Missing


class Greeter(ModuleBase):
    @command("hello", "hi")
    def hello(self, who: str = "world"):
        """Greet someone."""
        self.respond(f"hello {who}")

    @command("say")
    def say(self, text: Annotated[str, Remainder], *, loud: Annotated[bool, Named("l", "loud")] = False):
        self.respond(text.upper() if loud else text)

    @command("paint")
    def paint(self, color: Color, text: Annotated[str, Remainder] = "sample"):
        self.respond(Text(text, style=Style(color=color)))

    def unhandled(self, value, /):
        self.respond(str(value))
        return self.success(value)


@group("timer", "t")
class Timer(ModuleBase):
    """Duration helpers."""

    @command("add")
    def add(self, first: timedelta, second: timedelta):
        return first + second

    @command("add", fallback=True)
    def usage(self):
        return self.error("timer add expects two durations", hint="e.g. timer add 1h30m \"5 minutes\"")

    def unhandled(self, value, /):
        self.respond(str(value))
        return self.success(value)


@requires(RequirePrefix("!"))
class Admin(ModuleBase):
    @command("context")
    def show(self):
        pprint(self.context, console=self.console)


def main():
    logging.basicConfig(
        level=logging.INFO,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), rich_tracebacks=True)],
    )

    dispatcher = Dispatcher(
        Greeter,
        Timer,
        Admin,
        prefixes=("!", "/"),
        shell=True,
        console=console,
        logger=logging.getLogger("herald.console"),
    )

    if len(sys.argv) > 1:
        invoke(dispatcher, sys.argv[1:])
        return

    async def loop():
        while True:
            try:
                line = await asyncio.to_thread(console.input, "[bold]> [/bold]")
            except (EOFError, KeyboardInterrupt):
                break
            if line.strip() in ("!quit", "/quit"):
                break
            await dispatcher.dispatch(line, factory=ConsoleContext, transport={"user": "operator"})

    asyncio.run(loop())


if __name__ == '__main__':
    main()
