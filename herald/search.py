"""
Overload search engine.

Given the root components, the command name and the positional tokens,
produce the ordered list of candidate commands the dispatcher will try
(Check + Read) until one succeeds.

Walk
- At the current level, collect the commands and the groups whose alias set
  contains the name (case-insensitive).
- When groups matched and tokens remain, the next token becomes the name and
  the walk recurses into each matched group, most populated first. Their
  candidates come first: a deeper, more specific match wins over a sibling
  command of the same name.
- Matched commands follow, ordered by
    (fallback last, fewest required tokens, fewest parameters, highest priority).
- No candidate at all is a SearchResult failure (UnknownCommandError).

Each candidate records its depth: the number of group names it consumed
from the positional tokens.
"""
from .components import Command, Module
from .faults import UnknownCommandError
from .internals import IntrospectiveType
from .results import SearchResult


class Candidate(metaclass=IntrospectiveType):
    __introspectable__ = ("command", "depth")

    def __init__(self, command, depth=0):
        self._command = command
        self._depth = depth


def _order(command):
    return command.fallback, command.min_length, len(command.parameters), -command.priority


def _walk(components, name, tokens):
    key = name.casefold()
    commands = []
    groups = []
    for component in components:
        if key not in component.keys:
            continue
        if isinstance(component, Command):
            commands.append(component)
        elif isinstance(component, Module):
            groups.append(component)

    candidates = []
    if groups and tokens and isinstance(tokens[0], str):
        for module in sorted(groups, key=lambda module: len(module.components), reverse=True):
            candidates.extend(
                Candidate(candidate.command, candidate.depth + 1)
                for candidate in _walk(module.components, tokens[0], tokens[1:])
            )

    candidates.extend(Candidate(command) for command in sorted(commands, key=_order))
    return candidates


def search(components, name, tokens=(), /):
    """
    Return a SearchResult holding the ordered candidates for `name`.
    """
    tokens = list(tokens)
    if candidates := _walk(components, name, tokens):
        return SearchResult(candidates)

    if any(isinstance(component, Module) and name.casefold() in component.keys for component in components):
        route = " ".join([name, *(token for token in tokens if isinstance(token, str))])
        return SearchResult.failure(UnknownCommandError(
            f"no command matches {route!r}",
            hint=f"{name!r} is a group, follow it with one of its commands",
            name=name,
        ))

    return SearchResult.failure(UnknownCommandError(
        f"unknown command {name!r}",
        hint="check the spelling of the command name",
        name=name,
    ))


__all__ = (
    "Candidate",
    "search",
)
