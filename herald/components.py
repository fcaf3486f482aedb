r"""
Herald component model: declarations and the build pass.

Declarations
- @command(*aliases, priority=0, descr=..., fallback=False, **attributes)
  marks a ModuleBase method as a command. Bare @command uses the method name.
- @group(*aliases, descr=..., **attributes) turns a ModuleBase subclass into a
  named group; nested @group classes become child modules.

Build pass
- build(*sources, readers=..., logger=...) reflects over ModuleBase
  subclasses (given directly, as imported modules, or as module-glob strings
  like "app.commands.*") and returns a BuildResult holding the immutable
  Module/Command tree. Invalid declarations surface as BuildError failures.

Tree shape
- Module: declaring type, aliases, parent, components (commands and nested
  groups), merged attributes and preconditions (parent first).
- Command: aliases, owning module, function, parameters, token window,
  preconditions (module + own), priority, fallback flag and a return kind
  computed once at build time.
- The root level holds the commands of every ungrouped top-level module and
  every grouped top-level module itself.

Quick example:
    >>> @group("config", "cfg")
    ... class Config(ModuleBase):
    ...     @command("set")
    ...     def set(self, key: str, value: Annotated[str, Remainder]): ...
    ...
    >>> result = build(Config)
    >>> result.components
    (module(name='config', ...),)
"""
import builtins
import importlib
import inspect
import logging
import types
import typing
from enum import IntEnum

from .arguments import build_parameters, select_constructor, window, _unwrap
from .faults import BuildError, DuplicateAliasError, InvalidModuleError
from .internals import IntrospectiveType
from .modules import ModuleBase
from .readers import TypeReaders
from .results import BuildResult
from .utils import Unset, coalesce, mglob


class ReturnKind(IntEnum):
    VOID = 1
    AWAITABLE = 2
    VALUE = 3


def _sanitize_aliases(aliases, label):
    if not all(isinstance(alias, str) for alias in aliases):
        raise TypeError(f"{label} aliases must be strings")
    sanitized = [alias for alias in map(str.strip, aliases) if alias]
    seen = set()
    for alias in sanitized:
        if (key := alias.casefold()) in seen:
            raise DuplicateAliasError(
                f"{label} declares the alias {alias!r} more than once",
                hint="aliases are matched case-insensitively",
                alias=alias,
            )
        seen.add(key)
    return sanitized


def command(*aliases, priority=0, descr=Unset, fallback=False, **attributes):
    """
    Mark a ModuleBase method as a command.

    Parameters
    - aliases: names the command answers to (the first is its name).
    - priority: int; higher runs first among equally matching overloads.
    - descr: short description (defaults to the docstring).
    - fallback: designate the error overload, tried last and exempt from the
      length pre-filter.
    - attributes: free-form metadata merged over the module's attributes.
    """
    if len(aliases) == 1 and builtins.callable(aliases[0]) and not isinstance(aliases[0], str):
        function, = aliases
        return command(function.__name__)(function)

    if not all(isinstance(alias, str) for alias in aliases):
        raise TypeError("@command() aliases must be strings")
    if not isinstance(priority, int) or isinstance(priority, bool):
        raise TypeError("@command() 'priority' must be an integer")
    if not isinstance(descr, str | Unset):
        raise TypeError("@command() 'descr' must be a string")

    def wrapper(function, /):
        if not inspect.isfunction(function):
            raise TypeError("@command() must be applied to a function")
        function.__command__ = {
            "aliases": aliases,
            "priority": priority,
            "descr": coalesce(descr, inspect.getdoc(function)),
            "fallback": bool(fallback),
            "attributes": attributes,
        }
        return function

    return wrapper


def group(*aliases, descr=Unset, **attributes):
    """
    Turn a ModuleBase subclass into a named group.

    Bare @group uses the lowercased class name.
    """
    if len(aliases) == 1 and isinstance(aliases[0], type):
        cls, = aliases
        return group(cls.__name__.lower())(cls)

    if not all(isinstance(alias, str) for alias in aliases):
        raise TypeError("@group() aliases must be strings")
    if not isinstance(descr, str | Unset):
        raise TypeError("@group() 'descr' must be a string")

    def wrapper(cls, /):
        if not isinstance(cls, type) or not issubclass(cls, ModuleBase):
            raise TypeError("@group() must be applied to a ModuleBase subclass")
        cls.__group__ = {
            "aliases": aliases,
            "descr": coalesce(descr, inspect.getdoc(cls) if cls.__doc__ else None),
            "attributes": attributes,
        }
        return cls

    return wrapper


class Dependency(metaclass=IntrospectiveType):
    """One constructor parameter of a handler type, resolved from Services."""
    __introspectable__ = (
        "name",
        "type",
        "default",
        "optional",
        "nullable",
        "positional",
    )

    def __init__(self, name, type, *, default=Unset, nullable=False, positional=False):
        self._name = name
        self._type = type
        self._default = default
        self._optional = default is not Unset
        self._nullable = nullable
        self._positional = positional


class Module(metaclass=IntrospectiveType):
    __introspectable__ = (
        "type",
        "name",
        "aliases",
        "keys",
        "descr",
        "parent",
        "components",
        "attributes",
        "preconditions",
        "grouped",
        "constructor",
        "dependencies",
    )
    __displayable__ = (
        "name",
        "aliases",
        "grouped",
        "components",
    )

    def __init__(self, type, aliases, *, descr=None, parent=None, attributes=Unset, preconditions=(), grouped=False, constructor=Unset, dependencies=()):
        self._type = type
        self._aliases = list(aliases)
        self._name = self._aliases[0]
        self._keys = frozenset(alias.casefold() for alias in self._aliases)
        self._descr = descr
        self._parent = parent
        self._components = []
        self._attributes = dict(coalesce(attributes, {}))
        self._preconditions = list(preconditions)
        self._grouped = grouped
        self._constructor = coalesce(constructor, type)
        self._dependencies = list(dependencies)

    @property
    def commands(self):
        return tuple(component for component in self._components if isinstance(component, Command))

    @property
    def modules(self):
        return tuple(component for component in self._components if isinstance(component, Module))

    @property
    def path(self):
        """Aliases from the outermost group down to this module."""
        path = []
        module = self
        while module is not None:
            if module.grouped:
                path.append(module.name)
            module = module.parent
        return tuple(reversed(path))

    def __repr__(self):
        return f"{type(self).__typename__}(name={self._name!r}, grouped={self._grouped!r}, components={len(self._components)})"


class Command(metaclass=IntrospectiveType):
    __introspectable__ = (
        "name",
        "aliases",
        "keys",
        "descr",
        "module",
        "function",
        "parameters",
        "min_length",
        "max_length",
        "preconditions",
        "checks",
        "priority",
        "fallback",
        "attributes",
        "returns",
    )
    __displayable__ = (
        "name",
        "aliases",
        "parameters",
        "priority",
        "fallback",
    )

    def __init__(self, module, function, aliases, parameters, *, descr=None, checks=(), priority=0, fallback=False, attributes=Unset, returns=ReturnKind.VALUE):
        self._module = module
        self._function = function
        self._aliases = list(aliases)
        self._name = self._aliases[0]
        self._keys = frozenset(alias.casefold() for alias in self._aliases)
        self._descr = descr
        self._parameters = list(parameters)
        self._min_length, self._max_length = window(self.positionals)
        self._checks = list(checks)
        self._preconditions = list(module.preconditions) + self._checks
        self._priority = priority
        self._fallback = fallback
        self._attributes = dict(module.attributes) | dict(coalesce(attributes, {}))
        self._returns = returns

    @property
    def positionals(self):
        return tuple(parameter for parameter in self._parameters if not parameter.named)

    @property
    def keywords(self):
        return tuple(parameter for parameter in self._parameters if parameter.named)

    @property
    def path(self):
        """Full route of the command, e.g. ('config', 'set')."""
        return self._module.path + (self._name,)

    def __repr__(self):
        return f"{type(self).__typename__}(path={' '.join(self.path)!r}, parameters={[parameter.name for parameter in self._parameters]!r})"


def _return_kind(function):
    if inspect.iscoroutinefunction(function):
        return ReturnKind.AWAITABLE
    try:
        annotation = typing.get_type_hints(function).get("return", inspect.Signature.empty)
    except (NameError, TypeError):
        annotation = inspect.signature(function).return_annotation
    if annotation is None or annotation is types.NoneType:
        return ReturnKind.VOID
    return ReturnKind.VALUE


def _dependencies(cls, constructor):
    if constructor is cls and cls.__init__ is object.__init__:
        return []

    target = cls.__init__ if constructor is cls else constructor
    try:
        signature = inspect.signature(target)
        hints = typing.get_type_hints(target)
    except (NameError, TypeError, ValueError) as exception:
        error = InvalidModuleError(f"cannot inspect the constructor of {cls.__qualname__!r}: {exception}", type=cls)
        error.__cause__ = exception
        raise error

    declared = list(signature.parameters.values())
    if constructor is cls:
        declared = declared[1:]

    dependencies = []
    for parameter in declared:
        if parameter.kind in (inspect.Parameter.VAR_POSITIONAL, inspect.Parameter.VAR_KEYWORD):
            continue
        type, nullable, _ = _unwrap(hints.get(parameter.name, parameter.annotation))
        if parameter.annotation is inspect.Parameter.empty:
            type = Unset
        default = Unset if parameter.default is inspect.Parameter.empty else parameter.default
        if type is Unset and default is Unset and not nullable:
            raise InvalidModuleError(
                f"constructor parameter {parameter.name!r} of {cls.__qualname__!r} cannot be injected",
                hint="annotate it with a single service type or give it a default",
                type=cls,
            )
        dependencies.append(Dependency(
            parameter.name,
            type,
            default=default,
            nullable=nullable,
            positional=parameter.kind is inspect.Parameter.POSITIONAL_ONLY,
        ))
    return dependencies


def _members(cls):
    # later definitions (subclasses) override earlier ones; declaration order is kept
    members = {}
    for base in reversed(cls.__mro__):
        if base is object:
            continue
        for name, member in vars(base).items():
            members[name] = member
    return [
        member for member in members.values()
        if inspect.isfunction(member) and hasattr(member, "__command__")
    ]


def _build_command(module, function, readers, logger):
    metadata = function.__command__
    aliases = _sanitize_aliases(metadata["aliases"], f"command {function.__qualname__!r}")
    if not aliases:
        logger.debug("skipping %s: no aliases were declared", function.__qualname__)
        return None

    parameters = build_parameters(function, readers, bound=True)
    return Command(
        module,
        function,
        aliases,
        parameters,
        descr=metadata["descr"],
        checks=getattr(function, "__preconditions__", ()),
        priority=metadata["priority"],
        fallback=metadata["fallback"],
        attributes=metadata["attributes"],
        returns=_return_kind(function),
    )


def _build_module(cls, parent, readers, logger):
    metadata = vars(cls).get("__group__")
    grouped = metadata is not None

    if grouped:
        aliases = _sanitize_aliases(metadata["aliases"], f"group {cls.__qualname__!r}")
        if not aliases:
            logger.debug("skipping %s: no aliases were declared", cls.__qualname__)
            return None
    else:
        aliases = [cls.__name__]

    constructor = select_constructor(cls)
    module = Module(
        cls,
        aliases,
        descr=metadata["descr"] if grouped else None,
        parent=parent,
        attributes=dict(parent.attributes if parent else {}) | dict(metadata["attributes"] if grouped else {}),
        preconditions=tuple(parent.preconditions if parent else ()) + tuple(vars(cls).get("__preconditions__", ())),
        grouped=grouped,
        constructor=constructor,
        dependencies=_dependencies(cls, constructor),
    )

    for function in _members(cls):
        if (built := _build_command(module, function, readers, logger)) is not None:
            module._components.append(built)

    for nested in vars(cls).values():
        if isinstance(nested, type) and issubclass(nested, ModuleBase) and "__group__" in vars(nested):
            if (built := _build_module(nested, module, readers, logger)) is not None:
                module._components.append(built)

    logger.debug("built %r", module)
    return module


def _collect(sources):
    seen = {}

    def visit(python):
        for member in vars(python).values():
            if (
                isinstance(member, type)
                and issubclass(member, ModuleBase)
                and member is not ModuleBase
                and member.__module__ == python.__name__
                and "." not in member.__qualname__
            ):
                seen.setdefault(member, None)

    for source in sources:
        if isinstance(source, type):
            if not issubclass(source, ModuleBase):
                raise InvalidModuleError(
                    f"{source.__qualname__!r} is not a ModuleBase subclass",
                    hint="command handlers must inherit from ModuleBase",
                    source=source,
                )
            seen.setdefault(source, None)
        elif isinstance(source, types.ModuleType):
            visit(source)
        elif isinstance(source, str):
            for name in mglob(source):
                try:
                    visit(importlib.import_module(name))
                except ImportError as exception:
                    error = InvalidModuleError(f"cannot import {name!r}: {exception}", source=source)
                    error.__cause__ = exception
                    raise error
        else:
            raise TypeError("build() sources must be ModuleBase subclasses, modules or module globs")

    return list(seen)


def build(*sources, readers=Unset, logger=Unset):
    """
    Build the module tree from `sources`.

    Returns
    - BuildResult(modules, components) on success, where `components` is
      the root level searched by the dispatcher.
    - A failed BuildResult carrying the first BuildError otherwise.
    """
    readers = TypeReaders() if readers is Unset else readers
    logger = coalesce(logger, logging.getLogger("herald"))

    modules = []
    components = []
    try:
        for cls in _collect(sources):
            if (module := _build_module(cls, None, readers, logger)) is None:
                continue
            modules.append(module)
            if module.grouped:
                components.append(module)
            else:
                components.extend(module.components)
    except BuildError as error:
        logger.error("build failed: %s", error.message)
        return BuildResult.failure(error)

    logger.debug("built %d module(s) exposing %d root component(s)", len(modules), len(components))
    return BuildResult(modules, components)


__all__ = (
    "ReturnKind",
    "command",
    "group",
    "Dependency",
    "Module",
    "Command",
    "build",
)
