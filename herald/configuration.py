"""
Dispatcher configuration.

    configuration = Configuration(
        prefixes=("!", "/"),
        services=Services(database),
        approach=Approach.DISCARD,
        shell=True,
    )

Every field is validated on construction and exposed read-only.
"""
import logging
from collections.abc import Iterable, Mapping
from enum import IntEnum
from types import MappingProxyType

from rich.console import Console

from .internals import IntrospectiveType
from .readers import TypeReaders
from .services import Services
from .utils import Unset


class Approach(IntEnum):
    """
    How execute() runs the pipeline.

    - AWAIT: the caller awaits the final result.
    - DISCARD: fire-and-forget; execute() schedules an asyncio.Task and
      returns it immediately.
    """
    AWAIT = 1
    DISCARD = 2


def _sanitize_prefixes(prefixes):
    if isinstance(prefixes, str) or not isinstance(prefixes, Iterable):
        raise TypeError("Configuration 'prefixes' must be an iterable of strings")
    sanitized = []
    for prefix in prefixes:
        if not isinstance(prefix, str):
            raise TypeError("Configuration prefixes must be strings")
        elif not (prefix := prefix.strip()):
            raise ValueError("Configuration prefixes cannot be empty-strings")
        elif prefix not in sanitized:
            sanitized.append(prefix)
    return sanitized


def _sanitize_mapping(mapping, label):
    if isinstance(mapping, Mapping):
        return dict(mapping)
    if isinstance(mapping, Iterable) and not isinstance(mapping, str):
        return dict(mapping)
    raise TypeError(f"Configuration {label!r} must be a mapping")


class Configuration(metaclass=IntrospectiveType):
    """
    Parameters
    - prefixes: command prefixes the parser requires (none by default).
    - readers: TypeReaders registry (a default registry when Unset).
    - services: Services used to construct handlers (empty when Unset).
    - approach: Approach.AWAIT or Approach.DISCARD.
    - cascade: on a conversion or missing-value failure, try the next
      candidate overload (True) or fail immediately (False). Overloads whose
      token window does not fit are skipped either way.
    - shell: render failed results to the console from on_result().
    - colorful / fancy: fault rendering options.
    - logger: logging.Logger handed to every context (logging.getLogger("herald")).
    - console: rich Console for responses and rendered faults (stderr).
    - prog: program name shown in fault headers.
    - styles: style overrides for fault rendering.
    - codes: FaultCode → label overrides for fault headers.
    """
    __introspectable__ = (
        "prefixes",
        "readers",
        "services",
        "approach",
        "cascade",
        "shell",
        "colorful",
        "fancy",
        "logger",
        "console",
        "prog",
        "styles",
        "codes",
    )
    __displayable__ = (
        "prefixes",
        "approach",
        "cascade",
        "shell",
        "colorful",
        "fancy",
        "prog",
    )

    def __init__(
            self,
            *,
            prefixes=(),
            readers=Unset,
            services=Unset,
            approach=Approach.AWAIT,
            cascade=True,
            shell=False,
            colorful=True,
            fancy=False,
            logger=Unset,
            console=Unset,
            prog="herald",
            styles=(),
            codes=(),
    ):
        if not isinstance(readers, TypeReaders | Unset):
            raise TypeError(f"{type(self).__typename__} 'readers' must be a type readers registry")
        elif not isinstance(services, Services | Unset):
            raise TypeError(f"{type(self).__typename__} 'services' must be a services container")
        elif approach not in tuple(Approach):
            raise ValueError(f"{type(self).__typename__} 'approach' must be an approach")
        elif not isinstance(logger, logging.Logger | Unset):
            raise TypeError(f"{type(self).__typename__} 'logger' must be a logger")
        elif not isinstance(console, Console | Unset):
            raise TypeError(f"{type(self).__typename__} 'console' must be a rich console")
        elif not isinstance(prog, str):
            raise TypeError(f"{type(self).__typename__} 'prog' must be a string")
        elif not (prog := prog.strip()):
            raise ValueError(f"{type(self).__typename__} 'prog' cannot be an empty-string")

        self._prefixes = _sanitize_prefixes(prefixes)
        self._readers = TypeReaders() if readers is Unset else readers
        self._services = Services() if services is Unset else services
        self._approach = Approach(approach)
        self._cascade = bool(cascade)
        self._shell = bool(shell)
        self._colorful = bool(colorful)
        self._fancy = bool(fancy)
        self._logger = logging.getLogger("herald") if logger is Unset else logger
        self._console = Console(stderr=True) if console is Unset else console
        self._prog = prog
        self._styles = MappingProxyType(_sanitize_mapping(styles, "styles"))
        self._codes = MappingProxyType(_sanitize_mapping(codes, "codes"))

    def __replace__(self, **overrides):
        options = {name: getattr(self, "_" + name) for name in type(self).__introspectable__}
        return type(self)(**(options | overrides))


__all__ = (
    "Approach",
    "Configuration",
)
