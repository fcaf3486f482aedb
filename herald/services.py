"""
Type-keyed service lookup used to construct command handlers.

    services = Services(database, clock)          # instances, keyed by type
    services.register(Cache, RedisCache(...))     # instance under an explicit key
    services.factory(Session, Session.open)       # called on every lookup

Lookup order: exact type, then the first registration whose key is a
subclass of the requested type.
"""
from collections.abc import Mapping

from .internals import IntrospectiveABCType
from .utils import Unset


class Services(Mapping, metaclass=IntrospectiveABCType):
    __displayable__ = ("types",)

    def __init__(self, *instances):
        self._instances = {}
        self._factories = {}
        for instance in instances:
            self.register(type(instance), instance)

    @property
    def types(self):
        return tuple(self._instances) + tuple(self._factories)

    def register(self, key, instance, /):
        if not isinstance(key, type):
            raise TypeError("register() first argument must be a type")
        self._factories.pop(key, None)
        self._instances[key] = instance
        return instance

    def factory(self, key, factory, /):
        if not isinstance(key, type):
            raise TypeError("factory() first argument must be a type")
        elif not callable(factory):
            raise TypeError("factory() second argument must be callable")
        self._instances.pop(key, None)
        self._factories[key] = factory
        return factory

    def resolve(self, key, /, default=Unset):
        """Return the service for `key`, or `default` when none is known."""
        if key in self._instances:
            return self._instances[key]
        if key in self._factories:
            return self._factories[key]()
        if isinstance(key, type):
            for registered, instance in self._instances.items():
                if issubclass(registered, key):
                    return instance
            for registered, factory in self._factories.items():
                if issubclass(registered, key):
                    return factory()
        return default

    def __getitem__(self, key, /):
        if (service := self.resolve(key)) is Unset:
            raise KeyError(key)
        return service

    def __iter__(self):
        return iter(self.types)

    def __len__(self):
        return len(self._instances) + len(self._factories)

    def __contains__(self, key, /):
        if key in self._instances or key in self._factories:
            return True
        return isinstance(key, type) and any(issubclass(registered, key) for registered in self.types)


__all__ = (
    "Services",
)
