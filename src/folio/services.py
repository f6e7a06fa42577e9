"""Service locator for pluggable collaborators.

The dispatch core doesn't construct its page repository or template
engine; it asks the locator, keyed by protocol type. Factories receive the
``RequestContext`` of the request being served::

    services = ServiceLocator()
    services.provide(TemplateEngine, lambda ctx: JinjaEngine(ctx.config))

    engine = services.get(TemplateEngine, ctx)

A plugin swaps a collaborator by providing a new factory during bootstrap.
"""

from collections.abc import Callable
from typing import Any

from folio.context import RequestContext
from folio.errors import ConfigurationError

type ServiceFactory = Callable[[RequestContext], Any]


class ServiceLocator:
    """Maps service keys (protocol types) to factories."""

    __slots__ = ("_factories",)

    def __init__(self) -> None:
        self._factories: dict[type, ServiceFactory] = {}

    def provide(self, key: type, factory: ServiceFactory) -> None:
        """Register *factory* for *key*, replacing any earlier one."""
        if not callable(factory):
            msg = f"Factory for {key.__name__} is not callable: {factory!r}"
            raise ConfigurationError(msg)
        self._factories[key] = factory

    def has(self, key: type) -> bool:
        return key in self._factories

    def get(self, key: type, context: RequestContext) -> Any:
        """Build the service registered for *key*."""
        factory = self._factories.get(key)
        if factory is None:
            msg = f"No service provided for {key.__name__}"
            raise ConfigurationError(msg)
        return factory(context)

    def __repr__(self) -> str:
        names = sorted(key.__name__ for key in self._factories)
        return f"<ServiceLocator {names!r}>"
