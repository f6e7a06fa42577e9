"""Plugins — packaged event subscribers with settings.

A plugin maps event names to its own methods and is itself a bootstrap
callback::

    class ReadingTime(Plugin):
        handled_events = {"after_resolve_page": "on_page"}
        default_settings = {"words_per_minute": 200}

        def on_page(self, event: AfterResolvePage) -> None:
            words = len(event.page.raw_content.split())
            event.page.meta["reading_time"] = words // self.settings["words_per_minute"] + 1

    core.add_bootstrap(ReadingTime())

Plugins can also be listed in configuration and activated by
``load_plugins()``::

    Config({"plugins": {"myext.reading:ReadingTime": {"active": True, "words_per_minute": 250}}})
"""

import importlib
import logging
from collections.abc import Mapping
from typing import Any, ClassVar

from folio.config import Config
from folio.errors import ConfigurationError
from folio.events import EventBus

logger = logging.getLogger("folio.plugins")


class Plugin:
    """Base class for folio plugins.

    Subclasses set ``handled_events`` (event name -> method name) and
    ``default_settings``. Settings from ``config["plugins"][key]`` are
    merged over the defaults when the plugin is bootstrapped. Calling a
    plugin again with the same bus does nothing.
    """

    handled_events: ClassVar[dict[str, str]] = {}
    default_settings: ClassVar[dict[str, Any]] = {}

    def __init__(self, key: str | None = None, settings: Mapping[str, Any] | None = None) -> None:
        self.key = key or f"{type(self).__module__}:{type(self).__qualname__}"
        self.settings: dict[str, Any] = {**self.default_settings, **(settings or {})}
        self._buses: list[EventBus] = []

    def __call__(self, events: EventBus, config: Config) -> None:
        # Bootstrap runs on every dispatch; handlers go on each bus once
        if any(bus is events for bus in self._buses):
            return
        self._buses.append(events)

        configured = (config.get("plugins") or {}).get(self.key) or {}
        self.settings.update({k: v for k, v in configured.items() if k != "active"})

        for event, method_name in self.handled_events.items():
            method = getattr(self, method_name, None)
            if method is None:
                msg = f"Plugin {self.key!r} handles {event!r} with missing method {method_name!r}"
                raise ConfigurationError(msg)
            events.register(event, method)

        self.on_bootstrap(events, config)
        logger.debug("Plugin %s registered %d handlers", self.key, len(self.handled_events))

    def on_bootstrap(self, events: EventBus, config: Config) -> None:
        """Hook for extra setup (declare events, change settings)."""

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.key!r}>"


def resolve_plugin(import_string: str) -> type[Plugin]:
    """Resolve ``"module:attribute"`` to a Plugin subclass.

    Raises:
        ConfigurationError: If the string is malformed, the module or
            attribute is missing, or the target is not a Plugin subclass.
    """
    module_path, sep, attr_name = import_string.partition(":")
    if not sep or not module_path or not attr_name:
        msg = f"Plugin {import_string!r} must look like 'module:ClassName'"
        raise ConfigurationError(msg)

    try:
        module = importlib.import_module(module_path)
        obj = getattr(module, attr_name)
    except (ImportError, AttributeError) as exc:
        msg = f"Cannot import plugin {import_string!r}: {exc}"
        raise ConfigurationError(msg) from exc

    if not (isinstance(obj, type) and issubclass(obj, Plugin)):
        msg = f"{import_string!r} resolved to {obj!r}, not a folio Plugin subclass"
        raise ConfigurationError(msg)
    return obj


def load_plugins(config: Config) -> list[Plugin]:
    """Instantiate every active plugin listed in ``config["plugins"]``.

    Entries without ``active`` are treated as active. Order follows the
    mapping's insertion order.
    """
    plugins: list[Plugin] = []
    for import_string, options in (config.get("plugins") or {}).items():
        options = options or {}
        if not options.get("active", True):
            logger.debug("Plugin %s is inactive", import_string)
            continue
        plugin_class = resolve_plugin(import_string)
        plugins.append(plugin_class(import_string))
    return plugins
