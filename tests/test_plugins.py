"""Tests for folio.plugins — Plugin base class and config-driven loading."""

from typing import Any, ClassVar

import pytest

from folio.config import Config
from folio.errors import ConfigurationError
from folio.events import After404, EventBus
from folio.plugins import Plugin, load_plugins, resolve_plugin


class MissCounter(Plugin):
    handled_events: ClassVar[dict[str, str]] = {"after_404": "on_miss"}
    default_settings: ClassVar[dict[str, Any]] = {"step": 1}

    def __init__(self, key: str | None = None, settings: dict[str, Any] | None = None) -> None:
        super().__init__(key, settings)
        self.misses = 0

    def on_miss(self, event: After404) -> None:
        self.misses += self.settings["step"]


class Broken(Plugin):
    handled_events: ClassVar[dict[str, str]] = {"after_404": "does_not_exist"}


class NotAPlugin:
    pass


KEY = f"{__name__}:MissCounter"


class TestPlugin:
    def test_registers_handled_events(self) -> None:
        bus = EventBus()
        plugin = MissCounter()
        plugin(bus, Config())

        bus.trigger("after_404")
        assert plugin.misses == 1

    def test_default_key(self) -> None:
        assert MissCounter().key == KEY

    def test_settings_from_config_override_defaults(self) -> None:
        bus = EventBus()
        plugin = MissCounter()
        plugin(bus, Config({"plugins": {KEY: {"active": True, "step": 5}}}))

        bus.trigger("after_404")
        assert plugin.misses == 5
        assert "active" not in plugin.settings

    def test_registration_is_once_per_bus(self) -> None:
        bus = EventBus()
        plugin = MissCounter()
        plugin(bus, Config())
        plugin(bus, Config())

        assert len(bus.subscribers("after_404")) == 1

    def test_missing_handler_method(self) -> None:
        with pytest.raises(ConfigurationError, match="does_not_exist"):
            Broken()(EventBus(), Config())

    def test_on_bootstrap_hook(self) -> None:
        calls: list[str] = []

        class Hooked(Plugin):
            def on_bootstrap(self, events: EventBus, config: Config) -> None:
                calls.append("boot")

        Hooked()(EventBus(), Config())
        assert calls == ["boot"]


class TestLoading:
    def test_resolve(self) -> None:
        assert resolve_plugin(KEY) is MissCounter

    @pytest.mark.parametrize("import_string", ["no_colon", ":X", "mod:"])
    def test_malformed(self, import_string: str) -> None:
        with pytest.raises(ConfigurationError, match="module:ClassName"):
            resolve_plugin(import_string)

    def test_missing_module(self) -> None:
        with pytest.raises(ConfigurationError, match="Cannot import"):
            resolve_plugin("folio_missing_module:Thing")

    def test_missing_attribute(self) -> None:
        with pytest.raises(ConfigurationError, match="Cannot import"):
            resolve_plugin(f"{__name__}:Nope")

    def test_not_a_plugin(self) -> None:
        with pytest.raises(ConfigurationError, match="not a folio Plugin"):
            resolve_plugin(f"{__name__}:NotAPlugin")

    def test_load_active_only(self) -> None:
        config = Config(
            {
                "plugins": {
                    KEY: {"active": True},
                    f"{__name__}:Broken": {"active": False},
                }
            }
        )
        plugins = load_plugins(config)

        assert len(plugins) == 1
        assert isinstance(plugins[0], MissCounter)
        assert plugins[0].key == KEY

    def test_active_defaults_to_true(self) -> None:
        assert len(load_plugins(Config({"plugins": {KEY: {}}}))) == 1

    def test_no_plugins(self) -> None:
        assert load_plugins(Config()) == []
