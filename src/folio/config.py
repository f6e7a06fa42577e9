"""Site configuration.

Config is mutable during bootstrap (plugins merge their settings in) and
locked by ``Folio.dispatch()`` before the middleware chain sees a request.
After that every mutation raises ``ConfigLockedError``.
"""

import copy
import posixpath
from collections.abc import Mapping
from typing import Any

from folio.errors import ConfigLockedError

DEFAULTS: dict[str, Any] = {
    # Site
    "site_title": "Folio",
    "base_url": "",  # Empty = derive from the request (scheme, host, root path)
    "debug": False,
    # Content
    "content_dir": "content",
    "content_ext": ".md",
    "not_found_page": "404",
    "pages_order": "meta.title:desc",
    # Themes
    "themes_dir": "themes",
    "theme": "default",
    "template_extension": ".html",
    # Output
    "charset": "utf-8",
    # Extensions: "module:attr" -> {"active": bool, ...settings}
    "plugins": {},
}


class Config:
    """Key/value settings store with a one-way lock.

    Starts from ``DEFAULTS`` overlaid with *settings*::

        config = Config({"site_title": "My Notes", "theme": "paper"})
        config.set("debug", True)
        config.lock()
        config.set("debug", False)  # raises ConfigLockedError
    """

    __slots__ = ("_locked", "_settings")

    def __init__(self, settings: Mapping[str, Any] | None = None) -> None:
        self._settings: dict[str, Any] = copy.deepcopy(DEFAULTS)
        self._locked = False
        if settings:
            self._settings.update(settings)

    def get(self, key: str, default: Any = None) -> Any:
        """Return a copy of the value for *key*, or *default* if it isn't set.

        Nested values are copied, so mutating the result never reaches the
        store; use ``set()`` to change a setting.
        """
        return copy.deepcopy(self._settings.get(key, default))

    def has(self, key: str) -> bool:
        return key in self._settings

    def set(self, key: str, value: Any) -> None:
        """Set *key* to *value*. Raises ``ConfigLockedError`` once locked."""
        if self._locked:
            raise ConfigLockedError(key)
        self._settings[key] = value

    def merge(self, values: Mapping[str, Any]) -> None:
        """Set several keys at once. All-or-nothing when locked."""
        if self._locked:
            raise ConfigLockedError(", ".join(values) or "<empty>")
        self._settings.update(values)

    def to_dict(self) -> dict[str, Any]:
        """Return a deep copy of all settings."""
        return copy.deepcopy(self._settings)

    # -- Lock --

    def lock(self) -> None:
        """Freeze the store. Locking an already-locked store is a no-op."""
        self._locked = True

    @property
    def is_locked(self) -> bool:
        return self._locked

    # -- Template variables --

    def template_vars(self) -> dict[str, Any]:
        """Variables every theme template can rely on.

        Derived from the current settings on each call, so values
        changed during bootstrap are reflected.
        """
        base_url = str(self.get("base_url") or "").rstrip("/")
        content_dir = str(self.get("content_dir")).rstrip("/")
        themes_dir = str(self.get("themes_dir")).rstrip("/")
        theme = str(self.get("theme"))
        return {
            "base_url": base_url,
            "config": self.to_dict(),
            "content_dir": content_dir,
            "content_url": f"{base_url}/{posixpath.basename(content_dir)}",
            "site_title": self.get("site_title"),
            "theme_dir": f"{themes_dir}/{theme}",
            "theme_url": f"{base_url}/{posixpath.basename(themes_dir)}/{theme}",
        }

    def __repr__(self) -> str:
        state = "locked" if self._locked else "open"
        return f"<Config {state} keys={sorted(self._settings)!r}>"
