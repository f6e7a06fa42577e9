"""Folio exception hierarchy.

Shared across the config store, event bus, repository, template engine,
and dispatch core so every module raises and catches the same types.
"""

from typing import Any


class FolioError(Exception):
    """Base for all folio-specific errors."""


class ConfigurationError(FolioError):
    """Raised when the site setup is invalid.

    Unknown event names, non-callable subscribers, unresolvable plugin
    import strings, and a missing not-found page all end up here.
    """


class ConfigLockedError(ConfigurationError):
    """Raised when a locked ``Config`` is mutated.

    The store is locked by ``Folio.dispatch()`` right after bootstrap.
    """

    def __init__(self, key: str) -> None:
        self.key = key
        super().__init__(f"Configuration is locked; cannot set {key!r}")


class PageNotFoundError(FolioError):
    """No page exists for the given page id.

    The dispatch core never lets this escape: a miss falls back to the
    configured not-found page.
    """

    def __init__(self, page_id: str) -> None:
        self.page_id = page_id
        super().__init__(f"Page not found: {page_id!r}")


class TemplateRenderError(FolioError):
    """The template engine failed while rendering a page."""


class SubscriberError(FolioError):
    """An event subscriber raised.

    Aborts the remaining subscribers of the same trigger call. The
    original exception is available as ``__cause__``.
    """

    def __init__(self, event: str, subscriber: Any) -> None:
        self.event = event
        self.subscriber = subscriber
        name = getattr(subscriber, "__qualname__", None) or repr(subscriber)
        super().__init__(f"Subscriber {name} failed during {event!r}")


class RecoverableSubscriberError(FolioError):
    """Raise from a subscriber to report a failure without aborting siblings.

    The event bus logs it as a warning and moves on to the next
    subscriber of the same trigger.
    """
