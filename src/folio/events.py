"""Named-hook event bus.

Every event name maps to one mutable record type. Subscribers receive the
same record instance, in registration order, and communicate by mutating
it. Setting ``response`` to a ``Response`` asks the stage that triggered
the event to stop and return that response.

Usage::

    bus = EventBus()

    @bus.on("request_uri")
    def serve_robots(event: RequestUri) -> None:
        if event.uri == "robots.txt":
            event.response = Response("User-agent: *", content_type="text/plain")

    event = bus.trigger("request_uri", RequestUri(uri="robots.txt"))
    assert isinstance(event.response, Response)

Failure policy:
    A subscriber that raises ``RecoverableSubscriberError`` is logged and
    skipped. Anything else is wrapped in ``SubscriberError`` and aborts
    the remaining subscribers of that trigger.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from folio.errors import ConfigurationError, RecoverableSubscriberError, SubscriberError

if TYPE_CHECKING:
    from kida import Environment

    from folio.http.response import Response, ResponseFactory
    from folio.pages.page import Page
    from folio.templating.engine import TemplateEngine

logger = logging.getLogger("folio.events")

type Subscriber = Callable[[Any], None]


# -- Core pipeline records --


@dataclass(slots=True)
class AfterInitCore:
    """Seeded with the request's ``ResponseFactory``; replace with a ``Response`` to finish early."""

    response: Response | ResponseFactory | None = None


@dataclass(slots=True)
class RequestUri:
    """The page id the router derived; set ``response`` to serve a virtual route."""

    uri: str = ""
    response: Response | None = None


@dataclass(slots=True)
class After404:
    """Notification only: the requested page was missing."""


@dataclass(slots=True)
class AfterResolvePage:
    page_id: str = ""
    page: Page | None = None
    response: Response | None = None


@dataclass(slots=True)
class BeforeInitTemplate:
    """Notification only: the template engine is about to be created."""


@dataclass(slots=True)
class BeforeRenderTemplate:
    template_engine: TemplateEngine | None = None
    response: Response | None = None


@dataclass(slots=True)
class AfterRenderTemplate:
    template_engine: TemplateEngine | None = None
    output: str = ""


# -- Collaborator records --


@dataclass(slots=True)
class TemplateEngineRegistered:
    """Fired by the kida engine before rendering; ``data`` is the render context."""

    engine: Environment | None = None
    data: dict[str, Any] = field(default_factory=dict)


@dataclass(slots=True)
class BeforeParseContent:
    content: str = ""
    page: Page | None = None


@dataclass(slots=True)
class AfterParseContent:
    """``content`` holds the parsed HTML and may be rewritten."""

    content: str = ""
    page: Page | None = None


BUILTIN_EVENTS: dict[str, type] = {
    "after_init_core": AfterInitCore,
    "request_uri": RequestUri,
    "after_404": After404,
    "after_resolve_page": AfterResolvePage,
    "before_init_template": BeforeInitTemplate,
    "before_render_template": BeforeRenderTemplate,
    "after_render_template": AfterRenderTemplate,
    "template_engine_registered": TemplateEngineRegistered,
    "before_parse_content": BeforeParseContent,
    "after_parse_content": AfterParseContent,
}


class EventBus:
    """Ordered, synchronous publish/subscribe keyed by event name.

    Subscribers run in registration order. No priorities, no sorting;
    registering the same callable twice runs it twice.
    """

    __slots__ = ("_definitions", "_subscribers")

    def __init__(self) -> None:
        self._definitions: dict[str, type] = dict(BUILTIN_EVENTS)
        self._subscribers: dict[str, list[Subscriber]] = {}

    def define(self, event: str, record_type: type) -> None:
        """Declare a new event name and the record type it carries.

        Redefining a name with the same type is allowed; with a different
        type it is a ``ConfigurationError``.
        """
        existing = self._definitions.get(event)
        if existing is not None and existing is not record_type:
            msg = f"Event {event!r} is already defined with {existing.__name__}"
            raise ConfigurationError(msg)
        self._definitions[event] = record_type

    def is_defined(self, event: str) -> bool:
        return event in self._definitions

    def register(self, event: str, subscriber: Subscriber) -> None:
        """Subscribe *subscriber* to *event*."""
        if event not in self._definitions:
            msg = f"Unknown event {event!r}. Declare it with EventBus.define() first."
            raise ConfigurationError(msg)
        if not callable(subscriber):
            msg = f"Subscriber for {event!r} is not callable: {subscriber!r}"
            raise ConfigurationError(msg)
        self._subscribers.setdefault(event, []).append(subscriber)

    def on(self, event: str) -> Callable[[Subscriber], Subscriber]:
        """Register a subscriber via decorator."""

        def decorator(func: Subscriber) -> Subscriber:
            self.register(event, func)
            return func

        return decorator

    def subscribers(self, event: str) -> tuple[Subscriber, ...]:
        return tuple(self._subscribers.get(event, ()))

    def trigger(self, event: str, context: Any = None) -> Any:
        """Run every subscriber of *event* against *context* and return it.

        When *context* is omitted a fresh default record is created.
        """
        record_type = self._definitions.get(event)
        if record_type is None:
            msg = f"Unknown event {event!r}"
            raise ConfigurationError(msg)
        if context is None:
            context = record_type()
        elif not isinstance(context, record_type):
            msg = (
                f"Event {event!r} expects {record_type.__name__}, "
                f"got {type(context).__name__}"
            )
            raise ConfigurationError(msg)

        for subscriber in tuple(self._subscribers.get(event, ())):
            try:
                subscriber(context)
            except RecoverableSubscriberError as exc:
                logger.warning("Subscriber %r failed during %r: %s", subscriber, event, exc)
            except Exception as exc:
                raise SubscriberError(event, subscriber) from exc
        return context

    def __repr__(self) -> str:
        counts = {name: len(subs) for name, subs in self._subscribers.items()}
        return f"<EventBus subscribers={counts!r}>"
