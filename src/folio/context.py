"""Per-request state.

``RequestContext`` holds everything one pass through ``Folio.process()``
shares between stages: the router bound to this request and the
template-variable accumulator extensions add to. It is created fresh per
request and passed explicitly to collaborators.

It is also bound to a ``ContextVar`` while the request runs, so code that
isn't handed the context (theme helpers, plugins) can still reach it::

    from folio.context import get_context

    def on_before_init_template(event) -> None:
        get_context().template_vars["year"] = 2026

Thread safety:
    ``ContextVar`` is task-local under asyncio, so concurrent requests on
    one ``Folio`` instance never see each other's router or variables.
"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from folio.config import Config
    from folio.events import EventBus
    from folio.http.request import Request
    from folio.routing.router import Router
    from folio.services import ServiceLocator


@dataclass(slots=True)
class RequestContext:
    """State shared by the stages of one request."""

    request: Request
    config: Config
    events: EventBus
    services: ServiceLocator
    router: Router
    template_vars: dict[str, Any] = field(default_factory=dict)
    not_found: bool = False


context_var: ContextVar[RequestContext] = ContextVar("folio_request_context")
"""The context of the request being processed. Set by ``Folio.process()``."""


def get_context() -> RequestContext:
    """Return the current request context.

    Raises ``LookupError`` if called outside a request.
    """
    return context_var.get()


@contextmanager
def bind_context(context: RequestContext) -> Iterator[RequestContext]:
    """Make *context* current for the duration of the block."""
    token = context_var.set(context)
    try:
        yield context
    finally:
        context_var.reset(token)
