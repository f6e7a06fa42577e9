"""The dispatch core.

``Folio`` sequences bootstrap, locks configuration, assembles the
middleware chain and, as the chain's terminal step, turns a request into
a page response::

    router -> after_init_core -> request_uri -> repository lookup
           -> (301 | not-found fallback -> after_404) -> after_resolve_page
           -> before_init_template -> before_render_template -> render
           -> after_render_template -> HTML response

Any event whose record ends up holding a ``Response`` in ``response``
ends the request right there with that response.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from enum import Enum
from typing import Any

from folio.config import Config
from folio.context import RequestContext, bind_context
from folio.errors import ConfigurationError
from folio.events import (
    AfterInitCore,
    AfterRenderTemplate,
    AfterResolvePage,
    BeforeRenderTemplate,
    EventBus,
    RequestUri,
)
from folio.http.request import Request
from folio.http.response import Response, ResponseFactory
from folio.middleware.chain import RequestHandler
from folio.middleware.protocol import Next
from folio.pages.page import Page
from folio.pages.repository import PageRepository
from folio.routing.router import Router
from folio.services import ServiceLocator
from folio.templating.engine import TemplateEngine

logger = logging.getLogger("folio.core")

type BootstrapCallback = Callable[[EventBus, Config], Any]
type MiddlewareCallback = Callable[[RequestHandler, EventBus, Config], Any]


class Stage(Enum):
    """Where ``dispatch()`` is in its setup sequence."""

    IDLE = "idle"
    BOOTSTRAPPED = "bootstrapped"
    CONFIG_LOCKED = "config_locked"
    READY = "ready"


class Folio:
    """The request-dispatch core.

    Register setup callbacks, then dispatch::

        core = Folio(EventBus(), Config(), services)
        core.add_bootstrap(lambda events, config: config.set("theme", "paper"))
        core.add_middleware(lambda handler, events, config: handler.add(core))
        response = await core.dispatch(Request(path="/about"))

    Concurrency:
        Per-request state (router, template variables) lives on a fresh
        ``RequestContext``, never on the instance. Setup callbacks and
        the config store are shared; configuration is read-only once
        ``dispatch()`` has locked it.
    """

    __slots__ = (
        "_bootstrap_callbacks",
        "_middleware_callbacks",
        "config",
        "events",
        "services",
        "state",
    )

    def __init__(
        self,
        events: EventBus,
        config: Config,
        services: ServiceLocator | None = None,
    ) -> None:
        self.events = events
        self.config = config
        self.services = services or ServiceLocator()
        self.state = Stage.IDLE
        self._bootstrap_callbacks: list[BootstrapCallback] = []
        self._middleware_callbacks: list[MiddlewareCallback] = []

    # -- Setup --

    def add_bootstrap(self, callback: BootstrapCallback) -> Folio:
        """Queue a callback run by ``bootstrap()`` with ``(events, config)``."""
        self._bootstrap_callbacks.append(callback)
        return self

    def add_middleware(self, callback: MiddlewareCallback) -> Folio:
        """Queue a callback run per dispatch with ``(handler, events, config)``."""
        self._middleware_callbacks.append(callback)
        return self

    def bootstrap(self) -> Folio:
        """Run every bootstrap callback in registration order."""
        for callback in self._bootstrap_callbacks:
            callback(self.events, self.config)
        self.state = Stage.BOOTSTRAPPED
        return self

    async def dispatch(self, request: Request) -> Response:
        """Bootstrap, lock config, build the middleware chain, and run *request*."""
        self.bootstrap()
        self.config.lock()
        self.state = Stage.CONFIG_LOCKED

        handler = RequestHandler(ResponseFactory(self.config.get("charset")).create_response())
        for callback in self._middleware_callbacks:
            callback(handler, self.events, self.config)
        self.state = Stage.READY

        return await handler.handle(request)

    # -- Middleware entry point --

    async def __call__(self, request: Request, next: Next) -> Response:
        return await self.process(request, next)

    async def process(self, request: Request, next: Next) -> Response:  # noqa: ARG002
        """Serve *request* as a page. Never calls *next*."""
        router = Router(request.server_params, self.config.get("base_url") or "")
        context = RequestContext(
            request=request,
            config=self.config,
            events=self.events,
            services=self.services,
            router=router,
        )
        with bind_context(context):
            charset = self.config.get("charset")

            # BC: a subscriber may answer before any lookup happens
            event = self.events.trigger(
                "after_init_core", AfterInitCore(response=ResponseFactory(charset))
            )
            if isinstance(event.response, Response):
                logger.debug("after_init_core answered %s", request.path)
                return event.response

            page = self.resolve_current_page(context)
            if isinstance(page, Response):
                return page

            html = self.render_html(page, context)
            if isinstance(html, Response):
                return html

            response = (
                ResponseFactory(charset)
                .create_html_response(html)
                .with_header("Content-Type", f"text/html; charset={charset}")
            )
            if context.not_found or self._is_not_found_page(page):
                response = response.with_status(404)
            return response

    # -- Stages --

    def resolve_current_page(self, context: RequestContext) -> Page | Response:
        """Turn the request into a page, or a terminal response."""
        router = context.router
        page_id = router.current_url()

        event = self.events.trigger("request_uri", RequestUri(uri=page_id))
        if isinstance(event.response, Response):
            logger.debug("request_uri answered %r", page_id)
            return event.response

        repository: PageRepository = self.services.get(PageRepository, context)
        page = repository.find_by_path(page_id)

        if page is not None and page.page_id != page_id:
            url = router.url_for_page(page.page_id)
            logger.debug("Redirecting %r to canonical %r", page_id, page.page_id)
            return ResponseFactory(self.config.get("charset")).create_redirect_response(url, 301)

        if page is None:
            not_found_id = self.config.get("not_found_page")
            page = repository.find_by_path(not_found_id)
            if page is None:
                msg = f"Not-found page {not_found_id!r} does not exist"
                raise ConfigurationError(msg)
            context.not_found = True
            self.events.trigger("after_404")

        event = self.events.trigger(
            "after_resolve_page", AfterResolvePage(page_id=page_id, page=page)
        )
        if isinstance(event.response, Response):
            logger.debug("after_resolve_page answered %r", page_id)
            return event.response
        return event.page

    def render_html(self, page: Page, context: RequestContext) -> str | Response:
        """Render *page* to markup, or return a terminal response."""
        self.events.trigger("before_init_template")
        engine: TemplateEngine = self.services.get(TemplateEngine, context)

        # Values contributed earlier in the request override the config defaults
        context.template_vars = {**self.config.template_vars(), **context.template_vars}

        event = self.events.trigger(
            "before_render_template", BeforeRenderTemplate(template_engine=engine)
        )
        if isinstance(event.response, Response):
            logger.debug("before_render_template answered %r", page.page_id)
            return event.response
        engine = event.template_engine

        engine.set_current_page(page)
        output = engine.render()

        event = self.events.trigger(
            "after_render_template", AfterRenderTemplate(template_engine=engine, output=output)
        )
        return event.output

    def _is_not_found_page(self, page: Page) -> bool:
        # The repository tolerates a leading slash and case differences
        not_found_id = str(self.config.get("not_found_page")).lstrip("/")
        return page.page_id.casefold() == not_found_id.casefold()

    def __repr__(self) -> str:
        return (
            f"<Folio state={self.state.value} bootstrap={len(self._bootstrap_callbacks)} "
            f"middleware={len(self._middleware_callbacks)}>"
        )
