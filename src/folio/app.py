"""Application assembly.

``create_app()`` wires a ready-to-dispatch ``Folio`` core with the
default collaborators:

- ``FilePageRepository`` over ``content_dir`` with the Markdown parser
- ``KidaTemplateEngine`` over ``<themes_dir>/<theme>``
- plugins from ``config["plugins"]`` plus any passed explicitly
- ``ErrorMiddleware`` outside the core in the middleware chain

Usage::

    core = create_app({"content_dir": "site/content", "themes_dir": "site/themes"})
    response = await core.dispatch(Request(path="/about"))
"""

from collections.abc import Mapping, Sequence
from typing import Any

from kida import Environment

from folio.config import Config
from folio.context import RequestContext
from folio.core import Folio
from folio.events import EventBus
from folio.middleware.chain import RequestHandler
from folio.middleware.errors import ErrorMiddleware
from folio.pages.parser import MarkdownParser
from folio.pages.repository import FilePageRepository, PageRepository
from folio.plugins import Plugin, load_plugins
from folio.services import ServiceLocator
from folio.templating.engine import KidaTemplateEngine, TemplateEngine, create_environment

# Middleware priorities: higher runs further out
ERROR_MIDDLEWARE_PRIORITY = 100
CORE_PRIORITY = 0


def default_services() -> ServiceLocator:
    """A locator with the file repository and kida engine registered.

    The parser is shared; the kida environment is created on first use
    (after configuration is locked) and reused.
    """
    services = ServiceLocator()
    parser = MarkdownParser()
    environments: dict[tuple[str, str], Environment] = {}

    def repository(context: RequestContext) -> FilePageRepository:
        return FilePageRepository(context.config, context.events, parser)

    def template_engine(context: RequestContext) -> KidaTemplateEngine:
        config = context.config
        key = (str(config.get("themes_dir")), str(config.get("theme")))
        if key not in environments:
            environments[key] = create_environment(config)
        repo = services.get(PageRepository, context)
        pages = getattr(repo, "find_all", None)
        return KidaTemplateEngine(environments[key], context, pages=pages)

    services.provide(PageRepository, repository)
    services.provide(TemplateEngine, template_engine)
    return services


def create_app(
    settings: Mapping[str, Any] | None = None,
    *,
    plugins: Sequence[Plugin] = (),
    services: ServiceLocator | None = None,
) -> Folio:
    """Build a ``Folio`` core with default collaborators and middleware."""
    core = Folio(EventBus(), Config(settings), services or default_services())

    activated: list[Plugin] = []

    def activate_plugins(events: EventBus, config: Config) -> None:
        if not activated:
            activated.extend(load_plugins(config))
            activated.extend(plugins)
        for plugin in activated:
            plugin(events, config)

    def install_middleware(handler: RequestHandler, events: EventBus, config: Config) -> None:  # noqa: ARG001
        handler.add(
            ErrorMiddleware(debug=bool(config.get("debug")), charset=config.get("charset")),
            priority=ERROR_MIDDLEWARE_PRIORITY,
        )
        handler.add(core, priority=CORE_PRIORITY)

    core.add_bootstrap(activate_plugins)
    core.add_middleware(install_middleware)
    return core
