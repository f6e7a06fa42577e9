"""Folio — the request-dispatch core of a flat-file CMS.

Resolves a request to a content page, renders it through a theme, and
lets extensions intercept every step through named hooks.

Basic usage::

    from folio import Request, create_app

    core = create_app({"content_dir": "content", "themes_dir": "themes"})

    @core.events.on("after_404")
    def log_miss(event) -> None:
        print("missing page")

    response = await core.dispatch(Request(path="/about"))

Serve it with any ASGI server::

    from folio.server import asgi_app
    app = asgi_app(core)
"""

__version__ = "0.1.0-dev"
__all__ = [
    "Config",
    "ConfigLockedError",
    "ConfigurationError",
    "EventBus",
    "Folio",
    "FolioError",
    "Page",
    "PageNotFoundError",
    "Plugin",
    "Request",
    "Response",
    "ResponseFactory",
    "SubscriberError",
    "TemplateRenderError",
    "create_app",
    "get_context",
]


def __getattr__(name: str) -> object:
    """Lazy imports for public API.

    Keeps ``import folio`` fast while providing a clean top-level API.
    """
    if name == "Folio":
        from folio.core import Folio

        return Folio

    if name == "create_app":
        from folio.app import create_app

        return create_app

    if name == "Config":
        from folio.config import Config

        return Config

    if name == "EventBus":
        from folio.events import EventBus

        return EventBus

    if name == "Request":
        from folio.http.request import Request

        return Request

    if name in ("Response", "ResponseFactory"):
        from folio.http import response as _resp

        return getattr(_resp, name)

    if name == "Page":
        from folio.pages.page import Page

        return Page

    if name == "Plugin":
        from folio.plugins import Plugin

        return Plugin

    if name == "get_context":
        from folio.context import get_context

        return get_context

    if name in (
        "ConfigLockedError",
        "ConfigurationError",
        "FolioError",
        "PageNotFoundError",
        "SubscriberError",
        "TemplateRenderError",
    ):
        from folio import errors as _errors

        return getattr(_errors, name)

    msg = f"module {__name__!r} has no attribute {name!r}"
    raise AttributeError(msg)
