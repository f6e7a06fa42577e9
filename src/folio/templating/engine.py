"""Template engines — bind a page and render it to markup.

The dispatch core only needs ``set_current_page()`` and ``render()``.
``KidaTemplateEngine`` is the default: one kida ``Environment`` per theme,
templates picked by the page's ``Template`` meta.
"""

from collections.abc import Callable, Iterator, Sequence
from pathlib import Path
from typing import Any, Protocol, overload

from kida import Environment, FileSystemLoader
from kida.environment.exceptions import (
    TemplateNotFoundError,
    TemplateRuntimeError,
    TemplateSyntaxError,
    UndefinedError,
)
from kida.template import Markup

from folio.config import Config
from folio.context import RequestContext
from folio.errors import TemplateRenderError
from folio.events import TemplateEngineRegistered
from folio.pages.page import Page

_KIDA_ERRORS = (TemplateNotFoundError, TemplateRuntimeError, TemplateSyntaxError, UndefinedError)


class TemplateEngine(Protocol):
    """What the dispatch core renders pages with."""

    def set_current_page(self, page: Page) -> None: ...

    def render(self) -> str: ...


def create_environment(config: Config) -> Environment:
    """Create a kida Environment for the configured theme.

    The loader is rooted at ``<themes_dir>/<theme>``.
    """
    theme_dir = Path(config.get("themes_dir")) / config.get("theme")
    return Environment(
        loader=FileSystemLoader(str(theme_dir)),
        autoescape=True,
        auto_reload=bool(config.get("debug")),
        trim_blocks=True,
        lstrip_blocks=True,
    )


class LazyPages(Sequence[Page]):
    """A page listing that calls *load* on first access only.

    Templates that never touch ``pages`` never read the content tree.
    """

    __slots__ = ("_load", "_pages")

    def __init__(self, load: Callable[[], list[Page]]) -> None:
        self._load = load
        self._pages: list[Page] | None = None

    def _resolve(self) -> list[Page]:
        if self._pages is None:
            self._pages = list(self._load())
        return self._pages

    @overload
    def __getitem__(self, index: int) -> Page: ...
    @overload
    def __getitem__(self, index: slice) -> list[Page]: ...
    def __getitem__(self, index: int | slice) -> Page | list[Page]:
        return self._resolve()[index]

    def __len__(self) -> int:
        return len(self._resolve())

    def __iter__(self) -> Iterator[Page]:
        return iter(self._resolve())

    def __repr__(self) -> str:
        state = "unloaded" if self._pages is None else f"{len(self._pages)} pages"
        return f"<LazyPages {state}>"


class KidaTemplateEngine:
    """Render the current page with a kida theme template.

    Render data, later entries winning:

    1. ``content`` (parsed page HTML), ``meta``, ``current_page``,
       ``pages``, ``url_for``
    2. the request's accumulated template variables

    ``template_engine_registered`` fires with the environment and the data
    dict right before rendering, so subscribers can add filters or values.
    """

    __slots__ = ("_context", "_env", "_page", "_pages")

    def __init__(
        self,
        env: Environment,
        context: RequestContext,
        *,
        pages: Callable[[], list[Page]] | None = None,
    ) -> None:
        self._env = env
        self._context = context
        self._pages = pages
        self._page: Page | None = None

    @property
    def environment(self) -> Environment:
        return self._env

    def set_current_page(self, page: Page) -> None:
        self._page = page

    def template_name(self) -> str:
        if self._page is None:
            msg = "No current page set"
            raise TemplateRenderError(msg)
        name = str(self._page.meta.get("template") or "index")
        return name + self._context.config.get("template_extension")

    def template_vars(self) -> dict[str, Any]:
        page = self._page
        if page is None:
            msg = "No current page set"
            raise TemplateRenderError(msg)
        defaults: dict[str, Any] = {
            "content": Markup(page.content),
            "meta": page.meta,
            "current_page": page,
            "pages": LazyPages(self._pages) if self._pages is not None else [],
            "url_for": self._context.router.url_for_page,
        }
        return {**defaults, **self._context.template_vars}

    def render(self) -> str:
        name = self.template_name()
        data = self.template_vars()
        event = self._context.events.trigger(
            "template_engine_registered",
            TemplateEngineRegistered(engine=self._env, data=data),
        )
        try:
            template = event.engine.get_template(name)
            return template.render(event.data)
        except _KIDA_ERRORS as exc:
            msg = f"Failed to render {name!r} for page {self._page.page_id!r}: {exc}"
            raise TemplateRenderError(msg) from exc
