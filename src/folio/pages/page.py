"""The page entity.

A page is one content file: an id, its raw source, the meta block, and
the parsed HTML (computed on first access, with parse events fired
around it).
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Any

from folio.context import get_context
from folio.events import AfterParseContent, BeforeParseContent

if TYPE_CHECKING:
    from folio.events import EventBus
    from folio.pages.parser import ContentParser


def page_id_for(relative: str, content_ext: str) -> str:
    """Page id for a file path relative to the content dir.

    A trailing ``index`` segment is dropped so a folder's index page is
    addressed by the folder::

        "about.md"      -> "about"
        "docs/index.md" -> "docs/"
        "index.md"      -> ""
    """
    page_id = relative.removesuffix(content_ext)
    if page_id == "index":
        return ""
    if page_id.endswith("/index"):
        return page_id.removesuffix("index")
    return page_id


class Page:
    """One content page.

    ``content`` is parsed lazily; ``raw_content`` is the body after the
    meta block.
    """

    __slots__ = ("_content", "_events", "_parser", "file_path", "meta", "page_id", "raw_content")

    def __init__(
        self,
        page_id: str,
        raw_content: str = "",
        meta: dict[str, Any] | None = None,
        *,
        file_path: Path | None = None,
        parser: ContentParser | None = None,
        events: EventBus | None = None,
    ) -> None:
        self.page_id = page_id
        self.raw_content = raw_content
        self.meta: dict[str, Any] = meta or {}
        self.file_path = file_path
        self._parser = parser
        self._events = events
        self._content: str | None = None

    @property
    def content(self) -> str:
        """Page body as HTML."""
        if self._content is None:
            source = self.raw_content
            if self._events is not None:
                source = self._events.trigger(
                    "before_parse_content", BeforeParseContent(content=source, page=self)
                ).content
            html = self._parser.parse(source) if self._parser is not None else source
            if self._events is not None:
                html = self._events.trigger(
                    "after_parse_content", AfterParseContent(content=html, page=self)
                ).content
            self._content = html
        return self._content

    @property
    def title(self) -> str:
        return str(self.meta.get("title", ""))

    @property
    def url(self) -> str:
        """Absolute URL when a request is in flight, root-relative otherwise."""
        try:
            router = get_context().router
        except LookupError:
            return f"/{self.page_id}"
        return router.url_for_page(self.page_id)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Page):
            return NotImplemented
        return self.page_id == other.page_id and self.raw_content == other.raw_content

    def __hash__(self) -> int:
        return hash(self.page_id)

    def __repr__(self) -> str:
        return f"<Page {self.page_id!r} title={self.title!r}>"
