"""Page lookup.

``FilePageRepository`` serves pages from a directory of content files.
Lookups are forgiving, and the page that comes back always carries its
canonical id. The dispatch core compares that id with the requested one
and redirects when they differ:

    requested "docs"   -> docs/index.md -> canonical "docs/"
    requested "About"  -> about.md      -> canonical "about"
"""

import logging
from pathlib import Path
from typing import Any, Protocol

from folio.config import Config
from folio.errors import ConfigurationError, PageNotFoundError
from folio.events import EventBus
from folio.pages.meta import parse_meta
from folio.pages.page import Page, page_id_for
from folio.pages.parser import ContentParser

logger = logging.getLogger("folio.pages")


class PageRepository(Protocol):
    """Resolves page ids to pages."""

    def find_by_path(self, page_id: str) -> Page | None: ...


class FilePageRepository:
    """Pages stored as files under ``config["content_dir"]``.

    Usage::

        repo = FilePageRepository(config, events, MarkdownParser())
        page = repo.find_by_path("docs/setup")
        pages = repo.find_all()
    """

    __slots__ = ("_content_dir", "_content_ext", "_events", "_pages_order", "_parser")

    def __init__(self, config: Config, events: EventBus, parser: ContentParser) -> None:
        self._content_dir = Path(config.get("content_dir"))
        self._content_ext: str = config.get("content_ext")
        self._pages_order: str = config.get("pages_order") or ""
        self._events = events
        self._parser = parser

    def find_by_path(self, page_id: str) -> Page | None:
        """Return the page for *page_id*, or ``None``.

        A leading slash is tolerated. ``""`` and ``"sub/"`` mean the index
        page of the root and of ``sub``. ``sub/index`` and ``sub`` stand in
        for each other, and a case-insensitive match is the last resort.
        """
        page_id = page_id.lstrip("/")
        if any(part == ".." for part in page_id.split("/")):
            return None
        if page_id == "" or page_id.endswith("/"):
            page_id += "index"

        candidates = [page_id]
        if page_id == "index" or page_id.endswith("/index"):
            candidates.append(page_id.removesuffix("index").rstrip("/"))
        else:
            candidates.append(f"{page_id}/index")

        for candidate in candidates:
            path = self._content_dir / f"{candidate}{self._content_ext}"
            if candidate and path.is_file():
                return self._load(path)

        path = self._find_case_insensitive(candidates)
        if path is not None:
            return self._load(path)
        return None

    def get(self, page_id: str) -> Page:
        """Like ``find_by_path()``, but raises ``PageNotFoundError`` on a miss."""
        page = self.find_by_path(page_id)
        if page is None:
            raise PageNotFoundError(page_id)
        return page

    def find_all(self, order: str | None = None) -> list[Page]:
        """Every page under the content dir, sorted by *order*.

        *order* defaults to ``config["pages_order"]``: space-separated
        ``source.key:direction`` terms, e.g. ``"meta.date:desc page.title:asc"``.
        Sources are ``meta`` (the meta block) and ``page`` (page attributes).
        """
        if not self._content_dir.is_dir():
            return []
        pages = [
            self._load(path)
            for path in sorted(self._content_dir.rglob(f"*{self._content_ext}"))
            if path.is_file()
        ]
        return sort_pages(pages, self._pages_order if order is None else order)

    def _find_case_insensitive(self, candidates: list[str]) -> Path | None:
        """One walk of the content dir; earlier candidates win."""
        if not self._content_dir.is_dir():
            return None
        wanted = {
            f"{candidate}{self._content_ext}".lower(): rank
            for rank, candidate in reversed(list(enumerate(candidates)))
            if candidate
        }
        best: tuple[int, Path] | None = None
        for path in self._content_dir.rglob(f"*{self._content_ext}"):
            rank = wanted.get(path.relative_to(self._content_dir).as_posix().lower())
            if rank is None or (best is not None and best[0] <= rank):
                continue
            best = (rank, path)
            if rank == 0:
                break
        return best[1] if best is not None else None

    def _load(self, path: Path) -> Page:
        relative = path.relative_to(self._content_dir).as_posix()
        meta, body = parse_meta(path.read_text(encoding="utf-8"))
        logger.debug("Loaded page %s from %s", relative, path)
        return Page(
            page_id_for(relative, self._content_ext),
            body,
            meta,
            file_path=path,
            parser=self._parser,
            events=self._events,
        )


def sort_pages(pages: list[Page], order: str) -> list[Page]:
    """Sort *pages* by an order string (see ``FilePageRepository.find_all``)."""
    terms = order.split()
    # Stable sorts applied from the least to the most significant term
    for term in reversed(terms):
        field_spec, _, direction = term.partition(":")
        source, _, key = field_spec.partition(".")
        if source not in ("meta", "page") or not key:
            msg = f"Invalid pages_order term {term!r}; expected 'meta.<key>:asc|desc'"
            raise ConfigurationError(msg)
        descending = direction.lower() == "desc"

        def value_of(page: Page, _source: str = source, _key: str = key) -> Any:
            return page.meta.get(_key) if _source == "meta" else getattr(page, _key, None)

        # Pages without the key stay last in either direction
        present = [page for page in pages if value_of(page) is not None]
        missing = [page for page in pages if value_of(page) is None]
        present.sort(key=lambda page: str(value_of(page)).lower(), reverse=descending)
        pages = present + missing
    return pages
