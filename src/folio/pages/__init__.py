"""Pages — the content entity, meta parsing, and file-backed lookup.

Page files live under ``content_dir``. Each may open with a meta block::

    <!--
    Title: About us
    -->
    Some *Markdown*.

Public API:
    Page -- one content page
    PageRepository -- lookup protocol the dispatch core depends on
    FilePageRepository -- default repository over a content directory
    MarkdownParser -- default content parser (patitas)
"""

from folio.pages.meta import parse_meta
from folio.pages.page import Page
from folio.pages.parser import ContentParser, MarkdownParser
from folio.pages.repository import FilePageRepository, PageRepository, sort_pages

__all__ = [
    "ContentParser",
    "FilePageRepository",
    "MarkdownParser",
    "Page",
    "PageRepository",
    "parse_meta",
    "sort_pages",
]
