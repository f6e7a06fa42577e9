"""Content parsers — page source to HTML."""

from typing import Protocol

from patitas import Markdown


class ContentParser(Protocol):
    """Anything that turns page source into HTML."""

    def parse(self, text: str) -> str: ...


class MarkdownParser:
    """Render Markdown page bodies to HTML via patitas.

    Args:
        plugins: Patitas plugins to enable (default: all).
        highlight: Enable syntax highlighting for fenced code blocks.
    """

    __slots__ = ("_md",)

    def __init__(
        self,
        *,
        plugins: list[str] | None = None,
        highlight: bool = False,
    ) -> None:
        self._md = Markdown(plugins=plugins or ["all"], highlight=highlight)

    def parse(self, text: str) -> str:
        if not text:
            return ""
        return self._md(text)
