"""HTTP response values and the response builder.

``Response`` is immutable: each ``.with_*()`` call returns a new one.
``ResponseFactory`` builds them with the site's charset. A factory is not
a response, which is what lets the core seed ``after_init_core`` with one
and still tell whether a subscriber replaced it.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, replace


@dataclass(frozen=True, slots=True)
class Response:
    """An HTTP response built through immutable transformations."""

    body: str | bytes = ""
    status: int = 200
    content_type: str = "text/html; charset=utf-8"
    headers: tuple[tuple[str, str], ...] = ()

    # -- Chainable transformations --

    def with_status(self, status: int) -> Response:
        """Return a new Response with a different status code."""
        return replace(self, status=status)

    def with_header(self, name: str, value: str) -> Response:
        """Return a new Response with header *name* set to *value*.

        ``Content-Type`` updates ``content_type``; any other name replaces
        earlier values of the same header (case-insensitive).
        """
        if name.lower() == "content-type":
            return replace(self, content_type=value)
        kept = tuple((n, v) for n, v in self.headers if n.lower() != name.lower())
        return replace(self, headers=(*kept, (name, value)))

    def with_headers(self, headers: Mapping[str, str]) -> Response:
        """Return a new Response with several headers set."""
        response = self
        for name, value in headers.items():
            response = response.with_header(name, value)
        return response

    def with_content_type(self, content_type: str) -> Response:
        return replace(self, content_type=content_type)

    # -- Accessors --

    def header(self, name: str, default: str | None = None) -> str | None:
        """Return the value of header *name* (case-insensitive)."""
        if name.lower() == "content-type":
            return self.content_type
        for n, v in self.headers:
            if n.lower() == name.lower():
                return v
        return default

    @property
    def body_bytes(self) -> bytes:
        """Body as bytes, encoded with the content type's charset."""
        if isinstance(self.body, str):
            return self.body.encode(self.charset)
        return self.body

    @property
    def text(self) -> str:
        """Body as string."""
        if isinstance(self.body, bytes):
            return self.body.decode(self.charset)
        return self.body

    @property
    def charset(self) -> str:
        _, _, params = self.content_type.partition(";")
        for param in params.split(";"):
            key, _, value = param.strip().partition("=")
            if key.lower() == "charset" and value:
                return value.strip('"')
        return "utf-8"


class ResponseFactory:
    """Builds responses for one request.

    Usage::

        factory = ResponseFactory(charset="utf-8")
        factory.create_html_response("<h1>Hi</h1>")
        factory.create_redirect_response("https://example.com/about", 301)
    """

    __slots__ = ("charset",)

    def __init__(self, charset: str = "utf-8") -> None:
        self.charset = charset

    def set_charset(self, charset: str) -> ResponseFactory:
        self.charset = charset
        return self

    def create_response(self, status: int = 200) -> Response:
        """An empty response with the factory's charset."""
        return Response(status=status, content_type=f"text/html; charset={self.charset}")

    def create_html_response(self, body: str) -> Response:
        return Response(body=body, content_type=f"text/html; charset={self.charset}")

    def create_redirect_response(self, url: str, status: int = 302) -> Response:
        """A body-less redirect to *url*."""
        return self.create_response(status).with_header("Location", url)

    def __repr__(self) -> str:
        return f"<ResponseFactory charset={self.charset!r}>"
