"""Immutable HTTP request.

Folio only serves pages, so the request carries routing metadata and
nothing else: no body, no cookies, no form parsing.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from folio.http.headers import Headers


@dataclass(frozen=True, slots=True)
class Request:
    """An immutable HTTP request.

    Build one from an ASGI scope with ``Request.from_asgi()``, or directly
    in tests::

        Request(path="/about")
    """

    path: str = "/"
    method: str = "GET"
    root_path: str = ""
    scheme: str = "http"
    query_string: bytes = b""
    headers: Headers = field(default_factory=Headers)
    server: tuple[str, int] | None = None

    @property
    def host(self) -> str:
        """The ``Host`` header, falling back to the ASGI server address."""
        host = self.headers.get("host")
        if host:
            return host
        if self.server is None:
            return "localhost"
        name, port = self.server
        default_port = 443 if self.scheme == "https" else 80
        return name if port == default_port else f"{name}:{port}"

    @property
    def server_params(self) -> Mapping[str, str]:
        """The routing-relevant parameters the router is built from."""
        return {
            "path": self.path,
            "root_path": self.root_path,
            "query_string": self.query_string.decode("latin-1"),
            "scheme": self.scheme,
            "host": self.host,
        }

    @property
    def url(self) -> str:
        """Request path plus query string."""
        if self.query_string:
            return f"{self.path}?{self.query_string.decode('latin-1')}"
        return self.path

    @classmethod
    def from_asgi(cls, scope: Mapping[str, Any]) -> Request:
        """Create a Request from an ASGI HTTP scope."""
        server = scope.get("server")
        return cls(
            path=scope["path"],
            method=scope.get("method", "GET"),
            root_path=scope.get("root_path", ""),
            scheme=scope.get("scheme", "http"),
            query_string=scope.get("query_string", b""),
            headers=Headers(tuple(tuple(pair) for pair in scope.get("headers", ()))),
            server=tuple(server) if server else None,
        )
