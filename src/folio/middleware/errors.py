"""Error middleware — unrecovered failures become 500 responses.

Sits at the outside of the chain. Anything the dispatch core lets
escape (a failing subscriber, a broken template, a missing not-found
page) is logged with its traceback and answered with a 500.
"""

import html
import logging
import traceback

from folio.http.request import Request
from folio.http.response import Response
from folio.middleware.protocol import Next

logger = logging.getLogger("folio.server")


def render_debug_page(exc: BaseException, request: Request) -> str:
    """Minimal HTML page with the exception and traceback, all escaped."""
    frames = "".join(traceback.format_exception(exc))
    return (
        "<!DOCTYPE html><html><head><title>500 Internal Server Error</title></head><body>"
        f"<h1>{html.escape(type(exc).__name__)}</h1>"
        f"<p>{html.escape(str(exc))}</p>"
        f"<p><code>{html.escape(request.method)} {html.escape(request.url)}</code></p>"
        f"<pre>{html.escape(frames)}</pre>"
        "</body></html>"
    )


class ErrorMiddleware:
    """Turn exceptions from inner middleware into a 500 response.

    With ``debug=True`` the body shows the traceback; otherwise a plain
    "Internal Server Error".
    """

    __slots__ = ("charset", "debug")

    def __init__(self, *, debug: bool = False, charset: str = "utf-8") -> None:
        self.debug = debug
        self.charset = charset

    async def __call__(self, request: Request, next: Next) -> Response:
        try:
            return await next(request)
        except Exception as exc:
            logger.exception("500 %s %s", request.method, request.path)
            body = render_debug_page(exc, request) if self.debug else "Internal Server Error"
            content_type = "text/html" if self.debug else "text/plain"
            return Response(
                body=body,
                status=500,
                content_type=f"{content_type}; charset={self.charset}",
            )
