"""ASGI adapter — serve a ``Folio`` core from any ASGI server.

The only module that touches raw ASGI. Converts the scope to a
``Request``, runs ``Folio.dispatch()``, and sends the ``Response`` back::

    app = asgi_app(create_app({"content_dir": "content"}))
    # uvicorn mysite:app
"""

import logging
from collections.abc import Awaitable, Callable, MutableMapping
from typing import Any

from folio.core import Folio
from folio.http.request import Request
from folio.http.response import Response

logger = logging.getLogger("folio.server")

type Scope = MutableMapping[str, Any]
type Receive = Callable[[], Awaitable[MutableMapping[str, Any]]]
type Send = Callable[[MutableMapping[str, Any]], Awaitable[None]]
type ASGIApp = Callable[[Scope, Receive, Send], Awaitable[None]]


def _body_allowed(status: int) -> bool:
    """Whether an HTTP status code permits a response body."""
    # RFC: 1xx, 204, and 304 responses do not include a message body.
    return not (100 <= status < 200 or status in {204, 304})


async def send_response(response: Response, send: Send, *, head: bool = False) -> None:
    """Translate a folio Response into ASGI send() calls."""
    raw_headers: list[tuple[bytes, bytes]] = [
        (b"content-type", response.content_type.encode("latin-1")),
    ]
    for name, value in response.headers:
        raw_headers.append((name.lower().encode("latin-1"), value.encode("latin-1")))

    body = response.body_bytes if _body_allowed(response.status) else b""
    raw_headers.append((b"content-length", str(len(body)).encode("latin-1")))

    await send(
        {
            "type": "http.response.start",
            "status": response.status,
            "headers": raw_headers,
        }
    )
    await send(
        {
            "type": "http.response.body",
            "body": b"" if head else body,
        }
    )


def asgi_app(core: Folio) -> ASGIApp:
    """Wrap *core* as an ASGI application.

    Non-HTTP scopes (lifespan, websocket) are ignored.
    """

    async def app(scope: Scope, receive: Receive, send: Send) -> None:  # noqa: ARG001
        if scope["type"] != "http":
            return
        request = Request.from_asgi(scope)
        response = await core.dispatch(request)
        logger.debug("%d %s %s", response.status, request.method, request.path)
        await send_response(response, send, head=request.method == "HEAD")

    return app
