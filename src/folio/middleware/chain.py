"""The request handler — an ordered middleware queue.

``Folio.dispatch()`` builds a fresh ``RequestHandler`` per request, lets
the middleware-setup callbacks fill it, then hands it the request. Each
middleware gets a ``next`` that runs the rest of the queue; when the
queue runs dry, the fallback response the handler was seeded with is
returned.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from dataclasses import dataclass

from folio.http.request import Request
from folio.http.response import Response
from folio.middleware.protocol import Middleware

logger = logging.getLogger("folio.core")


@dataclass(frozen=True, slots=True)
class _Entry:
    middleware: Middleware
    priority: int
    sequence: int


class RequestHandler:
    """Runs a request through queued middleware.

    Usage::

        handler = RequestHandler(Response(status=404))
        handler.add(ErrorMiddleware(), priority=100)
        handler.add(core)
        response = await handler.handle(request)
    """

    __slots__ = ("_entries", "_fallback")

    def __init__(self, fallback: Response) -> None:
        self._fallback = fallback
        self._entries: list[_Entry] = []

    def add(self, middleware: Middleware, priority: int = 0) -> RequestHandler:
        """Queue *middleware*.

        Higher priority runs earlier (further out); equal priorities keep
        insertion order.
        """
        self._entries.append(_Entry(middleware, priority, len(self._entries)))
        self._entries.sort(key=lambda e: (-e.priority, e.sequence))
        return self

    async def handle(self, request: Request) -> Response:
        """Run *request* through the queue and return the response."""
        middleware = tuple(entry.middleware for entry in self._entries)

        async def call(index: int, req: Request) -> Response:
            if index >= len(middleware):
                logger.debug("Middleware queue exhausted for %s", req.path)
                return self._fallback

            async def next_(next_req: Request) -> Response:
                return await call(index + 1, next_req)

            return await middleware[index](req, next_)

        return await call(0, request)

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[Middleware]:
        return (entry.middleware for entry in self._entries)
