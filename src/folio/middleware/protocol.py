"""Middleware protocol and Next type alias.

A middleware is any callable matching::

    async def my_mw(request: Request, next: Next) -> Response: ...

No base class required. The chain checks the shape, not the lineage.
"""

from collections.abc import Awaitable, Callable
from typing import Protocol

from folio.http.request import Request
from folio.http.response import Response

# The next handler in the middleware chain
type Next = Callable[[Request], Awaitable[Response]]


class Middleware(Protocol):
    """Protocol for folio middleware.

    Accepts both functions and callable objects::

        # Function middleware
        async def powered_by(request: Request, next: Next) -> Response:
            response = await next(request)
            return response.with_header("X-Powered-By", "folio")

        # Class middleware
        class Maintenance:
            async def __call__(self, request: Request, next: Next) -> Response:
                ...
    """

    async def __call__(self, request: Request, next: Next) -> Response: ...
