"""Middleware — Protocol-based, no inheritance required.

A middleware is any callable matching:
    async def mw(request: Request, next: Next) -> Response

Provided here:
    RequestHandler -- the ordered queue ``Folio.dispatch()`` runs
    ErrorMiddleware -- converts unrecovered exceptions into 500 responses
"""

from folio.middleware.chain import RequestHandler
from folio.middleware.errors import ErrorMiddleware
from folio.middleware.protocol import Middleware, Next

__all__ = [
    "ErrorMiddleware",
    "Middleware",
    "Next",
    "RequestHandler",
]
