"""HTTP values: the request folio routes and the responses it builds."""

from folio.http.headers import Headers
from folio.http.request import Request
from folio.http.response import Response, ResponseFactory

__all__ = ["Headers", "Request", "Response", "ResponseFactory"]
