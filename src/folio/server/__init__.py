"""Server binding — the ASGI adapter."""

from folio.server.asgi import asgi_app, send_response

__all__ = ["asgi_app", "send_response"]
