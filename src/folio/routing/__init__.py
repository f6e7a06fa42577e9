"""Routing — request path to page id, page id to URL."""

from folio.routing.router import Router

__all__ = ["Router"]
