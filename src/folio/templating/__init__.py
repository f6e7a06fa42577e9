"""Templating — the engine protocol and the default kida engine."""

from folio.templating.engine import (
    KidaTemplateEngine,
    LazyPages,
    TemplateEngine,
    create_environment,
)

__all__ = ["KidaTemplateEngine", "LazyPages", "TemplateEngine", "create_environment"]
