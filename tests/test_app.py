"""End-to-end tests for folio.app and folio.server — files, themes, plugins, ASGI."""

from pathlib import Path
from typing import Any, ClassVar

import pytest

from folio import Request, create_app
from folio.app import default_services
from folio.core import Folio
from folio.events import AfterResolvePage
from folio.middleware import ErrorMiddleware
from folio.plugins import Plugin
from folio.server import asgi_app

LAYOUT = "<title>{{ site_title }} - {{ current_page.title }}</title>{{ content }}"


def _write(root: Path, relative: str, text: str) -> None:
    path = root / relative
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")


@pytest.fixture
def site(tmp_path: Path) -> dict[str, Any]:
    content = tmp_path / "content"
    themes = tmp_path / "themes"
    _write(content, "index.md", "<!--\nTitle: Home\n-->\n# Welcome")
    _write(content, "about.md", "<!--\nTitle: About\n-->\nAbout *us*")
    _write(content, "404.md", "<!--\nTitle: Not Found\n-->\nNo such page")
    _write(content, "docs/index.md", "<!--\nTitle: Docs\n-->\nDocs")
    _write(themes, "default/index.html", LAYOUT)
    _write(themes, "default/bare.html", "{{ content }}")
    return {
        "content_dir": str(content),
        "themes_dir": str(themes),
        "site_title": "Site",
        "base_url": "https://example.com",
    }


class Stamp(Plugin):
    handled_events: ClassVar[dict[str, str]] = {"after_resolve_page": "stamp"}
    default_settings: ClassVar[dict[str, Any]] = {"template": "bare"}

    def stamp(self, event: AfterResolvePage) -> None:
        event.page.meta["template"] = self.settings["template"]


class TestCreateApp:
    def test_wiring(self) -> None:
        core = create_app()
        assert isinstance(core, Folio)
        assert core.config.get("site_title") == "Folio"
        assert core.config.is_locked is False

    async def test_renders_page(self, site: dict[str, Any]) -> None:
        core = create_app(site)
        response = await core.dispatch(Request(path="/about"))

        assert response.status == 200
        assert response.content_type == "text/html; charset=utf-8"
        assert "<title>Site - About</title>" in response.text
        assert "<em>us</em>" in response.text
        assert core.config.is_locked is True

    async def test_root_index(self, site: dict[str, Any]) -> None:
        response = await create_app(site).dispatch(Request(path="/"))
        assert response.status == 200
        assert "Site - Home" in response.text

    async def test_folder_redirects_to_slash(self, site: dict[str, Any]) -> None:
        response = await create_app(site).dispatch(Request(path="/docs"))
        assert response.status == 301
        assert response.header("Location") == "https://example.com/docs/"

    async def test_case_redirect(self, site: dict[str, Any]) -> None:
        response = await create_app(site).dispatch(Request(path="/About"))
        assert response.status == 301
        assert response.header("Location") == "https://example.com/about"

    async def test_not_found(self, site: dict[str, Any]) -> None:
        core = create_app(site)
        misses: list[object] = []
        core.events.register("after_404", misses.append)

        response = await core.dispatch(Request(path="/missing"))

        assert response.status == 404
        assert "Site - Not Found" in response.text
        assert len(misses) == 1

    async def test_not_found_page_with_leading_slash(self, site: dict[str, Any]) -> None:
        site["not_found_page"] = "/404"
        core = create_app(site)

        missing = await core.dispatch(Request(path="/missing"))
        direct = await core.dispatch(Request(path="/404"))

        assert missing.status == 404
        assert "Site - Not Found" in missing.text
        assert direct.status == 404

    async def test_not_found_page_with_different_case(self, site: dict[str, Any]) -> None:
        content = Path(site["content_dir"])
        (content / "404.md").rename(content / "notfound.md")
        site["not_found_page"] = "NotFound"

        response = await create_app(site).dispatch(Request(path="/missing"))

        assert response.status == 404
        assert "Site - Not Found" in response.text

    async def test_missing_template_is_500(self, site: dict[str, Any]) -> None:
        _write(Path(site["content_dir"]), "odd.md", "<!--\nTemplate: nope\n-->\nx")
        response = await create_app(site).dispatch(Request(path="/odd"))
        assert response.status == 500
        assert response.text == "Internal Server Error"

    async def test_missing_not_found_page_is_500(self, site: dict[str, Any]) -> None:
        Path(site["content_dir"], "404.md").unlink()
        response = await create_app(site).dispatch(Request(path="/missing"))
        assert response.status == 500

    async def test_explicit_plugin(self, site: dict[str, Any]) -> None:
        core = create_app(site, plugins=[Stamp()])
        response = await core.dispatch(Request(path="/about"))
        assert "<title>" not in response.text
        assert "<em>us</em>" in response.text

    async def test_configured_plugin(self, site: dict[str, Any]) -> None:
        site["plugins"] = {f"{__name__}:Stamp": {"active": True}}
        response = await create_app(site).dispatch(Request(path="/about"))
        assert "<title>" not in response.text

    async def test_repeated_dispatch_is_stable(self, site: dict[str, Any]) -> None:
        core = create_app(site, plugins=[Stamp()])
        first = await core.dispatch(Request(path="/about"))
        second = await core.dispatch(Request(path="/about"))

        assert first.text == second.text
        assert len(core.events.subscribers("after_resolve_page")) == 1

    async def test_error_middleware_is_outermost(self, site: dict[str, Any]) -> None:
        core = create_app(site)
        seen: list[list[object]] = []
        core.add_middleware(lambda handler, events, config: seen.append(list(handler)))
        await core.dispatch(Request(path="/about"))

        assert isinstance(seen[0][0], ErrorMiddleware)
        assert seen[0][1] is core

    def test_default_services(self) -> None:
        from folio.pages.repository import PageRepository
        from folio.templating.engine import TemplateEngine

        services = default_services()
        assert services.has(PageRepository)
        assert services.has(TemplateEngine)


class TestASGI:
    async def _call(self, app, path: str, method: str = "GET") -> list[dict[str, Any]]:
        scope = {
            "type": "http",
            "method": method,
            "path": path,
            "root_path": "",
            "scheme": "http",
            "query_string": b"",
            "headers": [(b"host", b"example.com")],
            "server": ("127.0.0.1", 8000),
        }
        sent: list[dict[str, Any]] = []

        async def receive() -> dict[str, Any]:
            return {"type": "http.request", "body": b"", "more_body": False}

        async def send(message: dict[str, Any]) -> None:
            sent.append(message)

        await app(scope, receive, send)
        return sent

    async def test_page(self, site: dict[str, Any]) -> None:
        sent = await self._call(asgi_app(create_app(site)), "/about")

        start, body = sent
        assert start["status"] == 200
        headers = dict(start["headers"])
        assert headers[b"content-type"] == b"text/html; charset=utf-8"
        assert int(headers[b"content-length"]) == len(body["body"])
        assert b"Site - About" in body["body"]

    async def test_redirect(self, site: dict[str, Any]) -> None:
        sent = await self._call(asgi_app(create_app(site)), "/docs")
        assert sent[0]["status"] == 301
        assert dict(sent[0]["headers"])[b"location"] == b"https://example.com/docs/"

    async def test_head_has_no_body(self, site: dict[str, Any]) -> None:
        sent = await self._call(asgi_app(create_app(site)), "/about", method="HEAD")
        assert sent[1]["body"] == b""
        assert int(dict(sent[0]["headers"])[b"content-length"]) > 0

    async def test_lifespan_ignored(self, site: dict[str, Any]) -> None:
        app = asgi_app(create_app(site))
        sent: list[object] = []

        async def send(message: object) -> None:
            sent.append(message)

        await app({"type": "lifespan"}, None, send)  # type: ignore[arg-type]
        assert sent == []
