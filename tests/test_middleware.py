"""Tests for folio.middleware — RequestHandler queue and ErrorMiddleware."""

import pytest

from folio.http.request import Request
from folio.http.response import Response
from folio.middleware import ErrorMiddleware, Next, RequestHandler


def _tagging(tag: str, calls: list[str]):
    async def mw(request: Request, next: Next) -> Response:
        calls.append(f"{tag}:in")
        response = await next(request)
        calls.append(f"{tag}:out")
        return response.with_header(f"X-{tag}", "1")

    return mw


async def _terminal(request: Request, next: Next) -> Response:
    return Response(f"page {request.path}")


class TestRequestHandler:
    async def test_empty_queue_returns_fallback(self) -> None:
        fallback = Response("fallback", status=204)
        handler = RequestHandler(fallback)
        assert await handler.handle(Request()) is fallback

    async def test_insertion_order(self) -> None:
        calls: list[str] = []
        handler = RequestHandler(Response())
        handler.add(_tagging("a", calls)).add(_tagging("b", calls)).add(_terminal)

        response = await handler.handle(Request(path="/x"))

        assert calls == ["a:in", "b:in", "b:out", "a:out"]
        assert response.text == "page /x"
        assert response.header("X-a") == "1"
        assert response.header("X-b") == "1"

    async def test_priority_runs_first(self) -> None:
        calls: list[str] = []
        handler = RequestHandler(Response())
        handler.add(_tagging("low", calls))
        handler.add(_tagging("high", calls), priority=10)
        handler.add(_terminal, priority=-10)

        await handler.handle(Request())
        assert calls[:2] == ["high:in", "low:in"]

    async def test_short_circuit_skips_rest(self) -> None:
        async def gate(request: Request, next: Next) -> Response:
            return Response("maintenance", status=503)

        reached: list[bool] = []

        async def inner(request: Request, next: Next) -> Response:
            reached.append(True)
            return await next(request)

        handler = RequestHandler(Response()).add(gate).add(inner)
        response = await handler.handle(Request())

        assert response.status == 503
        assert reached == []

    async def test_falls_through_to_fallback(self) -> None:
        calls: list[str] = []
        handler = RequestHandler(Response("seed")).add(_tagging("a", calls))
        response = await handler.handle(Request())
        assert response.text == "seed"

    async def test_middleware_can_replace_request(self) -> None:
        async def rewrite(request: Request, next: Next) -> Response:
            return await next(Request(path="/rewritten"))

        handler = RequestHandler(Response()).add(rewrite).add(_terminal)
        response = await handler.handle(Request(path="/orig"))
        assert response.text == "page /rewritten"

    def test_len_and_iter(self) -> None:
        handler = RequestHandler(Response()).add(_terminal).add(_terminal, priority=5)
        assert len(handler) == 2
        assert list(handler) == [_terminal, _terminal]


class TestErrorMiddleware:
    async def test_passes_through(self) -> None:
        handler = RequestHandler(Response()).add(ErrorMiddleware()).add(_terminal)
        response = await handler.handle(Request(path="/ok"))
        assert response.status == 200

    async def test_exception_becomes_500(self, caplog: pytest.LogCaptureFixture) -> None:
        async def broken(request: Request, next: Next) -> Response:
            raise RuntimeError("kaput")

        handler = RequestHandler(Response()).add(ErrorMiddleware()).add(broken)
        with caplog.at_level("ERROR", logger="folio.server"):
            response = await handler.handle(Request(path="/boom"))

        assert response.status == 500
        assert response.text == "Internal Server Error"
        assert "kaput" not in response.text
        assert "500 GET /boom" in caplog.text

    async def test_debug_shows_escaped_traceback(self) -> None:
        async def broken(request: Request, next: Next) -> Response:
            raise ValueError("<script>")

        handler = RequestHandler(Response()).add(ErrorMiddleware(debug=True)).add(broken)
        response = await handler.handle(Request(path="/boom"))

        assert response.status == 500
        assert "ValueError" in response.text
        assert "&lt;script&gt;" in response.text
        assert "<script>" not in response.text
