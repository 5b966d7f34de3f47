"""Tests for AsyncHttpClient against a local aiohttp server."""

from __future__ import annotations

import pytest
from aiohttp import test_utils, web

from hawkeye.errors import FetchFailure
from hawkeye.utils.http import AsyncHttpClient
from hawkeye.utils.rate_limiter import RateLimiter


@pytest.fixture
async def server():
    async def ok(request):
        return web.json_response({"ok": True, "user": request.query.get("userID")})

    async def broken(request):
        return web.Response(status=503)

    async def html(request):
        return web.Response(text="<html>$1,500</html>")

    app = web.Application()
    app.router.add_get("/ok", ok)
    app.router.add_get("/broken", broken)
    app.router.add_get("/html", html)
    srv = test_utils.TestServer(app)
    await srv.start_server()
    yield srv
    await srv.close()


@pytest.fixture
async def http():
    client = AsyncHttpClient(timeout=5.0, rate_limiter=RateLimiter(per_minute=1000.0))
    yield client
    await client.close()


class TestAsyncHttpClient:
    async def test_get_json(self, server, http):
        data = await http.get_json(str(server.make_url("/ok")), params={"userID": "42"})
        assert data == {"ok": True, "user": "42"}

    async def test_fetch_text(self, server, http):
        assert "$1,500" in await http.fetch_text(str(server.make_url("/html")))

    async def test_non_200_is_fetch_failure(self, server, http):
        with pytest.raises(FetchFailure, match="HTTP 503"):
            await http.fetch_text(str(server.make_url("/broken")))

    async def test_bad_json_is_fetch_failure(self, server, http):
        with pytest.raises(FetchFailure, match="invalid JSON"):
            await http.get_json(str(server.make_url("/html")))

    async def test_connection_error_is_fetch_failure(self, http):
        with pytest.raises(FetchFailure):
            await http.fetch_text("http://127.0.0.1:1/")

    async def test_context_manager_closes_session(self, server):
        async with AsyncHttpClient() as client:
            await client.fetch_text(str(server.make_url("/html")))
            session = client._session
        assert session is not None and session.closed
