# File: tests/conftest.py
from __future__ import annotations

import json
import logging
from collections.abc import AsyncIterator
from typing import Any, Dict, List, Optional, Tuple

import pytest
import pytest_asyncio
from aiohttp import web

from wp_diff.config import ComparatorConfig
from wp_diff.errors import FetchError
from wp_diff.fetcher import FetchHandle, Side, normalize_hosts
from wp_diff.reporter import LogReporter

ORIGIN = "origin.test"
MIRROR = "mirror.test"

WP_ENV_KEYS = (
    "WP_SITE_A",
    "WP_SITE_B",
    "WP_SCHEME",
    "WP_EXCLUDE_FIELDS",
    "WP_TIMEOUT",
    "WP_USER_AGENT",
    "WP_LOG_DIR",
)


# --------------------------------------------------------------------------- #
#                               Housekeeping                                  #
# --------------------------------------------------------------------------- #


@pytest.fixture(autouse=True)
def reset_project_logger():
    """CLI tests attach handlers bound to CliRunner streams; drop them afterwards."""
    yield
    lg = logging.getLogger("WPDiff")
    for handler in list(lg.handlers):
        lg.removeHandler(handler)
        handler.close()
    lg.propagate = True
    lg.setLevel(logging.NOTSET)


@pytest.fixture()
def clean_env(monkeypatch):
    """Remove WP_* variables; whatever the test (or load_dotenv) sets is undone."""
    for key in WP_ENV_KEYS:
        monkeypatch.setenv(key, "")
        monkeypatch.delenv(key)
    return monkeypatch


@pytest.fixture()
def config() -> ComparatorConfig:
    return ComparatorConfig(site_a=ORIGIN, site_b=MIRROR)


@pytest.fixture()
def reporter() -> LogReporter:
    return LogReporter(logger=logging.getLogger("tests.report"))


# --------------------------------------------------------------------------- #
#                                Fake fetcher                                 #
# --------------------------------------------------------------------------- #


def post(post_id: int, host: str = ORIGIN, **extra: Any) -> Dict[str, Any]:
    """Minimal WordPress post as returned by /wp-json/wp/v2/posts."""
    data = {
        "id": post_id,
        "title": {"rendered": f"Post {post_id}"},
        "link": f"https://{host}/?p={post_id}",
        "_links": {"self": [{"href": f"https://{host}/wp-json/wp/v2/posts/{post_id}"}]},
    }
    data.update(extra)
    return data


class FakeFetcher:
    """In-memory stand-in for :class:`wp_diff.fetcher.Fetcher`.

    ``pages[side]`` maps page number → JSON-serialisable value or raw string;
    missing pages resolve to ``"[]"``. ``fail[side]`` lists pages whose fetch
    raises :class:`FetchError`.
    """

    def __init__(
        self,
        pages: Dict[Side, Dict[int, Any]],
        fail: Optional[Dict[Side, List[int]]] = None,
    ) -> None:
        self.pages = pages
        self.fail = fail or {}
        self.requests: Dict[Side, List[str]] = {Side.ORIGIN: [], Side.MIRROR: []}

    @staticmethod
    def page_of(path: str) -> int:
        query = path.split("?", 1)[1]
        params = dict(part.split("=", 1) for part in query.split("&"))
        return int(params["page"])

    def requested_pages(self, side: Side) -> List[int]:
        return [self.page_of(p) for p in self.requests[side]]

    def fetch(self, side: Side, path: str) -> FetchHandle:
        host = MIRROR if side is Side.MIRROR else ORIGIN
        url = f"https://{host}/wp-json/wp/v2/{path}"
        page = self.page_of(path)

        async def _request() -> str:
            self.requests[side].append(path)
            if page in self.fail.get(side, []):
                raise FetchError(url, ConnectionResetError("reset by peer"))
            value = self.pages.get(side, {}).get(page, [])
            body = value if isinstance(value, str) else json.dumps(value)
            if side is Side.MIRROR:
                body = normalize_hosts(body, MIRROR, ORIGIN)
            return body

        return FetchHandle(url, _request)


# --------------------------------------------------------------------------- #
#                          Two-host aiohttp server                            #
# --------------------------------------------------------------------------- #


async def _serve_app(app: web.Application, port: int) -> AsyncIterator[int]:
    """Start *app* on *port*, yield the port, ensure cleanup."""
    runner = web.AppRunner(app)
    await runner.setup()
    site = web.TCPSite(runner, "127.0.0.1", port)
    await site.start()
    try:
        yield port
    finally:
        await runner.cleanup()


Hit = Tuple[str, str, str]


def wp_app(collections: Dict[str, Dict[str, List[Any]]]) -> Tuple[web.Application, List[Hit]]:
    """Serve ``/wp-json/wp/v2/{resource}`` per requested host name.

    ``collections[hostname][resource]`` is a list of pages; out-of-range pages
    return ``[]`` like an exhausted listing. ``{host}`` inside the data is
    replaced with the Host header. A page given as ``bytes`` is sent as is;
    a ``(status, data)`` tuple sets the HTTP status. Every request is
    recorded in the returned hits list as ``(hostname, resource, query_string)``.
    """
    app = web.Application()
    hits: List[Hit] = []

    async def handle(request: web.Request) -> web.Response:
        resource = request.match_info["resource"]
        page = int(request.query.get("page", "1"))
        hits.append((request.url.host, resource, request.query_string))
        pages = collections.get(request.url.host, {}).get(resource, [])
        data = pages[page - 1] if 0 < page <= len(pages) else []
        if isinstance(data, bytes):
            return web.Response(body=data, content_type="application/json")
        status = 200
        if isinstance(data, tuple):
            status, data = data
        body = json.dumps(data).replace("{host}", request.host)
        return web.Response(text=body, status=status, content_type="application/json")

    app.router.add_get("/wp-json/wp/v2/{resource}", handle)
    return app, hits


@pytest_asyncio.fixture
async def wp_server(unused_tcp_port: int):
    """Factory: ``await wp_server(collections)`` → ``(hits, port)`` of a running server."""
    started: List[AsyncIterator[int]] = []

    async def _start(collections):
        app, hits = wp_app(collections)
        gen = _serve_app(app, unused_tcp_port)
        started.append(gen)
        port = await gen.__anext__()
        return hits, port

    yield _start

    for gen in started:
        await gen.aclose()
