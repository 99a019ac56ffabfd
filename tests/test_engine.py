# File: tests/test_engine.py
# End-to-end: real aiohttp server answering as both origin and mirror
from __future__ import annotations

import logging

import pytest

from wp_diff.config import ComparatorConfig
from wp_diff.differ import DiffKind
from wp_diff.engine import RunContext, run_comparison
from wp_diff.reporter import LogReporter


def wp_posts(ids, **extra):
    return [
        {
            "id": i,
            "link": "http://{host}/?p=%d" % i,
            "guid": {"rendered": "http://{host}/?p=%d" % i},
            "title": {"rendered": f"Post {i}"},
            **extra,
        }
        for i in ids
    ]


def make_context(port: int, **overrides) -> RunContext:
    cfg = ComparatorConfig(
        site_a=f"127.0.0.1:{port}", site_b=f"localhost:{port}", scheme="http", timeout=5.0, **overrides
    )
    return RunContext(cfg, reporter=LogReporter(logger=logging.getLogger("tests.e2e")))


@pytest.mark.asyncio()
async def test_identical_sites_traverse_until_empty(wp_server):
    pages = [wp_posts([1, 2]), wp_posts([3, 4]), wp_posts([5])]
    hits, port = await wp_server({"127.0.0.1": {"posts": pages}, "localhost": {"posts": pages}})

    report = await run_comparison(make_context(port), "posts")

    assert report.pages == 4
    assert report.summary["pages"] == 4
    assert report.summary["total_diffs"] == 0
    origin_queries = [q for host, _, q in hits if host == "127.0.0.1"]
    assert origin_queries == [f"page={n}&order=asc&orderby=id" for n in (1, 2, 3, 4)]
    assert len(hits) == 8


@pytest.mark.asyncio()
async def test_content_difference_is_reported(wp_server):
    origin = [wp_posts([1, 2], count=1)]
    mirror = [wp_posts([1], count=1) + wp_posts([2], count=99, title={"rendered": "Changed"})]
    _, port = await wp_server({"127.0.0.1": {"tags": origin}, "localhost": {"tags": mirror}})

    report = await run_comparison(make_context(port), "tags", max_pages=5)

    assert report.pages == 2
    first = report.records[0]
    assert [(d.kind, d.path) for d in first.diffs] == [(DiffKind.CHANGED, (1, "title", "rendered"))]
    assert report.summary["pages_with_diffs"] == 1


@pytest.mark.asyncio()
async def test_max_pages_limits_requests(wp_server):
    pages = [wp_posts([i]) for i in range(1, 6)]
    hits, port = await wp_server({"127.0.0.1": {"pages": pages}, "localhost": {"pages": pages}})

    report = await run_comparison(make_context(port), "pages", max_pages=2)

    assert report.pages == 2
    assert len(hits) == 4


@pytest.mark.asyncio()
async def test_custom_exclusions_from_config(wp_server):
    origin = [wp_posts([1], modified="2020-01-01")]
    mirror = [wp_posts([1], modified="2024-01-01")]
    _, port = await wp_server({"127.0.0.1": {"posts": origin}, "localhost": {"posts": mirror}})

    report = await run_comparison(
        make_context(port, exclude_fields=["count", "modified"]), "posts"
    )

    assert report.summary["total_diffs"] == 0


@pytest.mark.asyncio()
async def test_undecodable_mirror_body_does_not_abort_run(wp_server):
    origin = [[{"id": 1, "title": "café"}]]
    mirror = [b'[{"id": 1, "title": "caf\xe9"}]']
    _, port = await wp_server({"127.0.0.1": {"posts": origin}, "localhost": {"posts": mirror}})

    report = await run_comparison(make_context(port), "posts", max_pages=1)

    assert report.pages == 1
    assert [(d.kind, d.path) for d in report.records[0].diffs] == [(DiffKind.CHANGED, (0, "title"))]
    assert report.summary["errors"] == 0
