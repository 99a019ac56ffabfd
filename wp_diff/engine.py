# File: wp_diff/engine.py
"""wp_diff.engine: Orchestration layer для запуска сравнения и сборки отчёта."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Optional

from wp_diff.aggregator import RunReport, aggregate_results
from wp_diff.config import ComparatorConfig
from wp_diff.differ import Differ
from wp_diff.fetcher import Fetcher
from wp_diff.logger import get_logger
from wp_diff.paginator import Paginator
from wp_diff.reporter import LogReporter

__all__ = ["RunContext", "run_comparison"]


@dataclass
class RunContext:
    """Всё, что нужно одному запуску: конфиг, приёмник отчётов, логгер и флаг отмены."""

    config: ComparatorConfig
    reporter: LogReporter = field(default_factory=LogReporter)
    logger: logging.Logger = field(default_factory=get_logger)
    cancel_event: Optional[asyncio.Event] = None


async def run_comparison(
    context: RunContext,
    endpoint: str,
    max_pages: Optional[int] = None,
    *,
    fetcher: Optional[Fetcher] = None,
) -> RunReport:
    """Сравнивает *endpoint* на обоих сайтах и возвращает RunReport.

    Если *fetcher* не передан, открывается собственная aiohttp-сессия.
    """
    cfg = context.config
    context.logger.info(
        "Comparing %s: %s (A) vs %s (B), max pages: %s",
        endpoint,
        cfg.site_a,
        cfg.site_b,
        max_pages or "unbounded",
    )
    differ = Differ(context.reporter, cfg.exclude_fields)

    async def _traverse(f: Fetcher) -> int:
        paginator = Paginator(f, differ, cancel_event=context.cancel_event)
        return await paginator.compare(endpoint, max_pages=max_pages)

    if fetcher is not None:
        pages = await _traverse(fetcher)
    else:
        async with Fetcher.open(cfg) as own_fetcher:
            pages = await _traverse(own_fetcher)

    report = aggregate_results(endpoint, context.reporter, pages)
    context.logger.info("Finished %s: %s", endpoint, report.summary)
    return report

