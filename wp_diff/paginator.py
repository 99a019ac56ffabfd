# wp_diff/paginator.py
"""
Paginator: walks a WordPress collection page by page on both sites.

One page at a time, two requests in flight at most. Traversal stops at the
page cap, when either side has no data for the current page, or when the
cancel event is set between pages.
"""
from __future__ import annotations

import asyncio
from dataclasses import dataclass, replace
from typing import Optional, Sequence, Tuple

from wp_diff.differ import Differ, PageComparison
from wp_diff.errors import InvocationError
from wp_diff.fetcher import Fetcher, Side
from wp_diff.logger import get_logger

__all__ = ("PageCursor", "Paginator", "build_query", "QUERY_ORDER")

QUERY_ORDER: Tuple[Tuple[str, str], ...] = (("order", "asc"), ("orderby", "id"))

log = get_logger("paginator")


def build_query(page: int, extra: Sequence[Tuple[str, str]] = QUERY_ORDER) -> str:
    """``page={n}&order=asc&orderby=id``; parameter order is fixed."""
    params = [("page", str(page)), *extra]
    return "&".join(f"{key}={value}" for key, value in params)


@dataclass(frozen=True, slots=True)
class PageCursor:
    """Traversal state for one step."""

    endpoint: str
    page: int = 1
    max_pages: Optional[int] = None

    @property
    def path(self) -> str:
        return f"{self.endpoint}?{build_query(self.page)}"

    @property
    def at_limit(self) -> bool:
        return self.max_pages is not None and self.page >= self.max_pages

    def next(self) -> PageCursor:
        return replace(self, page=self.page + 1)


class Paginator:
    """Drives Fetcher → Differ for consecutive pages."""

    def __init__(
        self,
        fetcher: Fetcher,
        differ: Differ,
        cancel_event: Optional[asyncio.Event] = None,
    ) -> None:
        self.fetcher = fetcher
        self.differ = differ
        self.cancel_event = cancel_event

    async def compare_page(self, cursor: PageCursor) -> PageComparison:
        handle_a = self.fetcher.fetch(Side.ORIGIN, cursor.path)
        handle_b = self.fetcher.fetch(Side.MIRROR, cursor.path)
        return await self.differ.diff(handle_a, handle_b)

    async def compare(self, endpoint: str, page: int = 1, max_pages: Optional[int] = None) -> int:
        """Compare *endpoint* from *page* on; returns the number of pages compared."""
        cursor = self._cursor(endpoint, page, max_pages)
        compared = 0

        while True:
            if self.cancel_event is not None and self.cancel_event.is_set():
                log.info("Cancelled before page %d of %s", cursor.page, cursor.endpoint)
                break

            result = await self.compare_page(cursor)
            compared += 1

            if cursor.at_limit:
                log.info("Reached max pages (%d) for %s", cursor.max_pages, cursor.endpoint)
                break
            if not result.both_present:
                log.info(
                    "Stopping %s after page %d (A: %s, B: %s)",
                    cursor.endpoint,
                    cursor.page,
                    result.side_a.state.value,
                    result.side_b.state.value,
                )
                break
            cursor = cursor.next()

        return compared

    @staticmethod
    def _cursor(endpoint: str, page: int, max_pages: Optional[int]) -> PageCursor:
        endpoint = (endpoint or "").strip().strip("/")
        if not endpoint:
            raise InvocationError("No endpoint specified.")
        if page < 1:
            raise InvocationError(f"page must be >= 1, got {page}")
        if max_pages is not None and max_pages < 1:
            raise InvocationError(f"max_pages must be a positive integer, got {max_pages}")
        return PageCursor(endpoint, page, max_pages)
