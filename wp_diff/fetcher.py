# wp_diff/fetcher.py
"""
Fetcher module: builds WordPress REST URLs for either side and performs the GET.

Mirror-side bodies have the mirror host rewritten to the origin host on the
raw text, so URLs embedded anywhere in the JSON compare equal.
"""
from __future__ import annotations

import asyncio
import enum
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from typing import AsyncIterator, Awaitable, Callable

from aiohttp import ClientError, ClientSession, ClientTimeout

from wp_diff.config import ComparatorConfig
from wp_diff.errors import FetchError
from wp_diff.logger import get_logger

__all__ = ("Side", "FetchHandle", "Fetcher", "normalize_hosts", "REST_PREFIX")

REST_PREFIX = "wp-json/wp/v2"

log = get_logger("fetcher")


class Side(str, enum.Enum):
    """Which of the two compared sites a request targets."""

    ORIGIN = "a"
    MIRROR = "b"


def normalize_hosts(body: str, mirror_host: str, origin_host: str) -> str:
    """Replace every literal occurrence of *mirror_host* in *body* with *origin_host*."""
    if not mirror_host:
        return body
    return body.replace(mirror_host, origin_host)


@dataclass(slots=True)
class FetchHandle:
    """Lazy fetch: the request is only sent when :meth:`resolve` is awaited."""

    url: str
    _request: Callable[[], Awaitable[str]] = field(repr=False)
    _consumed: bool = field(default=False, repr=False)

    async def resolve(self) -> str:
        if self._consumed:
            raise RuntimeError(f"FetchHandle for {self.url} already resolved")
        self._consumed = True
        return await self._request()


class Fetcher:
    """Creates :class:`FetchHandle` objects against the origin or the mirror."""

    def __init__(self, session: ClientSession, config: ComparatorConfig) -> None:
        self.session = session
        self.config = config

    @classmethod
    @asynccontextmanager
    async def open(cls, config: ComparatorConfig) -> AsyncIterator[Fetcher]:
        """Fetcher with its own ClientSession, closed on exit."""
        session = ClientSession(
            timeout=ClientTimeout(total=config.timeout),
            headers={"User-Agent": config.user_agent},
            raise_for_status=False,
        )
        try:
            yield cls(session, config)
        finally:
            await session.close()

    def host_for(self, side: Side) -> str:
        return self.config.site_b if side is Side.MIRROR else self.config.site_a

    def build_url(self, side: Side, path: str) -> str:
        return f"{self.config.scheme}://{self.host_for(side)}/{REST_PREFIX}/{path.lstrip('/')}"

    def fetch(self, side: Side, path: str) -> FetchHandle:
        url = self.build_url(side, path)

        async def _request() -> str:
            body = await self._get(url)
            if side is Side.MIRROR:
                body = normalize_hosts(body, self.config.site_b, self.config.site_a)
            return body

        return FetchHandle(url, _request)

    async def _get(self, url: str) -> str:
        try:
            async with self.session.get(url) as resp:
                # non-2xx bodies are still compared; undecodable bytes become U+FFFD
                body = await resp.text(errors="replace")
                log.debug("GET %s -> HTTP %s (%d bytes)", url, resp.status, len(body))
                return body
        except (ClientError, asyncio.TimeoutError) as exc:
            raise FetchError(url, exc) from exc
