# wp_diff/errors.py
"""
Exception hierarchy for wp_diff.

Per-page errors (``FetchError``, ``ParseError``) never abort a run;
startup errors (``ConfigurationError``, ``InvocationError``) are fatal.
"""
from __future__ import annotations

from typing import Optional


class WPDiffError(Exception):
    """Base class for all wp_diff errors."""


class FetchError(WPDiffError):
    """Transport-level failure while requesting a page (DNS, timeout, reset)."""

    def __init__(self, url: str, cause: BaseException) -> None:
        super().__init__(f"GET {url} failed: {cause!r}")
        self.url = url
        self.cause = cause


class ParseError(WPDiffError):
    """Response body is not valid JSON."""

    _PREVIEW = 80

    def __init__(self, body: str, cause: Optional[BaseException] = None) -> None:
        preview = body[: self._PREVIEW]
        super().__init__(f"Unparseable body ({cause}): {preview!r}")
        self.body = body
        self.cause = cause


class ConfigurationError(WPDiffError):
    """Required configuration is missing or left at placeholder values."""


class InvocationError(WPDiffError):
    """Required invocation parameter is missing or invalid."""


__all__ = [
    "WPDiffError",
    "FetchError",
    "ParseError",
    "ConfigurationError",
    "InvocationError",
]
