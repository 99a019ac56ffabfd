# wp_diff/reporter.py
"""
Reporter: the sink for page records and per-page errors.

Emission is fire-and-forget for the caller; :class:`LogReporter` writes
through the project logger and keeps what it saw for the final report.
"""
from __future__ import annotations

import json
import logging
from typing import Any, Dict, List, Optional

from wp_diff.differ import ReportRecord
from wp_diff.logger import get_logger

__all__ = ("Reporter", "LogReporter")


class Reporter:
    """Inbound contract used by the differ."""

    def info(self, record: ReportRecord) -> None:
        raise NotImplementedError

    def error(self, failure: BaseException) -> None:
        raise NotImplementedError


class LogReporter(Reporter):
    """Logs records at INFO (pretty JSON) and failures at ERROR."""

    def __init__(self, logger: Optional[logging.Logger] = None, keep_records: bool = True) -> None:
        self.logger = logger or get_logger("report")
        self.keep_records = keep_records
        self.records: List[ReportRecord] = []
        self.errors: List[str] = []
        self._pages = 0
        self._pages_with_diffs = 0
        self._total_diffs = 0

    def info(self, record: ReportRecord) -> None:
        self._pages += 1
        if record.diffs:
            self._pages_with_diffs += 1
            self._total_diffs += len(record.diffs)
        if self.keep_records:
            self.records.append(record)
        self.logger.info(
            "%s", json.dumps(record.as_dict(), ensure_ascii=False, indent=2, default=str)
        )

    def error(self, failure: BaseException) -> None:
        self.errors.append(str(failure))
        self.logger.error("%s", failure)

    def summary(self) -> Dict[str, Any]:
        return {
            "pages": self._pages,
            "pages_with_diffs": self._pages_with_diffs,
            "total_diffs": self._total_diffs,
            "errors": len(self.errors),
        }
