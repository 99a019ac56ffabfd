# File: wp_diff/aggregator.py
"""wp_diff.aggregator: сборка итогового отчёта одного запуска сравнения."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, Dict, List

from wp_diff.differ import ReportRecord
from wp_diff.reporter import LogReporter


@dataclass(slots=True)
class RunReport:
    """Результаты сравнения одного endpoint: записи по страницам, ошибки и сводка."""

    endpoint: str
    pages: int = 0
    records: List[ReportRecord] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)
    summary: Dict[str, Any] = field(default_factory=dict)

    def as_dict(self) -> Dict[str, Any]:
        return {
            "endpoint": self.endpoint,
            "summary": self.summary,
            "records": [r.as_dict() for r in self.records],
            "errors": list(self.errors),
        }

    def json(self, *, pretty: bool = False) -> str:
        """Возвращает JSON-представление RunReport."""
        return json.dumps(self.as_dict(), ensure_ascii=False, indent=2 if pretty else None, default=str)


def aggregate_results(endpoint: str, reporter: LogReporter, pages: int) -> RunReport:
    """Собирает RunReport из того, что накопил LogReporter."""
    summary = reporter.summary()
    summary["pages_requested"] = pages
    return RunReport(
        endpoint=endpoint,
        pages=pages,
        records=list(reporter.records),
        errors=list(reporter.errors),
        summary=summary,
    )


__all__ = ["RunReport", "aggregate_results"]
