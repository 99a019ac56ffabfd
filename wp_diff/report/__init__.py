# File: wp_diff/report/__init__.py
"""wp_diff.report: Генерация отчётов (JSON и HTML) по итогам сравнения."""

from __future__ import annotations

from wp_diff.report.html_report import render_html
from wp_diff.report.json_report import render_json

__all__ = ["render_json", "render_html"]
