# File: wp_diff/report/html_report.py
"""wp_diff.report.html_report: Генерация HTML-отчёта с помощью Jinja2."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Union

from jinja2 import Environment, FileSystemLoader, select_autoescape

from wp_diff.aggregator import RunReport

DEFAULT_TEMPLATE_DIR = Path(__file__).resolve().parent.parent / "templates"
TEMPLATE_NAME = "report.html.j2"


def _to_json(value: Any) -> str:
    return json.dumps(value, ensure_ascii=False, default=str)


def render_html(
    report: RunReport,
    template_dir: Union[Path, str, None],
    output_path: Union[Path, str],
) -> Path:
    """Рендерит HTML-отчёт из шаблона и сохраняет его по указанному пути.

    Args:
        report: объект RunReport.
        template_dir: директория с шаблоном ``report.html.j2``;
            ``None``: встроенный шаблон пакета.
        output_path: путь к итоговому HTML-файлу.

    Returns:
        Path до сохранённого HTML-файла.
    """
    template_dir = Path(template_dir) if template_dir else DEFAULT_TEMPLATE_DIR
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    env = Environment(
        loader=FileSystemLoader(str(template_dir)),
        autoescape=select_autoescape(["html", "xml", "j2"]),
    )
    env.filters["tojson_compact"] = _to_json
    template = env.get_template(TEMPLATE_NAME)

    context: dict[str, Any] = {
        "endpoint": report.endpoint,
        "summary": report.summary,
        "records": [r.as_dict() for r in report.records],
        "errors": report.errors,
    }

    output_path.write_text(template.render(**context), encoding="utf-8")
    return output_path
