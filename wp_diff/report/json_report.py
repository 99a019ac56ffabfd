# wp_diff/report/json_report.py

"""
Генерация JSON-отчёта для wp_diff.

Сериализация объекта RunReport в файл.
"""
import json
from pathlib import Path

from wp_diff.aggregator import RunReport


def render_json(report: RunReport, output_path: Path | str) -> Path:
    """
    Сохраняет отчёт report в формате JSON по указанному пути.

    :param report: объект RunReport с результатами сравнения
    :param output_path: путь к JSON-файлу
    :return: Path сохранённого файла

    Пример:
    ```python
    from wp_diff.report.json_report import render_json
    report_path = render_json(report, 'reports/posts.json')
    ```
    """
    output = Path(output_path)
    output.parent.mkdir(parents=True, exist_ok=True)

    with output.open('w', encoding='utf-8') as f:
        json.dump(report.as_dict(), f, ensure_ascii=False, indent=2, default=str)

    return output
