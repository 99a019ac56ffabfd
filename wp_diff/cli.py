# === FILE: wp_diff/cli.py ===
#!/usr/bin/env python3
"""
Точка входа для запуска сравнения wp_diff через командную строку.

Команды:
  compare   Сравнить коллекцию REST API на двух сайтах постранично
  config    Показать текущую конфигурацию

Общие опции:
  --config PATH       YAML/JSON-конфиг (по умолчанию: переменные окружения WP_*)
  --env-file PATH     .env-файл с WP_SITE_A / WP_SITE_B
  --log-level LEVEL   Уровень логирования (DEBUG, INFO, ...)
  --log-file PATH     Файл для логов (по умолчанию logs/<endpoint>-<ts>.log)
  --log-format FORMAT Формат логирования

Команда compare опции:
  --endpoint NAME     Ресурс REST API (posts, pages, categories, ...)
  --max-pages INT     Не сравнивать больше N страниц
  --json PATH         Сохранить JSON-отчёт в файл
  --html PATH         Сохранить HTML-отчёт в файл
  --template DIR      Папка с Jinja2-шаблоном report.html.j2
  --timeout SEC       Таймаут всего сравнения (секунд)

Пример:
  wp-diff compare --endpoint posts --max-pages 5 --json reports/posts.json
"""
import asyncio
import json
import sys
from pathlib import Path

import click
from jinja2 import TemplateError

from wp_diff import __version__
from wp_diff.config import load_config, load_env_config
from wp_diff.engine import RunContext, run_comparison
from wp_diff.errors import WPDiffError
from wp_diff.logger import configure, default_log_file
from wp_diff.report.html_report import render_html
from wp_diff.report.json_report import render_json

CONTEXT_SETTINGS = dict(help_option_names=["--help"])
DEFAULT_LOG_FORMAT = '%(asctime)s %(levelname)s %(name)s %(message)s'


def print_error(message: str):
    click.secho(message, fg='red', err=True)
    sys.exit(1)


@click.group(context_settings=CONTEXT_SETTINGS)
@click.version_option(__version__, '--version', '-v', message='wp-diff, version %(version)s')
@click.option(
    '--config', '-c', 'config_path',
    default=None,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help='Путь к файлу конфигурации YAML/JSON.'
)
@click.option(
    '--env-file', 'env_file',
    default=None,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help='Путь к .env-файлу (по умолчанию ищется .env).'
)
@click.option(
    '--log-level', 'log_level',
    default='INFO', show_default=True,
    type=click.Choice(['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']),
    help='Уровень логирования'
)
@click.option(
    '--log-file', 'log_file',
    default=None,
    type=click.Path(writable=True, dir_okay=False, path_type=Path),
    help='Путь к файлу логов'
)
@click.option(
    '--log-format', 'log_format',
    default=DEFAULT_LOG_FORMAT,
    show_default=True,
    help='Строка формата для логов'
)
@click.pass_context
def cli(ctx, config_path, env_file, log_level, log_file, log_format):
    """Сравнение WordPress-сайта (A) и его зеркала (B) через REST API."""
    configure(level=log_level, log_format=log_format)
    try:
        cfg = load_config(config_path) if config_path else load_env_config(env_file)
    except WPDiffError as e:
        print_error(str(e))
    ctx.ensure_object(dict)
    ctx.obj.update(config=cfg, log_level=log_level, log_file=log_file, log_format=log_format)


@cli.command('compare', context_settings=CONTEXT_SETTINGS)
@click.option('--endpoint', '-e', 'endpoint', default=None, help='Ресурс REST API, например posts')
@click.option(
    '--max-pages', '-m', 'max_pages',
    type=click.IntRange(min=1),
    default=None,
    help='Макс. число страниц для сравнения'
)
@click.option(
    '--json', '-j', 'json_output',
    default=None,
    type=click.Path(writable=True, dir_okay=False, path_type=Path),
    help='Сохранить JSON-отчёт в файл'
)
@click.option(
    '--html', '-h', 'html_output',
    default=None,
    type=click.Path(writable=True, dir_okay=False, path_type=Path),
    help='Сохранить HTML-отчёт в файл'
)
@click.option(
    '--template', '-t', 'template_dir',
    default=None,
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    help='Папка с Jinja2-шаблоном (по умолчанию встроенный)'
)
@click.option(
    '--timeout', 'run_timeout',
    type=float,
    default=None,
    help='Таймаут всего сравнения (секунд)'
)
@click.pass_context
def compare(ctx, endpoint, max_pages, json_output, html_output, template_dir, run_timeout):
    """Сравнить коллекцию постранично и сохранить/вывести отчёт."""
    if not endpoint:
        print_error('No endpoint specified.')
    cfg = ctx.obj['config']

    log_file = ctx.obj['log_file'] or default_log_file(cfg.log_dir, endpoint)
    configure(
        level=ctx.obj['log_level'],
        log_file=log_file,
        log_format=ctx.obj['log_format'],
        replace_handlers=False,
        console=False,
    )

    context = RunContext(cfg)
    try:
        coro = run_comparison(context, endpoint, max_pages)
        if run_timeout:
            report = asyncio.run(asyncio.wait_for(coro, timeout=run_timeout))
        else:
            report = asyncio.run(coro)
    except asyncio.TimeoutError:
        print_error(f'Сравнение не завершено за {run_timeout} секунд')
    except WPDiffError as e:
        print_error(str(e))

    if json_output:
        try:
            click.echo(f'JSON report: {render_json(report, json_output)}')
        except OSError as e:
            print_error(f'Ошибка при сохранении JSON: {e}')

    if html_output:
        try:
            click.echo(f'HTML report: {render_html(report, template_dir, html_output)}')
        except (OSError, TemplateError) as e:
            print_error(f'Ошибка при сохранении HTML: {e}')

    click.echo(json.dumps(report.summary, ensure_ascii=False))


@cli.command('config', context_settings=CONTEXT_SETTINGS)
@click.pass_context
def show_config(ctx):
    """Показать текущую конфигурацию в JSON."""
    cfg = ctx.obj['config']
    click.echo(cfg.model_dump_json(indent=2))


if __name__ == "__main__":
    cli()
