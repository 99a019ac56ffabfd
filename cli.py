# cli.py

"""
Точка входа для запуска wp_diff без установки пакета.

Пример запуска:
    python cli.py --env-file .env compare --endpoint posts --max-pages 10 --json reports/posts.json
"""
from wp_diff.cli import cli


if __name__ == '__main__':
    cli()
