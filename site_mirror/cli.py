# === FILE: site_mirror/cli.py ===
#!/usr/bin/env python3
"""
Точка входа для сборки статического зеркала SiteMirror через командную строку.

Команды:
  build     Собрать сайт по конфигу и записать файлы в каталог
  config    Показать текущую конфигурацию

Общие опции:
  --config PATH       Путь к YAML/JSON-конфигу (default: mirror.yml)
  --log-level LEVEL   Уровень логирования (DEBUG, INFO, ...)
  --log-file PATH     Файл для логов (stderr, если не указан)
  --log-format FORMAT Формат логирования (e.g. "%(asctime)s %(levelname)s %(message)s")

Команда build опции:
  --output DIR         Каталог для файлов сайта (default: content)
  --report PATH        Сохранить JSON-сводку сборки в файл
  --build-timeout SEC  Таймаут всей сборки (секунд)
  --no-clean           Не очищать каталог перед записью

Дополнительно:
  --version, -v       Показать версию SiteMirror

Пример:
  site-mirror --config mirror.yml build --output content --report build.json
"""
import asyncio
import json
import sys
from pathlib import Path

import click

from site_mirror import __version__
from site_mirror.config import load_config
from site_mirror.engine import start_build
from site_mirror.errors import UnsafePathError
from site_mirror.logger import init_logging
from site_mirror.materializer import write_bundle
from site_mirror.report.json_report import render_json

CONTEXT_SETTINGS = dict(help_option_names=["--help", "-h"])


def print_error(message: str):
    click.secho(message, fg='red', err=True)
    sys.exit(1)


@click.group(context_settings=CONTEXT_SETTINGS)
@click.version_option(__version__, '--version', '-v', message='SiteMirror, version %(version)s')
@click.option(
    '--config', '-c', 'config_path',
    default='mirror.yml',
    show_default=True,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help='Путь к файлу конфигурации YAML/JSON.'
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
    help='Путь к файлу логов (stderr, если не указан)'
)
@click.option(
    '--log-format', 'log_format',
    default='%(asctime)s %(levelname)s %(message)s',
    show_default=True,
    help='Строка формата для логов'
)
@click.pass_context
def cli(ctx, config_path, log_level, log_file, log_format):
    """Группа команд SiteMirror CLI."""
    init_logging(
        level=log_level,
        log_file=str(log_file) if log_file else None,
        log_format=log_format
    )
    try:
        cfg = load_config(config_path)
    except Exception as e:
        print_error(f'Ошибка загрузки конфигурации: {e}')
    ctx.ensure_object(dict)
    ctx.obj['config'] = cfg


@cli.command('build', context_settings=CONTEXT_SETTINGS)
@click.option(
    '--output', '-o', 'output_dir',
    default='content',
    show_default=True,
    type=click.Path(file_okay=False, path_type=Path),
    help='Каталог для файлов сайта'
)
@click.option(
    '--report', '-r', 'report_path',
    default=None,
    type=click.Path(writable=True, dir_okay=False, path_type=Path),
    help='Сохранить JSON-сводку сборки в файл'
)
@click.option(
    '--build-timeout', 'build_timeout',
    type=float,
    default=None,
    help='Таймаут всей сборки (секунд)'
)
@click.option(
    '--no-clean', 'no_clean', is_flag=True,
    help='Не очищать каталог перед записью'
)
@click.pass_context
def build(ctx, output_dir, report_path, build_timeout, no_clean):
    """Собрать сайт и записать файлы."""
    cfg = ctx.obj['config']
    click.echo(f'Building: {cfg.site} -> {cfg.target_host}')
    try:
        if build_timeout:
            bundle = asyncio.run(
                asyncio.wait_for(start_build(cfg), timeout=build_timeout)
            )
        else:
            bundle = asyncio.run(start_build(cfg))
    except asyncio.TimeoutError:
        print_error(f'Сборка не завершена за {build_timeout} секунд')
    except Exception as e:
        print_error(f'Ошибка при сборке: {e}')

    try:
        written = write_bundle(bundle, output_dir, clean=not no_clean)
    except (OSError, UnsafePathError) as e:
        print_error(f'Ошибка при записи файлов: {e}')
    click.echo(f'Pages: {len(bundle.pages)}, files: {len(written)} -> {output_dir}')

    if report_path:
        try:
            saved = render_json(bundle, report_path)
            click.echo(f'JSON report: {saved}')
        except Exception as e:
            print_error(f'Ошибка при сохранении JSON: {e}')

    click.echo('Finished successfully!')


@cli.command('config', context_settings=CONTEXT_SETTINGS)
@click.pass_context
def show_config(ctx):
    """Показать текущую конфигурацию в JSON."""
    cfg = ctx.obj['config']
    click.echo(json.dumps(cfg.model_dump(by_alias=True), indent=2, ensure_ascii=False))


if __name__ == "__main__":
    cli()
