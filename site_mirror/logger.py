# File: site_mirror/logger.py
"""site_mirror.logger: Общий логгер сборки ``SiteMirror``.

Все модули пишут в один именованный логгер::

    from site_mirror.logger import logger
    logger.info("Total pages: %d", len(pages))

Вывод идёт в stderr (stdout занят JSON команды ``config``), при желании
дублируется в файл с ротацией. CLI перенастраивает логгер через
:func:`init_logging` по опциям ``--log-level``, ``--log-file``, ``--log-format``.
"""
from __future__ import annotations

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Final, Iterator, Union

LOGGER_NAME: Final[str] = "SiteMirror"
_DEFAULT_FORMAT: Final[str] = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
_LOG_FILE_MAX_BYTES: Final[int] = 5 * 1024 * 1024
_LOG_FILE_BACKUPS: Final[int] = 3

_LevelT = Union[int, str]


def _handlers(log_file: str | Path | None) -> Iterator[logging.Handler]:
    yield logging.StreamHandler(sys.stderr)
    if log_file is not None:
        yield RotatingFileHandler(
            filename=str(log_file),
            maxBytes=_LOG_FILE_MAX_BYTES,
            backupCount=_LOG_FILE_BACKUPS,
            encoding="utf-8",
        )


def configure(
    *,
    level: _LevelT = "INFO",
    log_file: str | Path | None = None,
    log_format: str = _DEFAULT_FORMAT,
    replace_handlers: bool = True,
) -> logging.Logger:
    """Настраивает логгер ``SiteMirror`` и возвращает его.

    :param level: уровень (``"DEBUG"``, ``logging.INFO`` и т.п.)
    :param log_file: файл для копии логов; ``None``: только stderr
    :param log_format: строка формата для :class:`logging.Formatter`
    :param replace_handlers: закрыть и снять ранее добавленные обработчики
    """
    lg = logging.getLogger(LOGGER_NAME)
    lg.setLevel(level)

    if replace_handlers:
        for handler in list(lg.handlers):
            lg.removeHandler(handler)
            handler.close()

    formatter = logging.Formatter(log_format)
    for handler in _handlers(log_file):
        handler.setFormatter(formatter)
        lg.addHandler(handler)

    lg.propagate = False
    return lg


def init_logging(
    level: _LevelT = "INFO",
    log_file: str | Path | None = None,
    log_format: str = _DEFAULT_FORMAT,
) -> logging.Logger:
    """Вариант :func:`configure` для CLI: обработчики всегда заменяются."""
    return configure(level=level, log_file=log_file, log_format=log_format)


logger: logging.Logger = init_logging()

__all__ = ["logger", "configure", "init_logging", "LOGGER_NAME"]
