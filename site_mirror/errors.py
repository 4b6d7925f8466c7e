# File: site_mirror/errors.py
"""site_mirror.errors: Иерархия ошибок сборки статического зеркала."""

from __future__ import annotations

from typing import Optional

__all__ = [
    "MirrorError",
    "ConfigError",
    "RetryableFetchError",
    "FatalFetchError",
    "AssetNotFoundError",
    "UnsafePathError",
]


class MirrorError(Exception):
    """Базовый класс для всех ошибок сборки."""


class ConfigError(MirrorError, ValueError):
    """Отсутствует или неверно задано обязательное поле конфигурации."""


class RetryableFetchError(MirrorError):
    """Сетевой сбой или недопустимый HTTP-статус; повторяется в пределах бюджета попыток."""

    def __init__(self, url: str, reason: str, status: Optional[int] = None) -> None:
        super().__init__(f"{url}: {reason}")
        self.url = url
        self.reason = reason
        self.status = status


class FatalFetchError(MirrorError):
    """Бюджет попыток исчерпан; сборка прерывается."""

    def __init__(self, url: str, attempts: int, last_error: Optional[BaseException] = None) -> None:
        detail = f": {last_error}" if last_error is not None else ""
        super().__init__(f"Too many retries ({attempts}) for {url}, aborting{detail}")
        self.url = url
        self.attempts = attempts
        self.last_error = last_error


class AssetNotFoundError(MirrorError, LookupError):
    """На главной странице не найден ожидаемый ресурс платформы."""

    def __init__(self, kind: str) -> None:
        super().__init__(f"{kind} file not found on the home page")
        self.kind = kind


class UnsafePathError(MirrorError, ValueError):
    """Путь файла bundle выходит за пределы каталога назначения."""

    def __init__(self, path: str) -> None:
        super().__init__(f"Refusing to write outside the output directory: {path}")
        self.path = path
