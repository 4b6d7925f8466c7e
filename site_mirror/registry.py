# File: site_mirror/registry.py
"""site_mirror.registry: Набор уже скачанных картинок на время одной сборки."""

from __future__ import annotations

from threading import Lock
from typing import Iterator, Set

__all__ = ["ImageRegistry"]


class ImageRegistry:
    """Потокобезопасное множество URL-источников картинок.

    Один экземпляр создаётся на сборку и передаётся всем переписчикам страниц.
    ``claim`` выполняет атомарную проверку-и-отметку: из двух гонящихся страниц скачивание
    достаётся ровно одной.
    """

    def __init__(self) -> None:
        self._seen: Set[str] = set()
        self._lock = Lock()

    def has_seen(self, url: str) -> bool:
        with self._lock:
            return url in self._seen

    def mark_seen(self, url: str) -> None:
        with self._lock:
            self._seen.add(url)

    def claim(self, url: str) -> bool:
        """Отмечает *url*; True, если он ещё не был отмечен."""
        with self._lock:
            if url in self._seen:
                return False
            self._seen.add(url)
            return True

    def release(self, url: str) -> None:
        """Снимает отметку после неудачной загрузки."""
        with self._lock:
            self._seen.discard(url)

    def __contains__(self, url: object) -> bool:
        return isinstance(url, str) and self.has_seen(url)

    def __len__(self) -> int:
        with self._lock:
            return len(self._seen)

    def __iter__(self) -> Iterator[str]:
        with self._lock:
            return iter(sorted(self._seen))
