# File: site_mirror/materializer.py
"""site_mirror.materializer: Запись собранного Bundle на диск."""

from __future__ import annotations

import shutil
from pathlib import Path
from typing import List, Union

from site_mirror.crawler.models import Bundle
from site_mirror.errors import UnsafePathError
from site_mirror.logger import logger

__all__ = ["write_bundle"]


def write_bundle(bundle: Bundle, output_dir: Union[str, Path], clean: bool = True) -> List[Path]:
    """Записывает все файлы bundle в *output_dir* и возвращает их пути.

    :param bundle: результат сборки
    :param output_dir: каталог назначения
    :param clean: удалить предыдущее содержимое каталога
    :return: список записанных файлов в порядке bundle
    :raises UnsafePathError: путь файла выходит за пределы *output_dir*
    """
    root = Path(output_dir)
    if clean and root.exists():
        shutil.rmtree(root)
    root.mkdir(parents=True, exist_ok=True)
    resolved_root = root.resolve()

    # все пути проверяются до первой записи
    targets = {}
    for rel_path in bundle.files:
        target = root / rel_path
        if not target.resolve().is_relative_to(resolved_root):
            raise UnsafePathError(rel_path)
        targets[rel_path] = target

    written: List[Path] = []
    for rel_path, content in bundle.files.items():
        target = targets[rel_path]
        target.parent.mkdir(parents=True, exist_ok=True)
        if isinstance(content, bytes):
            target.write_bytes(content)
        else:
            target.write_text(content, encoding="utf-8")
        written.append(target)
    logger.info("Wrote %d files to %s", len(written), root)
    return written
