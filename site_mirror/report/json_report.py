# site_mirror/report/json_report.py

"""
Генерация JSON-сводки для проекта SiteMirror.

Сериализация Bundle (без содержимого файлов) в файл.
"""
import json
from pathlib import Path
from typing import Any, Dict

from site_mirror.crawler.models import Bundle


def build_summary(bundle: Bundle) -> Dict[str, Any]:
    """Список страниц, файлов и картинок с размерами."""
    files = {
        path: len(content if isinstance(content, bytes) else content.encode("utf-8"))
        for path, content in bundle.files.items()
    }
    return {
        'pages': [page.path for page in bundle.pages],
        'images': list(bundle.images),
        'files': files,
        'total_pages': len(bundle.pages),
        'total_images': len(bundle.images),
        'total_bytes': sum(files.values()),
    }


def render_json(bundle: Bundle, output_path: Path | str) -> Path:
    """
    Сохраняет сводку по bundle в формате JSON по указанному пути.

    :param bundle: результат сборки
    :param output_path: путь к JSON-файлу
    :return: Path сохранённого файла

    Пример:
    ```python
    from site_mirror.report.json_report import render_json
    report_path = render_json(bundle, 'reports/build.json')
    print(f"JSON report saved to: {report_path}")
    ```
    """
    output = Path(output_path)
    output.parent.mkdir(parents=True, exist_ok=True)

    with output.open('w', encoding='utf-8') as f:
        json.dump(build_summary(bundle), f, ensure_ascii=False, indent=2)

    return output
