"""site_mirror.crawler: сетевой слой, модели данных и поиск ресурсов платформы."""
