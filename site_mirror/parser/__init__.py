"""site_mirror.parser: разбор HTML-ссылок и sitemap.xml."""
