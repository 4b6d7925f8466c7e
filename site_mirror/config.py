# === FILE: site_mirror/config.py ===
"""
Модуль для загрузки и валидации конфигурации сборки SiteMirror.
Используется Pydantic для описания схемы и проверки данных.
"""
from __future__ import annotations

import errno
import json
import os
from pathlib import Path
from typing import Any, Optional, Union

import yaml
from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    field_validator,
)

from site_mirror.crawler.models import SiteDescriptor
from site_mirror.errors import ConfigError


class BuildConfig(BaseModel):
    """Конфигурация одного запуска сборки."""
    model_config = ConfigDict(extra="forbid", frozen=True, populate_by_name=True)

    site: str = Field(..., min_length=1, description="URL сайта на платформе (dev host).")
    target_host: str = Field(
        ..., alias="targetHost", min_length=1, description="URL, под который переписывается экспорт."
    )
    robots_txt: Optional[str] = Field(None, alias="robotsTxt", description="Содержимое robots.txt.")
    redirects: Optional[str] = Field(None, description="Содержимое файла _redirects.")
    headers: Optional[str] = Field(None, description="Содержимое файла _headers.")

    retry_times: int = Field(4, ge=0, description="Число повторных попыток после первой.")
    retry_delay: float = Field(5.0, ge=0, description="Пауза между попытками (секунд).")
    timeout: float = Field(30.0, gt=0, description="Таймаут на один запрос (секунд).")
    concurrency: int = Field(8, ge=1, description="Сколько страниц обрабатывается одновременно.")
    user_agent: str = Field("SiteMirrorBot/1.0", min_length=1, description="Заголовок User-Agent.")

    hide_badge: bool = Field(True, description="Скрыть бейдж платформы через CSS.")
    image_marker: str = Field("data-sb-process", min_length=1, description="Атрибут-маркер для картинок.")
    assets_dir: str = Field("sb_assets", min_length=1, description="Каталог для картинок.")
    fetch_proxy: str = Field(
        "https://cors-anywhere.herokuapp.com/",
        description="Прокси для клиентских fetch-запросов к target host.",
    )
    css_safelist: list[str] = Field(default_factory=list, description="Селекторы, которые не удаляются.")

    @field_validator("site", "target_host", mode="before")
    def _strip_trailing_slash(cls, v: Any) -> Any:
        if isinstance(v, str):
            return v.strip().rstrip("/")
        return v

    @field_validator("assets_dir")
    def _strip_slashes(cls, v: str) -> str:
        return v.strip("/")

    def descriptor(self) -> SiteDescriptor:
        return SiteDescriptor(dev_host=self.site, target_host=self.target_host)


_DEFAULT_CFG = Path("mirror.yml")


def _read_yaml(path: Path) -> dict[str, Any]:
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as exc:
        raise ValueError(f"Неправильный YAML в {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise TypeError(f"Верхний уровень YAML должен быть mapping, получено {type(data).__name__}")
    return data


def _read_json(path: Path) -> dict[str, Any]:
    try:
        data = json.loads(path.read_text(encoding="utf-8")) or {}
    except json.JSONDecodeError as exc:
        raise ValueError(f"Неправильный JSON в {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise TypeError(f"Верхний уровень JSON должен быть mapping, получено {type(data).__name__}")
    return data


def build_config(data: dict[str, Any]) -> BuildConfig:
    """Проверяет словарь настроек; любая ошибка схемы превращается в ConfigError."""
    try:
        return BuildConfig(**data)
    except ValidationError as exc:
        fields = ", ".join(".".join(str(p) for p in err["loc"]) or "<root>" for err in exc.errors())
        raise ConfigError(f"Неверная конфигурация ({fields}): {exc}") from exc


def load_config(path: Union[str, Path, None]) -> BuildConfig:
    """
    Читает YAML или JSON и возвращает проверенный объект BuildConfig.
    При отсутствии файла конфига бросает FileNotFoundError,
    при пустых `site`/`targetHost` бросает ConfigError.
    """
    if path is None:
        if not _DEFAULT_CFG.exists():
            raise FileNotFoundError(errno.ENOENT, os.strerror(errno.ENOENT), str(_DEFAULT_CFG))
        path_obj = _DEFAULT_CFG
    else:
        path_obj = Path(path).expanduser().resolve()
        if not path_obj.is_file():
            raise FileNotFoundError(errno.ENOENT, os.strerror(errno.ENOENT), str(path_obj))

    suffix = path_obj.suffix.lower()
    if suffix in (".yaml", ".yml"):
        data = _read_yaml(path_obj)
    elif suffix == ".json":
        data = _read_json(path_obj)
    else:
        raise ValueError(f"Неподдерживаемый формат конфига: {suffix}")

    return build_config(data)
