from __future__ import annotations

import logging
from dataclasses import dataclass, field, fields, replace
from pathlib import Path
from typing import Any, Dict, Optional

from ruamel.yaml import YAML
from ruamel.yaml.error import YAMLError

from .errors import ConfigError

logger = logging.getLogger(__name__)

_yaml = YAML(typ="safe")

SETTINGS_FILE = "tpages.yaml"

# Наибольшая вложенность, которая укладывается в стандартный sys.getrecursionlimit()
MAX_DEPTH_LIMIT = 100


@dataclass(frozen=True)
class TemplateSettings:
    """
    Настройки контекста шаблонов.

    page_extension: расширение файлов страниц (идентификатор 'page' ищется
    как 'page.html'); layout_name: имя файла layout без расширения;
    max_depth: предел вложенности partial/forEach; default_binding: имя
    переменной цикла forEach по умолчанию; args: аргументы контекста.
    """
    page_extension: str = ".html"
    layout_name: str = "_layout"
    max_depth: int = 64
    default_binding: str = "it"
    args: Dict[str, Any] = field(default_factory=dict)

    def with_args(self, extra: Dict[str, Any]) -> TemplateSettings:
        merged = dict(self.args)
        merged.update(extra)
        return replace(self, args=merged)


_EXPECTED_TYPES = {
    "page_extension": str,
    "layout_name": str,
    "max_depth": int,
    "default_binding": str,
    "args": dict,
}


def settings_from_dict(data: Dict[str, Any], *, source: str = "<dict>") -> TemplateSettings:
    """
    Собирает TemplateSettings из словаря с проверкой ключей и типов.

    Raises:
        ConfigError: Неизвестный ключ или значение неверного типа
    """
    known = {f.name for f in fields(TemplateSettings)}
    kwargs: Dict[str, Any] = {}
    for key, value in data.items():
        if key not in known:
            raise ConfigError(f"{source}: unknown settings key '{key}'")
        expected = _EXPECTED_TYPES[key]
        if (expected is int and isinstance(value, bool)) or not isinstance(value, expected):
            raise ConfigError(
                f"{source}: '{key}' must be {expected.__name__}, got {type(value).__name__}"
            )
        kwargs[key] = dict(value) if expected is dict else value

    ext = kwargs.get("page_extension")
    if ext is not None and ext and not ext.startswith("."):
        kwargs["page_extension"] = "." + ext
    depth = kwargs.get("max_depth", 1)
    if depth < 1:
        raise ConfigError(f"{source}: 'max_depth' must be positive")
    if depth > MAX_DEPTH_LIMIT:
        raise ConfigError(f"{source}: 'max_depth' must not exceed {MAX_DEPTH_LIMIT}")
    if "default_binding" in kwargs and not kwargs["default_binding"].isidentifier():
        raise ConfigError(f"{source}: 'default_binding' must be an identifier")

    return TemplateSettings(**kwargs)


def load_settings(path: Path) -> TemplateSettings:
    """
    Загружает настройки из YAML-файла.

    Отсутствующий или пустой файл даёт настройки по умолчанию.

    Raises:
        ConfigError: Ошибка YAML, корень не словарь, неверные ключи/типы
    """
    if not path.is_file():
        logger.debug("Settings file %s not found, using defaults", path)
        return TemplateSettings()

    try:
        data = _yaml.load(path.read_text(encoding="utf-8"))
    except YAMLError as e:
        raise ConfigError(f"{path}: invalid YAML: {e}") from e

    if data is None:
        return TemplateSettings()
    if not isinstance(data, dict):
        raise ConfigError(f"{path}: settings root must be a mapping")

    settings = settings_from_dict(data, source=str(path))
    logger.debug("Loaded settings from %s", path)
    return settings


def find_settings(root: Path, explicit: Optional[Path] = None) -> TemplateSettings:
    """Настройки из явного файла или из <root>/tpages.yaml."""
    if explicit is not None:
        if not explicit.is_file():
            raise ConfigError(f"Settings file not found: {explicit}")
        return load_settings(explicit)
    return load_settings(root / SETTINGS_FILE)


__all__ = [
    "TemplateSettings",
    "settings_from_dict",
    "load_settings",
    "find_settings",
    "SETTINGS_FILE",
    "MAX_DEPTH_LIMIT",
]
