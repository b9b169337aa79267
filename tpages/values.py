"""
Доступ к значениям, передаваемым в шаблоны.

Значение: строка, число, bool, последовательность, словарь или
структурированный объект, либо None. Обращение к свойству по сегменту пути
выполняется единообразно через get_property().
"""

from __future__ import annotations

import json
from collections.abc import Hashable, Mapping, Sequence
from typing import Any


def is_sequence(value: Any) -> bool:
    """Последовательность значений, но не строка и не байты."""
    return isinstance(value, Sequence) and not isinstance(value, (str, bytes, bytearray))


def get_property(value: Any, segment: Any) -> Any:
    """
    Возвращает свойство значения по одному сегменту пути.

    - словари: по ключу;
    - последовательности: по целочисленному индексу (в т.ч. "0");
    - прочие объекты: по публичному атрибуту (имена с '_' не выдаются).

    Отсутствующее свойство и обращение к None дают None.
    """
    if value is None or segment is None:
        return None

    if isinstance(value, Mapping):
        # m[[1]], m[{a: 1}]: такой ключ не может быть в словаре
        if not isinstance(segment, Hashable):
            return None
        if segment in value:
            return value[segment]
        # {{ map[1] }} для словаря со строковыми ключами
        return value.get(str(segment))

    if is_sequence(value):
        index = _as_index(segment)
        if index is None:
            if segment == "length":
                return len(value)
            return None
        try:
            return value[index]
        except IndexError:
            return None

    if isinstance(value, str):
        if segment == "length":
            return len(value)
        return None

    name = str(segment)
    if not name or name.startswith("_"):
        return None
    return getattr(value, name, None)


def _as_index(segment: Any) -> int | None:
    if isinstance(segment, bool):
        return None
    if isinstance(segment, int):
        return segment
    if isinstance(segment, str) and segment.lstrip("-").isdigit():
        return int(segment)
    return None


def to_text(value: Any) -> str:
    """
    Строковое представление значения для вывода в документ.

    None → "", bool → "true"/"false", последовательности: через запятую,
    словари: JSON.
    """
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if is_sequence(value):
        return ",".join(to_text(item) for item in value)
    if isinstance(value, Mapping):
        return json.dumps(value, ensure_ascii=False, default=str)
    return str(value)


__all__ = ["get_property", "is_sequence", "to_text"]
