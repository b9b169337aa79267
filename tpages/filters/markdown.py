"""
Фильтр markdown: преобразование текста в HTML через Python-Markdown.

Регистрируется хостом как обычный фильтр; ядро ничего не знает о Markdown.
"""

from __future__ import annotations

from typing import Any, Iterable, Optional

import markdown as _markdown

from .registry import FilterRegistry
from ..values import to_text


def make_markdown_filter(extensions: Optional[Iterable[str]] = None):
    ext = list(extensions or [])

    def markdown(value: Any) -> Any:
        if value is None:
            return None
        return _markdown.markdown(to_text(value), extensions=ext)

    return markdown


def register_markdown_filter(
    registry: FilterRegistry,
    extensions: Optional[Iterable[str]] = None,
) -> FilterRegistry:
    registry.register("markdown", make_markdown_filter(extensions))
    return registry


__all__ = ["make_markdown_filter", "register_markdown_filter"]
