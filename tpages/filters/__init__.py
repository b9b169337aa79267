"""
Фильтры конвейера: реестр, встроенные фильтры и markdown.
"""

from __future__ import annotations

from .registry import FilterContext, FilterRegistry, FilterSpec
from .builtin import create_builtin_filters, register_builtin_filters
from .markdown import register_markdown_filter


def create_default_filters(markdown: bool = True) -> FilterRegistry:
    """Реестр со встроенными фильтрами и, по умолчанию, фильтром markdown."""
    registry = create_builtin_filters()
    if markdown:
        register_markdown_filter(registry)
    return registry


__all__ = [
    "FilterContext",
    "FilterRegistry",
    "FilterSpec",
    "create_builtin_filters",
    "register_builtin_filters",
    "register_markdown_filter",
    "create_default_filters",
]
