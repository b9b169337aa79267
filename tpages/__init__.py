"""
Template Pages: страницы с layout, partial и конвейерами фильтров.
"""

from __future__ import annotations

from .config import TemplateSettings, load_settings
from .context import PageResult, TemplatePage, TemplatePagesContext
from .errors import (
    ConfigError,
    FilterArityError,
    FilterError,
    FilterExecutionError,
    RenderDepthError,
    TemplateNotFoundError,
    TemplatePagesError,
    TemplateSyntaxError,
    UnknownFilterError,
)
from .filters import FilterContext, FilterRegistry
from .sources import FileSystemSource, MemorySource, TemplateSource

__all__ = [
    "TemplatePagesContext",
    "TemplatePage",
    "PageResult",
    "TemplateSettings",
    "load_settings",
    "FilterContext",
    "FilterRegistry",
    "TemplateSource",
    "MemorySource",
    "FileSystemSource",
    "TemplatePagesError",
    "TemplateSyntaxError",
    "TemplateNotFoundError",
    "FilterError",
    "UnknownFilterError",
    "FilterArityError",
    "FilterExecutionError",
    "RenderDepthError",
    "ConfigError",
]
