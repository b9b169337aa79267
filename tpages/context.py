"""
Публичный API шаблонизатора: контекст страниц и одноразовый рендер PageResult.

    context = TemplatePagesContext(args={"defaultMessage": "hi"})
    context.virtual_files.write_file("_layout.html", "<title>{{ title }}</title>{{ page }}")
    context.virtual_files.write_file("page.html", "<h1>{{ title }}</h1>")
    PageResult(context.get_page("page"), {"title": "The title"}).result
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from pathlib import Path
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional

from .composer import PageComposer
from .config import TemplateSettings, find_settings
from .errors import TemplateSyntaxError
from .filters import FilterRegistry, create_default_filters
from .frontmatter import NO_LAYOUT
from .registry import ParsedTemplate, TemplateRegistry
from .sources import FileSystemSource, MemorySource, TemplateSource
from .template.parser import parse_template

logger = logging.getLogger(__name__)

INLINE_PAGE_ID = "<inline>"


@dataclass(frozen=True)
class TemplatePage:
    """Страница, привязанная к контексту, в котором она будет рендериться."""
    context: "TemplatePagesContext"
    template: ParsedTemplate

    @property
    def page_id(self) -> str:
        return self.template.page_id


class TemplatePagesContext:
    """
    Контекст шаблонов: источник файлов, аргументы по умолчанию, фильтры,
    кэш разобранных страниц.

    Фильтры регистрируются до первого рендера; init() замораживает реестр
    фильтров, после чего контекст безопасно использовать из нескольких потоков.
    """

    def __init__(
        self,
        source: Optional[TemplateSource] = None,
        *,
        args: Optional[Mapping[str, Any]] = None,
        settings: Optional[TemplateSettings] = None,
        filters: Optional[FilterRegistry] = None,
        markdown: bool = True,
    ):
        settings = settings or TemplateSettings()
        if args:
            settings = settings.with_args(dict(args))
        self.settings = settings
        self.virtual_files: TemplateSource = source if source is not None else MemorySource()
        self.filters = filters if filters is not None else create_default_filters(markdown)
        self.registry = TemplateRegistry(self.virtual_files, settings.page_extension)

        self._composer: Optional[PageComposer] = None
        self._init_lock = threading.Lock()

    @classmethod
    def from_directory(cls, root: Path, config: Optional[Path] = None, **kwargs: Any) -> TemplatePagesContext:
        """Контекст над каталогом шаблонов с настройками из tpages.yaml."""
        root = Path(root)
        settings = find_settings(root, config)
        return cls(FileSystemSource(root), settings=settings, **kwargs)

    @property
    def args(self) -> Dict[str, Any]:
        """Аргументы контекста (самый внешний кадр цепочки областей)."""
        return self.settings.args

    def init(self) -> TemplatePagesContext:
        """Замораживает фильтры и создаёт композитор. Повторный вызов ничего не делает."""
        with self._init_lock:
            if self._composer is None:
                self.filters.freeze()
                self._composer = PageComposer(self.registry, self.filters, self.settings)
                logger.debug(
                    "Initialized template context with %d filters", len(self.filters)
                )
        return self

    @property
    def composer(self) -> PageComposer:
        if self._composer is None:
            self.init()
        assert self._composer is not None
        return self._composer

    # ---------------------------- Страницы ----------------------------

    def get_page(self, name: str) -> TemplatePage:
        """
        Raises:
            TemplateNotFoundError: Если страницы нет
            TemplateSyntaxError: Если страница не разбирается
        """
        return TemplatePage(self, self.registry.get_page(name))

    def one_time_page(self, text: str) -> TemplatePage:
        """
        Страница из текста, минуя реестр; layout не применяется.

        Raises:
            TemplateSyntaxError: Если текст не разбирается
        """
        try:
            nodes = parse_template(text)
        except TemplateSyntaxError as e:
            raise e.with_page(INLINE_PAGE_ID) from None
        template = ParsedTemplate(
            page_id=INLINE_PAGE_ID,
            path="",
            args=MappingProxyType({}),
            layout=NO_LAYOUT,
            nodes=tuple(nodes),
        )
        return TemplatePage(self, template)

    def list_pages(self) -> List[str]:
        return self.registry.list_pages()

    # ---------------------------- Рендер ----------------------------

    def render(self, name: str, args: Optional[Mapping[str, Any]] = None) -> str:
        """Рендерит страницу name, обёрнутую в её layout."""
        return PageResult(self.get_page(name), args).result

    def render_inline(self, text: str, args: Optional[Mapping[str, Any]] = None) -> str:
        """Рендерит текст шаблона напрямую, без реестра и layout."""
        return self.composer.render_inline(text, args)


class PageResult:
    """
    Одноразовое задание рендера: страница и её локальные аргументы.

    Каждое обращение к result рендерит заново; результат не кэшируется.
    """

    def __init__(self, page: TemplatePage, args: Optional[Mapping[str, Any]] = None):
        self.page = page
        self.args: Dict[str, Any] = dict(args or {})

    @property
    def result(self) -> str:
        return self.page.context.composer.render_page(self.page.template, self.args)

    def __str__(self) -> str:
        return self.result


__all__ = [
    "TemplatePagesContext",
    "TemplatePage",
    "PageResult",
    "INLINE_PAGE_ID",
]
