"""
Реестр разобранных шаблонов.

Лениво загружает текст страниц через TemplateSource, разбирает front matter
и тело в AST и кэширует результат на время жизни реестра. Разобранные
шаблоны неизменяемы и безопасны для параллельного чтения.
"""

from __future__ import annotations

import logging
import posixpath
import re
import threading
from dataclasses import dataclass
from types import MappingProxyType
from typing import Dict, List, Mapping, Optional, Tuple

from .errors import TemplateNotFoundError, TemplateSyntaxError
from .frontmatter import NO_LAYOUT, parse_frontmatter
from .sources import TemplateSource, normalize_path
from .template.nodes import TemplateAST, TemplateNode
from .template.parser import parse_template

logger = logging.getLogger(__name__)

# Пустые строки в начале файла страницы не выводятся
_LEADING_BLANK_LINES = re.compile(r"\A(?:[ \t]*\r?\n)+")


@dataclass(frozen=True)
class ParsedTemplate:
    """
    Разобранная страница: идентификатор, путь в источнике, аргументы
    front matter и AST тела.
    """
    page_id: str
    path: str
    args: Mapping[str, object]
    layout: Optional[str]
    nodes: Tuple[TemplateNode, ...]

    @property
    def directory(self) -> str:
        return posixpath.dirname(self.page_id)


class TemplateRegistry:
    """
    Кэш page_id -> ParsedTemplate поверх поставщика исходников.

    Повторное заполнение одной записи при гонке допустимо: разбор
    детерминирован и не имеет побочных эффектов, в кэше остаётся первая.
    Отсутствующие страницы не кэшируются.
    """

    def __init__(self, source: TemplateSource, page_extension: str = ".html"):
        self.source = source
        self.page_extension = page_extension
        self._pages: Dict[str, ParsedTemplate] = {}
        self._inline: Dict[str, Tuple[TemplateNode, ...]] = {}
        self._lock = threading.Lock()

    # ---------------------------- Идентификаторы ----------------------------

    def page_id_for(self, name: str) -> str:
        """Канонический идентификатор страницы (без расширения страниц)."""
        norm = normalize_path(name)
        ext = self.page_extension
        if ext and norm.endswith(ext) and len(norm) > len(ext):
            norm = norm[: -len(ext)]
        return norm

    def _candidate_paths(self, page_id: str) -> List[str]:
        if self.page_extension:
            return [page_id + self.page_extension, page_id]
        return [page_id]

    # ---------------------------- Страницы ----------------------------

    def find_page(self, name: str) -> Optional[ParsedTemplate]:
        """
        Возвращает разобранную страницу или None, если её нет в источнике.

        Raises:
            TemplateSyntaxError: Если текст страницы не разбирается
        """
        try:
            page_id = self.page_id_for(name)
        except ValueError as e:
            logger.debug("Rejected page name %r: %s", name, e)
            return None

        cached = self._pages.get(page_id)
        if cached is not None:
            return cached

        for path in self._candidate_paths(page_id):
            text = self.source.get_source(path)
            if text is None:
                continue
            parsed = self._parse_page(page_id, path, text)
            with self._lock:
                parsed = self._pages.setdefault(page_id, parsed)
            logger.debug("Cached page '%s' from '%s' (%d nodes)", page_id, path, len(parsed.nodes))
            return parsed

        return None

    def get_page(self, name: str, kind: str = "page") -> ParsedTemplate:
        """
        Как find_page(), но отсутствие страницы считается ошибкой.

        Raises:
            TemplateNotFoundError: Если страницы нет
            TemplateSyntaxError: Если текст страницы не разбирается
        """
        page = self.find_page(name)
        if page is None:
            raise TemplateNotFoundError(name, kind)
        return page

    def _parse_page(self, page_id: str, path: str, text: str) -> ParsedTemplate:
        frontmatter, body = parse_frontmatter(text, page=page_id)
        line_offset = frontmatter.line_count if frontmatter else 0
        position_offset = frontmatter.length if frontmatter else 0

        blank = _LEADING_BLANK_LINES.match(body)
        if blank:
            line_offset += blank.group(0).count("\n")
            position_offset += blank.end()
            body = body[blank.end():]

        try:
            ast = parse_template(body)
        except TemplateSyntaxError as e:
            raise e.with_page(page_id, line_offset, position_offset) from None

        return ParsedTemplate(
            page_id=page_id,
            path=path,
            args=MappingProxyType(dict(frontmatter.args) if frontmatter else {}),
            layout=frontmatter.layout if frontmatter else None,
            nodes=tuple(ast),
        )

    # ---------------------------- Layout ----------------------------

    def find_layout(self, page: ParsedTemplate, layout_name: str) -> Optional[ParsedTemplate]:
        """
        Находит layout для страницы.

        - front matter 'layout: name': ищется в каталоге страницы, затем от корня;
          отсутствие явно указанного layout считается ошибкой;
        - 'layout: false': без layout;
        - иначе ближайший файл layout_name от каталога страницы вверх до корня.

        Raises:
            TemplateNotFoundError: Если явно указанный layout не найден
        """
        if page.layout == NO_LAYOUT:
            return None

        if page.layout is not None:
            for candidate in self._relative_candidates(page.directory, page.layout):
                layout = self.find_page(candidate)
                if layout is not None:
                    return layout
            raise TemplateNotFoundError(page.layout, "layout")

        directory = page.directory
        while True:
            candidate = posixpath.join(directory, layout_name) if directory else layout_name
            layout = self.find_page(candidate)
            if layout is not None and layout.page_id != page.page_id:
                logger.debug("Resolved layout '%s' for page '%s'", layout.page_id, page.page_id)
                return layout
            if not directory:
                return None
            directory = posixpath.dirname(directory)

    @staticmethod
    def _relative_candidates(directory: str, name: str) -> List[str]:
        if name.startswith("/") or not directory:
            return [name]
        return [posixpath.join(directory, name), name]

    # ---------------------------- Встроенные шаблоны ----------------------------

    def parse_inline(self, text: str) -> TemplateAST:
        """
        Разбирает встроенный шаблон forEach с кэшированием
        по тексту. Ошибки разбора не кэшируются.
        """
        nodes = self._inline.get(text)
        if nodes is None:
            nodes = tuple(parse_template(text))
            with self._lock:
                nodes = self._inline.setdefault(text, nodes)
        return list(nodes)

    # ---------------------------- Обслуживание ----------------------------

    def invalidate(self, name: Optional[str] = None) -> None:
        """Сбрасывает кэш одной страницы или весь кэш."""
        with self._lock:
            if name is None:
                self._pages.clear()
                self._inline.clear()
            else:
                self._pages.pop(self.page_id_for(name), None)

    def list_pages(self) -> List[str]:
        """Идентификаторы страниц в источнике (файлы с расширением страниц)."""
        ext = self.page_extension
        out: List[str] = []
        for path in self.source.list_files():
            if ext and not path.endswith(ext):
                continue
            out.append(self.page_id_for(path))
        return sorted(out)

    def cached_page_ids(self) -> List[str]:
        with self._lock:
            return sorted(self._pages)


__all__ = ["ParsedTemplate", "TemplateRegistry"]
