"""
Композитор страниц: layout, partial и forEach.

Обходит AST шаблона, вычисляя каждое выражение в текущей цепочке областей,
и склеивает результат. Фильтры partial и forEach повторно входят в
композитор с новой дочерней областью.

Литеральный текст выводится дословно: композиция никогда не обрезает
и не переформатирует пробелы вокруг выражений.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from typing import Any, List, Optional, Sequence

from .config import TemplateSettings
from .errors import RenderDepthError
from .evaluator import ExpressionEvaluator
from .filters.registry import FilterRegistry
from .registry import ParsedTemplate, TemplateRegistry
from .scope import ScopeChain
from .template.nodes import ExpressionNode, TemplateNode, TextNode
from .template.parser import parse_template
from .values import to_text

logger = logging.getLogger(__name__)

# Зарезервированное имя, под которым layout видит отрендеренное тело страницы
PAGE_PLACEHOLDER = "page"


class PageComposer:
    """
    Рекурсивное ядро рендеринга.

    Экземпляр разделяется между рендерами и не хранит их состояние:
    всё изменяемое (цепочка областей, буферы) создаётся на каждый рендер.
    """

    def __init__(
        self,
        registry: TemplateRegistry,
        filters: FilterRegistry,
        settings: Optional[TemplateSettings] = None,
    ):
        self.registry = registry
        self.filters = filters
        self.settings = settings or TemplateSettings()
        self.evaluator = ExpressionEvaluator(filters, self)

    # ---------------------------- Точки входа ----------------------------

    def render_page(self, page: ParsedTemplate, args: Optional[Mapping[str, Any]] = None) -> str:
        """
        Рендерит страницу, обёрнутую в её layout (если он есть).

        Тело страницы рендерится первым; затем layout рендерится с
        дополнительным кадром, где 'page' содержит готовое тело.
        """
        layout = self.registry.find_layout(page, self.settings.layout_name)

        scope = ScopeChain(self.settings.args, label="context")
        if layout is not None:
            scope.extend(layout.args, label=f"layout:{layout.page_id}")
        scope.extend(page.args, label=f"page:{page.page_id}")
        scope.extend(args or {}, label="args")

        logger.debug(
            "Rendering page '%s' (layout: %s)",
            page.page_id, layout.page_id if layout else "none",
        )

        body = self.render_nodes(page.nodes, scope)
        if layout is None:
            return body

        scope.extend({PAGE_PLACEHOLDER: body}, label="layout-body")
        return self.render_nodes(layout.nodes, scope)

    def render_inline(self, text: str, args: Optional[Mapping[str, Any]] = None) -> str:
        """Рендерит текст шаблона напрямую, без реестра и layout."""
        nodes = parse_template(text)
        scope = ScopeChain(self.settings.args, label="context")
        scope.extend(args or {}, label="args")
        return self.render_nodes(nodes, scope)

    def render_nodes(self, nodes: Sequence[TemplateNode], scope: ScopeChain) -> str:
        parts: List[str] = []
        for node in nodes:
            if isinstance(node, TextNode):
                parts.append(node.text)
            elif isinstance(node, ExpressionNode):
                value = self.evaluator.evaluate(node.expression, scope)
                parts.append(to_text(value))
            else:
                raise TypeError(f"Unknown template node: {type(node).__name__}")
        return "".join(parts)

    # ---------------------------- Композиция ----------------------------

    def render_partial(self, name: str, args: Mapping[str, Any], scope: ScopeChain) -> str:
        """
        Рендерит partial в дочерней области вызывающего шаблона.

        args уже вычислены в области вызывающего; имена, которых нет в args,
        разрешаются через родительские кадры.

        Raises:
            TemplateNotFoundError: Если partial не найден
            RenderDepthError: При превышении вложенности
        """
        self._check_depth(scope, name)
        partial = self.registry.get_page(name, kind="partial")

        bindings = dict(partial.args)
        bindings.update(args)

        with scope.child(bindings, label=f"partial:{partial.page_id}"):
            return self.render_nodes(partial.nodes, scope)

    def render_each(
        self,
        text: str,
        collection: Any,
        binding: Optional[str],
        scope: ScopeChain,
    ) -> str:
        """
        Повторяет встроенный шаблон для каждого элемента коллекции.

        Результаты склеиваются в порядке коллекции без разделителя.
        """
        if collection is None:
            return ""
        if isinstance(collection, (str, bytes)) or not isinstance(collection, Iterable):
            raise TypeError(f"forEach expects a collection, got {type(collection).__name__}")
        if isinstance(collection, Mapping):
            collection = collection.values()

        name = binding or self.settings.default_binding
        self._check_depth(scope, f"forEach:{name}")
        nodes = self.registry.parse_inline(text)

        parts: List[str] = []
        for item in collection:
            with scope.child({name: item}, label=f"forEach:{name}"):
                parts.append(self.render_nodes(nodes, scope))
        return "".join(parts)

    def _check_depth(self, scope: ScopeChain, target: str) -> None:
        if scope.nesting >= self.settings.max_depth:
            raise RenderDepthError(self.settings.max_depth, target)


__all__ = ["PageComposer", "PAGE_PLACEHOLDER"]
