"""
AST-узлы шаблона и выражений.

Определяет неизменяемые классы узлов: верхний уровень шаблона
(текст и выражения) и дерево аргументов выражения.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, List, Tuple, Union


# ---------------------------- Выражения ----------------------------

@dataclass(frozen=True)
class Literal:
    """Строка, число, true/false или null."""
    value: Any


@dataclass(frozen=True)
class PropertyPath:
    """
    Идентификатор с цепочкой обращений к свойствам: a.b.c, a[0], a[key].

    Сегменты: строки (имя свойства) либо вложенные выражения индекса.
    """
    name: str
    segments: Tuple[Union[str, "ArgExpression"], ...] = ()

    def dotted(self) -> str:
        parts = [self.name]
        for seg in self.segments:
            parts.append(seg if isinstance(seg, str) else "[...]")
        return ".".join(parts)


@dataclass(frozen=True)
class ArrayLiteral:
    items: Tuple["ArgExpression", ...] = ()


@dataclass(frozen=True)
class ObjectLiteral:
    """Объектный литерал { k: v, ... }; порядок ключей сохраняется."""
    entries: Tuple[Tuple[str, "ArgExpression"], ...] = ()


@dataclass(frozen=True)
class FilterCall:
    """Одна ступень конвейера: имя фильтра и выражения его аргументов."""
    name: str
    args: Tuple["ArgExpression", ...] = ()
    line: int = 0
    column: int = 0


@dataclass(frozen=True)
class Expression:
    """
    Корневое значение и упорядоченная цепочка фильтров.

    Фильтры применяются слева направо; результат каждой ступени
    становится неявным первым аргументом следующей.
    """
    root: "ArgExpression"
    filters: Tuple[FilterCall, ...] = field(default_factory=tuple)


ArgExpression = Union[Literal, PropertyPath, ArrayLiteral, ObjectLiteral, Expression]


# ---------------------------- Шаблон ----------------------------

@dataclass(frozen=True)
class TemplateNode:
    """Базовый класс для всех узлов AST шаблона."""
    pass


@dataclass(frozen=True)
class TextNode(TemplateNode):
    """
    Обычный текстовый контент в шаблоне.

    Выводится в результат как есть, без обрезки пробелов.
    """
    text: str


@dataclass(frozen=True)
class ExpressionNode(TemplateNode):
    """Выражение {{ ... }} с исходным текстом и позицией для диагностики."""
    expression: Expression
    source: str
    line: int = 0
    column: int = 0


# Алиас для списка узлов (AST)
TemplateAST = List[TemplateNode]


def collect_filter_names(ast: TemplateAST) -> List[str]:
    """Возвращает имена фильтров, используемых в шаблоне, в порядке появления."""
    names: List[str] = []

    def visit(expr: ArgExpression) -> None:
        if isinstance(expr, Expression):
            visit(expr.root)
            for call in expr.filters:
                if call.name not in names:
                    names.append(call.name)
                for arg in call.args:
                    visit(arg)
        elif isinstance(expr, ArrayLiteral):
            for item in expr.items:
                visit(item)
        elif isinstance(expr, ObjectLiteral):
            for _, value in expr.entries:
                visit(value)
        elif isinstance(expr, PropertyPath):
            for seg in expr.segments:
                if not isinstance(seg, str):
                    visit(seg)

    for node in ast:
        if isinstance(node, ExpressionNode):
            visit(node.expression)
    return names


def collect_inline_templates(ast: TemplateAST, filter_name: str = "forEach") -> List[str]:
    """
    Возвращает тексты встроенных шаблонов, известные без рендера:
    строковые литералы, которые сразу передаются в filter_name
    ({{ '<li>{{ it }}</li>' | forEach(items) }}).
    """
    texts: List[str] = []

    def visit(expr: ArgExpression) -> None:
        if isinstance(expr, Expression):
            root = expr.root
            if (
                expr.filters
                and expr.filters[0].name == filter_name
                and isinstance(root, Literal)
                and isinstance(root.value, str)
                and root.value not in texts
            ):
                texts.append(root.value)
            visit(root)
            for call in expr.filters:
                for arg in call.args:
                    visit(arg)
        elif isinstance(expr, ArrayLiteral):
            for item in expr.items:
                visit(item)
        elif isinstance(expr, ObjectLiteral):
            for _, value in expr.entries:
                visit(value)
        elif isinstance(expr, PropertyPath):
            for seg in expr.segments:
                if not isinstance(seg, str):
                    visit(seg)

    for node in ast:
        if isinstance(node, ExpressionNode):
            visit(node.expression)
    return texts


__all__ = [
    "Literal",
    "PropertyPath",
    "ArrayLiteral",
    "ObjectLiteral",
    "FilterCall",
    "Expression",
    "ArgExpression",
    "TemplateNode",
    "TextNode",
    "ExpressionNode",
    "TemplateAST",
    "collect_filter_names",
    "collect_inline_templates",
]
