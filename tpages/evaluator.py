"""
Вычислитель выражений с конвейером фильтров.

Корень выражения разрешается через цепочку областей, затем каждая
ступень конвейера вызывается с (предыдущее значение, *аргументы).
Аргументы всех ступеней вычисляются в одной и той же внешней области.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Dict, List

from .filters.registry import FilterContext, FilterRegistry
from .scope import MISSING, ScopeChain
from .template.nodes import (
    ArgExpression,
    ArrayLiteral,
    Expression,
    Literal,
    ObjectLiteral,
    PropertyPath,
)
from .values import get_property

if TYPE_CHECKING:
    from .composer import PageComposer

logger = logging.getLogger(__name__)


class ExpressionEvaluator:
    """
    Вычисляет AST выражения в контексте цепочки областей видимости.

    Неразрешённый идентификатор не считается ошибкой: он даёт None, что позволяет
    подставить значение по умолчанию через otherwise().
    """

    def __init__(self, filters: FilterRegistry, composer: "PageComposer"):
        self.filters = filters
        self.composer = composer

    def evaluate(self, expr: ArgExpression, scope: ScopeChain) -> Any:
        """
        Вычисляет выражение.

        Raises:
            UnknownFilterError, FilterArityError, FilterExecutionError
        """
        if isinstance(expr, Expression):
            return self._evaluate_pipeline(expr, scope)
        if isinstance(expr, Literal):
            return expr.value
        if isinstance(expr, PropertyPath):
            return self._evaluate_path(expr, scope)
        if isinstance(expr, ArrayLiteral):
            return [self.evaluate(item, scope) for item in expr.items]
        if isinstance(expr, ObjectLiteral):
            return self._evaluate_object(expr, scope)
        raise TypeError(f"Unknown expression node: {type(expr).__name__}")

    def _evaluate_pipeline(self, expr: Expression, scope: ScopeChain) -> Any:
        value = self.evaluate(expr.root, scope)
        if not expr.filters:
            return value

        ctx = FilterContext(composer=self.composer, scope=scope)
        for call in expr.filters:
            args: List[Any] = [self.evaluate(arg, scope) for arg in call.args]
            value = self.filters.invoke(call.name, ctx, value, args)
        return value

    def _evaluate_path(self, path: PropertyPath, scope: ScopeChain) -> Any:
        value = scope.resolve(path.name)
        if value is MISSING:
            logger.debug("Unresolved variable '%s' in '%s'", path.name, path.dotted())
            return None

        for segment in path.segments:
            if value is None:
                return None
            key = segment if isinstance(segment, str) else self.evaluate(segment, scope)
            value = get_property(value, key)
        return value

    def _evaluate_object(self, obj: ObjectLiteral, scope: ScopeChain) -> Dict[str, Any]:
        result: Dict[str, Any] = {}
        for key, value_expr in obj.entries:
            result[key] = self.evaluate(value_expr, scope)
        return result


__all__ = ["ExpressionEvaluator"]
