"""
Встроенные фильтры.

partial и forEach: контекстные: они повторно входят в композитор
с новой дочерней областью видимости.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any, Optional

from .registry import FilterContext, FilterRegistry
from ..values import to_text


def otherwise(value: Any, default: Any) -> Any:
    """default, если значение отсутствует (None); иначе значение без изменений."""
    return default if value is None else value


def upper(value: Any) -> Any:
    return _string_op(value, str.upper)


def lower(value: Any) -> Any:
    return _string_op(value, str.lower)


def _string_op(value: Any, op) -> Any:
    if value is None:
        return None
    if not isinstance(value, str):
        raise TypeError(f"expected a string, got {type(value).__name__}")
    return op(value)


def join(value: Any, separator: Any = ",") -> Any:
    """Соединяет строковые представления элементов последовательности."""
    if value is None:
        return None
    if isinstance(value, (str, bytes)) or not isinstance(value, Iterable):
        raise TypeError(f"expected a collection, got {type(value).__name__}")
    if isinstance(value, Mapping):
        value = value.values()
    return to_text(separator).join(to_text(item) for item in value)


def raw(value: Any) -> Any:
    return value


def partial(ctx: FilterContext, value: Any, args: Any = None) -> str:
    """
    {{ 'name' | partial({ k: v }) }}: рендерит другой шаблон.

    Аргументы уже вычислены в области вызывающего шаблона.
    """
    if not isinstance(value, str) or not value:
        raise TypeError(f"expected a page name, got {to_text(value)!r}")
    if args is None:
        args = {}
    if not isinstance(args, Mapping):
        raise TypeError(f"arguments must be an object, got {type(args).__name__}")
    return ctx.composer.render_partial(value, args, ctx.scope)


def for_each(ctx: FilterContext, value: Any, collection: Any, binding: Optional[Any] = None) -> str:
    """
    {{ 'tpl' | forEach(items, 'name') }}: повторяет встроенный шаблон
    для каждого элемента коллекции.
    """
    if not isinstance(value, str):
        raise TypeError(f"expected an inline template string, got {type(value).__name__}")
    if binding is not None and (not isinstance(binding, str) or not binding.isidentifier()):
        raise ValueError(f"invalid binding name {to_text(binding)!r}")
    return ctx.composer.render_each(value, collection, binding, ctx.scope)


def register_builtin_filters(registry: FilterRegistry) -> FilterRegistry:
    registry.register("otherwise", otherwise)
    registry.register("upper", upper)
    registry.register("lower", lower)
    registry.register("join", join)
    registry.register("raw", raw)
    registry.register("partial", partial, contextual=True)
    registry.register("forEach", for_each, contextual=True)
    return registry


def create_builtin_filters() -> FilterRegistry:
    """Новый реестр со всеми встроенными фильтрами (кроме markdown)."""
    return register_builtin_filters(FilterRegistry())


__all__ = [
    "otherwise",
    "upper",
    "lower",
    "join",
    "raw",
    "partial",
    "for_each",
    "register_builtin_filters",
    "create_builtin_filters",
]
