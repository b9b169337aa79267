"""
Реестр фильтров конвейера {{ value | name(args) }}.

Фильтр: функция вида f(value, *args) -> value. Контекстные фильтры
(partial, forEach) дополнительно получают первым параметром FilterContext
с доступом к композитору и текущей области видимости.

Реестр наполняется при инициализации и замораживается перед рендером.
"""

from __future__ import annotations

import inspect
import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Callable, Dict, List, Optional, Sequence, Tuple

from ..errors import (
    FilterArityError,
    FilterExecutionError,
    TemplatePagesError,
    UnknownFilterError,
)

if TYPE_CHECKING:
    from ..composer import PageComposer
    from ..scope import ScopeChain

logger = logging.getLogger(__name__)

FilterFunc = Callable[..., Any]


@dataclass(frozen=True)
class FilterContext:
    """Доступ контекстного фильтра к ядру: композитор и текущая цепочка областей."""
    composer: "PageComposer"
    scope: "ScopeChain"


@dataclass(frozen=True)
class FilterSpec:
    """Зарегистрированный фильтр с допустимым числом явных аргументов."""
    name: str
    func: FilterFunc
    min_args: int
    max_args: Optional[int]
    contextual: bool = False

    def accepts(self, count: int) -> bool:
        if count < self.min_args:
            return False
        return self.max_args is None or count <= self.max_args


def _signature_arity(func: FilterFunc, skip: int) -> Tuple[int, Optional[int]]:
    """
    Вычисляет (min, max) явных аргументов по сигнатуре функции.

    Первые skip позиционных параметров (value и, для контекстных, ctx)
    передаются ядром и не считаются.
    """
    params = [
        p for p in inspect.signature(func).parameters.values()
        if p.kind in (p.POSITIONAL_ONLY, p.POSITIONAL_OR_KEYWORD, p.VAR_POSITIONAL)
    ]
    if any(p.kind == p.VAR_POSITIONAL for p in params[:skip]):
        return 0, None

    explicit = params[skip:]
    if any(p.kind == p.VAR_POSITIONAL for p in explicit):
        required = [p for p in explicit if p.kind != p.VAR_POSITIONAL and p.default is p.empty]
        return len(required), None

    required = [p for p in explicit if p.default is p.empty]
    return len(required), len(explicit)


class FilterRegistry:
    """
    Отображение имени фильтра в FilterSpec.

    Неизвестное имя вызывает UnknownFilterError, а не молчаливый no-op.
    """

    def __init__(self):
        self._filters: Dict[str, FilterSpec] = {}
        self._frozen = False

    def register(
        self,
        name: str,
        func: FilterFunc,
        *,
        contextual: bool = False,
        min_args: Optional[int] = None,
        max_args: Optional[int] = None,
    ) -> FilterSpec:
        """
        Регистрирует фильтр.

        Args:
            name: Имя фильтра в шаблоне
            func: f(value, *args) или f(ctx, value, *args) для контекстных
            contextual: Передавать ли FilterContext первым параметром
            min_args: Минимум явных аргументов (по умолчанию из сигнатуры)
            max_args: Максимум явных аргументов (по умолчанию из сигнатуры)

        Raises:
            RuntimeError: Если реестр уже заморожен
        """
        if self._frozen:
            raise RuntimeError(f"Filter registry is frozen; cannot register '{name}'")

        if min_args is None or max_args is None:
            sig_min, sig_max = _signature_arity(func, 2 if contextual else 1)
            if min_args is None:
                min_args = sig_min
            if max_args is None:
                max_args = sig_max

        if name in self._filters:
            logger.warning("Filter '%s' overwrites existing filter", name)

        spec = FilterSpec(
            name=name,
            func=func,
            min_args=min_args,
            max_args=max_args,
            contextual=contextual,
        )
        self._filters[name] = spec
        logger.debug("Registered filter '%s' (args %s..%s)", name, min_args, max_args)
        return spec

    def filter(self, name: Optional[str] = None, **options: Any) -> Callable[[FilterFunc], FilterFunc]:
        """Декоратор для register(); имя по умолчанию: имя функции."""
        def decorator(func: FilterFunc) -> FilterFunc:
            self.register(name or func.__name__, func, **options)
            return func
        return decorator

    def get(self, name: str) -> FilterSpec:
        spec = self._filters.get(name)
        if spec is None:
            raise UnknownFilterError(name)
        return spec

    def invoke(self, name: str, ctx: FilterContext, value: Any, args: Sequence[Any]) -> Any:
        """
        Вызывает фильтр с проверкой числа аргументов.

        Ошибки шаблонизатора (например, из вложенного partial) пробрасываются
        как есть, прочие исключения оборачиваются в FilterExecutionError.
        """
        spec = self.get(name)
        if not spec.accepts(len(args)):
            raise FilterArityError(name, len(args), spec.min_args, spec.max_args)

        try:
            if spec.contextual:
                return spec.func(ctx, value, *args)
            return spec.func(value, *args)
        except TemplatePagesError:
            raise
        except Exception as e:
            raise FilterExecutionError(str(e) or type(e).__name__, name) from e

    def freeze(self) -> None:
        """Запрещает дальнейшую регистрацию (реестр только для чтения)."""
        self._frozen = True

    @property
    def frozen(self) -> bool:
        return self._frozen

    def copy(self) -> FilterRegistry:
        """Незамороженная копия реестра для расширения."""
        clone = FilterRegistry()
        clone._filters = dict(self._filters)
        return clone

    def names(self) -> List[str]:
        return sorted(self._filters)

    def __contains__(self, name: object) -> bool:
        return name in self._filters

    def __len__(self) -> int:
        return len(self._filters)


__all__ = ["FilterContext", "FilterSpec", "FilterRegistry", "FilterFunc"]
