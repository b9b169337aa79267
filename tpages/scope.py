"""
Цепочка областей видимости для разрешения идентификаторов.

Все кадры одного рендера хранятся в общем списке (арене); ссылка на
родителя: индекс в этом списке, а не объект. Кадры partial/forEach
создаются на время вызова и удаляются при выходе из него.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any, Iterator, List, Mapping, Optional

logger = logging.getLogger(__name__)


class _Missing:
    """Маркер неразрешённого имени (отличается от явного None)."""

    _instance: Optional["_Missing"] = None

    def __new__(cls) -> "_Missing":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "MISSING"

    def __bool__(self) -> bool:
        return False


MISSING = _Missing()


@dataclass(frozen=True)
class ScopeFrame:
    """Один уровень цепочки: привязки и индекс родительского кадра."""
    bindings: Mapping[str, Any]
    parent: Optional[int]
    label: str = ""


class ScopeChain:
    """
    Арена кадров одного рендера с указателем на текущий кадр.

    Поиск идёт от текущего кадра к родителям до корня (аргументы контекста).
    Экземпляр принадлежит одному рендеру и не разделяется между потоками.
    """

    def __init__(self, root: Optional[Mapping[str, Any]] = None, label: str = "context"):
        self._frames: List[ScopeFrame] = []
        self.current: Optional[int] = None
        # Число активных временных кадров (вложенность partial/forEach)
        self.nesting = 0
        if root is not None:
            self.current = self.push(root, label=label)

    def push(self, bindings: Mapping[str, Any], *, label: str = "") -> int:
        """
        Добавляет кадр поверх текущего и возвращает его индекс.

        Текущий кадр не меняется; для временных кадров используйте child().
        """
        frame = ScopeFrame(bindings=dict(bindings), parent=self.current, label=label)
        self._frames.append(frame)
        return len(self._frames) - 1

    def extend(self, bindings: Mapping[str, Any], *, label: str = "") -> int:
        """Добавляет постоянный кадр и делает его текущим."""
        self.current = self.push(bindings, label=label)
        return self.current

    @contextmanager
    def child(self, bindings: Mapping[str, Any], *, label: str = "") -> Iterator[int]:
        """
        Временный дочерний кадр текущего кадра.

        На время блока кадр становится текущим; при выходе (в т.ч. по
        исключению) восстанавливается прежний текущий кадр и кадр удаляется.
        """
        saved = self.current
        index = self.push(bindings, label=label)
        self.current = index
        self.nesting += 1
        logger.debug("Entered scope '%s' (nesting %d)", label, self.nesting)
        try:
            yield index
        finally:
            self.nesting -= 1
            self.current = saved
            # Кадры строго вложены, поэтому дочерний всегда последний
            if index == len(self._frames) - 1:
                self._frames.pop()

    def resolve(self, name: str) -> Any:
        """
        Ищет имя от текущего кадра к корню.

        Returns:
            Значение или MISSING, если имя не найдено ни в одном кадре
        """
        index = self.current
        while index is not None:
            frame = self._frames[index]
            if name in frame.bindings:
                return frame.bindings[name]
            index = frame.parent
        return MISSING

    def lookup(self, name: str, default: Any = None) -> Any:
        """Как resolve(), но с обычным значением по умолчанию."""
        value = self.resolve(name)
        return default if value is MISSING else value

    @property
    def depth(self) -> int:
        """Длина цепочки от текущего кадра до корня."""
        depth = 0
        index = self.current
        while index is not None:
            depth += 1
            index = self._frames[index].parent
        return depth


__all__ = ["MISSING", "ScopeFrame", "ScopeChain"]
