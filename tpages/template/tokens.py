"""
Лексические типы шаблонизатора.

Определяет типы токенов обоих уровней разбора: сегменты шаблона
(текст и выражения {{ ... }}) и токены внутри выражения.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass


class TokenType(enum.Enum):
    """Типы токенов шаблона и выражений."""

    # Сегменты шаблона
    TEXT = "TEXT"
    EXPRESSION = "EXPRESSION"                # содержимое между {{ и }}

    # Токены выражения
    IDENTIFIER = "IDENTIFIER"
    STRING = "STRING"
    NUMBER = "NUMBER"
    PIPE = "PIPE"                            # |
    DOT = "DOT"                              # .
    COMMA = "COMMA"                          # ,
    COLON = "COLON"                          # :
    LPAREN = "LPAREN"                        # (
    RPAREN = "RPAREN"                        # )
    LBRACKET = "LBRACKET"                    # [
    RBRACKET = "RBRACKET"                    # ]
    LBRACE = "LBRACE"                        # {
    RBRACE = "RBRACE"                        # }

    EOF = "EOF"


@dataclass(frozen=True)
class Token:
    """
    Токен с позиционной информацией для точной диагностики ошибок.
    """
    type: TokenType
    value: str
    position: int        # Позиция в исходном тексте шаблона
    line: int            # Номер строки (начиная с 1)
    column: int          # Номер колонки (начиная с 1)

    def __repr__(self) -> str:
        return f"Token({self.type.name}, {self.value!r}, {self.line}:{self.column})"


__all__ = ["TokenType", "Token"]
