"""
Лексический анализатор шаблонов.

Работает в два уровня:
- TemplateLexer разбивает исходный текст на TEXT-сегменты и содержимое
  выражений между {{ и }};
- ExpressionLexer токенизирует содержимое одного выражения.

Закрывающий }} ищется с учётом строковых литералов и вложенных фигурных
скобок, поэтому '<li> {{it}} </li>' внутри выражения остаётся одной строкой.
"""

from __future__ import annotations

import logging
import re
from typing import List

from .tokens import Token, TokenType
from ..errors import TemplateSyntaxError

logger = logging.getLogger(__name__)

OPEN_DELIMITER = "{{"
CLOSE_DELIMITER = "}}"

_QUOTES = "'\""

_ESCAPES = {
    "n": "\n",
    "t": "\t",
    "r": "\r",
    "\\": "\\",
    "'": "'",
    '"': '"',
}


class _PositionTracker:
    """Отслеживает позицию, строку и колонку при продвижении по тексту."""

    def __init__(self, text: str, position: int = 0, line: int = 1, column: int = 1):
        self.text = text
        self.length = len(text)
        self.index = 0
        self.position = position
        self.line = line
        self.column = column

    def advance(self, count: int = 1) -> None:
        """
        Перемещает позицию на указанное количество символов,
        обновляя номера строк и колонок.
        """
        for _ in range(count):
            if self.index >= self.length:
                break
            if self.text[self.index] == "\n":
                self.line += 1
                self.column = 1
            else:
                self.column += 1
            self.index += 1
            self.position += 1

    def error(self, message: str) -> TemplateSyntaxError:
        return TemplateSyntaxError(
            message, line=self.line, column=self.column, position=self.position
        )


class TemplateLexer:
    """
    Лексический анализатор шаблона верхнего уровня.

    Возвращает последовательность TEXT и EXPRESSION токенов, завершаемую EOF.
    Текст вне {{ }} сохраняется дословно, включая переводы строк.
    """

    def __init__(self, text: str):
        self.text = text
        self._cursor = _PositionTracker(text)

    def tokenize(self) -> List[Token]:
        """
        Токенизирует весь исходный текст.

        Raises:
            TemplateSyntaxError: При незакрытом {{ или незакрытой строке внутри выражения
        """
        tokens: List[Token] = []
        cur = self._cursor

        while cur.index < cur.length:
            start = self.text.find(OPEN_DELIMITER, cur.index)
            if start < 0:
                start = cur.length

            if start > cur.index:
                tokens.append(self._take_text(start - cur.index))
                continue

            tokens.append(self._take_expression())

        tokens.append(Token(TokenType.EOF, "", cur.position, cur.line, cur.column))
        logger.debug("Tokenized template into %d tokens", len(tokens))
        return tokens

    def _take_text(self, count: int) -> Token:
        cur = self._cursor
        token = Token(
            TokenType.TEXT,
            self.text[cur.index:cur.index + count],
            cur.position,
            cur.line,
            cur.column,
        )
        cur.advance(count)
        return token

    def _take_expression(self) -> Token:
        """Считывает {{ ... }} и возвращает токен с внутренним содержимым."""
        cur = self._cursor
        open_line, open_column, open_position = cur.line, cur.column, cur.position
        cur.advance(len(OPEN_DELIMITER))

        content_start = cur.index
        start_position, start_line, start_column = cur.position, cur.line, cur.column

        depth = 0
        quote = ""
        while cur.index < cur.length:
            char = self.text[cur.index]

            if quote:
                if char == "\\":
                    cur.advance(2)
                    continue
                if char == quote:
                    quote = ""
                cur.advance()
                continue

            if char in _QUOTES:
                quote = char
            elif char == "{":
                depth += 1
            elif char == "}":
                if depth > 0:
                    depth -= 1
                elif self.text.startswith(CLOSE_DELIMITER, cur.index):
                    content = self.text[content_start:cur.index]
                    cur.advance(len(CLOSE_DELIMITER))
                    return Token(
                        TokenType.EXPRESSION, content, start_position, start_line, start_column
                    )
            cur.advance()

        if quote:
            message = "Unterminated string literal in expression opened"
        else:
            message = f"Unclosed '{OPEN_DELIMITER}'"
        raise TemplateSyntaxError(
            message, line=open_line, column=open_column, position=open_position
        )


class ExpressionLexer:
    """
    Лексер содержимого одного выражения.

    Позиции токенов считаются относительно всего шаблона: базовая позиция
    передаётся из токена EXPRESSION.
    """

    _IDENTIFIER = re.compile(r"[A-Za-z_$][A-Za-z0-9_$]*")
    _NUMBER = re.compile(r"-?(?:\d+\.\d+|\d+|\.\d+)(?![A-Za-z_$])")

    _PUNCTUATION = {
        "|": TokenType.PIPE,
        ".": TokenType.DOT,
        ",": TokenType.COMMA,
        ":": TokenType.COLON,
        "(": TokenType.LPAREN,
        ")": TokenType.RPAREN,
        "[": TokenType.LBRACKET,
        "]": TokenType.RBRACKET,
        "{": TokenType.LBRACE,
        "}": TokenType.RBRACE,
    }

    def __init__(self, text: str, position: int = 0, line: int = 1, column: int = 1):
        self.text = text
        self._cursor = _PositionTracker(text, position, line, column)

    def tokenize(self) -> List[Token]:
        tokens: List[Token] = []
        cur = self._cursor

        while cur.index < cur.length:
            char = self.text[cur.index]

            if char.isspace():
                cur.advance()
                continue

            if char in _QUOTES:
                tokens.append(self._take_string(char))
                continue

            number = self._NUMBER.match(self.text, cur.index)
            if number and (char != "." or not self._follows_value(tokens)):
                tokens.append(self._take(TokenType.NUMBER, number.group(0)))
                continue

            ident = self._IDENTIFIER.match(self.text, cur.index)
            if ident:
                tokens.append(self._take(TokenType.IDENTIFIER, ident.group(0)))
                continue

            token_type = self._PUNCTUATION.get(char)
            if token_type is not None:
                tokens.append(self._take(token_type, char))
                continue

            raise cur.error(f"Unexpected character in expression: {char!r}")

        tokens.append(Token(TokenType.EOF, "", cur.position, cur.line, cur.column))
        return tokens

    @staticmethod
    def _follows_value(tokens: List[Token]) -> bool:
        # '.5' после идентификатора или ']': это обращение к свойству, а не число
        return bool(tokens) and tokens[-1].type in (
            TokenType.IDENTIFIER, TokenType.RBRACKET, TokenType.RPAREN
        )

    def _take(self, token_type: TokenType, value: str) -> Token:
        cur = self._cursor
        token = Token(token_type, value, cur.position, cur.line, cur.column)
        cur.advance(len(value))
        return token

    def _take_string(self, quote: str) -> Token:
        """Считывает строковый литерал, раскрывая escape-последовательности."""
        cur = self._cursor
        start_position, start_line, start_column = cur.position, cur.line, cur.column
        cur.advance()

        chars: List[str] = []
        while cur.index < cur.length:
            char = self.text[cur.index]
            if char == "\\" and cur.index + 1 < cur.length:
                escaped = self.text[cur.index + 1]
                chars.append(_ESCAPES.get(escaped, "\\" + escaped))
                cur.advance(2)
                continue
            if char == quote:
                cur.advance()
                return Token(TokenType.STRING, "".join(chars), start_position, start_line, start_column)
            chars.append(char)
            cur.advance()

        raise TemplateSyntaxError(
            "Unterminated string literal",
            line=start_line, column=start_column, position=start_position,
        )


def tokenize_template(text: str) -> List[Token]:
    """
    Удобная функция для токенизации шаблона.

    Raises:
        TemplateSyntaxError: При ошибке лексического анализа
    """
    return TemplateLexer(text).tokenize()


__all__ = [
    "TemplateLexer",
    "ExpressionLexer",
    "tokenize_template",
    "OPEN_DELIMITER",
    "CLOSE_DELIMITER",
]
