"""
Парсер шаблонов и выражений с рекурсивным спуском.

Грамматика выражения:
expression := primary ("|" filter)*
filter     := IDENT ["(" [expression ("," expression)*] ")"]
primary    := literal | path | array | object | "(" expression ")"
path       := IDENT ("." IDENT | "[" expression "]")*
literal    := STRING | NUMBER | "true" | "false" | "null"
array      := "[" [expression ("," expression)* [","]] "]"
object     := "{" [entry ("," entry)* [","]] "}"
entry      := (IDENT | STRING) ":" expression | IDENT
"""

from __future__ import annotations

import logging
from typing import List, Tuple, Union

from .lexer import ExpressionLexer, TemplateLexer
from .nodes import (
    ArgExpression,
    ArrayLiteral,
    Expression,
    ExpressionNode,
    FilterCall,
    Literal,
    ObjectLiteral,
    PropertyPath,
    TemplateAST,
    TemplateNode,
    TextNode,
)
from .tokens import Token, TokenType
from ..errors import TemplateSyntaxError

logger = logging.getLogger(__name__)

_KEYWORD_LITERALS = {
    "true": True,
    "false": False,
    "null": None,
}


class ExpressionParser:
    """
    Парсер одного выражения.

    Только строит дерево: идентификаторы в аргументах фильтров
    разрешаются позже, при вычислении.
    """

    def __init__(self, tokens: List[Token]):
        self._tokens = tokens
        self._position = 0

    def parse(self) -> Expression:
        """
        Парсит полное выражение.

        Raises:
            TemplateSyntaxError: При синтаксической ошибке
        """
        if self._is_at_end():
            raise self._error("Empty expression", self._current())

        expr = self._parse_expression()

        if not self._is_at_end():
            current = self._current()
            raise self._error(f"Unexpected token '{current.value}'", current)

        return expr

    def _parse_expression(self) -> Expression:
        root = self._parse_primary()
        filters: List[FilterCall] = []

        while self._match(TokenType.PIPE):
            filters.append(self._parse_filter())

        return Expression(root=root, filters=tuple(filters))

    def _parse_filter(self) -> FilterCall:
        name_token = self._consume(TokenType.IDENTIFIER, "Expected filter name after '|'")
        args: List[ArgExpression] = []

        if self._match(TokenType.LPAREN):
            if not self._check(TokenType.RPAREN):
                args.append(self._parse_argument())
                while self._match(TokenType.COMMA):
                    args.append(self._parse_argument())
            self._consume(TokenType.RPAREN, f"Expected ')' after arguments of '{name_token.value}'")

        return FilterCall(
            name=name_token.value,
            args=tuple(args),
            line=name_token.line,
            column=name_token.column,
        )

    def _parse_argument(self) -> ArgExpression:
        return _simplify(self._parse_expression())

    def _parse_primary(self) -> ArgExpression:
        token = self._current()

        if token.type == TokenType.STRING:
            self._advance()
            return Literal(token.value)

        if token.type == TokenType.NUMBER:
            self._advance()
            return Literal(_parse_number(token.value))

        if token.type == TokenType.IDENTIFIER:
            if token.value in _KEYWORD_LITERALS:
                self._advance()
                return Literal(_KEYWORD_LITERALS[token.value])
            return self._parse_path()

        if self._match(TokenType.LBRACKET):
            return self._parse_array()

        if self._match(TokenType.LBRACE):
            return self._parse_object()

        if self._match(TokenType.LPAREN):
            inner = self._parse_expression()
            self._consume(TokenType.RPAREN, "Expected ')' after grouped expression")
            return _simplify(inner)

        if token.type == TokenType.EOF:
            raise self._error("Unexpected end of expression", token)
        raise self._error(f"Unexpected token '{token.value}'", token)

    def _parse_path(self) -> PropertyPath:
        name = self._advance().value
        segments: List[Union[str, ArgExpression]] = []

        while True:
            if self._match(TokenType.DOT):
                seg = self._current()
                if seg.type == TokenType.IDENTIFIER:
                    segments.append(self._advance().value)
                elif seg.type == TokenType.NUMBER and not seg.value.startswith("-"):
                    # items.0.1 лексер отдаёт как одно число "0.1"
                    self._advance()
                    segments.extend(seg.value.split("."))
                else:
                    raise self._error("Expected property name after '.'", seg)
            elif self._match(TokenType.LBRACKET):
                segments.append(self._parse_argument())
                self._consume(TokenType.RBRACKET, "Expected ']' after index expression")
            else:
                break

        return PropertyPath(name=name, segments=tuple(segments))

    def _parse_array(self) -> ArrayLiteral:
        items: List[ArgExpression] = []
        while not self._check(TokenType.RBRACKET):
            items.append(self._parse_argument())
            if not self._match(TokenType.COMMA):
                break
        self._consume(TokenType.RBRACKET, "Expected ']' to close array literal")
        return ArrayLiteral(items=tuple(items))

    def _parse_object(self) -> ObjectLiteral:
        entries: List[Tuple[str, ArgExpression]] = []
        while not self._check(TokenType.RBRACE):
            key_token = self._current()
            if key_token.type not in (TokenType.IDENTIFIER, TokenType.STRING):
                raise self._error("Expected property name in object literal", key_token)
            self._advance()

            if self._match(TokenType.COLON):
                value = self._parse_argument()
            elif key_token.type == TokenType.IDENTIFIER:
                # { title } == { title: title }
                value = PropertyPath(name=key_token.value)
            else:
                raise self._error("Expected ':' after property name", self._current())

            entries.append((key_token.value, value))
            if not self._match(TokenType.COMMA):
                break
        self._consume(TokenType.RBRACE, "Expected '}' to close object literal")
        return ObjectLiteral(entries=tuple(entries))

    # Вспомогательные методы для работы с токенами

    def _current(self) -> Token:
        return self._tokens[min(self._position, len(self._tokens) - 1)]

    def _is_at_end(self) -> bool:
        return self._current().type == TokenType.EOF

    def _advance(self) -> Token:
        token = self._current()
        if not self._is_at_end():
            self._position += 1
        return token

    def _check(self, token_type: TokenType) -> bool:
        return self._current().type == token_type

    def _match(self, token_type: TokenType) -> bool:
        if self._check(token_type):
            self._advance()
            return True
        return False

    def _consume(self, token_type: TokenType, message: str) -> Token:
        if self._check(token_type):
            return self._advance()
        raise self._error(message, self._current())

    @staticmethod
    def _error(message: str, token: Token) -> TemplateSyntaxError:
        return TemplateSyntaxError(
            message, line=token.line, column=token.column, position=token.position
        )


class TemplateParser:
    """
    Парсер шаблона верхнего уровня.

    Превращает поток TEXT/EXPRESSION токенов в AST, разбирая
    содержимое каждого выражения через ExpressionParser.
    """

    def __init__(self, tokens: List[Token]):
        self.tokens = tokens

    def parse(self) -> TemplateAST:
        ast: TemplateAST = []

        for token in self.tokens:
            if token.type == TokenType.TEXT:
                self._append_text(ast, token.value)
            elif token.type == TokenType.EXPRESSION:
                ast.append(self._parse_expression_token(token))
            elif token.type == TokenType.EOF:
                break
            else:
                raise TemplateSyntaxError(
                    f"Unexpected token {token.type.name}",
                    line=token.line, column=token.column, position=token.position,
                )

        logger.debug("Parsed template AST with %d nodes", len(ast))
        return ast

    @staticmethod
    def _append_text(ast: TemplateAST, text: str) -> None:
        # Объединяем с предыдущим TextNode если возможно
        if ast and isinstance(ast[-1], TextNode):
            ast[-1] = TextNode(text=ast[-1].text + text)
        else:
            ast.append(TextNode(text=text))

    @staticmethod
    def _parse_expression_token(token: Token) -> TemplateNode:
        lexer = ExpressionLexer(token.value, token.position, token.line, token.column)
        expression = ExpressionParser(lexer.tokenize()).parse()
        return ExpressionNode(
            expression=expression,
            source=token.value.strip(),
            line=token.line,
            column=token.column,
        )


def _simplify(expr: Expression) -> ArgExpression:
    """Выражение без фильтров заменяется своим корнем."""
    if not expr.filters:
        return expr.root
    return expr


def _parse_number(raw: str) -> Union[int, float]:
    if "." in raw:
        return float(raw)
    return int(raw)


def parse_expression(text: str) -> Expression:
    """
    Парсит текст одного выражения (без разделителей {{ }}).

    Raises:
        TemplateSyntaxError: При синтаксической ошибке
    """
    return ExpressionParser(ExpressionLexer(text).tokenize()).parse()


def parse_template(text: str) -> TemplateAST:
    """
    Парсит текст шаблона в AST.

    Raises:
        TemplateSyntaxError: При синтаксической ошибке
    """
    return TemplateParser(TemplateLexer(text).tokenize()).parse()


__all__ = [
    "ExpressionParser",
    "TemplateParser",
    "parse_expression",
    "parse_template",
]
