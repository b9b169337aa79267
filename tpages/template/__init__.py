"""
Разбор шаблонов: лексер {{ }}-сегментов, парсер выражений и AST-узлы.
"""

from __future__ import annotations

from .lexer import TemplateLexer, ExpressionLexer, tokenize_template
from .nodes import (
    collect_filter_names,
    collect_inline_templates,
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
from .parser import TemplateParser, ExpressionParser, parse_expression, parse_template

__all__ = [
    "TemplateLexer",
    "ExpressionLexer",
    "tokenize_template",
    "TemplateParser",
    "ExpressionParser",
    "parse_expression",
    "parse_template",
    "ArrayLiteral",
    "Expression",
    "ExpressionNode",
    "FilterCall",
    "Literal",
    "ObjectLiteral",
    "PropertyPath",
    "TemplateAST",
    "TemplateNode",
    "TextNode",
    "collect_filter_names",
    "collect_inline_templates",
]
