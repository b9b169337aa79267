"""
Тесты лексера шаблонов: сегменты {{ }} и токены выражений.
"""

import pytest

from tpages.errors import TemplateSyntaxError
from tpages.template.lexer import ExpressionLexer, TemplateLexer, tokenize_template
from tpages.template.tokens import TokenType


def _types(tokens):
    return [t.type for t in tokens]


class TestTemplateLexer:

    def test_plain_text(self):
        tokens = tokenize_template("Hello, world")
        assert _types(tokens) == [TokenType.TEXT, TokenType.EOF]
        assert tokens[0].value == "Hello, world"

    def test_empty_template(self):
        tokens = tokenize_template("")
        assert _types(tokens) == [TokenType.EOF]

    def test_text_and_expression(self):
        tokens = tokenize_template("a {{ b }} c")

        assert _types(tokens) == [
            TokenType.TEXT, TokenType.EXPRESSION, TokenType.TEXT, TokenType.EOF
        ]
        assert tokens[0].value == "a "
        assert tokens[1].value == " b "
        assert tokens[2].value == " c"

    def test_expression_position_points_after_delimiter(self):
        tokens = tokenize_template("a {{ b }}")
        expr = tokens[1]
        assert expr.position == 4
        assert expr.line == 1
        assert expr.column == 5

    def test_adjacent_expressions(self):
        tokens = tokenize_template("{{a}}{{b}}")
        assert _types(tokens) == [TokenType.EXPRESSION, TokenType.EXPRESSION, TokenType.EOF]
        assert [t.value for t in tokens[:2]] == ["a", "b"]

    def test_line_tracking(self):
        tokens = tokenize_template("line1\nline2 {{ x }}")
        expr = tokens[1]
        assert expr.line == 2
        assert expr.column == 9

    def test_close_delimiter_inside_string_is_ignored(self):
        """Вложенный шаблон forEach внутри строки остаётся одним выражением."""
        tokens = tokenize_template("<ul> {{ '<li> {{it}} </li>' | forEach(letters) }} </ul>")

        assert _types(tokens) == [
            TokenType.TEXT, TokenType.EXPRESSION, TokenType.TEXT, TokenType.EOF
        ]
        assert tokens[1].value == " '<li> {{it}} </li>' | forEach(letters) "

    def test_escaped_quote_inside_string(self):
        tokens = tokenize_template(r"{{ 'it\'s }}' }}")
        assert tokens[0].type == TokenType.EXPRESSION
        assert tokens[0].value == r" 'it\'s }}' "

    def test_object_literal_braces(self):
        tokens = tokenize_template("{{ 'p' | partial({ id: 'x' }) }}!")
        assert tokens[0].value == " 'p' | partial({ id: 'x' }) "
        assert tokens[1].value == "!"

    def test_object_literal_right_before_close(self):
        tokens = tokenize_template("{{ {a:1}}}")
        assert tokens[0].value == " {a:1}"

    def test_single_braces_are_text(self):
        tokens = tokenize_template("function() { return 1; }")
        assert _types(tokens) == [TokenType.TEXT, TokenType.EOF]

    def test_unclosed_expression(self):
        with pytest.raises(TemplateSyntaxError, match=r"Unclosed '\{\{'") as exc:
            tokenize_template("text {{ a")
        assert exc.value.line == 1
        assert exc.value.column == 6

    def test_unterminated_string_in_expression(self):
        with pytest.raises(TemplateSyntaxError, match="Unterminated string literal") as exc:
            TemplateLexer("x\n{{ 'abc }}").tokenize()
        assert exc.value.line == 2
        assert exc.value.column == 1


class TestExpressionLexer:

    def test_identifier_and_pipe(self):
        tokens = ExpressionLexer("title | upper").tokenize()
        assert _types(tokens) == [
            TokenType.IDENTIFIER, TokenType.PIPE, TokenType.IDENTIFIER, TokenType.EOF
        ]

    def test_identifier_charset(self):
        tokens = ExpressionLexer("$item_1").tokenize()
        assert tokens[0].type == TokenType.IDENTIFIER
        assert tokens[0].value == "$item_1"

    @pytest.mark.parametrize("text, value", [
        ("'single'", "single"),
        ('"double"', "double"),
        (r"'it\'s'", "it's"),
        (r"'a\nb'", "a\nb"),
        (r"'tab\there'", "tab\there"),
        (r"'back\\slash'", "back\\slash"),
        (r"'\d'", "\\d"),
    ])
    def test_strings(self, text, value):
        tokens = ExpressionLexer(text).tokenize()
        assert tokens[0].type == TokenType.STRING
        assert tokens[0].value == value

    def test_string_may_span_lines(self):
        tokens = ExpressionLexer("' - {{it}}\n'").tokenize()
        assert tokens[0].value == " - {{it}}\n"

    @pytest.mark.parametrize("text", ["42", "-7", "3.14", ".5"])
    def test_numbers(self, text):
        tokens = ExpressionLexer(text).tokenize()
        assert _types(tokens) == [TokenType.NUMBER, TokenType.EOF]
        assert tokens[0].value == text

    def test_dot_after_identifier_is_property_access(self):
        tokens = ExpressionLexer("items.0").tokenize()
        assert _types(tokens) == [
            TokenType.IDENTIFIER, TokenType.DOT, TokenType.NUMBER, TokenType.EOF
        ]

    def test_punctuation(self):
        tokens = ExpressionLexer("f({ a: [1, 2] })").tokenize()
        assert _types(tokens) == [
            TokenType.IDENTIFIER, TokenType.LPAREN, TokenType.LBRACE,
            TokenType.IDENTIFIER, TokenType.COLON, TokenType.LBRACKET,
            TokenType.NUMBER, TokenType.COMMA, TokenType.NUMBER,
            TokenType.RBRACKET, TokenType.RBRACE, TokenType.RPAREN, TokenType.EOF,
        ]

    def test_positions_are_relative_to_template(self):
        tokens = ExpressionLexer(" x", position=10, line=3, column=4).tokenize()
        assert tokens[0].position == 11
        assert tokens[0].line == 3
        assert tokens[0].column == 5

    def test_unexpected_character(self):
        with pytest.raises(TemplateSyntaxError, match="Unexpected character in expression: '#'") as exc:
            ExpressionLexer("a # b").tokenize()
        assert exc.value.column == 3

    def test_unterminated_string(self):
        with pytest.raises(TemplateSyntaxError, match="Unterminated string literal"):
            ExpressionLexer("'abc").tokenize()
