"""Tests for the Brewco lexer."""
import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

import pytest
from brewco.lexer import LexError, tokenize


def kinds(src):
    return [t.kind for t in tokenize(src)]


class TestBasics:
    def test_ends_with_eof(self):
        assert kinds("") == ["EOF"]

    def test_assignment_arrow(self):
        assert kinds("a <- 5") == ["IDENT", "ASSIGN", "NUMBER", "EOF"]

    def test_numbers_are_floats(self):
        toks = tokenize("42 3.14")
        assert toks[0].value == 42.0
        assert toks[1].value == 3.14

    def test_dot_without_digit_ends_number(self):
        assert kinds("1.foo") == ["NUMBER", "DOT", "IDENT", "EOF"]

    def test_positions_are_one_based(self):
        toks = tokenize("beans x\n  <- 1")
        assert (toks[0].line, toks[0].column) == (1, 1)
        assert (toks[2].line, toks[2].column) == (2, 3)

    def test_longest_symbol_wins(self):
        assert kinds("<= << <- <") == ["LE", "SHL", "ASSIGN", "LT", "EOF"]

    def test_less_than_negative_needs_space(self):
        assert kinds("a < -5") == ["IDENT", "LT", "MINUS", "NUMBER", "EOF"]


class TestWords:
    def test_coffee_and_conventional_keywords_share_kinds(self):
        assert kinds("bean class") == ["CLASS", "CLASS", "EOF"]
        assert kinds("taste if otherwise else") == ["IF", "IF", "ELSE", "ELSE", "EOF"]
        assert kinds("serve serve_back return") == ["RETURN", "RETURN", "RETURN", "EOF"]

    def test_operator_words(self):
        assert kinds("a add b sip c") == ["IDENT", "PLUS", "IDENT", "MINUS", "IDENT", "EOF"]
        assert kinds("x pour_in 1") == ["IDENT", "ASSIGN", "NUMBER", "EOF"]
        assert kinds("same_blend no_foam with") == ["EQ", "NOT", "AND", "EOF"]

    def test_whole_word_matching(self):
        toks = tokenize("adder beanstalk")
        assert [t.kind for t in toks] == ["IDENT", "IDENT", "EOF"]

    def test_underscore_identifier(self):
        assert tokenize("_shot_2")[0].value == "_shot_2"


class TestStrings:
    def test_double_and_single_quotes(self):
        toks = tokenize('"latte" \'mocha\'')
        assert [t.value for t in toks[:2]] == ["latte", "mocha"]

    def test_escapes(self):
        assert tokenize(r'"a\nb\t\"c\""')[0].value == 'a\nb\t"c"'

    def test_unknown_escape_keeps_char(self):
        assert tokenize(r'"\q"')[0].value == "q"

    def test_multiline_string(self):
        assert tokenize('"one\ntwo"')[0].value == "one\ntwo"

    def test_unterminated_string(self):
        with pytest.raises(LexError) as exc:
            tokenize('beans s <- "oops')
        assert exc.value.line == 1
        assert exc.value.column == 12


class TestComments:
    def test_ribbon_comment(self):
        assert kinds("\U0001F380 a note\nx") == ["IDENT", "EOF"]

    def test_slash_comment(self):
        assert kinds("x // trailing\ny") == ["IDENT", "IDENT", "EOF"]

    def test_nested_block_comment(self):
        assert kinds("/* outer /** doc */ still comment */ x") == ["IDENT", "EOF"]

    def test_unterminated_block_comment(self):
        with pytest.raises(LexError):
            tokenize("/* never closed")

    def test_unknown_character(self):
        with pytest.raises(LexError) as exc:
            tokenize("x @ y")
        assert exc.value.column == 3
