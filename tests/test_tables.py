"""Tests for the static editor tables."""
import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from brewco.runtime.builtins import REGISTRY
from brewco.tables import (
    KEYWORD_DETAILS, KEYWORDS, OPERATOR_DETAILS, OPERATOR_WORDS, SYMBOLS,
    builtin_catalog, describe,
)


class TestTables:
    def test_every_kind_is_documented(self):
        assert set(KEYWORDS.values()) <= set(KEYWORD_DETAILS)
        assert set(OPERATOR_WORDS.values()) <= set(OPERATOR_DETAILS)

    def test_operator_words_have_symbol_twins(self):
        symbol_kinds = set(SYMBOLS.values())
        assert set(OPERATOR_WORDS.values()) <= symbol_kinds

    def test_catalog_lists_registry(self):
        names = [entry["name"] for entry in builtin_catalog()]
        assert sorted(names) == sorted(REGISTRY)
        assert "scan_pantry" in names


class TestDescribe:
    def test_keyword(self):
        assert describe("steep") == {"name": "steep", "kind": "keyword", "detail": "While loop"}

    def test_operator_word(self):
        assert describe("grounds")["kind"] == "operator"

    def test_builtin(self):
        info = describe("root_drip")
        assert info["kind"] == "builtin"
        assert info["detail"].startswith("root_drip(n)")

    def test_unknown(self):
        assert describe("frappuccino") is None
