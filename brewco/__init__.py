"""Brewco - a coffee-themed dynamic scripting language with beans, brews and spills"""
__version__ = "1.0.0"

from .lexer import BrewcoSyntaxError, LexError, tokenize
from .parser import ParseError, parse
from .runtime.interpreter import ExecutionError, ExecutionResult, Runtime


def execute(source: str, **options):
    """Run ``source`` in a fresh Runtime built with ``options``."""
    return Runtime(**options).execute(source)


__all__ = ["Runtime", "execute", "ExecutionResult", "ExecutionError",
           "tokenize", "parse", "BrewcoSyntaxError", "LexError", "ParseError"]
