"""Lexer for Brewco source text."""
from dataclasses import dataclass
from typing import Any, List

from brewco.tables import COMMENT_MARKER, KEYWORDS, OPERATOR_WORDS, SYMBOLS


class BrewcoSyntaxError(Exception):
    """Compile-time failure with a source position."""

    kind = 'SyntaxError'

    def __init__(self, message: str, line: int = 0, column: int = 0):
        self.message = message
        self.line = line
        self.column = column
        super().__init__(f"{message} (line {line}, column {column})")


class LexError(BrewcoSyntaxError):
    """Raised on an unterminated string/comment or an unknown character."""

    kind = 'LexError'


@dataclass
class Token:
    kind: str
    value: Any
    line: int
    column: int

    def __repr__(self):
        return f"Token({self.kind}, {self.value!r}, {self.line}:{self.column})"


_DIGITS = '0123456789'

_ESCAPES = {'n': '\n', 't': '\t', 'r': '\r', '0': '\0',
            '\\': '\\', '"': '"', "'": "'"}

# longest symbols first
_SYMBOL_ORDER = sorted(SYMBOLS, key=len, reverse=True)


class _Scanner:

    def __init__(self, text: str):
        self.text = text
        self.i = 0
        self.line = 1
        self.col = 1
        self.tokens: List[Token] = []

    # ── cursor helpers ──────────────────────────────────────────────────────

    def peek(self, offset: int = 0) -> str:
        j = self.i + offset
        return self.text[j] if j < len(self.text) else ''

    def advance(self) -> str:
        c = self.text[self.i]
        self.i += 1
        if c == '\n':
            self.line += 1
            self.col = 1
        else:
            self.col += 1
        return c

    def emit(self, kind: str, value: Any, line: int, col: int) -> None:
        self.tokens.append(Token(kind, value, line, col))

    # ── main loop ───────────────────────────────────────────────────────────

    def scan(self) -> List[Token]:
        while self.i < len(self.text):
            c = self.peek()

            if c in ' \t\r\n\ufeff':
                self.advance()
                continue

            # ---------- line comments (🎀 … and // …) ----------
            if c == COMMENT_MARKER or (c == '/' and self.peek(1) == '/'):
                while self.i < len(self.text) and self.peek() != '\n':
                    self.advance()
                continue

            # ---------- block comments, nesting allowed ----------
            if c == '/' and self.peek(1) == '*':
                self.block_comment()
                continue

            if c in ('"', "'"):
                self.string(c)
                continue

            if c in _DIGITS:
                self.number()
                continue

            if c.isalpha() or c == '_':
                self.word()
                continue

            line, col = self.line, self.col
            for sym in _SYMBOL_ORDER:
                if self.text.startswith(sym, self.i):
                    for _ in sym:
                        self.advance()
                    self.emit(SYMBOLS[sym], sym, line, col)
                    break
            else:
                raise LexError(f"Unrecognized character {c!r}", line, col)

        self.emit('EOF', None, self.line, self.col)
        return self.tokens

    # ── token kinds ─────────────────────────────────────────────────────────

    def block_comment(self) -> None:
        line, col = self.line, self.col
        depth = 0
        while self.i < len(self.text):
            if self.peek() == '/' and self.peek(1) == '*':
                depth += 1
                self.advance()
                self.advance()
                continue
            if self.peek() == '*' and self.peek(1) == '/':
                depth -= 1
                self.advance()
                self.advance()
                if depth == 0:
                    return
                continue
            self.advance()
        raise LexError("Unterminated block comment", line, col)

    def string(self, quote: str) -> None:
        line, col = self.line, self.col
        self.advance()
        chars = []
        while True:
            if self.i >= len(self.text):
                raise LexError("Unterminated string literal", line, col)
            c = self.advance()
            if c == quote:
                break
            if c == '\\':
                if self.i >= len(self.text):
                    raise LexError("Unterminated string literal", line, col)
                esc = self.advance()
                chars.append(_ESCAPES.get(esc, esc))
                continue
            chars.append(c)
        self.emit('STRING', ''.join(chars), line, col)

    def number(self) -> None:
        line, col = self.line, self.col
        start = self.i
        while self.peek() and self.peek() in _DIGITS:
            self.advance()
        # a '.' only continues the number when a digit follows it
        if self.peek() == '.' and self.peek(1) and self.peek(1) in _DIGITS:
            self.advance()
            while self.peek() and self.peek() in _DIGITS:
                self.advance()
        self.emit('NUMBER', float(self.text[start:self.i]), line, col)

    def word(self) -> None:
        line, col = self.line, self.col
        start = self.i
        while self.peek() and (self.peek().isalnum() or self.peek() == '_'):
            self.advance()
        text = self.text[start:self.i]
        if text in KEYWORDS:
            self.emit(KEYWORDS[text], text, line, col)
        elif text in OPERATOR_WORDS:
            self.emit(OPERATOR_WORDS[text], text, line, col)
        else:
            self.emit('IDENT', text, line, col)


def tokenize(text: str) -> List[Token]:
    """Convert source text into a token list ending with an EOF token."""
    return _Scanner(text).scan()
