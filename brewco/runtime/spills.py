"""Runtime error model.

A spill is the language-level exception: anything that goes wrong while a
program runs raises one, and ``taste_carefully`` blocks can catch it.
"""
from enum import Enum
from typing import Optional


class SpillKind(str, Enum):
    UNBOUND_NAME = 'UnboundName'
    TYPE_MISMATCH = 'TypeMismatch'
    DIVISION_BY_ZERO = 'DivisionByZero'
    INDEX_OUT_OF_RANGE = 'IndexOutOfRange'
    UNDEFINED_METHOD = 'UndefinedMethod'
    FILE_NOT_FOUND = 'FileNotFound'
    CIRCULAR_IMPORT = 'CircularImport'
    IO_FAILURE = 'IOFailure'
    RECURSION_LIMIT = 'RecursionLimit'


class Spill(Exception):
    """Runtime failure. Position is 0 until the evaluator stamps it."""

    def __init__(self, kind: SpillKind, message: str, line: int = 0, column: int = 0):
        self.kind = SpillKind(kind)
        self.message = message
        self.line = line
        self.column = column
        super().__init__(message)

    def at(self, line: int, column: int) -> 'Spill':
        if not self.line:
            self.line = line
            self.column = column
        return self

    def __str__(self):
        return f"{self.kind.value}: {self.message} (line {self.line}, column {self.column})"


class CircularImportError(Spill):

    def __init__(self, path: str, line: int = 0, column: int = 0):
        self.path = path
        super().__init__(SpillKind.CIRCULAR_IMPORT,
                         f"Circular import of '{path}'", line, column)


def type_mismatch(message: str) -> Spill:
    return Spill(SpillKind.TYPE_MISMATCH, message)


def unbound(name: str) -> Spill:
    return Spill(SpillKind.UNBOUND_NAME, f"Undefined name '{name}'")


def out_of_range(message: str) -> Spill:
    return Spill(SpillKind.INDEX_OUT_OF_RANGE, message)


def undefined_method(owner: str, name: str, extra: Optional[str] = None) -> Spill:
    msg = f"{owner} has no member '{name}'"
    if extra:
        msg = f"{msg} {extra}"
    return Spill(SpillKind.UNDEFINED_METHOD, msg)
