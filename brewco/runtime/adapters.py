"""Adapters: the host file system, clock, randomness and console streams.

Builtins never touch ``open``/``time``/``sys`` directly; they go through the
helpers here so host failures turn into spills in one place.
"""
import os
import random
import sys
import time
from typing import IO, List, Optional

from brewco.runtime.spills import Spill, SpillKind

PANTRY_EXTENSIONS = ('.brewco', '.coffee')


# ── file system ──────────────────────────────────────────────────────────────

def _io_spill(path: str, exc: OSError) -> Spill:
    if isinstance(exc, FileNotFoundError):
        return Spill(SpillKind.FILE_NOT_FOUND, f"File not found: {path}")
    return Spill(SpillKind.IO_FAILURE, f"Could not access {path}: {exc.strerror or exc}")


def read_text(path: str) -> str:
    try:
        with open(path, 'r', encoding='utf-8') as fh:
            return fh.read()
    except OSError as e:
        raise _io_spill(path, e)
    except UnicodeDecodeError:
        raise Spill(SpillKind.IO_FAILURE, f"{path} is not valid UTF-8 text")


def write_text(path: str, content: str) -> None:
    try:
        with open(path, 'w', encoding='utf-8') as fh:
            fh.write(content)
    except FileNotFoundError:
        raise Spill(SpillKind.IO_FAILURE,
                    f"Could not write {path}: directory does not exist")
    except OSError as e:
        raise _io_spill(path, e)


def exists(path: str) -> bool:
    return os.path.exists(path)


def scan(directory: str) -> List[str]:
    """Sorted names of Brewco source files directly inside ``directory``."""
    try:
        entries = os.listdir(directory)
    except OSError as e:
        raise _io_spill(directory, e)
    return sorted(
        name for name in entries
        if name.endswith(PANTRY_EXTENSIONS) and os.path.isfile(os.path.join(directory, name))
    )


# ── clock / randomness ───────────────────────────────────────────────────────

def now() -> float:
    return float(time.time())


def sleep(seconds: float) -> None:
    if seconds > 0:
        time.sleep(seconds)


def random_unit() -> float:
    return random.random()


# ── console ──────────────────────────────────────────────────────────────────

class Console:
    """Program output and input.

    ``stdout=None`` means whatever ``sys.stdout`` is at write time, so
    redirection done after the runtime is created still applies.  Every
    write is also recorded so the host API can return the run's output.
    """

    def __init__(self, stdout: Optional[IO] = None, stdin: Optional[IO] = None):
        self._stdout = stdout
        self._stdin = stdin
        self._recorded: List[str] = []

    @property
    def stdout(self) -> IO:
        return self._stdout if self._stdout is not None else sys.stdout

    @property
    def stdin(self) -> IO:
        return self._stdin if self._stdin is not None else sys.stdin

    def write(self, text: str) -> None:
        self._recorded.append(text)
        self.stdout.write(text)

    def write_line(self, text: str) -> None:
        self.write(text + '\n')

    def readline(self) -> Optional[str]:
        """A line without its newline, or None at end of input."""
        line = self.stdin.readline()
        if line == '':
            return None
        return line.rstrip('\r\n')

    def start_recording(self) -> None:
        self._recorded = []

    def recorded(self) -> str:
        return ''.join(self._recorded)
