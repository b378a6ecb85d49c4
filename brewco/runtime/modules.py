"""Module Loader: resolve, cache and run ``grind`` imports."""
import os
from typing import Dict, Set

from brewco.parser import parse
from brewco.runtime import adapters
from brewco.runtime.spills import CircularImportError, Spill, SpillKind
from brewco.runtime.values import ModuleNamespace

SOURCE_SUFFIXES = ('.brewco', '.coffee')


class ModuleLoader:
    """Per-runtime import state.

    ``cache`` maps a resolved path to its namespace, so a second import
    returns the same object without re-running the module.  ``in_progress``
    holds the paths currently executing; meeting one again is a cycle.
    """

    def __init__(self, runtime):
        self.runtime = runtime
        self.cache: Dict[str, ModuleNamespace] = {}
        self.in_progress: Set[str] = set()

    def clear(self) -> None:
        self.cache.clear()
        self.in_progress.clear()

    def resolve(self, path: str, base_dir: str) -> str:
        candidate = path if os.path.isabs(path) else os.path.join(base_dir, path)
        if os.path.splitext(candidate)[1]:
            options = [candidate]
        else:
            options = [candidate + suffix for suffix in SOURCE_SUFFIXES]
        for option in options:
            if os.path.isfile(option):
                return os.path.realpath(option)
        raise Spill(SpillKind.FILE_NOT_FOUND, f"Module not found: {path}")

    def load(self, path: str, base_dir: str) -> ModuleNamespace:
        resolved = self.resolve(path, base_dir)
        cached = self.cache.get(resolved)
        if cached is not None:
            return cached
        if resolved in self.in_progress:
            raise CircularImportError(path)

        self.in_progress.add(resolved)
        try:
            source = adapters.read_text(resolved)
            program = parse(source)
            scope = self.runtime.new_global_scope(os.path.dirname(resolved))
            self.runtime.run_unit(program, scope)
        finally:
            self.in_progress.discard(resolved)

        name = os.path.splitext(os.path.basename(resolved))[0]
        namespace = ModuleNamespace(name, resolved, scope.values)
        self.cache[resolved] = namespace
        return namespace
