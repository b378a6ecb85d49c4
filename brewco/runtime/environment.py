"""Lexical scopes: a dict of bindings plus a link to the enclosing scope."""
from typing import Any, Dict, Optional

from brewco.runtime.spills import unbound


class Environment:

    def __init__(self, enclosing: Optional['Environment'] = None, frozen: bool = False,
                 unit_dir: Optional[str] = None):
        self.values: Dict[str, Any] = {}
        self.enclosing = enclosing
        # the shared builtin scope is never rebound by programs
        self.frozen = frozen
        # directory of the source unit whose globals this is (imports resolve here)
        self.unit_dir = unit_dir

    def child(self) -> 'Environment':
        return Environment(self)

    def define(self, name: str, value: Any) -> None:
        self.values[name] = value

    def lookup(self, name: str) -> Optional['Environment']:
        """Return the nearest scope that binds ``name``, or None."""
        env = self
        while env is not None:
            if name in env.values:
                return env
            env = env.enclosing
        return None

    def get(self, name: str) -> Any:
        env = self.lookup(name)
        if env is None:
            raise unbound(name)
        return env.values[name]

    def assign(self, name: str, value: Any) -> None:
        """Rebind the nearest existing binding, else declare here."""
        env = self.lookup(name)
        if env is None or env.frozen:
            env = self
        env.values[name] = value

    def __repr__(self):
        return f"<Environment {sorted(self.values)}>"
