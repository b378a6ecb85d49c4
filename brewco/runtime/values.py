"""Runtime value types and the helpers that display, compare and test them.

Numbers, strings, booleans, null, arrays and objects are plain Python
``float``, ``str``, ``bool``, ``None``, ``list`` and ``dict``.  Everything
callable or class-shaped gets a small class of its own below.
"""
from types import MappingProxyType
from typing import Any, Callable, Dict, List, Optional

from brewco import nodes as ast
from brewco.runtime.environment import Environment


# ── callables ────────────────────────────────────────────────────────────────

class BrewFunction:
    """A user-defined brew together with the scope it closes over."""

    def __init__(self, name: str, params: List[ast.Param], body: List[ast.Node],
                 closure: Environment, owner: Optional['BeanClass'] = None):
        self.name = name
        self.params = params
        self.body = body
        self.closure = closure
        # class whose body declared this method; drives super lookups
        self.owner = owner

    @property
    def arity(self) -> int:
        return len(self.params)

    def bind(self, receiver: 'Instance') -> 'BoundMethod':
        return BoundMethod(self, receiver)

    def __repr__(self):
        return f"<brew {self.name}>"


class BoundMethod:

    def __init__(self, function: BrewFunction, receiver: 'Instance'):
        self.function = function
        self.receiver = receiver

    @property
    def name(self) -> str:
        return self.function.name

    @property
    def arity(self) -> int:
        return self.function.arity

    def __eq__(self, other):
        return (isinstance(other, BoundMethod)
                and self.function is other.function
                and self.receiver is other.receiver)

    def __hash__(self):
        return hash((id(self.function), id(self.receiver)))

    def __repr__(self):
        return f"<brew {self.function.name}>"


class NativeFunction:
    """A host-implemented builtin.  ``fn`` receives the runtime first."""

    def __init__(self, name: str, arity: int, fn: Callable, category: str = 'utility',
                 signature: str = '', description: str = ''):
        self.name = name
        self.arity = arity
        self.fn = fn
        self.category = category
        self.signature = signature or f"{name}()"
        self.description = description

    def __call__(self, runtime, *args):
        return self.fn(runtime, *args)

    def __repr__(self):
        return f"<native {self.name}>"


# ── classes and instances ────────────────────────────────────────────────────

class Recipe:
    """Advisory interface: a name and method signatures, never enforced."""

    def __init__(self, name: str, signatures: List[ast.MethodSignature]):
        self.name = name
        self.signatures = signatures

    def __repr__(self):
        return f"<recipe {self.name}>"


class BeanClass:

    def __init__(self, name: str, parent: Optional['BeanClass'],
                 fields: List[ast.FieldDecl], methods: Dict[str, BrewFunction],
                 scope: Environment, recipes: Optional[List[Recipe]] = None):
        self.name = name
        self.parent = parent
        self.fields = fields
        self.methods = methods
        self.scope = scope
        self.recipes = recipes or []

    def chain(self) -> List['BeanClass']:
        """Ancestors root-first, ending with this class."""
        out = []
        cls = self
        while cls is not None:
            out.append(cls)
            cls = cls.parent
        out.reverse()
        return out

    def find_method(self, name: str) -> Optional[BrewFunction]:
        cls = self
        while cls is not None:
            if name in cls.methods:
                return cls.methods[name]
            cls = cls.parent
        return None

    def __repr__(self):
        return f"<bean {self.name}>"


class Instance:

    def __init__(self, bean: BeanClass):
        self.bean = bean
        self.fields: Dict[str, Any] = {}

    def __repr__(self):
        return f"<{self.bean.name} instance>"


class ModuleNamespace:
    """Read-only view of a module's top-level bindings."""

    def __init__(self, name: str, path: str, bindings: Dict[str, Any]):
        self.name = name
        self.path = path
        self.bindings = MappingProxyType(dict(bindings))

    def __repr__(self):
        return f"<module {self.name}>"


# ── helpers ──────────────────────────────────────────────────────────────────

def is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def is_callable(value: Any) -> bool:
    return isinstance(value, (BrewFunction, BoundMethod, NativeFunction))


def format_number(n: float) -> str:
    if isinstance(n, float) and n.is_integer():
        return str(int(n))
    return repr(n) if isinstance(n, float) else str(n)


def display(value: Any) -> str:
    """The form ``print`` and string concatenation use."""
    if isinstance(value, str):
        return value
    return debug_repr(value)


def debug_repr(value: Any) -> str:
    """Like display, but strings are quoted (used inside containers)."""
    if value is None:
        return 'null'
    if value is True:
        return 'true'
    if value is False:
        return 'false'
    if is_number(value):
        return format_number(value)
    if isinstance(value, str):
        return '"' + value.replace('\\', '\\\\').replace('"', '\\"') + '"'
    if isinstance(value, list):
        return '[' + ', '.join(debug_repr(v) for v in value) + ']'
    if isinstance(value, dict):
        return '{' + ', '.join(f"{k}: {debug_repr(v)}" for k, v in value.items()) + '}'
    return repr(value)


def type_name(value: Any) -> str:
    if value is None:
        return 'null'
    if isinstance(value, bool):
        return 'boolean'
    if is_number(value):
        return 'number'
    if isinstance(value, str):
        return 'string'
    if isinstance(value, list):
        return 'array'
    if isinstance(value, dict):
        return 'object'
    if is_callable(value):
        return 'brew'
    if isinstance(value, BeanClass):
        return 'bean'
    if isinstance(value, Recipe):
        return 'recipe'
    if isinstance(value, ModuleNamespace):
        return 'module'
    if isinstance(value, Instance):
        return value.bean.name
    return type(value).__name__


def is_truthy(value: Any) -> bool:
    if value is None or value is False:
        return False
    if is_number(value):
        return value != 0
    return True


def values_equal(a: Any, b: Any) -> bool:
    """Structural for arrays/objects, identity for reference-only values."""
    if isinstance(a, bool) or isinstance(b, bool):
        return isinstance(a, bool) and isinstance(b, bool) and a == b
    if is_number(a) and is_number(b):
        return a == b
    if isinstance(a, str) and isinstance(b, str):
        return a == b
    if a is None or b is None:
        return a is b
    if isinstance(a, list) and isinstance(b, list):
        return len(a) == len(b) and all(values_equal(x, y) for x, y in zip(a, b))
    if isinstance(a, dict) and isinstance(b, dict):
        if a.keys() != b.keys():
            return False
        return all(values_equal(a[k], b[k]) for k in a)
    if isinstance(a, BoundMethod) and isinstance(b, BoundMethod):
        return a == b
    return a is b
