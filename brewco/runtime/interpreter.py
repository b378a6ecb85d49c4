"""Brewco interpreter: a tree walk over the AST built by ``brewco.parser``.

Supported constructs
--------------------
- Variables      : beans x <- expr,  x <- expr  (also =, pour_in, refill_with)
- Output         : print(x),  pourout a, b
- Control flow   : taste / otherwise,  steep,  pour init; cond; update,
                   pour x in / foreach x in,  roast (switch),  serve / break / continue
- Functions      : brew name(params) { body },  anonymous brew (params) { body }
- Beans          : bean Name blend Parent { fields; brew methods },  new,  this,  super
- Recipes        : recipe Name { signatures }  (advisory only)
- Spills         : taste_carefully { … } if_spilled (e) { … }
- Modules        : grind "path" [as name]
- Builtins       : see ``brewco.runtime.builtins.REGISTRY``
"""
import math
import os
import sys
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Union

from brewco import nodes as ast
from brewco.lexer import BrewcoSyntaxError
from brewco.parser import parse
from brewco.runtime import adapters
from brewco.runtime.builtins import install
from brewco.runtime.environment import Environment
from brewco.runtime.modules import ModuleLoader
from brewco.runtime.spills import (
    Spill, SpillKind, out_of_range, type_mismatch, undefined_method,
)
from brewco.runtime.values import (
    BeanClass, BoundMethod, BrewFunction, Instance, ModuleNamespace,
    NativeFunction, Recipe, debug_repr, display, is_number, is_truthy,
    type_name, values_equal,
)

# Host frames needed per nested brew call are several, so the host limit is
# raised for the duration of a run.
RECURSION_DEPTH = 6000


class _ReturnSignal(Exception):
    def __init__(self, value: Any):
        self.value = value


class _BreakSignal(Exception):
    pass


class _ContinueSignal(Exception):
    pass


@dataclass
class ExecutionResult:
    value: Any
    output: str = ''
    ok: bool = field(default=True, init=False)


@dataclass
class ExecutionError:
    kind: str
    message: str
    line: int = 0
    column: int = 0
    output: str = ''
    ok: bool = field(default=False, init=False)

    def __str__(self):
        return f"{self.kind}: {self.message} (line {self.line}, column {self.column})"


# ── operator helpers ─────────────────────────────────────────────────────────

_SYMBOL = {
    'PLUS': '+', 'MINUS': '-', 'STAR': '*', 'SLASH': '/', 'PERCENT': '%',
    'LT': '<', 'GT': '>', 'LE': '<=', 'GE': '>=',
    'BITAND': '&', 'BITOR': '|', 'BITXOR': '^', 'SHL': '<<', 'SHR': '>>',
    'BITNOT': '~', 'NOT': '!',
}

_ARITHMETIC = {
    'MINUS': lambda a, b: a - b,
    'STAR': lambda a, b: a * b,
}

_ORDERING = {
    'LT': lambda a, b: a < b,
    'GT': lambda a, b: a > b,
    'LE': lambda a, b: a <= b,
    'GE': lambda a, b: a >= b,
}

_BITWISE = {
    'BITAND': lambda a, b: a & b,
    'BITOR': lambda a, b: a | b,
    'BITXOR': lambda a, b: a ^ b,
    'SHL': lambda a, b: a << b,
    'SHR': lambda a, b: a >> b,
}

# Any wider shift of a non-zero value is past the largest float.
_MAX_SHIFT = 1024


def _operand_error(op: str, a: Any, b: Any) -> Spill:
    return type_mismatch(
        f"Cannot apply '{_SYMBOL.get(op, op)}' to {type_name(a)} and {type_name(b)}")


def _integral(op: str, value: Any) -> int:
    if not is_number(value) or not float(value).is_integer():
        raise type_mismatch(
            f"'{_SYMBOL[op]}' needs whole numbers, got {debug_repr(value)}")
    return int(value)


def _to_number(n: int) -> float:
    try:
        return float(n)
    except OverflowError:
        return math.inf if n > 0 else -math.inf


def _checked_index(value: Any, length: int, what: str) -> int:
    if not is_number(value):
        raise type_mismatch(f"{what} index must be a number, got {type_name(value)}")
    if not float(value).is_integer():
        raise type_mismatch(f"{what} index must be a whole number, got {debug_repr(value)}")
    i = int(value)
    if i < 0 or i >= length:
        raise out_of_range(f"Index {i} is out of range for {what} of length {length}")
    return i


# ── Runtime ──────────────────────────────────────────────────────────────────

class Runtime:
    """Evaluate and execute Brewco code.

    Configuration is by keyword argument:

    ``stdout`` / ``stdin``
        Streams for program output and ``whats_the_gossip``.  ``None`` means
        the current ``sys.stdout`` / ``sys.stdin``.
    ``base_dir``
        Directory that imports and file builtins resolve against for
        host-supplied source.  Defaults to the working directory.
    ``loop_limit``
        Stop any single loop after this many iterations with a ``[warn]``
        line.  Off by default.
    """

    def __init__(self, stdout=None, stdin=None, base_dir: Optional[str] = None,
                 loop_limit: Optional[int] = None):
        self.console = adapters.Console(stdout, stdin)
        self.base_dir = base_dir
        self.loop_limit = loop_limit
        self.builtins = Environment(frozen=True)
        install(self.builtins)
        self.global_env = self.new_global_scope(None)
        self.modules = ModuleLoader(self)

    # ── public API ───────────────────────────────────────────────────────────

    @property
    def globals(self) -> Dict[str, Any]:
        """Top-level bindings of host-supplied source."""
        return self.global_env.values

    def execute(self, source: str) -> Union[ExecutionResult, ExecutionError]:
        self.console.start_recording()
        previous_limit = sys.getrecursionlimit()
        sys.setrecursionlimit(max(previous_limit, RECURSION_DEPTH))
        try:
            program = parse(source)
            value = self.run_unit(program, self.global_env)
        except BrewcoSyntaxError as e:
            return ExecutionError(e.kind, e.message, e.line, e.column, self.console.recorded())
        except Spill as e:
            return ExecutionError(e.kind.value, e.message, e.line, e.column,
                                  self.console.recorded())
        except RecursionError:
            return ExecutionError(SpillKind.RECURSION_LIMIT.value,
                                  'Maximum brew nesting depth exceeded', 0, 0,
                                  self.console.recorded())
        finally:
            sys.setrecursionlimit(previous_limit)
        return ExecutionResult(value, self.console.recorded())

    def run(self, text: str) -> Union[ExecutionResult, ExecutionError]:
        """Execute and report failures as an ``[error]`` line."""
        result = self.execute(text)
        if not result.ok:
            print(f'[error] {result}', file=self.console.stdout)
        return result

    def reset_modules(self) -> None:
        self.modules.clear()

    def resolve_path(self, path: str) -> str:
        if os.path.isabs(path):
            return path
        return os.path.join(self.base_dir or os.getcwd(), path)

    # ── units ────────────────────────────────────────────────────────────────

    def new_global_scope(self, unit_dir: Optional[str]) -> Environment:
        return Environment(self.builtins, unit_dir=unit_dir)

    def run_unit(self, program: ast.Program, scope: Environment) -> Any:
        """Run a whole program; the value is the last expression statement's."""
        last = None
        try:
            for stmt in program.body:
                value = self._exec(stmt, scope)
                if isinstance(stmt, ast.ExprStmt):
                    last = value
        except _ReturnSignal as r:
            # a top-level serve stops the unit
            last = r.value
        return last

    def _unit_dir(self, env: Environment) -> str:
        while env is not None:
            if env.unit_dir is not None:
                return env.unit_dir
            env = env.enclosing
        return self.base_dir or os.getcwd()

    # ── dispatch ─────────────────────────────────────────────────────────────

    def _exec(self, node: ast.Node, env: Environment) -> Any:
        try:
            return getattr(self, '_exec_' + type(node).__name__)(node, env)
        except Spill as e:
            raise e.at(node.line, node.column)

    def _eval(self, node: ast.Node, env: Environment) -> Any:
        try:
            return getattr(self, '_eval_' + type(node).__name__)(node, env)
        except Spill as e:
            raise e.at(node.line, node.column)

    def _run_block(self, body: List[ast.Node], env: Environment) -> None:
        for stmt in body:
            self._exec(stmt, env)

    def _limit_reached(self, count: int, loop: str) -> bool:
        if self.loop_limit is not None and count >= self.loop_limit:
            self.console.write_line(
                f'[warn] {loop} loop exceeded iteration limit ({self.loop_limit})')
            return True
        return False

    # ── statements ───────────────────────────────────────────────────────────

    def _exec_ExprStmt(self, node: ast.ExprStmt, env: Environment) -> Any:
        return self._eval(node.expr, env)

    def _exec_VarDecl(self, node: ast.VarDecl, env: Environment) -> None:
        value = self._eval(node.value, env) if node.value is not None else None
        env.define(node.name, value)

    def _exec_Print(self, node: ast.Print, env: Environment) -> None:
        parts = [display(self._eval(v, env)) for v in node.values]
        self.console.write_line(' '.join(parts))

    def _exec_Sleep(self, node: ast.Sleep, env: Environment) -> None:
        seconds = self._eval(node.seconds, env)
        if not is_number(seconds):
            raise type_mismatch(f"brew_time needs a number of seconds, got {type_name(seconds)}")
        adapters.sleep(float(seconds))

    def _exec_If(self, node: ast.If, env: Environment) -> None:
        if is_truthy(self._eval(node.condition, env)):
            self._run_block(node.then_body, env.child())
        elif node.else_body is not None:
            self._run_block(node.else_body, env.child())

    def _exec_While(self, node: ast.While, env: Environment) -> None:
        count = 0
        while is_truthy(self._eval(node.condition, env)):
            if self._limit_reached(count, 'steep'):
                break
            count += 1
            try:
                self._run_block(node.body, env.child())
            except _BreakSignal:
                break
            except _ContinueSignal:
                pass

    def _exec_For(self, node: ast.For, env: Environment) -> None:
        scope = env.child()
        if node.init is not None:
            self._exec(node.init, scope)
        count = 0
        while node.condition is None or is_truthy(self._eval(node.condition, scope)):
            if self._limit_reached(count, 'pour'):
                break
            count += 1
            try:
                self._run_block(node.body, scope.child())
            except _BreakSignal:
                break
            except _ContinueSignal:
                pass
            if node.update is not None:
                self._eval(node.update, scope)

    def _iteration_items(self, iterable: Any):
        if isinstance(iterable, list):
            # re-read the array each step so growth during the loop is seen
            i = 0
            while i < len(iterable):
                yield iterable[i]
                i += 1
        elif isinstance(iterable, str):
            yield from iterable
        elif isinstance(iterable, dict):
            yield from list(iterable.keys())
        elif isinstance(iterable, ModuleNamespace):
            yield from list(iterable.bindings.keys())
        else:
            raise type_mismatch(f"Cannot pour over a {type_name(iterable)}")

    def _exec_ForEach(self, node: ast.ForEach, env: Environment) -> None:
        iterable = self._eval(node.iterable, env)
        count = 0
        for item in self._iteration_items(iterable):
            if self._limit_reached(count, 'pour'):
                break
            count += 1
            scope = env.child()
            scope.define(node.var, item)
            try:
                self._run_block(node.body, scope)
            except _BreakSignal:
                break
            except _ContinueSignal:
                pass

    def _exec_Switch(self, node: ast.Switch, env: Environment) -> None:
        subject = self._eval(node.subject, env)
        for case in node.cases:
            if values_equal(subject, case.label):
                self._run_block(case.body, env.child())
                return
        if node.default is not None:
            self._run_block(node.default, env.child())

    def _exec_Try(self, node: ast.Try, env: Environment) -> None:
        try:
            self._run_block(node.body, env.child())
            return
        except Spill as e:
            message = e.message
        except RecursionError:
            message = 'Maximum brew nesting depth exceeded'
        scope = env.child()
        if node.error_name is not None:
            scope.define(node.error_name, message)
        self._run_block(node.handler, scope)

    def _exec_Return(self, node: ast.Return, env: Environment) -> None:
        value = self._eval(node.value, env) if node.value is not None else None
        raise _ReturnSignal(value)

    def _exec_Break(self, node: ast.Break, env: Environment) -> None:
        raise _BreakSignal()

    def _exec_Continue(self, node: ast.Continue, env: Environment) -> None:
        raise _ContinueSignal()

    def _exec_FunctionDecl(self, node: ast.FunctionDecl, env: Environment) -> None:
        env.define(node.name, BrewFunction(node.name, node.params, node.body, env))

    def _exec_ClassDecl(self, node: ast.ClassDecl, env: Environment) -> None:
        parent, recipes = None, []
        if node.parent is not None:
            base = self._eval(node.parent, env)
            if isinstance(base, BeanClass):
                parent = base
            elif isinstance(base, Recipe):
                recipes.append(base)
            else:
                raise type_mismatch(
                    f"Bean '{node.name}' can only blend a bean or a recipe, not a {type_name(base)}")
        cls = BeanClass(node.name, parent, node.fields, {}, env, recipes)
        for method in node.methods:
            cls.methods[method.name] = BrewFunction(
                method.name, method.params, method.body, env, owner=cls)
        env.define(node.name, cls)

    def _exec_RecipeDecl(self, node: ast.RecipeDecl, env: Environment) -> None:
        env.define(node.name, Recipe(node.name, node.signatures))

    def _exec_ImportStmt(self, node: ast.ImportStmt, env: Environment) -> None:
        env.define(node.alias, self.modules.load(node.path, self._unit_dir(env)))

    # ── expressions ──────────────────────────────────────────────────────────

    def _eval_Literal(self, node: ast.Literal, env: Environment) -> Any:
        return node.value

    def _eval_Name(self, node: ast.Name, env: Environment) -> Any:
        return env.get(node.name)

    def _eval_ArrayLiteral(self, node: ast.ArrayLiteral, env: Environment) -> List[Any]:
        return [self._eval(e, env) for e in node.elements]

    def _eval_ObjectLiteral(self, node: ast.ObjectLiteral, env: Environment) -> Dict[str, Any]:
        return {key: self._eval(value, env) for key, value in node.entries}

    def _eval_FunctionExpr(self, node: ast.FunctionExpr, env: Environment) -> BrewFunction:
        return BrewFunction('anonymous', node.params, node.body, env)

    def _eval_Import(self, node: ast.Import, env: Environment) -> ModuleNamespace:
        return self.modules.load(node.path, self._unit_dir(env))

    def _eval_Logical(self, node: ast.Logical, env: Environment) -> bool:
        left = is_truthy(self._eval(node.left, env))
        if node.op == 'AND':
            return left and is_truthy(self._eval(node.right, env))
        return left or is_truthy(self._eval(node.right, env))

    def _eval_Unary(self, node: ast.Unary, env: Environment) -> Any:
        value = self._eval(node.operand, env)
        if node.op == 'NOT':
            return not is_truthy(value)
        if node.op == 'MINUS':
            if isinstance(value, bool):
                return not value
            if is_number(value):
                return -value
            raise type_mismatch(f"Cannot negate a {type_name(value)}")
        return _to_number(~_integral(node.op, value))

    def _eval_Binary(self, node: ast.Binary, env: Environment) -> Any:
        left = self._eval(node.left, env)
        right = self._eval(node.right, env)
        return self.binary(node.op, left, right)

    def binary(self, op: str, a: Any, b: Any) -> Any:
        if op == 'EQ':
            return values_equal(a, b)
        if op == 'NE':
            return not values_equal(a, b)

        if op == 'PLUS':
            if is_number(a) and is_number(b):
                return a + b
            if isinstance(a, str) or isinstance(b, str):
                return display(a) + display(b)
            raise _operand_error(op, a, b)

        if op in _ORDERING:
            if (is_number(a) and is_number(b)) or (isinstance(a, str) and isinstance(b, str)):
                return _ORDERING[op](a, b)
            raise _operand_error(op, a, b)

        if op in _BITWISE:
            x, y = _integral(op, a), _integral(op, b)
            if op in ('SHL', 'SHR') and y < 0:
                raise type_mismatch(f"Cannot shift by a negative amount ({y})")
            if op == 'SHL' and y > _MAX_SHIFT:
                return 0.0 if x == 0 else math.copysign(math.inf, x)
            return _to_number(_BITWISE[op](x, y))

        if not (is_number(a) and is_number(b)):
            raise _operand_error(op, a, b)
        if op in _ARITHMETIC:
            return _ARITHMETIC[op](a, b)
        if b == 0:
            what = 'Division' if op == 'SLASH' else 'Remainder'
            raise Spill(SpillKind.DIVISION_BY_ZERO, f"{what} by zero")
        if op == 'SLASH':
            return a / b
        if math.isinf(a):
            return math.nan
        return math.fmod(a, b)

    # ---------- assignment ----------

    def _eval_Assign(self, node: ast.Assign, env: Environment) -> Any:
        target = node.target
        if isinstance(target, ast.Name):
            value = self._eval(node.value, env)
            env.assign(target.name, value)
            return value
        if isinstance(target, ast.Member):
            obj = self._eval(target.obj, env)
            value = self._eval(node.value, env)
            self.set_member(obj, target.name, value)
            return value
        obj = self._eval(target.obj, env)
        index = self._eval(target.index, env)
        value = self._eval(node.value, env)
        self.set_index(obj, index, value)
        return value

    # ---------- members & indexing ----------

    def _eval_Member(self, node: ast.Member, env: Environment) -> Any:
        return self.get_member(self._eval(node.obj, env), node.name)

    def get_member(self, obj: Any, name: str) -> Any:
        if isinstance(obj, Instance):
            if name in obj.fields:
                return obj.fields[name]
            method = obj.bean.find_method(name)
            if method is not None:
                return method.bind(obj)
            raise undefined_method(f"Bean '{obj.bean.name}'", name)
        if isinstance(obj, dict):
            if name in obj:
                return obj[name]
            raise undefined_method('Object', name)
        if isinstance(obj, ModuleNamespace):
            if name in obj.bindings:
                return obj.bindings[name]
            raise Spill(SpillKind.UNBOUND_NAME, f"Module '{obj.name}' has no binding '{name}'")
        raise type_mismatch(f"Cannot read member '{name}' of a {type_name(obj)}")

    def set_member(self, obj: Any, name: str, value: Any) -> None:
        if isinstance(obj, Instance):
            obj.fields[name] = value
        elif isinstance(obj, dict):
            obj[name] = value
        elif isinstance(obj, ModuleNamespace):
            raise type_mismatch(f"Module '{obj.name}' is read-only")
        else:
            raise type_mismatch(f"Cannot set member '{name}' on a {type_name(obj)}")

    def _eval_Index(self, node: ast.Index, env: Environment) -> Any:
        obj = self._eval(node.obj, env)
        index = self._eval(node.index, env)
        if isinstance(obj, list):
            return obj[_checked_index(index, len(obj), 'array')]
        if isinstance(obj, str):
            return obj[_checked_index(index, len(obj), 'string')]
        if isinstance(obj, dict):
            if not isinstance(index, str):
                raise type_mismatch(f"Object keys are strings, got {type_name(index)}")
            if index not in obj:
                raise out_of_range(f"Object has no key {debug_repr(index)}")
            return obj[index]
        raise type_mismatch(f"Cannot index a {type_name(obj)}")

    def set_index(self, obj: Any, index: Any, value: Any) -> None:
        if isinstance(obj, list):
            obj[_checked_index(index, len(obj), 'array')] = value
        elif isinstance(obj, dict):
            if not isinstance(index, str):
                raise type_mismatch(f"Object keys are strings, got {type_name(index)}")
            obj[index] = value
        else:
            raise type_mismatch(f"Cannot assign into a {type_name(obj)} by index")

    # ---------- calls ----------

    def _eval_Call(self, node: ast.Call, env: Environment) -> Any:
        callee = self._eval(node.callee, env)
        args = [self._eval(a, env) for a in node.args]
        return self.call(callee, args)

    def call(self, callee: Any, args: List[Any]) -> Any:
        if isinstance(callee, NativeFunction):
            if len(args) != callee.arity:
                raise self._arity_error(callee.name, callee.arity, len(args))
            return callee(self, *args)
        if isinstance(callee, BoundMethod):
            return self._invoke(callee.function, args, callee.receiver)
        if isinstance(callee, BrewFunction):
            return self._invoke(callee, args)
        if isinstance(callee, BeanClass):
            raise type_mismatch(f"Bean '{callee.name}' is created with 'new', not called")
        raise type_mismatch(f"A {type_name(callee)} is not callable")

    @staticmethod
    def _arity_error(name: str, expected: int, got: int) -> Spill:
        plural = '' if expected == 1 else 's'
        return type_mismatch(f"{name}() expects {expected} argument{plural}, but got {got}")

    def _invoke(self, fn: BrewFunction, args: List[Any],
                receiver: Optional[Instance] = None) -> Any:
        if len(args) != fn.arity:
            raise self._arity_error(fn.name, fn.arity, len(args))
        scope = fn.closure.child()
        if receiver is not None:
            scope.define('this', receiver)
            # 'super' is a keyword, so this binding is invisible to programs
            scope.define('super', fn.owner.parent if fn.owner else None)
        for param, arg in zip(fn.params, args):
            scope.define(param.name, arg)
        try:
            self._run_block(fn.body, scope)
        except _ReturnSignal as r:
            return r.value
        except RecursionError:
            raise Spill(SpillKind.RECURSION_LIMIT,
                        'Maximum brew nesting depth exceeded') from None
        return None

    # ---------- beans ----------

    def _eval_New(self, node: ast.New, env: Environment) -> Instance:
        cls = self._eval(node.bean, env)
        if not isinstance(cls, BeanClass):
            raise type_mismatch(f"'new' needs a bean, got a {type_name(cls)}")
        args = [self._eval(a, env) for a in node.args]
        return self.instantiate(cls, args)

    def instantiate(self, cls: BeanClass, args: List[Any]) -> Instance:
        instance = Instance(cls)
        for klass in cls.chain():
            for decl in klass.fields:
                scope = klass.scope.child()
                scope.define('this', instance)
                value = self._eval(decl.default, scope) if decl.default is not None else None
                instance.fields[decl.name] = value
        init = cls.find_method('init')
        if init is not None:
            self._invoke(init, args, instance)
        elif args:
            raise type_mismatch(
                f"Bean '{cls.name}' has no init, but {len(args)} argument(s) were given")
        return instance

    def _eval_This(self, node: ast.This, env: Environment) -> Instance:
        scope = env.lookup('this')
        if scope is None:
            raise type_mismatch("'this' used outside a bean method")
        return scope.values['this']

    def _super_parent(self, env: Environment) -> BeanClass:
        scope = env.lookup('super')
        if scope is None:
            raise type_mismatch("'super' used outside a bean method")
        parent = scope.values['super']
        if parent is None:
            this = self._eval_This(None, env)
            raise undefined_method(f"Bean '{this.bean.name}'", 'super', 'because it has no parent')
        return parent

    def _eval_SuperMember(self, node: ast.SuperMember, env: Environment) -> BoundMethod:
        parent = self._super_parent(env)
        method = parent.find_method(node.name)
        if method is None:
            raise undefined_method(f"Bean '{parent.name}'", node.name)
        return method.bind(self._eval_This(node, env))

    def _eval_SuperCall(self, node: ast.SuperCall, env: Environment) -> Any:
        parent = self._super_parent(env)
        args = [self._eval(a, env) for a in node.args]
        init = parent.find_method('init')
        if init is None:
            if args:
                raise type_mismatch(
                    f"Bean '{parent.name}' has no init, but {len(args)} argument(s) were given")
            return None
        return self._invoke(init, args, self._eval_This(node, env))
