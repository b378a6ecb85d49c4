"""AST node types produced by the parser.

Every node carries the (line, column) of the token that started it so the
evaluator can stamp spills with a source position.
"""
from dataclasses import dataclass, field
from typing import Any, List, Optional, Tuple


@dataclass
class Node:
    line: int = field(default=0, kw_only=True, compare=False)
    column: int = field(default=0, kw_only=True, compare=False)


# ── expressions ──────────────────────────────────────────────────────────────

@dataclass
class Literal(Node):
    value: Any


@dataclass
class Name(Node):
    name: str


@dataclass
class ArrayLiteral(Node):
    elements: List[Node]


@dataclass
class ObjectLiteral(Node):
    entries: List[Tuple[str, Node]]


@dataclass
class Binary(Node):
    op: str
    left: Node
    right: Node


@dataclass
class Logical(Node):
    op: str
    left: Node
    right: Node


@dataclass
class Unary(Node):
    op: str
    operand: Node


@dataclass
class Assign(Node):
    target: Node
    value: Node


@dataclass
class Call(Node):
    callee: Node
    args: List[Node]


@dataclass
class Member(Node):
    obj: Node
    name: str


@dataclass
class Index(Node):
    obj: Node
    index: Node


@dataclass
class New(Node):
    bean: Node
    args: List[Node]


@dataclass
class This(Node):
    pass


@dataclass
class SuperMember(Node):
    name: str


@dataclass
class SuperCall(Node):
    args: List[Node]


@dataclass
class Param(Node):
    name: str
    type_name: Optional[str] = None


@dataclass
class FunctionExpr(Node):
    params: List[Param]
    body: List[Node]
    return_type: Optional[str] = None


@dataclass
class Import(Node):
    path: str


# ── statements ───────────────────────────────────────────────────────────────

@dataclass
class ExprStmt(Node):
    expr: Node


@dataclass
class VarDecl(Node):
    name: str
    value: Optional[Node]
    type_name: Optional[str] = None


@dataclass
class Print(Node):
    values: List[Node]


@dataclass
class Sleep(Node):
    seconds: Node


@dataclass
class If(Node):
    condition: Node
    then_body: List[Node]
    else_body: Optional[List[Node]] = None


@dataclass
class While(Node):
    condition: Node
    body: List[Node]


@dataclass
class For(Node):
    init: Optional[Node]
    condition: Optional[Node]
    update: Optional[Node]
    body: List[Node]


@dataclass
class ForEach(Node):
    var: str
    iterable: Node
    body: List[Node]


@dataclass
class Case(Node):
    label: Any
    body: List[Node]


@dataclass
class Switch(Node):
    subject: Node
    cases: List[Case]
    default: Optional[List[Node]] = None


@dataclass
class Try(Node):
    body: List[Node]
    error_name: Optional[str]
    handler: List[Node]


@dataclass
class Return(Node):
    value: Optional[Node] = None


@dataclass
class Break(Node):
    pass


@dataclass
class Continue(Node):
    pass


@dataclass
class FunctionDecl(Node):
    name: str
    params: List[Param]
    body: List[Node]
    return_type: Optional[str] = None


@dataclass
class FieldDecl(Node):
    name: str
    default: Optional[Node] = None


@dataclass
class ClassDecl(Node):
    name: str
    parent: Optional[Node]
    fields: List[FieldDecl]
    methods: List[FunctionDecl]


@dataclass
class MethodSignature(Node):
    name: str
    params: List[Param]
    return_type: Optional[str] = None


@dataclass
class RecipeDecl(Node):
    name: str
    signatures: List[MethodSignature]


@dataclass
class ImportStmt(Node):
    path: str
    alias: str


@dataclass
class Program(Node):
    body: List[Node]
