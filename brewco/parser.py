"""Recursive-descent parser for Brewco.

Binary operators are parsed by precedence climbing over the canonical token
kinds, so alternate spellings (``add`` and ``+``, ``pour_in`` and ``<-``)
produce identical nodes.
"""
import os
from typing import List, Optional, Union

from brewco import nodes as ast
from brewco.lexer import BrewcoSyntaxError, Token, tokenize


class ParseError(BrewcoSyntaxError):
    """Raised at the first malformed construct."""

    kind = 'ParseError'

    def __init__(self, expected: str, found: str, line: int = 0, column: int = 0):
        self.expected = expected
        self.found = found
        super().__init__(f"Expected {expected} but found {found}", line, column)


# tightest binds highest
BINARY_PRECEDENCE = {
    'OR': 1,
    'AND': 2,
    'EQ': 3, 'NE': 3,
    'LT': 4, 'GT': 4, 'LE': 4, 'GE': 4,
    'PLUS': 5, 'MINUS': 5,
    'STAR': 6, 'SLASH': 6, 'PERCENT': 6,
    'BITAND': 7, 'BITOR': 7, 'BITXOR': 7,
    'SHL': 8, 'SHR': 8,
}

_UNARY = ('MINUS', 'NOT', 'BITNOT')


def _describe(tok: Token) -> str:
    if tok.kind == 'EOF':
        return 'end of input'
    return repr(tok.value)


class Parser:
    """Turn a token list into a ``Program``."""

    def __init__(self, tokens: List[Token]):
        self.tokens = tokens
        self.pos = 0
        self.loop_depth = 0
        self.single_case = False

    # ── token helpers ────────────────────────────────────────────────────────

    @property
    def current(self) -> Token:
        return self.tokens[self.pos]

    @property
    def previous(self) -> Token:
        return self.tokens[self.pos - 1]

    def peek(self, offset: int = 1) -> Token:
        j = min(self.pos + offset, len(self.tokens) - 1)
        return self.tokens[j]

    def check(self, *kinds: str) -> bool:
        return self.current.kind in kinds

    def advance(self) -> Token:
        tok = self.current
        if tok.kind != 'EOF':
            self.pos += 1
        return tok

    def match(self, *kinds: str) -> Optional[Token]:
        if self.check(*kinds):
            return self.advance()
        return None

    def expect(self, kind: str, expected: str) -> Token:
        if self.check(kind):
            return self.advance()
        raise self.error(expected)

    def error(self, expected: str) -> ParseError:
        tok = self.current
        return ParseError(expected, _describe(tok), tok.line, tok.column)

    def same_line(self) -> bool:
        return self.pos > 0 and self.current.line == self.previous.line

    def skip_separators(self) -> None:
        while self.match('SEMI'):
            pass

    def _at(self, tok: Token) -> dict:
        return {'line': tok.line, 'column': tok.column}

    # ── program / blocks ────────────────────────────────────────────────────

    def parse_program(self) -> ast.Program:
        body = []
        self.skip_separators()
        while not self.check('EOF'):
            body.append(self.statement())
            self.skip_separators()
        return ast.Program(body, line=1, column=1)

    def block(self) -> List[ast.Node]:
        self.expect('LBRACE', "'{'")
        saved, self.single_case = self.single_case, False
        body = []
        try:
            self.skip_separators()
            while not self.check('RBRACE'):
                if self.check('EOF'):
                    raise self.error("'}'")
                body.append(self.statement())
                self.skip_separators()
        finally:
            self.single_case = saved
        self.advance()
        return body

    def loop_body(self) -> List[ast.Node]:
        self.loop_depth += 1
        try:
            return self.block()
        finally:
            self.loop_depth -= 1

    def function_body(self) -> List[ast.Node]:
        saved = self.loop_depth
        self.loop_depth = 0
        try:
            return self.block()
        finally:
            self.loop_depth = saved

    # ── statements ──────────────────────────────────────────────────────────

    def statement(self) -> ast.Node:
        kind = self.current.kind

        if kind == 'LET':
            return self.var_declaration()
        if kind == 'CLASS':
            return self.class_declaration()
        if kind == 'RECIPE':
            return self.recipe_declaration()
        if kind == 'FN' and self.peek().kind == 'IDENT':
            return self.function_declaration()
        if kind == 'IF':
            return self.if_statement()
        if kind == 'WHILE':
            return self.while_statement()
        if kind in ('FOR', 'FOREACH'):
            return self.for_statement()
        if kind == 'SWITCH':
            return self.switch_statement()
        if kind == 'TRY':
            return self.try_statement()
        if kind == 'RETURN':
            return self.return_statement()
        if kind in ('BREAK', 'CONTINUE'):
            tok = self.advance()
            if self.loop_depth == 0:
                raise ParseError('a loop around ' + repr(tok.value), repr(tok.value),
                                 tok.line, tok.column)
            node = ast.Break if kind == 'BREAK' else ast.Continue
            return node(**self._at(tok))
        if kind == 'PRINT':
            tok = self.advance()
            values = [self.expression()]
            while self.match('COMMA'):
                values.append(self.expression())
            return ast.Print(values, **self._at(tok))
        if kind == 'SLEEP':
            tok = self.advance()
            return ast.Sleep(self.expression(), **self._at(tok))
        if kind == 'IMPORT' and self.peek().kind == 'STRING':
            return self.import_statement()

        tok = self.current
        return ast.ExprStmt(self.expression(), **self._at(tok))

    def type_annotation(self) -> str:
        return self.expect('IDENT', 'a type name').value

    def var_declaration(self) -> ast.VarDecl:
        tok = self.advance()
        name = self.expect('IDENT', 'a variable name').value
        type_name = None
        if self.match('COLON'):
            type_name = self.type_annotation()
        value = None
        if self.match('ASSIGN'):
            value = self.expression()
        return ast.VarDecl(name, value, type_name, **self._at(tok))

    def parameters(self) -> List[ast.Param]:
        self.expect('LPAREN', "'('")
        params = []
        if not self.check('RPAREN'):
            while True:
                tok = self.expect('IDENT', 'a parameter name')
                type_name = None
                if self.match('COLON'):
                    type_name = self.type_annotation()
                params.append(ast.Param(tok.value, type_name, **self._at(tok)))
                if not self.match('COMMA'):
                    break
        self.expect('RPAREN', "')'")
        return params

    def return_annotation(self) -> Optional[str]:
        if self.match('COLON', 'ARROW'):
            return self.type_annotation()
        return None

    def function_declaration(self) -> ast.FunctionDecl:
        tok = self.advance()
        name = self.expect('IDENT', 'a brew name').value
        params = self.parameters()
        return_type = self.return_annotation()
        body = self.function_body()
        return ast.FunctionDecl(name, params, body, return_type, **self._at(tok))

    def qualified_name(self) -> ast.Node:
        tok = self.expect('IDENT', 'a bean name')
        node: ast.Node = ast.Name(tok.value, **self._at(tok))
        while self.check('DOT'):
            self.advance()
            member = self.expect('IDENT', 'a member name')
            node = ast.Member(node, member.value, **self._at(member))
        return node

    def class_declaration(self) -> ast.ClassDecl:
        tok = self.advance()
        name = self.expect('IDENT', 'a bean name').value
        parent = None
        if self.match('EXTENDS'):
            parent = self.qualified_name()
        self.expect('LBRACE', "'{'")
        fields, methods = [], []
        self.skip_separators()
        while not self.check('RBRACE'):
            if self.check('FN'):
                methods.append(self.function_declaration())
            elif self.check('LET', 'IDENT'):
                self.match('LET')
                field_tok = self.expect('IDENT', 'a field name')
                default = None
                if self.match('ASSIGN'):
                    default = self.expression()
                fields.append(ast.FieldDecl(field_tok.value, default, **self._at(field_tok)))
            else:
                raise self.error("a field, a brew or '}'")
            self.skip_separators()
        self.advance()
        return ast.ClassDecl(name, parent, fields, methods, **self._at(tok))

    def recipe_declaration(self) -> ast.RecipeDecl:
        tok = self.advance()
        name = self.expect('IDENT', 'a recipe name').value
        self.expect('LBRACE', "'{'")
        signatures = []
        self.skip_separators()
        while not self.check('RBRACE'):
            self.match('FN')
            sig_tok = self.expect('IDENT', "a method signature or '}'")
            params = self.parameters()
            return_type = self.return_annotation()
            signatures.append(ast.MethodSignature(sig_tok.value, params, return_type,
                                                  **self._at(sig_tok)))
            self.skip_separators()
        self.advance()
        return ast.RecipeDecl(name, signatures, **self._at(tok))

    def if_statement(self) -> ast.If:
        tok = self.advance()
        condition = self.expression()
        then_body = self.block()
        else_body = None
        if self.match('ELSE'):
            if self.check('IF'):
                else_body = [self.if_statement()]
            else:
                else_body = self.block()
        return ast.If(condition, then_body, else_body, **self._at(tok))

    def while_statement(self) -> ast.While:
        tok = self.advance()
        condition = self.expression()
        return ast.While(condition, self.loop_body(), **self._at(tok))

    def _parenthesised_header(self) -> bool:
        """True when '(' opens a three-clause header: a ';' sits at depth one."""
        if not self.check('LPAREN'):
            return False
        depth = 0
        for tok in self.tokens[self.pos:]:
            if tok.kind in ('LPAREN', 'LBRACKET', 'LBRACE'):
                depth += 1
            elif tok.kind in ('RPAREN', 'RBRACKET', 'RBRACE'):
                depth -= 1
                if depth == 0:
                    return False
            elif tok.kind == 'SEMI' and depth == 1:
                return True
            elif tok.kind == 'EOF':
                return False
        return False

    def for_statement(self) -> ast.Node:
        tok = self.advance()

        # for-each:  pour x in expr { … }
        if tok.kind == 'FOREACH' or (self.check('IDENT') and self.peek().kind == 'IN'):
            var = self.expect('IDENT', 'a loop variable').value
            self.expect('IN', "'in'")
            iterable = self.expression()
            return ast.ForEach(var, iterable, self.loop_body(), **self._at(tok))

        # three-clause:  pour init; cond; update { … }
        parens = self._parenthesised_header()
        if parens:
            self.advance()
        init = None
        if not self.check('SEMI'):
            if self.check('LET'):
                init = self.var_declaration()
            else:
                start = self.current
                init = ast.ExprStmt(self.expression(), **self._at(start))
        self.expect('SEMI', "';'")
        condition = None
        if not self.check('SEMI'):
            condition = self.expression()
        self.expect('SEMI', "';'")
        update = None
        if not self.check('LBRACE', 'RPAREN'):
            update = self.expression()
        if parens:
            self.expect('RPAREN', "')'")
        return ast.For(init, condition, update, self.loop_body(), **self._at(tok))

    def case_label(self):
        negate = self.match('MINUS') is not None
        tok = self.current
        if tok.kind == 'NUMBER':
            self.advance()
            return -tok.value if negate else tok.value
        if negate:
            raise self.error('a number after "-"')
        if tok.kind == 'STRING':
            self.advance()
            return tok.value
        if tok.kind in ('TRUE', 'FALSE', 'NULL'):
            self.advance()
            return {'TRUE': True, 'FALSE': False, 'NULL': None}[tok.kind]
        raise self.error("a literal case label, 'otherwise' or '}'")

    def case_body(self) -> List[ast.Node]:
        if self.check('LBRACE'):
            return self.block()
        # a negative label on the next line starts the next case
        saved, self.single_case = self.single_case, True
        try:
            return [self.statement()]
        finally:
            self.single_case = saved

    def switch_statement(self) -> ast.Switch:
        tok = self.advance()
        subject = self.expression()
        self.expect('LBRACE', "'{'")
        cases, default = [], None
        self.skip_separators()
        while not self.check('RBRACE'):
            if self.check('ELSE', 'DEFAULT'):
                label_tok = self.advance()
                if default is not None:
                    raise ParseError('a single catch-all label', repr(label_tok.value),
                                     label_tok.line, label_tok.column)
                self.expect('COLON', "':'")
                default = self.case_body()
            else:
                label_tok = self.current
                label = self.case_label()
                self.expect('COLON', "':'")
                cases.append(ast.Case(label, self.case_body(), **self._at(label_tok)))
            self.skip_separators()
        self.advance()
        return ast.Switch(subject, cases, default, **self._at(tok))

    def try_statement(self) -> ast.Try:
        tok = self.advance()
        body = self.block()
        self.expect('CATCH', "'if_spilled'")
        error_name = None
        if self.match('LPAREN'):
            error_name = self.expect('IDENT', 'a spill variable name').value
            self.expect('RPAREN', "')'")
        elif self.check('IDENT'):
            error_name = self.advance().value
        handler = self.block()
        return ast.Try(body, error_name, handler, **self._at(tok))

    def return_statement(self) -> ast.Return:
        tok = self.advance()
        value = None
        if self.same_line() and not self.check('SEMI', 'RBRACE', 'EOF'):
            value = self.expression()
        return ast.Return(value, **self._at(tok))

    def import_statement(self) -> ast.ImportStmt:
        tok = self.advance()
        path = self.advance().value
        if self.match('AS'):
            alias = self.expect('IDENT', 'a module alias').value
        else:
            alias = os.path.splitext(os.path.basename(path))[0]
        return ast.ImportStmt(path, alias, **self._at(tok))

    # ── expressions ─────────────────────────────────────────────────────────

    def expression(self) -> ast.Node:
        return self.assignment()

    def assignment(self) -> ast.Node:
        target = self.binary(1)
        if self.check('ASSIGN'):
            tok = self.advance()
            if not isinstance(target, (ast.Name, ast.Member, ast.Index)):
                raise ParseError('an assignable target before ' + repr(tok.value),
                                 repr(tok.value), tok.line, tok.column)
            value = self.assignment()
            return ast.Assign(target, value, **self._at(tok))
        return target

    def binary(self, min_prec: int) -> ast.Node:
        left = self.unary()
        while True:
            prec = BINARY_PRECEDENCE.get(self.current.kind)
            if prec is None or prec < min_prec:
                return left
            if self.single_case and self.check('MINUS') and not self.same_line():
                return left
            tok = self.advance()
            right = self.binary(prec + 1)
            node = ast.Logical if tok.kind in ('AND', 'OR') else ast.Binary
            left = node(tok.kind, left, right, **self._at(tok))

    def unary(self) -> ast.Node:
        if self.check(*_UNARY):
            tok = self.advance()
            return ast.Unary(tok.kind, self.unary(), **self._at(tok))
        return self.postfix()

    def arguments(self) -> List[ast.Node]:
        self.expect('LPAREN', "'('")
        args = []
        if not self.check('RPAREN'):
            while True:
                args.append(self.expression())
                if not self.match('COMMA'):
                    break
        self.expect('RPAREN', "')'")
        return args

    def postfix(self) -> ast.Node:
        expr = self.primary()
        while True:
            if self.check('LPAREN') and self.same_line():
                tok = self.current
                expr = ast.Call(expr, self.arguments(), **self._at(tok))
            elif self.check('DOT'):
                self.advance()
                tok = self.expect('IDENT', 'a member name')
                expr = ast.Member(expr, tok.value, **self._at(tok))
            elif self.check('LBRACKET') and self.same_line():
                tok = self.advance()
                index = self.expression()
                self.expect('RBRACKET', "']'")
                expr = ast.Index(expr, index, **self._at(tok))
            else:
                return expr

    def primary(self) -> ast.Node:
        tok = self.current
        kind = tok.kind
        at = self._at(tok)

        if kind in ('NUMBER', 'STRING'):
            self.advance()
            return ast.Literal(tok.value, **at)
        if kind in ('TRUE', 'FALSE', 'NULL'):
            self.advance()
            return ast.Literal({'TRUE': True, 'FALSE': False, 'NULL': None}[kind], **at)
        if kind == 'IDENT':
            self.advance()
            return ast.Name(tok.value, **at)
        if kind == 'THIS':
            self.advance()
            return ast.This(**at)
        if kind == 'SUPER':
            self.advance()
            if self.match('DOT'):
                name = self.expect('IDENT', 'a parent method name').value
                return ast.SuperMember(name, **at)
            if self.check('LPAREN'):
                return ast.SuperCall(self.arguments(), **at)
            raise self.error("'.' or '(' after 'super'")
        if kind == 'NEW':
            self.advance()
            bean = self.qualified_name()
            args = self.arguments() if self.check('LPAREN') and self.same_line() else []
            return ast.New(bean, args, **at)
        if kind == 'FN':
            self.advance()
            params = self.parameters()
            return_type = self.return_annotation()
            body = self.function_body()
            return ast.FunctionExpr(params, body, return_type, **at)
        if kind == 'IMPORT':
            self.advance()
            path = self.expect('STRING', 'a module path string').value
            return ast.Import(path, **at)
        if kind == 'LPAREN':
            self.advance()
            expr = self.expression()
            self.expect('RPAREN', "')'")
            return expr
        if kind == 'LBRACKET':
            return self.array_literal()
        if kind == 'LBRACE':
            return self.object_literal()
        raise self.error('an expression')

    def array_literal(self) -> ast.ArrayLiteral:
        tok = self.advance()
        elements = []
        while not self.check('RBRACKET'):
            elements.append(self.expression())
            if not self.match('COMMA'):
                break
        self.expect('RBRACKET', "']'")
        return ast.ArrayLiteral(elements, **self._at(tok))

    def object_literal(self) -> ast.ObjectLiteral:
        tok = self.advance()
        entries = []
        while not self.check('RBRACE'):
            key_tok = self.current
            if key_tok.kind not in ('IDENT', 'STRING'):
                raise self.error('an object key')
            self.advance()
            self.expect('COLON', "':'")
            entries.append((key_tok.value, self.expression()))
            if not self.match('COMMA'):
                break
        self.expect('RBRACE', "'}'")
        return ast.ObjectLiteral(entries, **self._at(tok))


def parse(source: Union[str, List[Token]]) -> ast.Program:
    """Parse source text (or an already lexed token list) into a Program."""
    tokens = tokenize(source) if isinstance(source, str) else source
    return Parser(tokens).parse_program()
