from __future__ import annotations
from enum import Enum, auto
from . import ast_nodes as ast
from .errors import LoxSyntaxError
from .scanner import Token


class FunctionType(Enum):
    NONE = auto()
    FUNCTION = auto()
    INITIALIZER = auto()
    METHOD = auto()


class ClassType(Enum):
    NONE = auto()
    CLASS = auto()
    SUBCLASS = auto()


class Resolver:
    """Static pass computing how many scopes away each local variable lives.

    The result maps expression node ids to hop counts. Variables that are
    not found in any enclosing scope are left out and treated as globals
    by the interpreter.
    """

    def __init__(self):
        self.scopes: list[dict[str, bool]] = []
        self.locals: dict[int, int] = {}
        self.errors: list[LoxSyntaxError] = []
        self.current_function = FunctionType.NONE
        self.current_class = ClassType.NONE

    # ---- public interface ----

    def resolve(self, statements: list) -> dict[int, int]:
        for stmt in statements:
            self._resolve_stmt(stmt)
        return self.locals

    def resolve_expression(self, expr) -> dict[int, int]:
        self._resolve_expr(expr)
        return self.locals

    # ---- helpers ----

    def _error(self, token: Token, msg: str):
        self.errors.append(LoxSyntaxError.at(token, msg))

    def _begin_scope(self):
        self.scopes.append({})

    def _end_scope(self):
        self.scopes.pop()

    def _declare(self, name: Token):
        if not self.scopes:
            return
        scope = self.scopes[-1]
        if name.lexeme in scope:
            self._error(name, "Already a variable with this name in this scope.")
        scope[name.lexeme] = False

    def _define(self, name: Token):
        if not self.scopes:
            return
        self.scopes[-1][name.lexeme] = True

    def _resolve_local(self, expr, name: Token):
        for depth, scope in enumerate(reversed(self.scopes)):
            if name.lexeme in scope:
                self.locals[expr.node_id] = depth
                return

    def _resolve_function(self, function: ast.Function, kind: FunctionType):
        enclosing = self.current_function
        self.current_function = kind

        self._begin_scope()
        for param in function.params:
            self._declare(param)
            self._define(param)
        for stmt in function.body:
            self._resolve_stmt(stmt)
        self._end_scope()

        self.current_function = enclosing

    # ---- statements ----

    def _resolve_stmt(self, stmt):
        if isinstance(stmt, ast.Block):
            self._begin_scope()
            for inner in stmt.statements:
                self._resolve_stmt(inner)
            self._end_scope()
        elif isinstance(stmt, ast.Var):
            self._declare(stmt.name)
            if stmt.initializer is not None:
                self._resolve_expr(stmt.initializer)
            self._define(stmt.name)
        elif isinstance(stmt, ast.Function):
            # defined before the body so the function can call itself
            self._declare(stmt.name)
            self._define(stmt.name)
            self._resolve_function(stmt, FunctionType.FUNCTION)
        elif isinstance(stmt, ast.Class):
            self._resolve_class(stmt)
        elif isinstance(stmt, ast.Expression):
            self._resolve_expr(stmt.expression)
        elif isinstance(stmt, ast.Print):
            self._resolve_expr(stmt.expression)
        elif isinstance(stmt, ast.If):
            self._resolve_expr(stmt.condition)
            self._resolve_stmt(stmt.then_branch)
            if stmt.else_branch is not None:
                self._resolve_stmt(stmt.else_branch)
        elif isinstance(stmt, ast.While):
            self._resolve_expr(stmt.condition)
            self._resolve_stmt(stmt.body)
        elif isinstance(stmt, ast.Return):
            self._resolve_return(stmt)
        else:
            raise TypeError(f"cannot resolve statement: {type(stmt).__name__}")

    def _resolve_return(self, stmt: ast.Return):
        if self.current_function == FunctionType.NONE:
            self._error(stmt.keyword, "Can't return from top-level code.")
        if stmt.value is not None:
            if self.current_function == FunctionType.INITIALIZER:
                self._error(stmt.keyword, "Can't return a value from an initializer.")
            self._resolve_expr(stmt.value)

    def _resolve_class(self, stmt: ast.Class):
        enclosing = self.current_class
        self.current_class = ClassType.CLASS

        self._declare(stmt.name)
        self._define(stmt.name)

        if stmt.superclass is not None:
            if stmt.superclass.name.lexeme == stmt.name.lexeme:
                self._error(stmt.superclass.name, "A class can't inherit from itself.")
            self.current_class = ClassType.SUBCLASS
            self._resolve_expr(stmt.superclass)
            self._begin_scope()
            self.scopes[-1]["super"] = True

        self._begin_scope()
        self.scopes[-1]["this"] = True

        for method in stmt.methods:
            kind = FunctionType.METHOD
            if method.name.lexeme == "init":
                kind = FunctionType.INITIALIZER
            self._resolve_function(method, kind)

        self._end_scope()
        if stmt.superclass is not None:
            self._end_scope()

        self.current_class = enclosing

    # ---- expressions ----

    def _resolve_expr(self, expr):
        if isinstance(expr, ast.Variable):
            if self.scopes and self.scopes[-1].get(expr.name.lexeme) is False:
                self._error(expr.name, "Can't read local variable in its own initializer.")
            self._resolve_local(expr, expr.name)
        elif isinstance(expr, ast.Assign):
            self._resolve_expr(expr.value)
            self._resolve_local(expr, expr.name)
        elif isinstance(expr, (ast.Binary, ast.Logical)):
            self._resolve_expr(expr.left)
            self._resolve_expr(expr.right)
        elif isinstance(expr, ast.Unary):
            self._resolve_expr(expr.right)
        elif isinstance(expr, ast.Grouping):
            self._resolve_expr(expr.expression)
        elif isinstance(expr, ast.Literal):
            pass
        elif isinstance(expr, ast.Call):
            self._resolve_expr(expr.callee)
            for arg in expr.arguments:
                self._resolve_expr(arg)
        elif isinstance(expr, ast.Get):
            # property names are looked up dynamically
            self._resolve_expr(expr.obj)
        elif isinstance(expr, ast.Set):
            self._resolve_expr(expr.value)
            self._resolve_expr(expr.obj)
        elif isinstance(expr, ast.This):
            if self.current_class == ClassType.NONE:
                self._error(expr.keyword, "Can't use 'this' outside of a class.")
                return
            self._resolve_local(expr, expr.keyword)
        elif isinstance(expr, ast.Super):
            if self.current_class == ClassType.NONE:
                self._error(expr.keyword, "Can't use 'super' outside of a class.")
            elif self.current_class != ClassType.SUBCLASS:
                self._error(expr.keyword, "Can't use 'super' in a class with no superclass.")
            self._resolve_local(expr, expr.keyword)
        else:
            raise TypeError(f"cannot resolve expression: {type(expr).__name__}")
