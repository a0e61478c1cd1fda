from __future__ import annotations
from . import ast_nodes as ast


class AstPrinter:
    """Renders nodes as parenthesized prefix forms, e.g. ``(+ 1 (* 2 3))``."""

    def print(self, node) -> str:
        if isinstance(node, (
            ast.Expression, ast.Print, ast.Var, ast.Block, ast.If, ast.While,
            ast.Function, ast.Return, ast.Class,
        )):
            return self._stmt(node)
        return self._expr(node)

    def _parenthesize(self, name: str, *parts) -> str:
        inner = " ".join(p if isinstance(p, str) else self.print(p) for p in parts)
        return f"({name} {inner})" if inner else f"({name})"

    def _stmt(self, stmt) -> str:
        if isinstance(stmt, ast.Expression):
            return self._parenthesize(";", stmt.expression)
        if isinstance(stmt, ast.Print):
            return self._parenthesize("print", stmt.expression)
        if isinstance(stmt, ast.Var):
            if stmt.initializer is None:
                return self._parenthesize("var", stmt.name.lexeme)
            return self._parenthesize("var", stmt.name.lexeme, "=", stmt.initializer)
        if isinstance(stmt, ast.Block):
            return self._parenthesize("block", *stmt.statements)
        if isinstance(stmt, ast.If):
            if stmt.else_branch is None:
                return self._parenthesize("if", stmt.condition, stmt.then_branch)
            return self._parenthesize("if-else", stmt.condition, stmt.then_branch, stmt.else_branch)
        if isinstance(stmt, ast.While):
            return self._parenthesize("while", stmt.condition, stmt.body)
        if isinstance(stmt, ast.Function):
            params = "(" + " ".join(p.lexeme for p in stmt.params) + ")"
            return self._parenthesize(f"fun {stmt.name.lexeme}{params}", *stmt.body)
        if isinstance(stmt, ast.Return):
            if stmt.value is None:
                return "(return)"
            return self._parenthesize("return", stmt.value)
        if isinstance(stmt, ast.Class):
            name = f"class {stmt.name.lexeme}"
            if stmt.superclass is not None:
                name += f" < {stmt.superclass.name.lexeme}"
            return self._parenthesize(name, *stmt.methods)
        raise TypeError(f"cannot print statement: {type(stmt).__name__}")

    def _expr(self, expr) -> str:
        if isinstance(expr, ast.Literal):
            if expr.value is None:
                return "nil"
            if isinstance(expr.value, bool):
                return "true" if expr.value else "false"
            if isinstance(expr.value, str):
                return f'"{expr.value}"'
            return repr(expr.value)
        if isinstance(expr, ast.Grouping):
            return self._parenthesize("group", expr.expression)
        if isinstance(expr, ast.Unary):
            return self._parenthesize(expr.operator.lexeme, expr.right)
        if isinstance(expr, (ast.Binary, ast.Logical)):
            return self._parenthesize(expr.operator.lexeme, expr.left, expr.right)
        if isinstance(expr, ast.Variable):
            return expr.name.lexeme
        if isinstance(expr, ast.Assign):
            return self._parenthesize("=", expr.name.lexeme, expr.value)
        if isinstance(expr, ast.Call):
            return self._parenthesize("call", expr.callee, *expr.arguments)
        if isinstance(expr, ast.Get):
            return self._parenthesize(".", expr.obj, expr.name.lexeme)
        if isinstance(expr, ast.Set):
            return self._parenthesize("=", expr.obj, expr.name.lexeme, expr.value)
        if isinstance(expr, ast.This):
            return "this"
        if isinstance(expr, ast.Super):
            return self._parenthesize("super", expr.method.lexeme)
        raise TypeError(f"cannot print expression: {type(expr).__name__}")
