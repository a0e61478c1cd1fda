from __future__ import annotations
import logging
import math
import sys
from typing import Any, TextIO
from . import ast_nodes as ast
from .errors import LoxRuntimeError, ReturnSignal
from .natives import install_natives
from .runtime import Environment, LoxCallable, LoxClass, LoxFunction, LoxInstance, NativeFunction
from .scanner import TK, Token

logger = logging.getLogger(__name__)


def _is_truthy(v) -> bool:
    return v is not None and v is not False


def _is_equal(a, b) -> bool:
    if a is None:
        return b is None
    # bool is an int subclass; 1 == true must stay false
    if type(a) is not type(b):
        return False
    return a == b


def _check_number_operand(operator: Token, operand):
    if not isinstance(operand, float):
        raise LoxRuntimeError(operator, "Operand must be a number.")


def _check_number_operands(operator: Token, left, right):
    if not (isinstance(left, float) and isinstance(right, float)):
        raise LoxRuntimeError(operator, "Operands must be numbers.")


def _format_number(v: float) -> str:
    if math.isinf(v):
        return "-inf" if v < 0 else "inf"
    if math.isnan(v):
        return "nan"
    # whole numbers print as plain digits up to 1e21, then in exponent form
    if v != 0 and v.is_integer() and abs(v) < 1e21:
        return str(int(v))
    s = repr(v)
    if s.endswith(".0"):
        s = s[:-2]
    return s


def stringify(v) -> str:
    if v is None:
        return "nil"
    if isinstance(v, bool):
        return "true" if v else "false"
    if isinstance(v, float):
        return _format_number(v)
    if isinstance(v, str):
        return v
    return repr(v)


class Interpreter:
    def __init__(
        self,
        stdout: TextIO | None = None,
        stdin: TextIO | None = None,
        max_call_depth: int | None = None,
    ):
        self.globals = Environment()
        self.locals: dict[int, int] = {}
        self.stdout = stdout
        self.stdin = stdin if stdin is not None else sys.stdin
        self.max_call_depth = max_call_depth
        self.call_depth = 0
        self.output: list[str] = []
        install_natives(self)

    # ---- public interface ----

    def interpret(self, statements: list, locals: dict[int, int] | None = None) -> LoxRuntimeError | None:
        """Run statements until the end or the first runtime error, which is returned."""
        if locals:
            self.locals.update(locals)
        try:
            for stmt in statements:
                self._exec_stmt(stmt, self.globals)
        except LoxRuntimeError as e:
            logger.debug("runtime error: %s", e.report())
            return e
        return None

    def evaluate(self, expr, env: Environment | None = None) -> Any:
        return self._eval(expr, env or self.globals)

    def execute_block(self, statements: list, env: Environment):
        for stmt in statements:
            self._exec_stmt(stmt, env)

    # ---- statement execution ----

    def _exec_stmt(self, stmt, env: Environment):
        if isinstance(stmt, ast.Expression):
            self._eval(stmt.expression, env)
        elif isinstance(stmt, ast.Print):
            self._print(stringify(self._eval(stmt.expression, env)))
        elif isinstance(stmt, ast.Var):
            value = None
            if stmt.initializer is not None:
                value = self._eval(stmt.initializer, env)
            env.define(stmt.name.lexeme, value)
        elif isinstance(stmt, ast.Block):
            self.execute_block(stmt.statements, Environment(env))
        elif isinstance(stmt, ast.If):
            if _is_truthy(self._eval(stmt.condition, env)):
                self._exec_stmt(stmt.then_branch, env)
            elif stmt.else_branch is not None:
                self._exec_stmt(stmt.else_branch, env)
        elif isinstance(stmt, ast.While):
            while _is_truthy(self._eval(stmt.condition, env)):
                self._exec_stmt(stmt.body, env)
        elif isinstance(stmt, ast.Function):
            env.define(stmt.name.lexeme, LoxFunction(stmt, env, False))
        elif isinstance(stmt, ast.Return):
            value = None
            if stmt.value is not None:
                value = self._eval(stmt.value, env)
            raise ReturnSignal(value)
        elif isinstance(stmt, ast.Class):
            self._exec_class(stmt, env)
        else:
            raise TypeError(f"cannot execute statement: {type(stmt).__name__}")

    def _print(self, line: str):
        self.output.append(line)
        if self.stdout is not None:
            self.stdout.write(line + "\n")

    def _exec_class(self, stmt: ast.Class, env: Environment):
        superclass = None
        if stmt.superclass is not None:
            superclass = self._eval(stmt.superclass, env)
            if not isinstance(superclass, LoxClass):
                raise LoxRuntimeError(stmt.superclass.name, "Superclass must be a class.")

        # declared first so methods can refer to the class by name
        env.define(stmt.name.lexeme, None)

        method_env = env
        if superclass is not None:
            method_env = Environment(env)
            method_env.define("super", superclass)

        methods: dict[str, LoxFunction] = {}
        for method in stmt.methods:
            is_init = method.name.lexeme == "init"
            methods[method.name.lexeme] = LoxFunction(method, method_env, is_init)

        klass = LoxClass(stmt.name.lexeme, superclass, methods)
        env.assign(stmt.name, klass)

    # ---- expression evaluation ----

    def _eval(self, node, env: Environment) -> Any:
        if isinstance(node, ast.Literal):
            return node.value
        if isinstance(node, ast.Grouping):
            return self._eval(node.expression, env)
        if isinstance(node, ast.Variable):
            return self._look_up_variable(node.name, node, env)
        if isinstance(node, ast.Assign):
            value = self._eval(node.value, env)
            distance = self.locals.get(node.node_id)
            if distance is not None:
                env.assign_at(distance, node.name, value)
            else:
                self.globals.assign(node.name, value)
            return value
        if isinstance(node, ast.Logical):
            left = self._eval(node.left, env)
            if node.operator.kind == TK.OR:
                if _is_truthy(left):
                    return left
            elif not _is_truthy(left):
                return left
            return self._eval(node.right, env)
        if isinstance(node, ast.Binary):
            return self._eval_binary(node, env)
        if isinstance(node, ast.Unary):
            return self._eval_unary(node, env)
        if isinstance(node, ast.Call):
            return self._eval_call(node, env)
        if isinstance(node, ast.Get):
            obj = self._eval(node.obj, env)
            if isinstance(obj, LoxInstance):
                return obj.get(node.name)
            raise LoxRuntimeError(node.name, "Only instances have properties.")
        if isinstance(node, ast.Set):
            obj = self._eval(node.obj, env)
            if not isinstance(obj, LoxInstance):
                raise LoxRuntimeError(node.name, "Only instances have fields.")
            value = self._eval(node.value, env)
            obj.set(node.name, value)
            return value
        if isinstance(node, ast.This):
            return self._look_up_variable(node.keyword, node, env)
        if isinstance(node, ast.Super):
            return self._eval_super(node, env)
        raise TypeError(f"cannot evaluate node: {type(node).__name__}")

    def _look_up_variable(self, name: Token, node, env: Environment):
        distance = self.locals.get(node.node_id)
        if distance is not None:
            return env.get_at(distance, name.lexeme)
        return self.globals.get(name)

    def _eval_binary(self, node: ast.Binary, env: Environment):
        left = self._eval(node.left, env)
        right = self._eval(node.right, env)
        op = node.operator
        k = op.kind

        if k == TK.EQ:
            return _is_equal(left, right)
        if k == TK.NEQ:
            return not _is_equal(left, right)

        if k == TK.PLUS:
            if isinstance(left, float) and isinstance(right, float):
                return left + right
            if isinstance(left, str) and isinstance(right, str):
                return left + right
            raise LoxRuntimeError(op, "Operands must be two numbers or two strings.")

        _check_number_operands(op, left, right)
        if k == TK.MINUS:
            return left - right
        if k == TK.STAR:
            return left * right
        if k == TK.SLASH:
            return self._divide(left, right)
        if k == TK.GT:
            return left > right
        if k == TK.GE:
            return left >= right
        if k == TK.LT:
            return left < right
        if k == TK.LE:
            return left <= right

        raise LoxRuntimeError(op, f"Unknown binary operator '{op.lexeme}'.")

    def _divide(self, a: float, b: float) -> float:
        # IEEE semantics instead of Python's ZeroDivisionError
        if b == 0:
            if a == 0 or math.isnan(a):
                return math.nan
            return math.copysign(math.inf, a) * math.copysign(1, b)
        return a / b

    def _eval_unary(self, node: ast.Unary, env: Environment):
        right = self._eval(node.right, env)
        if node.operator.kind == TK.BANG:
            return not _is_truthy(right)
        if node.operator.kind == TK.MINUS:
            _check_number_operand(node.operator, right)
            return -right
        raise LoxRuntimeError(node.operator, f"Unknown unary operator '{node.operator.lexeme}'.")

    def _eval_call(self, node: ast.Call, env: Environment):
        callee = self._eval(node.callee, env)
        arguments = [self._eval(arg, env) for arg in node.arguments]

        if not isinstance(callee, LoxCallable):
            raise LoxRuntimeError(node.paren, "Can only call functions and classes.")
        if len(arguments) != callee.arity():
            raise LoxRuntimeError(
                node.paren,
                f"Expected {callee.arity()} arguments but got {len(arguments)}.",
            )
        return self._call_function(callee, arguments, node.paren)

    def _call_function(self, func: LoxCallable, arguments: list, paren: Token):
        if isinstance(func, NativeFunction):
            return func.call(self, arguments)

        self.call_depth += 1
        try:
            if self.max_call_depth is not None and self.call_depth > self.max_call_depth:
                raise LoxRuntimeError(paren, "Stack overflow.")
            return func.call(self, arguments)
        except RecursionError:
            raise LoxRuntimeError(paren, "Stack overflow.")
        finally:
            self.call_depth -= 1

    def _eval_super(self, node: ast.Super, env: Environment):
        distance = self.locals[node.node_id]
        superclass = env.get_at(distance, "super")
        # 'this' is always bound one environment inside 'super'
        obj = env.get_at(distance - 1, "this")
        method = superclass.find_method(node.method.lexeme)
        if method is None:
            raise LoxRuntimeError(node.method, f"Undefined property '{node.method.lexeme}'.")
        return method.bind(obj)
