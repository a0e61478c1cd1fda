from __future__ import annotations
import inspect
import logging
from typing import Any, TextIO
from .errors import LoxRuntimeError, LoxStaticError, LoxSyntaxError
from .interpreter import Interpreter
from .parser import Parser
from .printer import AstPrinter
from .resolver import Resolver
from .runtime import LoxCallable, NativeFunction
from .scanner import TK, Scanner, Token

logger = logging.getLogger(__name__)

# call site reported for Lox functions invoked from Python
_HOST_CALL = Token(TK.RPAREN, ")", None, 0)


class LoxSession:
    """A Lox execution session whose globals persist across runs.

    Args:
        stdout: Stream that printed lines are also written to (default: none,
            output is only captured).
        stdin: Stream ``readLine()`` reads from (default: ``sys.stdin``).
        max_call_depth: Max function call nesting depth (default: unbounded).
    """

    def __init__(
        self,
        stdout: TextIO | None = None,
        stdin: TextIO | None = None,
        max_call_depth: int | None = None,
    ):
        self.interpreter = Interpreter(
            stdout=stdout,
            stdin=stdin,
            max_call_depth=max_call_depth,
        )
        self.had_static_error = False
        self.had_runtime_error = False

    @property
    def output(self) -> list[str]:
        return self.interpreter.output

    def compile(self, code: str) -> tuple[list, dict[int, int], list[LoxSyntaxError]]:
        """Scan, parse and resolve; returns statements, locals and static errors."""
        scanner = Scanner(code)
        logger.debug("scanned %d tokens", len(scanner.tokens))
        for tok in scanner.tokens:
            logger.debug("  %r", tok)

        parser = Parser(scanner.tokens)
        statements = parser.parse()
        logger.debug("parsed %d statements", len(statements))
        if logger.isEnabledFor(logging.DEBUG):
            printer = AstPrinter()
            for stmt in statements:
                logger.debug("  %s", printer.print(stmt))

        errors = scanner.errors + parser.errors
        if errors:
            return statements, {}, errors

        resolver = Resolver()
        locals = resolver.resolve(statements)
        logger.debug("resolved %d local references", len(locals))
        return statements, locals, resolver.errors

    def _run(self, code: str) -> tuple[list[LoxSyntaxError], LoxRuntimeError | None]:
        self.interpreter.output = []
        self.had_static_error = False
        self.had_runtime_error = False

        statements, locals, errors = self.compile(code)
        if errors:
            self.had_static_error = True
            return errors, None

        error = self.interpreter.interpret(statements, locals)
        self.had_runtime_error = error is not None
        return [], error

    def run(self, code: str) -> list[str]:
        """Run code, returning formatted diagnostics instead of raising."""
        errors, runtime_error = self._run(code)
        if runtime_error is not None:
            return [runtime_error.report()]
        return [str(e) for e in errors]

    def execute(self, code: str) -> str:
        """Execute Lox code and return captured output as a string."""
        errors, runtime_error = self._run(code)
        if errors:
            raise LoxStaticError(errors)
        if runtime_error is not None:
            raise runtime_error
        return "\n".join(self.interpreter.output)

    def eval(self, expression: str) -> Any:
        """Evaluate a single Lox expression against the globals."""
        scanner = Scanner(expression)
        parser = Parser(scanner.tokens)
        expr = parser.parse_expression()
        errors = scanner.errors + parser.errors
        if not errors:
            resolver = Resolver()
            resolver.resolve_expression(expr)
            errors = resolver.errors
        if errors:
            raise LoxStaticError(errors)
        return self._to_python(self.interpreter.evaluate(expr))

    def set(self, name: str, value: Any):
        """Define a global variable from a Python value."""
        self.interpreter.globals.define(name, self._to_lox(name, value))

    def get(self, name: str) -> Any:
        """Get a global variable as a Python value."""
        return self._to_python(self.interpreter.globals.values.get(name))

    def _to_lox(self, name: str, value: Any) -> Any:
        if value is None or isinstance(value, (bool, str, float)):
            return value
        if isinstance(value, int):
            return float(value)
        if isinstance(value, LoxCallable):
            return value
        if hasattr(value, "lox_callable"):
            return value.lox_callable
        if callable(value):
            arity = len(inspect.signature(value).parameters)

            def wrapper(args):
                return self._to_lox(name, value(*[self._to_python(a) for a in args]))

            return NativeFunction(name, arity, wrapper)
        raise TypeError(f"cannot convert {type(value).__name__} to a Lox value")

    def _to_python(self, value: Any) -> Any:
        if isinstance(value, LoxCallable):
            return self._function_to_python(value)
        return value

    def _function_to_python(self, func: LoxCallable):
        interp = self.interpreter

        def wrapper(*args):
            if len(args) != func.arity():
                raise TypeError(f"expected {func.arity()} arguments but got {len(args)}")
            lox_args = [self._to_lox("?", a) for a in args]
            return self._to_python(interp._call_function(func, lox_args, _HOST_CALL))

        wrapper.lox_callable = func
        return wrapper
