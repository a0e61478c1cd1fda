from __future__ import annotations
from typing import Any, Callable, TYPE_CHECKING
from .errors import LoxRuntimeError, ReturnSignal
from .scanner import Token

if TYPE_CHECKING:
    from . import ast_nodes as ast
    from .interpreter import Interpreter


class Environment:
    __slots__ = ("values", "enclosing")

    def __init__(self, enclosing: Environment | None = None):
        self.values: dict[str, Any] = {}
        self.enclosing = enclosing

    def define(self, name: str, value):
        self.values[name] = value

    def get(self, name: Token):
        env = self
        while env is not None:
            if name.lexeme in env.values:
                return env.values[name.lexeme]
            env = env.enclosing
        raise LoxRuntimeError(name, f"Undefined variable '{name.lexeme}'.")

    def assign(self, name: Token, value):
        env = self
        while env is not None:
            if name.lexeme in env.values:
                env.values[name.lexeme] = value
                return
            env = env.enclosing
        raise LoxRuntimeError(name, f"Undefined variable '{name.lexeme}'.")

    def ancestor(self, distance: int) -> Environment:
        env = self
        for _ in range(distance):
            env = env.enclosing
        return env

    # The resolver already proved the name lives exactly `distance` hops out.

    def get_at(self, distance: int, name: str):
        return self.ancestor(distance).values[name]

    def assign_at(self, distance: int, name: Token, value):
        self.ancestor(distance).values[name.lexeme] = value


class LoxCallable:
    __slots__ = ()

    def arity(self) -> int:
        raise NotImplementedError

    def call(self, interpreter: Interpreter, arguments: list) -> Any:
        raise NotImplementedError


class NativeFunction(LoxCallable):
    __slots__ = ("name", "n_params", "func")

    def __init__(self, name: str, n_params: int, func: Callable):
        self.name = name
        self.n_params = n_params
        self.func = func

    def arity(self) -> int:
        return self.n_params

    def call(self, interpreter, arguments):
        return self.func(arguments)

    def __repr__(self):
        return "<native fn>"


class LoxFunction(LoxCallable):
    __slots__ = ("declaration", "closure", "is_initializer")

    def __init__(self, declaration: ast.Function, closure: Environment, is_initializer: bool = False):
        self.declaration = declaration
        self.closure = closure
        self.is_initializer = is_initializer

    @property
    def name(self) -> str:
        return self.declaration.name.lexeme

    def bind(self, instance: LoxInstance) -> LoxFunction:
        env = Environment(self.closure)
        env.define("this", instance)
        return LoxFunction(self.declaration, env, self.is_initializer)

    def arity(self) -> int:
        return len(self.declaration.params)

    def call(self, interpreter, arguments):
        env = Environment(self.closure)
        for param, arg in zip(self.declaration.params, arguments):
            env.define(param.lexeme, arg)

        try:
            interpreter.execute_block(self.declaration.body, env)
        except ReturnSignal as ret:
            if self.is_initializer:
                return self.closure.get_at(0, "this")
            return ret.value

        if self.is_initializer:
            return self.closure.get_at(0, "this")
        return None

    def __repr__(self):
        return f"<fn {self.name}>"


class LoxClass(LoxCallable):
    __slots__ = ("name", "superclass", "methods")

    def __init__(self, name: str, superclass: LoxClass | None, methods: dict[str, LoxFunction]):
        self.name = name
        self.superclass = superclass
        self.methods = methods

    def find_method(self, name: str) -> LoxFunction | None:
        klass = self
        while klass is not None:
            if name in klass.methods:
                return klass.methods[name]
            klass = klass.superclass
        return None

    def arity(self) -> int:
        initializer = self.find_method("init")
        if initializer is None:
            return 0
        return initializer.arity()

    def call(self, interpreter, arguments):
        instance = LoxInstance(self)
        initializer = self.find_method("init")
        if initializer is not None:
            initializer.bind(instance).call(interpreter, arguments)
        return instance

    def __repr__(self):
        return self.name


class LoxInstance:
    __slots__ = ("klass", "fields")

    def __init__(self, klass: LoxClass):
        self.klass = klass
        self.fields: dict[str, Any] = {}

    def get(self, name: Token):
        if name.lexeme in self.fields:
            return self.fields[name.lexeme]

        # bound afresh on every access
        method = self.klass.find_method(name.lexeme)
        if method is not None:
            return method.bind(self)

        raise LoxRuntimeError(name, f"Undefined property '{name.lexeme}'.")

    def set(self, name: Token, value):
        self.fields[name.lexeme] = value

    def __repr__(self):
        return f"{self.klass.name} instance"
