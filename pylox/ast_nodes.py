from __future__ import annotations
import itertools
from dataclasses import dataclass, field
from typing import Optional
from .scanner import Token


_node_ids = itertools.count()


def _next_id() -> int:
    return next(_node_ids)


# --------------- Expressions ---------------
# Each expression gets a unique node_id; the resolver's table is keyed by it.

@dataclass
class Literal:
    value: object
    node_id: int = field(default_factory=_next_id, repr=False)

@dataclass
class Grouping:
    expression: object
    node_id: int = field(default_factory=_next_id, repr=False)

@dataclass
class Unary:
    operator: Token
    right: object
    node_id: int = field(default_factory=_next_id, repr=False)

@dataclass
class Binary:
    left: object
    operator: Token
    right: object
    node_id: int = field(default_factory=_next_id, repr=False)

@dataclass
class Logical:
    left: object
    operator: Token
    right: object
    node_id: int = field(default_factory=_next_id, repr=False)

@dataclass
class Variable:
    name: Token
    node_id: int = field(default_factory=_next_id, repr=False)

@dataclass
class Assign:
    name: Token
    value: object
    node_id: int = field(default_factory=_next_id, repr=False)

@dataclass
class Call:
    callee: object
    paren: Token
    arguments: list
    node_id: int = field(default_factory=_next_id, repr=False)

@dataclass
class Get:
    obj: object
    name: Token
    node_id: int = field(default_factory=_next_id, repr=False)

@dataclass
class Set:
    obj: object
    name: Token
    value: object
    node_id: int = field(default_factory=_next_id, repr=False)

@dataclass
class This:
    keyword: Token
    node_id: int = field(default_factory=_next_id, repr=False)

@dataclass
class Super:
    keyword: Token
    method: Token
    node_id: int = field(default_factory=_next_id, repr=False)


# --------------- Statements ---------------

@dataclass
class Expression:
    expression: object

@dataclass
class Print:
    expression: object

@dataclass
class Var:
    name: Token
    initializer: Optional[object] = None

@dataclass
class Block:
    statements: list

@dataclass
class If:
    condition: object
    then_branch: object
    else_branch: Optional[object] = None

@dataclass
class While:
    condition: object
    body: object

@dataclass
class Function:
    name: Token
    params: list[Token]
    body: list

@dataclass
class Return:
    keyword: Token
    value: Optional[object] = None

@dataclass
class Class:
    name: Token
    superclass: Optional[Variable]
    methods: list[Function]
