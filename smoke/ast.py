"""Abstract Syntax Tree (AST) definitions for the Smoke language.

Smoke is expression-only: every node evaluates to a value. A parsed
submission is a :class:`Program`, a sequence of expressions evaluated in
the caller's current scope. Blocks and parenthesised expressions are
:class:`Grouping` nodes, which evaluate in a fresh scope.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import List

from .values import Value


class Operator(Enum):
    # Unaries
    NOT = '!'
    NEGATE = 'neg'

    # Binaries
    EQUAL = '=='
    NOT_EQUAL = '!='
    GREATER = '>'
    GREATER_EQUAL = '>='
    LESS = '<'
    LESS_EQUAL = '<='
    ADD = '+'
    SUBTRACT = '-'
    MULTIPLY = '*'
    DIVIDE = '/'


COMPARISON_OPERATORS = frozenset({
    Operator.GREATER, Operator.GREATER_EQUAL, Operator.LESS, Operator.LESS_EQUAL,
})
ARITHMETIC_OPERATORS = frozenset({
    Operator.ADD, Operator.SUBTRACT, Operator.MULTIPLY, Operator.DIVIDE,
})


@dataclass
class Node:
    """Base class for all AST nodes."""
    pass


@dataclass
class Program(Node):
    body: List[Node]


@dataclass
class Literal(Node):
    value: Value


@dataclass
class Declaration(Node):
    name: str
    value: Node


@dataclass
class Reference(Node):
    name: str


@dataclass
class Grouping(Node):
    children: List[Node]


@dataclass
class Operation(Node):
    """Common base of unary and binary operations."""
    pass


@dataclass
class Unary(Operation):
    operator: Operator
    operand: Node


@dataclass
class Binary(Operation):
    operator: Operator
    left: Node
    right: Node


@dataclass
class Function(Node):
    parameters: List[str]
    body: Node


@dataclass
class FunctionApplication(Node):
    callee: Node
    arguments: List[Node]
