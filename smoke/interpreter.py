"""Tree-walking interpreter for the Smoke language.

The :class:`Interpreter` evaluates AST nodes by structural recursion over
an :class:`~smoke.environment.Environment` it is given (or owns). Keeping
one interpreter, and so one environment, alive across submissions is what
lets ``let`` bindings persist between REPL lines.

Scopes pushed for blocks and calls are popped on every exit path, errors
included, so a failed evaluation leaves the scope stack as it found it.
"""

from __future__ import annotations

import math
from typing import IO, Any, Callable, List, Optional

from .ast import (
    ARITHMETIC_OPERATORS, COMPARISON_OPERATORS,
    Program, Literal, Declaration, Reference, Grouping, Unary, Binary,
    Function, FunctionApplication, Node, Operator,
)
from .environment import Environment
from .errors import (
    ArityError, DivisionByZeroError, InternalError, RecursionDepthError, TypeMismatchError,
)
from .parser import parse_source
from .values import (
    NIL, BoolVal, FloatVal, FunctionVal, IntVal, NumberValue, Value,
    coerce_numbers, make_integer, to_string, type_name, values_equal,
)


DEFAULT_MAX_DEPTH = 200


def truncating_divide(a: int, b: int) -> int:
    """Integer division rounding toward zero, as 64-bit hardware does."""
    if b == 0:
        raise DivisionByZeroError()
    quotient = abs(a) // abs(b)
    return -quotient if (a < 0) != (b < 0) else quotient


def float_divide(a: float, b: float) -> float:
    # Python raises on a zero divisor; IEEE 754 gives an infinity or nan.
    if b == 0.0:
        if a == 0.0 or math.isnan(a):
            return math.nan
        return math.copysign(math.inf, a) * math.copysign(1.0, b)
    return a / b


def apply_arithmetic(op: Operator, a: NumberValue, b: NumberValue) -> Value:
    if isinstance(a, IntVal):
        x, y = a.value, b.value
        if op is Operator.ADD:
            return make_integer(x + y, 'addition')
        if op is Operator.SUBTRACT:
            return make_integer(x - y, 'subtraction')
        if op is Operator.MULTIPLY:
            return make_integer(x * y, 'multiplication')
        if op is Operator.DIVIDE:
            return make_integer(truncating_divide(x, y), 'division')
    else:
        x, y = a.value, b.value
        if op is Operator.ADD:
            return FloatVal(x + y)
        if op is Operator.SUBTRACT:
            return FloatVal(x - y)
        if op is Operator.MULTIPLY:
            return FloatVal(x * y)
        if op is Operator.DIVIDE:
            return FloatVal(float_divide(x, y))
    raise InternalError(f"{op.name} is not an arithmetic operator")


def apply_comparison(op: Operator, a: NumberValue, b: NumberValue) -> BoolVal:
    x, y = a.value, b.value
    if op is Operator.GREATER:
        return BoolVal(x > y)
    if op is Operator.GREATER_EQUAL:
        return BoolVal(x >= y)
    if op is Operator.LESS:
        return BoolVal(x < y)
    if op is Operator.LESS_EQUAL:
        return BoolVal(x <= y)
    raise InternalError(f"{op.name} is not a comparison operator")


class Interpreter:
    """Evaluates Smoke ASTs against a long-lived environment."""
    def __init__(self, debug_level: int = 0, debug_file: str = 'debug.txt',
                 max_depth: int = DEFAULT_MAX_DEPTH, environment: Optional[Environment] = None):
        self.environment = environment if environment is not None else Environment()
        self.debug_level = debug_level
        self.debug_file = debug_file
        self.debug_fp: Optional[IO[str]] = None
        self.max_depth = max_depth
        self.depth = 0

    def debug(self, msg: str):
        if self.debug_level > 0:
            if self.debug_fp is None:
                self.debug_fp = open(self.debug_file, 'w', encoding='utf-8')
            self.debug_fp.write(msg + '\n')
            self.debug_fp.flush()

    def close(self):
        if self.debug_fp:
            self.debug_fp.close()
            self.debug_fp = None

    # Public API
    def run(self, program: Program, env: Optional[Environment] = None) -> Value:
        result = self.evaluate(program, env)
        if self.debug_level >= 1:
            self.debug(f"result: {to_string(result, quote_strings=True)}")
        return result

    def run_source(self, source: str, origin: str = 'file', path: Optional[str] = None,
                   parse: Callable[..., Program] = parse_source) -> Value:
        if self.debug_level >= 1:
            self.debug(f"submit: {source.strip()}")
        return self.run(parse(source, origin=origin, path=path))

    def evaluate(self, node: Node, env: Optional[Environment] = None) -> Value:
        if env is None:
            env = self.environment
        entry_depth = env.depth
        try:
            return self.eval_node(node, env)
        except RecursionError:
            env.unwind(entry_depth)
            raise RecursionDepthError('evaluation') from None

    def eval_node(self, node: Node, env: Environment) -> Value:
        self.depth += 1
        try:
            if self.depth > self.max_depth:
                raise RecursionDepthError('evaluation', self.max_depth)
            if self.debug_level >= 3:
                self.debug(f"{'  ' * self.depth}eval {type(node).__name__}")
            return self.dispatch(node, env)
        finally:
            self.depth -= 1

    def dispatch(self, node: Node, env: Environment) -> Value:
        if isinstance(node, Literal):
            return node.value
        if isinstance(node, Reference):
            return env.lookup(node.name).get()
        if isinstance(node, Binary):
            return self.eval_binary(node, env)
        if isinstance(node, Unary):
            return self.eval_unary(node, env)
        if isinstance(node, Declaration):
            value = self.eval_node(node.value, env)
            env.declare(node.name, value)
            if self.debug_level >= 2:
                self.debug(f"declare {node.name}: {type_name(value)} = {to_string(value, True)}")
            return NIL
        if isinstance(node, Grouping):
            return self.eval_grouping(node, env)
        if isinstance(node, Function):
            return FunctionVal(tuple(node.parameters), node.body)
        if isinstance(node, FunctionApplication):
            return self.eval_application(node, env)
        if isinstance(node, Program):
            return self.eval_sequence(node.body, env)
        raise InternalError(f"cannot evaluate node {type(node).__name__}")

    def eval_sequence(self, nodes: List[Node], env: Environment) -> Value:
        # the first failure aborts the remaining siblings
        result: Value = NIL
        for child in nodes:
            result = self.eval_node(child, env)
        return result

    def eval_grouping(self, node: Grouping, env: Environment) -> Value:
        try:
            with env.scope():
                if self.debug_level >= 2:
                    self.debug(f"push scope (depth {env.depth})")
                return self.eval_sequence(node.children, env)
        finally:
            if self.debug_level >= 2:
                self.debug(f"pop scope (depth {env.depth})")

    def eval_unary(self, node: Unary, env: Environment) -> Value:
        operand = self.eval_node(node.operand, env)
        if node.operator is Operator.NOT:
            if not isinstance(operand, BoolVal):
                raise TypeMismatchError('Bool', type_name(operand))
            return BoolVal(not operand.value)
        if node.operator is Operator.NEGATE:
            if isinstance(operand, IntVal):
                return make_integer(-operand.value, 'negation')
            if isinstance(operand, FloatVal):
                return FloatVal(-operand.value)
            raise TypeMismatchError('Integer or Float', type_name(operand))
        raise InternalError(f"{node.operator.name} is not a unary operator")

    def eval_binary(self, node: Binary, env: Environment) -> Value:
        left = self.eval_node(node.left, env)
        right = self.eval_node(node.right, env)
        op = node.operator
        if op is Operator.EQUAL:
            return BoolVal(values_equal(left, right))
        if op is Operator.NOT_EQUAL:
            return BoolVal(not values_equal(left, right))
        a, b = coerce_numbers(left, right)
        if op in COMPARISON_OPERATORS:
            return apply_comparison(op, a, b)
        if op in ARITHMETIC_OPERATORS:
            return apply_arithmetic(op, a, b)
        raise InternalError(f"{op.name} is not a binary operator")

    def eval_application(self, node: FunctionApplication, env: Environment) -> Value:
        callee = self.eval_node(node.callee, env)
        if not isinstance(callee, FunctionVal):
            raise TypeMismatchError('Function', type_name(callee))
        args = [self.eval_node(arg, env) for arg in node.arguments]
        if len(args) != len(callee.parameters):
            raise ArityError(len(callee.parameters), len(args))
        if self.debug_level >= 2:
            rendered = ', '.join(to_string(a, True) for a in args)
            self.debug(f"call {to_string(callee)} with ({rendered})")
        with env.scope(dict(zip(callee.parameters, args))):
            return self.eval_node(callee.body, env)


def evaluate(node: Node, environment: Environment, **options: Any) -> Value:
    """Evaluate ``node`` against a caller-owned environment."""
    return Interpreter(environment=environment, **options).evaluate(node)


def run_source(source: str, debug_level: int = 0) -> Value:
    """Convenience function to parse and evaluate Smoke source in a fresh environment."""
    interpreter = Interpreter(debug_level=debug_level)
    try:
        return interpreter.run_source(source)
    finally:
        interpreter.close()
