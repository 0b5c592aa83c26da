"""Runtime values for the Smoke interpreter.

This module defines the closed set of value kinds a Smoke program can
produce, plus the numeric coercion used by arithmetic and ordering
operators.

Values are immutable. Two values of different kinds never compare equal,
so ``IntVal(1) == FloatVal(1.0)`` is false; only the arithmetic and
ordering operators widen an Integer to a Float, never equality.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Dict, Tuple, Union

from .errors import IntegerOverflowError, TypeMismatchError

if TYPE_CHECKING:
    from .ast import Node


INT64_MIN = -(2 ** 63)
INT64_MAX = 2 ** 63 - 1


@dataclass(frozen=True)
class Value:
    """Base class of every runtime value."""
    type_name = 'Value'


@dataclass(frozen=True)
class NilVal(Value):
    type_name = 'Nil'

    def __repr__(self) -> str:
        return 'nil'


NIL = NilVal()


@dataclass(frozen=True)
class BoolVal(Value):
    value: bool
    type_name = 'Bool'


@dataclass(frozen=True)
class IntVal(Value):
    """A signed 64-bit integer."""
    value: int
    type_name = 'Integer'


@dataclass(frozen=True)
class FloatVal(Value):
    value: float
    type_name = 'Float'


@dataclass(frozen=True)
class StrVal(Value):
    value: str
    type_name = 'String'


@dataclass(frozen=True)
class FunctionVal(Value):
    """A user-defined function.

    Only the parameter names and body are kept. The defining scope is not
    captured: a call sees its arguments plus whatever the scope stack at
    the call site exposes.
    """
    parameters: Tuple[str, ...]
    body: 'Node'
    type_name = 'Function'


@dataclass(frozen=True)
class ScopeVal(Value):
    """A scope frame demoted to an ordinary value once it was popped."""
    bindings: Dict[str, Value] = field(default_factory=dict)
    type_name = 'Scope'


NumberValue = Union[IntVal, FloatVal]


def type_name(value: Value) -> str:
    return value.type_name


def make_integer(value: int, operation: str) -> IntVal:
    """Wrap ``value`` as an Integer, rejecting results outside 64 bits."""
    if value < INT64_MIN or value > INT64_MAX:
        raise IntegerOverflowError(operation)
    return IntVal(value)


def as_number(value: Value) -> NumberValue:
    if isinstance(value, (IntVal, FloatVal)):
        return value
    raise TypeMismatchError('Integer or Float', type_name(value))


def coerce_numbers(a: Value, b: Value) -> Tuple[NumberValue, NumberValue]:
    """Bring two operands to a common numeric kind.

    Two Integers stay Integers; if either side is a Float both become
    Floats. Anything else is a type error.
    """
    a = as_number(a)
    b = as_number(b)
    if isinstance(a, IntVal) and isinstance(b, IntVal):
        return a, b
    return FloatVal(float(a.value)), FloatVal(float(b.value))


def values_equal(a: Value, b: Value) -> bool:
    """Structural equality without numeric coercion."""
    if type(a) is not type(b):
        return False
    if isinstance(a, ScopeVal):
        if a.bindings.keys() != b.bindings.keys():
            return False
        return all(values_equal(a.bindings[k], b.bindings[k]) for k in a.bindings)
    if isinstance(a, FunctionVal):
        return a.parameters == b.parameters and a.body == b.body
    if isinstance(a, NilVal):
        return True
    # Bool, Integer, Float and String compare their payloads; for Float
    # this keeps IEEE semantics (nan != nan).
    return a.value == b.value


def to_string(value: Value, quote_strings: bool = False) -> str:
    """Render a value the way the REPL shows it."""
    if isinstance(value, NilVal):
        return 'nil'
    if isinstance(value, BoolVal):
        return 'true' if value.value else 'false'
    if isinstance(value, IntVal):
        return str(value.value)
    if isinstance(value, FloatVal):
        return repr(value.value)
    if isinstance(value, StrVal):
        return f'"{value.value}"' if quote_strings else value.value
    if isinstance(value, FunctionVal):
        return f"<fn({', '.join(value.parameters)})>"
    if isinstance(value, ScopeVal):
        inner = ', '.join(f"{name} = {to_string(v, True)}" for name, v in value.bindings.items())
        return f"<scope {{{inner}}}>"
    raise TypeError(f"not a Smoke value: {value!r}")
