"""JSON serialization/deserialization for Smoke ASTs.

This module converts between Smoke AST dataclasses and plain Python
dict/list structures suitable for JSON encoding. Literal values are
tagged with their kind so that ``1`` and ``1.0`` survive a round trip as
an Integer and a Float. Non-finite floats are written as the strings
``"inf"``, ``"-inf"`` and ``"nan"``.
"""

from __future__ import annotations

import math
from typing import Any, Dict

from .ast import (
    Program,
    Literal,
    Declaration,
    Reference,
    Grouping,
    Unary,
    Binary,
    Function,
    FunctionApplication,
    Operator,
)
from .values import NIL, BoolVal, FloatVal, IntVal, NilVal, StrVal, Value


def value_to_obj(value: Value) -> Dict[str, Any]:
    if isinstance(value, NilVal):
        return {"kind": "Nil"}
    if isinstance(value, BoolVal):
        return {"kind": "Bool", "value": value.value}
    if isinstance(value, IntVal):
        return {"kind": "Integer", "value": value.value}
    if isinstance(value, FloatVal):
        if math.isfinite(value.value):
            return {"kind": "Float", "value": value.value}
        return {"kind": "Float", "value": repr(value.value)}
    if isinstance(value, StrVal):
        return {"kind": "String", "value": value.value}
    raise TypeError(f"Unsupported literal for serialization: {type(value).__name__}")


def value_from_obj(o: Dict[str, Any]) -> Value:
    kind = o.get("kind")
    if kind == "Nil":
        return NIL
    if kind == "Bool":
        return BoolVal(bool(o["value"]))
    if kind == "Integer":
        return IntVal(int(o["value"]))
    if kind == "Float":
        return FloatVal(float(o["value"]))
    if kind == "String":
        return StrVal(str(o["value"]))
    raise ValueError(f"Unknown literal kind: {kind}")


def ast_to_obj(node: Any) -> Any:
    if isinstance(node, Program):
        return {"type": "Program", "body": [ast_to_obj(n) for n in node.body]}
    if isinstance(node, Literal):
        return {"type": "Literal", "value": value_to_obj(node.value)}
    if isinstance(node, Declaration):
        return {"type": "Declaration", "name": node.name, "value": ast_to_obj(node.value)}
    if isinstance(node, Reference):
        return {"type": "Reference", "name": node.name}
    if isinstance(node, Grouping):
        return {"type": "Grouping", "children": [ast_to_obj(c) for c in node.children]}
    if isinstance(node, Unary):
        return {"type": "Unary", "operator": node.operator.name, "operand": ast_to_obj(node.operand)}
    if isinstance(node, Binary):
        return {
            "type": "Binary",
            "operator": node.operator.name,
            "left": ast_to_obj(node.left),
            "right": ast_to_obj(node.right),
        }
    if isinstance(node, Function):
        return {"type": "Function", "parameters": list(node.parameters), "body": ast_to_obj(node.body)}
    if isinstance(node, FunctionApplication):
        return {
            "type": "FunctionApplication",
            "callee": ast_to_obj(node.callee),
            "arguments": [ast_to_obj(a) for a in node.arguments],
        }

    raise TypeError(f"Unsupported node for serialization: {type(node).__name__}")


def ast_from_obj(obj: Any) -> Any:
    if not isinstance(obj, dict):
        raise TypeError("Invalid AST object")
    t = obj.get("type")
    if t == "Program":
        return Program(body=[ast_from_obj(n) for n in obj["body"]])
    if t == "Literal":
        return Literal(value=value_from_obj(obj["value"]))
    if t == "Declaration":
        return Declaration(name=obj["name"], value=ast_from_obj(obj["value"]))
    if t == "Reference":
        return Reference(name=obj["name"])
    if t == "Grouping":
        return Grouping(children=[ast_from_obj(c) for c in obj["children"]])
    if t == "Unary":
        return Unary(operator=Operator[obj["operator"]], operand=ast_from_obj(obj["operand"]))
    if t == "Binary":
        return Binary(
            operator=Operator[obj["operator"]],
            left=ast_from_obj(obj["left"]),
            right=ast_from_obj(obj["right"]),
        )
    if t == "Function":
        return Function(parameters=list(obj["parameters"]), body=ast_from_obj(obj["body"]))
    if t == "FunctionApplication":
        return FunctionApplication(
            callee=ast_from_obj(obj["callee"]),
            arguments=[ast_from_obj(a) for a in obj["arguments"]],
        )

    raise ValueError(f"Unknown AST node type: {t}")
