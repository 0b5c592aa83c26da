"""Grammar-driven parser for the Smoke language.

This module describes Smoke declaratively as a Lark LALR grammar and
transforms Lark's parse tree into the same AST that the hand-written
recursive-descent parser in :mod:`smoke.parser` builds. Having both lets
the two be checked against each other, and the command line can run
programs through either one (``--parser lark``).

Lark's own exceptions are translated into the Smoke error hierarchy so
callers handle both front ends the same way.
"""

from __future__ import annotations

from typing import List, Optional

from lark import Lark, Token, Transformer
from lark.exceptions import UnexpectedCharacters, UnexpectedEOF, UnexpectedInput, VisitError
from lark.exceptions import UnexpectedToken as LarkUnexpectedToken

from .ast import (
    Program, Literal, Declaration, Reference, Grouping, Unary, Binary,
    Function, FunctionApplication, Node, Operator,
)
from .errors import (
    RecursionDepthError, SmokeError, UnexpectedToken, UnrecognizedCharacter, UnterminatedString,
)
from .lexer import LexemeLocation, parse_integer
from .values import NIL, BoolVal, FloatVal, IntVal, StrVal


SMOKE_GRAMMAR = r"""
    program: (expression (";" expression)* ";"?)?

    // Expressions, lowest precedence first
    ?expression: equality
    ?equality: comparison (equality_op comparison)*
    ?comparison: term (comparison_op term)*
    ?term: factor (term_op factor)*
    ?factor: unary (factor_op unary)*
    ?unary: unary_op unary
          | call
    ?call: primary
         | call "(" [arguments] ")"                        -> application
    arguments: expression ("," expression)*

    ?primary: literal
            | IDENT                                        -> reference
            | "(" expression ")"                           -> paren
            | "{" (expression (";" expression)* ";"?)? "}" -> block
            | "let" IDENT "=" expression                   -> declaration
            | "fn" IDENT "(" [parameters] ")" expression   -> function
            | reserved
    parameters: IDENT ("," IDENT)*

    !equality_op: "==" | "!="
    !comparison_op: ">=" | "<=" | ">" | "<"
    !term_op: "+" | "-"
    !factor_op: "*" | "/"
    !unary_op: "!" | "-"
    !reserved: "if" | "else" | "for" | "while" | "return" | "[" | "]" | "."

    literal: INT | FLOAT | STRING | TRUE | FALSE | NIL

    // Tokens
    TRUE: "true"
    FALSE: "false"
    NIL: "nil"
    IDENT: /[a-zA-Z_][a-zA-Z0-9_]*/
    STRING: /"[^"]*"/
    FLOAT.2: /(?:[0-9]+\.[0-9]*|\.[0-9]+)(?:[eE][+-]?[0-9]+)?|[0-9]+[eE][+-]?[0-9]+/
    INT: /[0-9]+/

    %import common.WS
    %ignore WS
"""


SMOKE_PARSER = Lark(
    SMOKE_GRAMMAR,
    start='program',
    parser='lalr',
    propagate_positions=True,
    maybe_placeholders=False,
)


OPERATOR_SYMBOLS = {
    '==': Operator.EQUAL,
    '!=': Operator.NOT_EQUAL,
    '>': Operator.GREATER,
    '>=': Operator.GREATER_EQUAL,
    '<': Operator.LESS,
    '<=': Operator.LESS_EQUAL,
    '+': Operator.ADD,
    '-': Operator.SUBTRACT,
    '*': Operator.MULTIPLY,
    '/': Operator.DIVIDE,
}

UNARY_SYMBOLS = {
    '!': Operator.NOT,
    '-': Operator.NEGATE,
}


class ASTTransformer(Transformer):
    """Transforms the raw parse tree into an AST."""

    def __init__(self, origin: str = 'file', path: Optional[str] = None):
        super().__init__()
        self.origin = origin
        self.path = path

    def location(self, token: Token) -> LexemeLocation:
        return LexemeLocation(self.origin, token.line, token.column, self.path)

    def program(self, items):
        return Program(body=list(items))

    def literal(self, items):
        token = items[0]
        if token.type == 'INT':
            value = parse_integer(token.value)
            # out of 64-bit range: the tokenizer reads these as Floats too
            return Literal(IntVal(value) if value is not None else FloatVal(float(token.value)))
        if token.type == 'FLOAT':
            return Literal(FloatVal(float(token.value)))
        if token.type == 'STRING':
            return Literal(StrVal(token.value[1:-1]))
        if token.type == 'NIL':
            return Literal(NIL)
        return Literal(BoolVal(token.type == 'TRUE'))

    def reference(self, items):
        return Reference(str(items[0]))

    def paren(self, items):
        return Grouping([items[0]])

    def block(self, items):
        return Grouping(list(items))

    def declaration(self, items):
        return Declaration(str(items[0]), items[1])

    def function(self, items):
        name = str(items[0])
        parameters: List[str] = items[1] if len(items) == 3 else []
        return Declaration(name, Function(parameters, items[-1]))

    def parameters(self, items):
        names: List[str] = []
        for token in items:
            if str(token) in names:
                raise UnexpectedToken('distinct parameter name', f"'{token}'", self.location(token))
            names.append(str(token))
        return names

    def application(self, items):
        arguments = items[1] if len(items) > 1 else []
        return FunctionApplication(items[0], arguments)

    def arguments(self, items):
        return list(items)

    def unary(self, items):
        return Unary(UNARY_SYMBOLS[items[0]], items[1])

    def fold_binary(self, items) -> Node:
        # items pattern: expr (op expr)*
        left = items[0]
        i = 1
        while i < len(items):
            left = Binary(OPERATOR_SYMBOLS[items[i]], left, items[i + 1])
            i += 2
        return left

    equality = comparison = term = factor = fold_binary

    def equality_op(self, items):
        return str(items[0])

    comparison_op = term_op = factor_op = unary_op = equality_op

    def reserved(self, items):
        token = items[0]
        raise UnexpectedToken('expression', f"'{token}'", self.location(token))


def translate_error(exc: UnexpectedInput, origin: str, path: Optional[str]) -> SmokeError:
    """Map a Lark parse failure onto the equivalent Smoke error."""
    location = LexemeLocation(origin, exc.line, exc.column, path)
    if isinstance(exc, UnexpectedCharacters):
        if exc.char == '"':
            return UnterminatedString(location)
        return UnrecognizedCharacter(exc.char, location)
    expected = ', '.join(sorted(exc.expected)) if exc.expected else 'expression'
    if isinstance(exc, UnexpectedEOF):
        return UnexpectedToken(expected, 'end of source', location)
    if isinstance(exc, LarkUnexpectedToken):
        token = exc.token
        if token.type == '$END':
            return UnexpectedToken(expected, 'end of source', location)
        return UnexpectedToken(expected, f"'{token}'", location)
    return UnexpectedToken(expected, 'input', location)


def parse_source(source: str, origin: str = 'file', path: Optional[str] = None) -> Program:
    """Parse Smoke source with the Lark grammar."""
    try:
        tree = SMOKE_PARSER.parse(source)
        return ASTTransformer(origin, path).transform(tree)
    except UnexpectedInput as exc:
        raise translate_error(exc, origin, path) from None
    except VisitError as exc:
        if isinstance(exc.orig_exc, SmokeError):
            raise exc.orig_exc from None
        if isinstance(exc.orig_exc, RecursionError):
            raise RecursionDepthError('parsing') from None
        raise
    except RecursionError:
        raise RecursionDepthError('parsing') from None
