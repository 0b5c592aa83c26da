"""Recursive-descent parser for the Smoke language.

The parser consumes a stream of :class:`~smoke.lexer.TokenExt` values
with one token of lookahead and builds the AST defined in
:mod:`smoke.ast`. Binary operators are parsed by precedence climbing,
lowest to highest:

    equality  ==  !=
    comparison  >  >=  <  <=
    term  +  -
    factor  *  /
    unary  !  -   (prefix)
    call  f(args)
    primary

Each binary level folds left-associatively. ``-`` is ambiguous between
negation and subtraction; the unary level reads it as negation and the
term level as subtraction.

``parse`` returns a :class:`~smoke.ast.Program`: the top level is a
``;``-separated sequence of expressions.
"""

from __future__ import annotations

from typing import Callable, Dict, FrozenSet, Iterable, Iterator, List, Optional

from .ast import (
    Program, Literal, Declaration, Reference, Grouping, Unary, Binary,
    Function, FunctionApplication, Node, Operator,
)
from .errors import InternalError, RecursionDepthError, UnexpectedToken
from .lexer import LITERAL_KINDS, TokenExt, TokenKind, tokenize
from .values import NIL, BoolVal, FloatVal, IntVal, StrVal, Value


UNARY_TOKENS: Dict[TokenKind, Operator] = {
    TokenKind.BANG: Operator.NOT,
    TokenKind.MINUS: Operator.NEGATE,
}

BINARY_TOKENS: Dict[TokenKind, Operator] = {
    TokenKind.EQUAL_EQUAL: Operator.EQUAL,
    TokenKind.BANG_EQUAL: Operator.NOT_EQUAL,
    TokenKind.GREATER: Operator.GREATER,
    TokenKind.GREATER_EQUAL: Operator.GREATER_EQUAL,
    TokenKind.LESS: Operator.LESS,
    TokenKind.LESS_EQUAL: Operator.LESS_EQUAL,
    TokenKind.PLUS: Operator.ADD,
    TokenKind.MINUS: Operator.SUBTRACT,
    TokenKind.STAR: Operator.MULTIPLY,
    TokenKind.SLASH: Operator.DIVIDE,
}

EQUALITY = frozenset({TokenKind.EQUAL_EQUAL, TokenKind.BANG_EQUAL})
COMPARISON = frozenset({
    TokenKind.GREATER, TokenKind.GREATER_EQUAL, TokenKind.LESS, TokenKind.LESS_EQUAL,
})
TERM = frozenset({TokenKind.PLUS, TokenKind.MINUS})
FACTOR = frozenset({TokenKind.STAR, TokenKind.SLASH})
UNARY = frozenset(UNARY_TOKENS)


def operator_for(token: TokenExt, table: Dict[TokenKind, Operator]) -> Operator:
    """Map an operator token through ``table``.

    Callers only pass tokens they have already matched against the table's
    keys, so a miss is a defect in the parser rather than in the source.
    """
    try:
        return table[token.kind]
    except KeyError:
        raise InternalError(f"token {token.describe()} did not correspond to any operator")


def literal_value(token: TokenExt) -> Value:
    kind = token.kind
    if kind == TokenKind.NIL:
        return NIL
    if kind == TokenKind.BOOL:
        return BoolVal(token.literal)
    if kind == TokenKind.INTEGER:
        return IntVal(token.literal)
    if kind == TokenKind.FLOAT:
        return FloatVal(token.literal)
    if kind == TokenKind.STRING:
        return StrVal(token.literal)
    raise InternalError(f"token {token.describe()} was not a literal")


class Parser:
    def __init__(self, tokens: Iterable[TokenExt]):
        self.tokens: Iterator[TokenExt] = iter(tokens)
        self.current: Optional[TokenExt] = None
        self.previous: Optional[TokenExt] = None
        self.exhausted = False

    # Token helpers

    def peek(self) -> Optional[TokenExt]:
        if self.current is None and not self.exhausted:
            self.current = next(self.tokens, None)
            if self.current is None:
                self.exhausted = True
        return self.current

    def advance(self) -> TokenExt:
        token = self.peek()
        if token is None:
            raise InternalError('advanced past the end of the token stream')
        self.previous = token
        self.current = None
        return token

    def match(self, kinds: FrozenSet[TokenKind]) -> bool:
        token = self.peek()
        return token is not None and token.kind in kinds

    def check(self, kind: TokenKind) -> bool:
        token = self.peek()
        return token is not None and token.kind == kind

    def error(self, expected: str) -> UnexpectedToken:
        token = self.peek()
        if token is None:
            location = self.previous.location if self.previous is not None else None
            return UnexpectedToken(expected, 'end of source', location)
        return UnexpectedToken(expected, token.describe(), token.location)

    def consume(self, kind: TokenKind, expected: str) -> TokenExt:
        if not self.check(kind):
            raise self.error(expected)
        return self.advance()

    def consume_identifier(self, expected: str = 'identifier') -> str:
        return self.consume(TokenKind.IDENTIFIER, expected).literal

    # Grammar

    def parse_program(self) -> Program:
        body = self.parse_sequence(end=None)
        if self.peek() is not None:
            raise self.error("';' or end of source")
        return Program(body)

    def parse_sequence(self, end: Optional[TokenKind]) -> List[Node]:
        """expression (';' expression)* [';'], stopping before ``end``."""
        expressions: List[Node] = []

        def at_end() -> bool:
            return self.peek() is None if end is None else self.check(end)

        if at_end():
            return expressions
        expressions.append(self.parse_expression())
        while self.check(TokenKind.SEMICOLON):
            self.advance()
            # trailing separator
            if at_end():
                break
            expressions.append(self.parse_expression())
        return expressions

    def parse_expression(self) -> Node:
        return self.parse_equality()

    def parse_binary(self, operators: FrozenSet[TokenKind], operand: Callable[[], Node]) -> Node:
        node = operand()
        while self.match(operators):
            operator = operator_for(self.advance(), BINARY_TOKENS)
            node = Binary(operator, node, operand())
        return node

    def parse_equality(self) -> Node:
        return self.parse_binary(EQUALITY, self.parse_comparison)

    def parse_comparison(self) -> Node:
        return self.parse_binary(COMPARISON, self.parse_term)

    def parse_term(self) -> Node:
        return self.parse_binary(TERM, self.parse_factor)

    def parse_factor(self) -> Node:
        return self.parse_binary(FACTOR, self.parse_unary)

    def parse_unary(self) -> Node:
        if self.match(UNARY):
            operator = operator_for(self.advance(), UNARY_TOKENS)
            return Unary(operator, self.parse_unary())
        return self.parse_call()

    def parse_call(self) -> Node:
        node = self.parse_primary()
        while self.check(TokenKind.PAREN_LEFT):
            self.advance()
            arguments: List[Node] = []
            if not self.check(TokenKind.PAREN_RIGHT):
                arguments.append(self.parse_expression())
                while self.check(TokenKind.COMMA):
                    self.advance()
                    arguments.append(self.parse_expression())
            self.consume(TokenKind.PAREN_RIGHT, "closing delimiter ')'")
            node = FunctionApplication(node, arguments)
        return node

    def parse_primary(self) -> Node:
        token = self.peek()
        if token is None:
            raise self.error('expression')
        if token.kind in LITERAL_KINDS:
            self.advance()
            return Literal(literal_value(token))
        if token.kind == TokenKind.IDENTIFIER:
            self.advance()
            return Reference(token.literal)
        if token.kind == TokenKind.PAREN_LEFT:
            self.advance()
            expr = self.parse_expression()
            self.consume(TokenKind.PAREN_RIGHT, "closing delimiter ')'")
            return Grouping([expr])
        if token.kind == TokenKind.CURLY_LEFT:
            return self.parse_block()
        if token.kind == TokenKind.LET:
            return self.parse_let()
        if token.kind == TokenKind.FUNCTION:
            return self.parse_fn()
        # reserved words (if, else, for, while, return) and stray punctuation
        raise self.error('expression')

    def parse_block(self) -> Grouping:
        self.consume(TokenKind.CURLY_LEFT, "opening delimiter '{'")
        children = self.parse_sequence(end=TokenKind.CURLY_RIGHT)
        self.consume(TokenKind.CURLY_RIGHT, "closing delimiter '}'")
        return Grouping(children)

    def parse_let(self) -> Declaration:
        self.consume(TokenKind.LET, "'let'")
        name = self.consume_identifier()
        self.consume(TokenKind.EQUAL, 'assignment operator')
        return Declaration(name, self.parse_expression())

    def parse_fn(self) -> Declaration:
        self.consume(TokenKind.FUNCTION, "'fn'")
        name = self.consume_identifier('function name')
        self.consume(TokenKind.PAREN_LEFT, "opening delimiter '('")
        parameters: List[str] = []
        if not self.check(TokenKind.PAREN_RIGHT):
            parameters.append(self.consume_identifier('parameter name'))
            while self.check(TokenKind.COMMA):
                self.advance()
                if self.check(TokenKind.IDENTIFIER) and self.peek().literal in parameters:
                    raise self.error('distinct parameter name')
                parameters.append(self.consume_identifier('parameter name'))
        self.consume(TokenKind.PAREN_RIGHT, "closing delimiter ')'")
        body = self.parse_expression()
        return Declaration(name, Function(parameters, body))


def parse(tokens: Iterable[TokenExt]) -> Program:
    """Parse a token stream into a Program.

    Lexical errors surface here too, since tokens are pulled lazily.
    """
    parser = Parser(tokens)
    try:
        return parser.parse_program()
    except RecursionError:
        raise RecursionDepthError('parsing') from None


def parse_source(source: str, origin: str = 'file', path: Optional[str] = None) -> Program:
    """Tokenize and parse Smoke source text."""
    return parse(tokenize(source, origin=origin, path=path))
