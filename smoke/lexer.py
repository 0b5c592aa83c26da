"""Tokenizer for the Smoke language.

Tokenization works by competition rather than by a single hand-written
state machine. At every position each recognizer in ``RECOGNIZERS`` looks
at the remaining input on its own and proposes zero or more candidate
``(text, token)`` pairs. The longest candidate wins. When two candidates
have the same length, the one proposed by the recognizer listed first in
``RECOGNIZERS`` wins, so the order of that tuple is significant:

    static table  >  identifier  >  string  >  integer  >  float

This makes ``fn`` a keyword while ``function`` stays an identifier, makes
``==`` a single token, and makes ``0`` an Integer even though ``0`` is
also a valid Float numeral.

Tokens are produced lazily by iterating a :class:`Tokenizer`; a tokenizer
cannot be rewound, create a new one to start over.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Iterable, Iterator, List, Optional, Tuple, Union

from .errors import UnrecognizedCharacter, UnterminatedString
from .values import INT64_MAX


class TokenKind(Enum):
    # Brackets
    PAREN_LEFT = '('
    PAREN_RIGHT = ')'
    CURLY_LEFT = '{'
    CURLY_RIGHT = '}'
    SQUARE_LEFT = '['
    SQUARE_RIGHT = ']'

    # Operators
    COMMA = ','
    DOT = '.'
    MINUS = '-'
    PLUS = '+'
    SLASH = '/'
    STAR = '*'
    BANG = '!'
    BANG_EQUAL = '!='
    EQUAL = '='
    EQUAL_EQUAL = '=='
    GREATER = '>'
    GREATER_EQUAL = '>='
    LESS = '<'
    LESS_EQUAL = '<='

    # Keywords
    FUNCTION = 'fn'
    RETURN = 'return'
    LET = 'let'
    IF = 'if'
    ELSE = 'else'
    FOR = 'for'
    WHILE = 'while'

    # Literals
    IDENTIFIER = 'identifier'
    NIL = 'nil'
    BOOL = 'bool'
    INTEGER = 'integer'
    FLOAT = 'float'
    STRING = 'string'

    SEMICOLON = ';'


LITERAL_KINDS = frozenset({
    TokenKind.NIL, TokenKind.BOOL, TokenKind.INTEGER, TokenKind.FLOAT, TokenKind.STRING,
})


@dataclass(frozen=True)
class Token:
    """A classified token and its literal payload, if it has one."""
    kind: TokenKind
    literal: Any = None

    def __repr__(self) -> str:
        if self.literal is None:
            return f"Token({self.kind.name})"
        return f"Token({self.kind.name}, {self.literal!r})"


@dataclass(frozen=True)
class LexemeLocation:
    """Where a lexeme was read from.

    ``origin`` is ``'file'`` (optionally with a path), ``'repl'`` for
    interactive input, or ``'internal'`` for tokens that never appeared in
    any source text. Lines and columns are 1-based.
    """
    origin: str
    line: Optional[int] = None
    column: Optional[int] = None
    path: Optional[str] = None

    @classmethod
    def internal(cls) -> 'LexemeLocation':
        return cls('internal')

    def __str__(self) -> str:
        if self.origin == 'internal':
            return '<internal>'
        if self.origin == 'repl':
            name = '<repl>'
        else:
            name = self.path or '<input>'
        return f"{name}:{self.line}:{self.column}"


@dataclass(frozen=True)
class Lexeme:
    content: str
    location: LexemeLocation


@dataclass(frozen=True)
class TokenExt:
    """A token paired with the lexeme it was read from."""
    token: Token
    lexeme: Lexeme

    @property
    def kind(self) -> TokenKind:
        return self.token.kind

    @property
    def literal(self) -> Any:
        return self.token.literal

    @property
    def location(self) -> LexemeLocation:
        return self.lexeme.location

    def describe(self) -> str:
        return f"'{self.lexeme.content}'"


###############################################################################
# Recognizers
###############################################################################

Candidate = Tuple[str, Token]
Recognizer = Callable[[str, int], List[Candidate]]

# Order matters only for prefixes of one another; longest match decides.
STATIC_TOKENS: Tuple[Tuple[str, Token], ...] = (
    ('(', Token(TokenKind.PAREN_LEFT)), (')', Token(TokenKind.PAREN_RIGHT)),
    ('{', Token(TokenKind.CURLY_LEFT)), ('}', Token(TokenKind.CURLY_RIGHT)),
    ('[', Token(TokenKind.SQUARE_LEFT)), (']', Token(TokenKind.SQUARE_RIGHT)),

    (',', Token(TokenKind.COMMA)),
    ('.', Token(TokenKind.DOT)),
    ('-', Token(TokenKind.MINUS)), ('+', Token(TokenKind.PLUS)),
    ('/', Token(TokenKind.SLASH)), ('*', Token(TokenKind.STAR)),
    ('=', Token(TokenKind.EQUAL)), ('==', Token(TokenKind.EQUAL_EQUAL)),
    ('!', Token(TokenKind.BANG)), ('!=', Token(TokenKind.BANG_EQUAL)),
    ('>', Token(TokenKind.GREATER)), ('>=', Token(TokenKind.GREATER_EQUAL)),
    ('<', Token(TokenKind.LESS)), ('<=', Token(TokenKind.LESS_EQUAL)),

    ('fn', Token(TokenKind.FUNCTION)), ('return', Token(TokenKind.RETURN)),
    ('let', Token(TokenKind.LET)),
    ('if', Token(TokenKind.IF)), ('else', Token(TokenKind.ELSE)),
    ('for', Token(TokenKind.FOR)), ('while', Token(TokenKind.WHILE)),

    ('true', Token(TokenKind.BOOL, True)), ('false', Token(TokenKind.BOOL, False)),
    ('nil', Token(TokenKind.NIL)),

    (';', Token(TokenKind.SEMICOLON)),
)

_IDENTIFIER = re.compile(r'[a-zA-Z_][a-zA-Z0-9_]*')
_INTEGER_NUMERAL = re.compile(r'[0-9]+')
_FLOAT_NUMERAL = re.compile(r'(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][+-]?[0-9]+)?')
_NUMERAL_CHARS = frozenset('0123456789.eE+-')


def recognize_static(source: str, start: int) -> List[Candidate]:
    return [(text, token) for text, token in STATIC_TOKENS if source.startswith(text, start)]


def recognize_identifier(source: str, start: int) -> List[Candidate]:
    match = _IDENTIFIER.match(source, start)
    if match is None:
        return []
    text = match.group()
    return [(text, Token(TokenKind.IDENTIFIER, text))]


def recognize_string(source: str, start: int) -> List[Candidate]:
    if not source.startswith('"', start):
        return []
    end = source.find('"', start + 1)
    if end == -1:
        return []
    text = source[start:end + 1]
    return [(text, Token(TokenKind.STRING, text[1:-1]))]


def numeral_prefixes(source: str, start: int) -> Iterator[str]:
    """Yield each non-empty prefix of the whitespace-delimited run at ``start``.

    Scanning stops early once a character appears that no numeral may
    contain, since no longer prefix could parse either.
    """
    end = start
    while end < len(source) and not source[end].isspace():
        if source[end] not in _NUMERAL_CHARS:
            return
        end += 1
        yield source[start:end]


def parse_integer(text: str) -> Optional[int]:
    if not _INTEGER_NUMERAL.fullmatch(text):
        return None
    # longer than INT64_MAX once leading zeros are dropped
    if len(text.lstrip('0')) > len(str(INT64_MAX)):
        return None
    value = int(text.lstrip('0') or '0')
    if value > INT64_MAX:
        return None
    return value


def parse_float(text: str) -> Optional[float]:
    if not _FLOAT_NUMERAL.fullmatch(text):
        return None
    return float(text)


def recognize_integer(source: str, start: int) -> List[Candidate]:
    candidates = []
    for text in numeral_prefixes(source, start):
        value = parse_integer(text)
        if value is not None:
            candidates.append((text, Token(TokenKind.INTEGER, value)))
    return candidates


def recognize_float(source: str, start: int) -> List[Candidate]:
    candidates = []
    for text in numeral_prefixes(source, start):
        value = parse_float(text)
        if value is not None:
            candidates.append((text, Token(TokenKind.FLOAT, value)))
    return candidates


RECOGNIZERS: Tuple[Recognizer, ...] = (
    recognize_static,
    recognize_identifier,
    recognize_string,
    recognize_integer,
    recognize_float,
)


def candidates_at(source: str, start: int = 0) -> List[Candidate]:
    """Run every recognizer at ``start`` and return all candidates in priority order."""
    candidates: List[Candidate] = []
    for recognizer in RECOGNIZERS:
        candidates.extend(recognizer(source, start))
    return candidates


def select_candidate(candidates: Iterable[Candidate]) -> Optional[Candidate]:
    """Pick the longest candidate; the earliest one wins a tie."""
    best: Optional[Candidate] = None
    for candidate in candidates:
        if best is None or len(candidate[0]) > len(best[0]):
            best = candidate
    return best


###############################################################################
# Tokenizer
###############################################################################


class Tokenizer:
    """Lazily turn source text into :class:`TokenExt` values."""

    def __init__(self, source: Union[str, Iterable[str]], origin: str = 'file',
                 path: Optional[str] = None):
        self.source = source if isinstance(source, str) else ''.join(source)
        self.origin = origin
        self.path = path
        self.pos = 0
        self.line = 1
        self.column = 1

    def __iter__(self) -> 'Tokenizer':
        return self

    def __next__(self) -> TokenExt:
        self.skip_whitespace()
        if self.pos >= len(self.source):
            raise StopIteration
        location = self.location()
        best = select_candidate(candidates_at(self.source, self.pos))
        if best is None:
            char = self.source[self.pos]
            if char == '"':
                raise UnterminatedString(location)
            raise UnrecognizedCharacter(char, location)
        text, token = best
        self.advance(len(text))
        return TokenExt(token, Lexeme(text, location))

    def location(self) -> LexemeLocation:
        return LexemeLocation(self.origin, self.line, self.column, self.path)

    def skip_whitespace(self):
        while self.pos < len(self.source) and self.source[self.pos].isspace():
            self.advance(1)

    def advance(self, n: int):
        for _ in range(n):
            if self.source[self.pos] == '\n':
                self.line += 1
                self.column = 1
            else:
                self.column += 1
            self.pos += 1


def tokenize(source: Union[str, Iterable[str]], origin: str = 'file',
             path: Optional[str] = None) -> Tokenizer:
    """Return a lazy token stream over ``source``."""
    return Tokenizer(source, origin=origin, path=path)
