# Smoke language package
# This package provides a tokenizer, parser and tree-walking interpreter
# for the Smoke expression language.
from .lexer import tokenize
from .parser import parse, parse_source
from .environment import Environment
from .interpreter import evaluate, run_source, Interpreter
from .errors import SmokeError

__all__ = [
    'tokenize',
    'parse',
    'parse_source',
    'Environment',
    'evaluate',
    'run_source',
    'Interpreter',
    'SmokeError',
]
