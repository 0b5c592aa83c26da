import pytest

from smoke import grammar, parser
from smoke.errors import UnexpectedToken, UnrecognizedCharacter, UnterminatedString
from smoke.interpreter import Interpreter
from smoke.values import IntVal


SOURCES = [
    '',
    '1 + 2 * 3',
    '8 - 4 - 2',
    '-1 - -2',
    '!true == false',
    '1 < 2 == true',
    '3.14 >= 3',
    '1.5e3 / .5',
    '"hi" != nil',
    '(1 + 2) * 3',
    '{}',
    '{ let x = 1; x + 1 }',
    'let x = 1;',
    'let x = 1; { let x = 2; x }',
    'fn add(a, b) a + b; add(2, 3)',
    'fn zero() 0; zero()',
    'f(1)(2, 3)',
    'letter + nilly',
    '99999999999999999999',
]


@pytest.mark.parametrize('source', SOURCES)
def test_lark_grammar_matches_descent_parser(source):
    assert grammar.parse_source(source) == parser.parse_source(source)


def test_lark_front_end_runs_programs():
    interp = Interpreter()
    assert interp.run_source('fn sq(x) x * x; sq(7)', parse=grammar.parse_source) == IntVal(49)


@pytest.mark.parametrize('word', ['if', 'while', 'return'])
def test_reserved_words(word):
    with pytest.raises(UnexpectedToken) as excinfo:
        grammar.parse_source(word)
    assert excinfo.value.expected == 'expression'


def test_unexpected_end_of_source():
    with pytest.raises(UnexpectedToken) as excinfo:
        grammar.parse_source('(1 + 2')
    assert excinfo.value.found == 'end of source'


def test_unexpected_token():
    with pytest.raises(UnexpectedToken) as excinfo:
        grammar.parse_source('1 2')
    assert excinfo.value.found == "'2'"


def test_duplicate_parameter():
    with pytest.raises(UnexpectedToken):
        grammar.parse_source('fn f(a, a) a')


def test_lexical_errors():
    with pytest.raises(UnrecognizedCharacter) as excinfo:
        grammar.parse_source('1 @ 2', origin='repl')
    assert excinfo.value.character == '@'
    assert str(excinfo.value.location) == '<repl>:1:3'
    with pytest.raises(UnterminatedString):
        grammar.parse_source('"open')


@pytest.mark.parametrize('source', ['[1]', ']', '1 . 2', '.'])
def test_stray_punctuation_is_an_unexpected_token(source):
    with pytest.raises(UnexpectedToken):
        parser.parse_source(source)
    with pytest.raises(UnexpectedToken):
        grammar.parse_source(source)


def test_long_numeral_is_a_float():
    assert grammar.parse_source('1' * 5000) == parser.parse_source('1' * 5000)
