import pytest

from smoke.ast import (
    Binary, Declaration, Function, FunctionApplication, Grouping, Literal, Operator, Program,
    Reference, Unary,
)
from smoke.errors import (
    InternalError, RecursionDepthError, UnexpectedToken, UnrecognizedCharacter,
)
from smoke.lexer import tokenize
from smoke.parser import BINARY_TOKENS, operator_for, parse, parse_source
from smoke.values import NIL, BoolVal, FloatVal, IntVal, StrVal


def lit(value):
    if isinstance(value, bool):
        return Literal(BoolVal(value))
    if isinstance(value, int):
        return Literal(IntVal(value))
    if isinstance(value, float):
        return Literal(FloatVal(value))
    return Literal(StrVal(value))


def single(source):
    program = parse_source(source)
    assert len(program.body) == 1
    return program.body[0]


def test_multiplication_binds_tighter_than_addition():
    assert single('1 + 2 * 3') == Binary(
        Operator.ADD, lit(1), Binary(Operator.MULTIPLY, lit(2), lit(3)),
    )


def test_binary_operators_are_left_associative():
    assert single('8 - 4 - 2') == Binary(
        Operator.SUBTRACT, Binary(Operator.SUBTRACT, lit(8), lit(4)), lit(2),
    )
    assert single('8 / 4 * 2') == Binary(
        Operator.MULTIPLY, Binary(Operator.DIVIDE, lit(8), lit(4)), lit(2),
    )


def test_minus_is_negation_or_subtraction_by_position():
    assert single('-1 - -2') == Binary(
        Operator.SUBTRACT,
        Unary(Operator.NEGATE, lit(1)),
        Unary(Operator.NEGATE, lit(2)),
    )
    assert single('!!true') == Unary(Operator.NOT, Unary(Operator.NOT, lit(True)))


def test_precedence_levels():
    assert single('1 < 2 == true') == Binary(
        Operator.EQUAL, Binary(Operator.LESS, lit(1), lit(2)), lit(True),
    )
    assert single('-a * b') == Binary(
        Operator.MULTIPLY, Unary(Operator.NEGATE, Reference('a')), Reference('b'),
    )


def test_literals():
    assert single('nil') == Literal(NIL)
    assert single('"smoke"') == lit('smoke')
    assert single('2.5') == lit(2.5)
    assert single('false') == lit(False)


def test_parentheses_make_a_grouping():
    assert single('(1 + 2) * 3') == Binary(
        Operator.MULTIPLY, Grouping([Binary(Operator.ADD, lit(1), lit(2))]), lit(3),
    )


def test_block():
    assert single('{ let x = 1; x + 1 }') == Grouping([
        Declaration('x', lit(1)),
        Binary(Operator.ADD, Reference('x'), lit(1)),
    ])
    assert single('{}') == Grouping([])
    assert single('{ 1; }') == Grouping([lit(1)])


def test_program_sequence_and_trailing_semicolon():
    assert parse_source('') == Program([])
    assert parse_source('let x = 1;') == Program([Declaration('x', lit(1))])
    assert parse_source('let x = 1; x') == Program([Declaration('x', lit(1)), Reference('x')])


def test_let_takes_a_whole_expression():
    assert single('let y = 1 + 2') == Declaration('y', Binary(Operator.ADD, lit(1), lit(2)))


def test_fn_desugars_to_declaration():
    assert single('fn add(a, b) a + b') == Declaration(
        'add', Function(['a', 'b'], Binary(Operator.ADD, Reference('a'), Reference('b'))),
    )
    assert single('fn zero() 0') == Declaration('zero', Function([], lit(0)))


def test_calls():
    assert single('f()') == FunctionApplication(Reference('f'), [])
    assert single('add(1, 2 * 3)') == FunctionApplication(
        Reference('add'), [lit(1), Binary(Operator.MULTIPLY, lit(2), lit(3))],
    )
    assert single('f(1)(2)') == FunctionApplication(
        FunctionApplication(Reference('f'), [lit(1)]), [lit(2)],
    )


def test_parse_accepts_a_token_stream():
    assert parse(tokenize('1')) == Program([lit(1)])


def test_missing_identifier_after_let():
    with pytest.raises(UnexpectedToken) as excinfo:
        parse_source('let = 1')
    assert excinfo.value.expected == 'identifier'
    assert excinfo.value.found == "'='"


def test_missing_closing_paren_reports_end_of_source():
    with pytest.raises(UnexpectedToken) as excinfo:
        parse_source('(1 + 2')
    assert excinfo.value.expected == "closing delimiter ')'"
    assert excinfo.value.found == 'end of source'
    assert excinfo.value.location.column == 6


def test_missing_operand():
    with pytest.raises(UnexpectedToken) as excinfo:
        parse_source('1 +')
    assert excinfo.value.expected == 'expression'
    assert excinfo.value.found == 'end of source'


@pytest.mark.parametrize('word', ['if', 'else', 'for', 'while', 'return'])
def test_reserved_words_are_not_expressions(word):
    with pytest.raises(UnexpectedToken) as excinfo:
        parse_source(word)
    assert excinfo.value.expected == 'expression'
    assert excinfo.value.found == f"'{word}'"


def test_stray_punctuation():
    for source in (')', '[1]', '.', ';'):
        with pytest.raises(UnexpectedToken):
            parse_source(source)


def test_adjacent_expressions_need_a_separator():
    with pytest.raises(UnexpectedToken) as excinfo:
        parse_source('1 2')
    assert excinfo.value.expected == "';' or end of source"
    assert excinfo.value.found == "'2'"


def test_unclosed_block():
    with pytest.raises(UnexpectedToken) as excinfo:
        parse_source('{ 1; 2')
    assert excinfo.value.found == 'end of source'


def test_duplicate_parameter():
    with pytest.raises(UnexpectedToken) as excinfo:
        parse_source('fn f(a, a) a')
    assert excinfo.value.found == "'a'"


def test_lex_errors_surface_through_the_parser():
    with pytest.raises(UnrecognizedCharacter):
        parse_source('1 + $')


def test_operator_for_rejects_non_operators():
    token = next(tokenize('let'))
    with pytest.raises(InternalError):
        operator_for(token, BINARY_TOKENS)


def test_deep_nesting_is_a_recursion_depth_error():
    source = '(' * 5000 + '1' + ')' * 5000
    with pytest.raises(RecursionDepthError) as excinfo:
        parse_source(source)
    assert excinfo.value.stage == 'parsing'
