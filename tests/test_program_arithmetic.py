from smoke.interpreter import Interpreter
from smoke.parser import parse_source
from smoke.values import FloatVal


def test_program_arithmetic():
    with open('examples/arithmetic.smoke', 'r', encoding='utf-8') as f:
        source = f.read()
    ast = parse_source(source)
    interp = Interpreter()
    result = interp.run(ast)
    assert result == FloatVal(17.5)
