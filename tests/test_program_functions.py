from smoke.__main__ import main


def test_program_functions(capsys):
    main(['examples/functions.smoke'])
    out = capsys.readouterr().out.strip()
    assert out == '25'


def test_program_functions_lark(capsys):
    main(['--parser', 'lark', 'examples/functions.smoke'])
    out = capsys.readouterr().out.strip()
    assert out == '25'
