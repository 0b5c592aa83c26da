import builtins

import pytest

from smoke.__main__ import main


def feed(monkeypatch, lines):
    pending = iter(lines)

    def fake_input(prompt=''):
        try:
            return next(pending)
        except StopIteration:
            raise EOFError

    monkeypatch.setattr(builtins, 'input', fake_input)


def test_run_file(tmp_path, capsys):
    program = tmp_path / 'hello.smoke'
    program.write_text('let greeting = "hello"; greeting', encoding='utf-8')
    main([str(program)])
    assert capsys.readouterr().out.strip() == '"hello"'


def test_error_exits_with_status_one(tmp_path, capsys):
    program = tmp_path / 'bad.smoke'
    program.write_text('1 + nil', encoding='utf-8')
    with pytest.raises(SystemExit) as excinfo:
        main([str(program)])
    assert excinfo.value.code == 1
    err = capsys.readouterr().err
    assert 'TypeError' in err
    assert 'expected value of type Integer or Float but found Nil' in err


def test_missing_file(tmp_path, capsys):
    with pytest.raises(SystemExit) as excinfo:
        main([str(tmp_path / 'nope.smoke')])
    assert excinfo.value.code == 1
    assert 'not found' in capsys.readouterr().err


def test_emit_and_run_ast(tmp_path, capsys):
    program = tmp_path / 'calc.smoke'
    program.write_text('fn twice(n) n * 2; twice(21)', encoding='utf-8')
    main(['--emit-ast', str(program)])
    ast_path = capsys.readouterr().out.strip()
    assert ast_path.endswith('calc.smoke.ast.json')
    main(['--ast', ast_path])
    assert capsys.readouterr().out.strip() == '42'


def test_print_tokens(tmp_path, capsys):
    program = tmp_path / 'tokens.smoke'
    program.write_text('1 == 1', encoding='utf-8')
    main(['--tokens', str(program)])
    lines = capsys.readouterr().out.strip().splitlines()
    assert len(lines) == 4
    assert "Token(EQUAL_EQUAL)" in lines[1]
    assert lines[-1] == 'true'


def test_repl_keeps_bindings_between_lines(monkeypatch, capsys):
    feed(monkeypatch, ['let x = 2', 'x * 21', 'y', '', '{ let x = 1; x }', 'x'])
    main([])
    captured = capsys.readouterr()
    assert captured.out.split() == ['nil', '42', '1', '2']
    assert 'reference by name y was not in scope' in captured.err


def test_repl_reports_lex_errors_with_repl_location(monkeypatch, capsys):
    feed(monkeypatch, ['1 $ 2', '3'])
    main([])
    captured = capsys.readouterr()
    assert '<repl>:1:3' in captured.err
    assert captured.out.split() == ['3']


def test_verbose_writes_debug_file(tmp_path, monkeypatch, capsys):
    monkeypatch.chdir(tmp_path)
    program = tmp_path / 'one.smoke'
    program.write_text('1 + 1', encoding='utf-8')
    main(['-v', str(program)])
    assert capsys.readouterr().out.strip() == '2'
    log = (tmp_path / 'debug.txt').read_text(encoding='utf-8')
    assert 'submit: 1 + 1' in log
    assert 'result: 2' in log


def test_repl_survives_a_huge_numeral(monkeypatch, capsys):
    feed(monkeypatch, ['1' * 5000, '2'])
    main([])
    assert capsys.readouterr().out.split() == ['inf', '2']
