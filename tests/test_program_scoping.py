from smoke.__main__ import main


def test_program_scoping(capsys):
    main(['examples/scoping.smoke'])
    out = capsys.readouterr().out.strip()
    assert out == '21'
