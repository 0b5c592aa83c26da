"""CLI entry point for the Smoke interpreter.

Usage:
    python -m smoke [options] <program_file>
    python -m smoke [options]                      (interactive REPL)
    python -m smoke [options] --emit-ast <program_file>
    python -m smoke [options] --ast <ast_json_file>

Options:
  -v                 Increase debug verbosity (can be repeated)
  --max-depth N      Maximum evaluation nesting depth
  --parser ENGINE    Front end to parse with: 'descent' (default) or 'lark'
  --tokens           Print the token stream of each submission
  --emit-ast         Parse the given file and emit an AST JSON file
  --ast              Execute a previously emitted AST JSON file

Debug information is written to `debug.txt` in the current directory when
verbosity is greater than zero. In the REPL every line is evaluated
against the same environment, so `let` bindings carry over between lines,
and an error only abandons the line that caused it.
"""

import argparse
import json
import sys
from pathlib import Path
from typing import Callable, Optional

from . import grammar, parser as descent
from .ast import Program
from .ast_json import ast_to_obj, ast_from_obj
from .errors import InternalError, SmokeError
from .interpreter import DEFAULT_MAX_DEPTH, Interpreter
from .lexer import tokenize
from .values import to_string


PROMPT = 'smoke> '


def front_end(name: str) -> Callable[..., Program]:
    if name == 'lark':
        return grammar.parse_source
    return descent.parse_source


def print_tokens(source: str, origin: str, path: Optional[str]) -> None:
    for token in tokenize(source, origin=origin, path=path):
        print(f"{token.location}\t{token.token!r}\t{token.describe()}")


def report(exc: SmokeError) -> None:
    if isinstance(exc, InternalError):
        print(f"Internal error (this is a bug in Smoke, not in your program): {exc}", file=sys.stderr)
    else:
        print(f"Error: {exc}", file=sys.stderr)


def read_program(path_arg: str) -> str:
    program_file = Path(path_arg)
    if not program_file.exists():
        print(f"Error: file {program_file} not found", file=sys.stderr)
        sys.exit(1)
    with open(program_file, 'r', encoding='utf-8') as f:
        return f.read()


def repl(interpreter: Interpreter, parse: Callable[..., Program], show_tokens: bool) -> None:
    while True:
        try:
            line = input(PROMPT)
        except EOFError:
            print()
            return
        except KeyboardInterrupt:
            print()
            continue
        if not line.strip():
            continue
        try:
            if show_tokens:
                print_tokens(line, 'repl', None)
            result = interpreter.run_source(line, origin='repl', parse=parse)
        except SmokeError as exc:
            report(exc)
            continue
        print(to_string(result, quote_strings=True))


def main(argv: Optional[list] = None) -> None:
    parser = argparse.ArgumentParser(description="Smoke language interpreter")
    parser.add_argument('-v', action='count', default=0, help='increase debug verbosity (can be repeated)')
    parser.add_argument('--max-depth', type=int, default=DEFAULT_MAX_DEPTH,
                        help='maximum evaluation nesting depth')
    parser.add_argument('--parser', choices=('descent', 'lark'), default='descent',
                        help='front end used to parse source text')
    parser.add_argument('--tokens', action='store_true', help='print the token stream of each submission')
    group = parser.add_mutually_exclusive_group()
    group.add_argument('--emit-ast', metavar='SMOKE_FILE', help='emit AST JSON for the given .smoke file')
    group.add_argument('--ast', metavar='AST_JSON_FILE', help='execute AST from a JSON file')
    parser.add_argument('program', nargs='?', help='Smoke program file (.smoke) to execute')
    args = parser.parse_args(argv)

    parse = front_end(args.parser)

    # Emit AST mode
    if args.emit_ast:
        source = read_program(args.emit_ast)
        program_file = Path(args.emit_ast)
        try:
            ast_program = parse(source, origin='file', path=str(program_file))
        except SmokeError as exc:
            report(exc)
            sys.exit(1)
        out_path = program_file.with_name(program_file.name + '.ast.json')
        with open(out_path, 'w', encoding='utf-8') as out:
            json.dump(ast_to_obj(ast_program), out, ensure_ascii=False, indent=2)
        print(str(out_path))
        return

    interpreter = Interpreter(debug_level=args.v, max_depth=args.max_depth)
    try:
        # Execute from AST JSON
        if args.ast:
            ast_path = Path(args.ast)
            if not ast_path.exists():
                print(f"Error: file {ast_path} not found", file=sys.stderr)
                sys.exit(1)
            with open(ast_path, 'r', encoding='utf-8') as f:
                data = json.load(f)
            try:
                result = interpreter.run(ast_from_obj(data))
            except SmokeError as exc:
                report(exc)
                sys.exit(1)
            print(to_string(result, quote_strings=True))
            return

        # Interactive mode
        if not args.program:
            repl(interpreter, parse, args.tokens)
            return

        # Default: execute source file
        source = read_program(args.program)
        try:
            if args.tokens:
                print_tokens(source, 'file', args.program)
            result = interpreter.run_source(source, origin='file', path=args.program, parse=parse)
        except SmokeError as exc:
            report(exc)
            sys.exit(1)
        print(to_string(result, quote_strings=True))
    finally:
        interpreter.close()


if __name__ == '__main__':
    main()
