"""
Command line entry point.

Usage:
    calc                 interactive session
    calc -e "x = 2; print x * 3"
    calc -vv             trace tree traversal and node visits
"""
import argparse
import logging
import sys
from typing import Callable, Optional

from calc.config import Settings
from calc.session import Session
from calc.tree import Print, dump_ast, to_dot
from calc.utils import format_number

BANNER = "CALC v0.1\n'help' for commands."

HELP = """\
Enter an expression to evaluate it, e.g. "x = 10 / 4" or "print x % 2".
Operators: + - * / %, unary + (absolute value) and - (negation), parentheses.
Several statements may be separated with ';'.

Commands:
  help            show this message
  symbols         list variables and their values
  ast <expr>      show the parsed tree of <expr> without evaluating it
  dot <expr>      show <expr> as a Graphviz digraph
  quit, exit      leave the session"""


def print_value(value: float) -> None:
    print(format_number(value))


def print_tree(render: Callable[[], str]) -> None:
    try:
        print(render())
    except RecursionError:
        print("expression is nested too deeply")


def run_code(session: Session, code: str, dump_tree: bool = False) -> int:
    result = session.run(code)
    if dump_tree:
        for tree in result.trees:
            print_tree(lambda: "\n".join(dump_ast(tree, session.symbols)))
    if result.errors:
        print(f"Errors: {result.errors}")
    elif result.trees and not isinstance(result.trees[-1], Print):
        print_value(result.values[-1])
    return result.errors


def handle_command(session: Session, line: str) -> Optional[bool]:
    """Run ``line`` if it is a session command.

    Returns None when ``line`` is not a command, otherwise whether the session
    should keep going.
    """
    word, _, rest = line.strip().partition(" ")
    if rest.lstrip().startswith("="):
        return None  # assignment to a variable that shares a command's name

    if word in ("quit", "exit") and not rest:
        return False
    elif word == "help" and not rest:
        print(HELP)
    elif word == "symbols" and not rest:
        print("\n".join(session.symbols.dump()) or "No symbols defined")
    elif word in ("ast", "dot") and rest:
        result = session.inspect(rest)
        for diagnostic in result.diagnostics:
            print(diagnostic)
        for tree in result.trees:
            if word == "ast":
                print_tree(lambda: "\n".join(dump_ast(tree, session.symbols)))
            else:
                print_tree(lambda: to_dot(tree))
    else:
        return None
    return True


def repl(session: Session, dump_tree: bool = False) -> None:
    print(BANNER)
    while True:
        try:
            line = input(session.settings.prompt)
        except (EOFError, KeyboardInterrupt):
            print()
            break

        if not line.strip():
            continue

        keep_going = handle_command(session, line)
        if keep_going is None:
            run_code(session, line, dump_tree=dump_tree)
        elif not keep_going:
            break


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(prog="calc", description="Interactive arithmetic expression evaluator")
    parser.add_argument(
        "-v",
        "--verbose",
        action="count",
        dest="verbosity",
        help="Trace evaluation; repeat for more detail (overrides CALC_VERBOSITY)",
    )
    parser.add_argument("-e", "--eval", dest="code", help="Evaluate CODE and exit")
    parser.add_argument(
        "--dump-ast",
        action="store_true",
        dest="dump_ast",
        help="Print the parsed tree of every line before its result",
    )
    args = parser.parse_args(argv)

    settings = Settings() if args.verbosity is None else Settings(verbosity=args.verbosity)
    logging.basicConfig(
        level=logging.DEBUG if settings.verbosity else logging.INFO,
        format="%(levelname)s: %(message)s",
        stream=sys.stderr,
    )

    session = Session(settings=settings, printer=print_value)
    if args.code is not None:
        return 1 if run_code(session, args.code, dump_tree=args.dump_ast) else 0

    repl(session, dump_tree=args.dump_ast)
    return 0
