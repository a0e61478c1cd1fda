"""
pylox command line

Usage:
    pylox [script] [--debug] [--max-call-depth N] [--print-ast]

Without a script, starts an interactive prompt that runs one line at a time.
"""

import argparse
import logging
import sys
from pathlib import Path

from .printer import AstPrinter
from .session import LoxSession

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_STATIC_ERROR = 64
EXIT_NO_INPUT = 66
EXIT_RUNTIME_ERROR = 70


def _report(diagnostics, stderr):
    for line in diagnostics:
        stderr.write(line + "\n")


def print_ast(session, source, stdout, stderr):
    statements, _, errors = session.compile(source)
    if errors:
        _report([str(e) for e in errors], stderr)
        return EXIT_STATIC_ERROR
    printer = AstPrinter()
    for stmt in statements:
        stdout.write(printer.print(stmt) + "\n")
    return EXIT_OK


def run_file(session, path, stderr):
    """Run a script file and map its outcome to a process exit status."""
    try:
        source = Path(path).read_text(encoding="utf-8")
    except OSError as e:
        stderr.write(f"Could not read {path}: {e.strerror}\n")
        return EXIT_NO_INPUT

    logger.debug("running %s", path)
    _report(session.run(source), stderr)
    if session.had_static_error:
        return EXIT_STATIC_ERROR
    if session.had_runtime_error:
        return EXIT_RUNTIME_ERROR
    return EXIT_OK


def run_prompt(session, stdin, stdout, stderr):
    """Read-eval-print loop; each line runs with a fresh error state."""
    while True:
        stdout.write("> ")
        stdout.flush()
        line = stdin.readline()
        if not line:
            stdout.write("\n")
            return EXIT_OK
        _report(session.run(line), stderr)


def build_parser():
    parser = argparse.ArgumentParser(prog="pylox", description="Run Lox scripts.")
    parser.add_argument("script", nargs="?", help="Script to run; omit for a prompt")
    parser.add_argument("--debug", action="store_true", help="Log tokens and statements to stderr")
    parser.add_argument("--max-call-depth", type=int, default=None, metavar="N",
                        help="Fail with a runtime error past N nested calls")
    parser.add_argument("--print-ast", action="store_true",
                        help="Print the parsed statements of the script instead of running it")
    return parser


def main(argv=None, stdin=None, stdout=None, stderr=None):
    stdin = stdin or sys.stdin
    stdout = stdout or sys.stdout
    stderr = stderr or sys.stderr

    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.debug else logging.WARNING,
        format="%(name)s: %(message)s",
        stream=stderr,
    )

    session = LoxSession(stdout=stdout, stdin=stdin, max_call_depth=args.max_call_depth)

    if args.script is None:
        return run_prompt(session, stdin, stdout, stderr)
    if args.print_ast:
        try:
            source = Path(args.script).read_text(encoding="utf-8")
        except OSError as e:
            stderr.write(f"Could not read {args.script}: {e.strerror}\n")
            return EXIT_NO_INPUT
        return print_ast(session, source, stdout, stderr)
    return run_file(session, args.script, stderr)


if __name__ == "__main__":
    sys.exit(main())
