"""
Barebones command line front end.

Usage:
    barebones run program.bb [--step] [--separator ';'] [--no-sort] [-v]
    barebones check program.bb
    barebones highlight program.bb
"""

import argparse
import logging
import sys

from .barebones_runtime import BarebonesRuntime, RuntimeConfig
from .errors import BarebonesError, StructuralError
from .highlight import highlight_sections
from .listeners import OUTPUT_ERROR, OUTPUT_TEXT, InterpreterListener
from .log import install_console_handler


class ConsoleListener(InterpreterListener):
    """Print program output to stdout and errors to stderr"""

    def on_output(self, text, kind=OUTPUT_TEXT):
        stream = sys.stderr if kind == OUTPUT_ERROR else sys.stdout
        print(text, file=stream)


def read_source(path: str) -> str:
    with open(path, "r", encoding="utf-8") as f:
        return f.read()


def cmd_run(args) -> int:
    config = RuntimeConfig(
        separator=args.separator,
        log_level=logging.DEBUG if args.verbose else None,
        sorted_memory=not args.no_sort,
    )
    runtime = BarebonesRuntime(config, listeners=[ConsoleListener()])
    try:
        engine = runtime.load(read_source(args.file))
    except StructuralError:
        return 1

    if args.step:
        engine.start(stepping=True)
        while not engine.finished:
            position = engine.current_position
            if not engine.step():
                break
            print(f"{position:4d}: {engine.program[position]}")
    else:
        engine.run()

    if engine.error is not None:
        return 1

    print(engine.format_memory())
    if not args.step:
        print(engine.format_time_taken())
    return 0


def cmd_check(args) -> int:
    runtime = BarebonesRuntime(RuntimeConfig(separator=args.separator), listeners=[ConsoleListener()])
    try:
        engine = runtime.load(read_source(args.file))
    except StructuralError as e:
        print(f"{len(e.errors)} structural error(s)", file=sys.stderr)
        return 1
    print(f"OK: {len(engine.program)} instruction(s), {len(engine.jump_table)} block(s)")
    return 0


def cmd_highlight(args) -> int:
    for section in highlight_sections(read_source(args.file), args.separator):
        if section.text.isspace():
            continue
        print(f"{section.kind.value:6s} {section.text}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="barebones", description="Run Barebones programs.")
    sub = parser.add_subparsers(dest="command", required=True)

    run = sub.add_parser("run", help="Execute a program and print its memory.")
    run.add_argument("file", type=str, help="Path to the Barebones source file.")
    run.add_argument("--step", action="store_true", help="Single-step and trace every instruction.")
    run.add_argument("--no-sort", action="store_true", help="Dump variables in creation order.")
    run.add_argument("-v", "--verbose", action="store_true", help="Debug logging.")
    run.set_defaults(func=cmd_run)

    check = sub.add_parser("check", help="Load a program and report structural errors.")
    check.add_argument("file", type=str, help="Path to the Barebones source file.")
    check.set_defaults(func=cmd_check)

    highlight = sub.add_parser("highlight", help="Print highlight sections.")
    highlight.add_argument("file", type=str, help="Path to the Barebones source file.")
    highlight.set_defaults(func=cmd_highlight)

    for p in (run, check, highlight):
        p.add_argument("--separator", type=str, default=";", help="Statement separator.")
    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    install_console_handler()
    try:
        return args.func(args)
    except OSError as e:
        print(f"Error reading file '{args.file}': {e}", file=sys.stderr)
        return 1
    except (BarebonesError, ValueError) as e:
        print(f"Execution failed: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
