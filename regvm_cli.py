#!/usr/bin/env python3
"""
regvm — Tiny Register VM CLI

Usage:
    python regvm_cli.py <program.vm | -> [-o trace.txt] [--registers R1,R2,R3]
                        [--word-bits 32] [--on-error skip|abort] [--regs]
                        [--dump] [--interactive] [--verbose]

Examples:
    python regvm_cli.py add.vm                    # trace to stdout
    python regvm_cli.py add.vm --regs             # trace + final registers
    python regvm_cli.py add.vm --on-error abort   # stop at first bad line
    echo "LOAD R1 5" | python regvm_cli.py -
    python regvm_cli.py --example > demo.vm
    python regvm_cli.py --interactive

Exit codes:
    0  run completed without errors
    1  run completed with errors, or was aborted
    2  bad arguments, bad configuration, or unreadable input
"""

import argparse
import logging
import os
import sys

# Allow running from project root without installing
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from regvm import __version__
from regvm.config import VMConfig, ErrorPolicy, EXAMPLE_PROGRAM
from regvm.errors import ConfigError
from regvm.log_setup import setup_logging
from regvm.parser import parse_program
from regvm.repl import Session
from regvm.runner import Runner

log = logging.getLogger("regvm.cli")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="regvm",
        description="Run LOAD/ADD/PRINT programs on a tiny register VM",
        epilog="Opcodes: LOAD <reg> <int>, ADD <reg> <reg>, PRINT <reg>",
    )
    parser.add_argument("program", nargs="?",
                        help="Program file, or '-' for stdin")
    parser.add_argument("-o", "--output", help="Write the trace to a file (default: stdout)")
    parser.add_argument("--registers", default=None,
                        help="Comma-separated register names (default: R1,R2,R3)")
    parser.add_argument("--word-bits", default=None,
                        help="Register width in bits, 0 for unbounded (default: 32)")
    parser.add_argument("--on-error", choices=[p.value for p in ErrorPolicy],
                        default=ErrorPolicy.SKIP.value,
                        help="After a failing line: skip to the next one, or abort the run")
    parser.add_argument("--no-comments", action="store_true",
                        help="Treat '//' and ';' as ordinary text")
    parser.add_argument("--regs", action="store_true",
                        help="Print final register values after the trace")
    parser.add_argument("--dump", action="store_true",
                        help="Print parsed instructions and exit (debug)")
    parser.add_argument("--example", action="store_true",
                        help="Print the example program and exit")
    parser.add_argument("--interactive", "-i", action="store_true",
                        help="Start an interactive session")
    parser.add_argument("--verbose", "-v", action="store_true",
                        help="Log every step to stderr")
    parser.add_argument("--log-file", help="Also write a debug log to this file")
    parser.add_argument("--version", action="version",
                        version=f"regvm {__version__}")
    return parser


def config_from_args(args) -> VMConfig:
    data = {
        "on_error": args.on_error,
        "allow_comments": not args.no_comments,
    }
    if args.registers is not None:
        data["registers"] = args.registers
    if args.word_bits is not None:
        data["word_bits"] = args.word_bits
    return VMConfig.from_mapping(data)


def read_program(path: str) -> str:
    if path == "-":
        return sys.stdin.read()
    with open(path, "r", encoding="utf-8") as f:
        return f.read()


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    setup_logging(console_level=logging.DEBUG if args.verbose else logging.WARNING,
                  log_file=args.log_file)

    if args.example:
        sys.stdout.write(EXAMPLE_PROGRAM)
        return 0

    try:
        config = config_from_args(args)
    except ConfigError as e:
        print(f"Config error: {e}", file=sys.stderr)
        return 2

    if args.interactive:
        Session(config).loop()
        return 0

    if not args.program:
        parser.print_usage(sys.stderr)
        print("Error: a program file (or '-') is required", file=sys.stderr)
        return 2

    try:
        source = read_program(args.program)
    except FileNotFoundError:
        print(f"Error: File not found: {args.program}", file=sys.stderr)
        return 2
    except (IOError, UnicodeDecodeError) as e:
        print(f"Error reading {args.program}: {e}", file=sys.stderr)
        return 2

    if args.dump:
        for instr in parse_program(source, config.allow_comments):
            print(f"{instr.line:4d}  {instr}")
        return 0

    log.debug("program: %s (%d bytes), registers: %s", args.program, len(source),
              ", ".join(config.registers))
    vm = Runner(config)
    result = vm.run(source)

    text = result.text
    if args.regs:
        text += "\n\n" + vm.registers.display()

    if args.output:
        with open(args.output, "w", encoding="utf-8") as f:
            f.write(text + "\n")
    else:
        print(text)

    if result.errors:
        log.warning("%d line(s) failed", len(result.errors))
    return 0 if result.ok else 1


if __name__ == "__main__":
    sys.exit(main())
