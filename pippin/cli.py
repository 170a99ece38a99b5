"""
pippin — Pippin accumulator machine tools

Usage:
    pippin check <source.pasm> [--last-error]
    pippin opcodes

Commands:
    check     validate an assembly source file and list every syntax error
    opcodes   print the instruction set: opcode byte per legal addressing mode

Exit codes (check):
    0   source is well formed
    1   syntax errors were found
    2   the source file could not be read

Examples:
    pippin check prog.pasm
    pippin -v --log-file pippin.log check prog.pasm
"""

import argparse
import logging
import sys
from typing import List, Optional

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from . import __version__
from .asm.validator import IO_ERROR_STATUS, SyntaxValidator
from .cpu.instruction import MODE_PREFIX, NO_ARGUMENT_MNEMONICS, OperationGroup, encode
from .emu import LEGAL_MODES
from .log_setup import reset_logging, setup_logging

EXIT_OK = 0
EXIT_SYNTAX = 1
EXIT_IO = 2


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="pippin",
        description="Pippin accumulator machine tools",
    )
    parser.add_argument("--verbose", "-v", action="count", default=0,
                        help="More console logging (-v info, -vv debug)")
    parser.add_argument("--quiet", "-q", action="store_true",
                        help="Only print errors")
    parser.add_argument("--log-file", default=None,
                        help="Also write a DEBUG log to this file")
    parser.add_argument("--version", action="version",
                        version=f"pippin {__version__}")

    sub = parser.add_subparsers(dest="command", required=True)

    check = sub.add_parser("check", help="Validate an assembly source file")
    check.add_argument("source", help="Assembly source file")
    check.add_argument("--last-error", action="store_true",
                       help="Report the last error's line as the status instead of the first")

    sub.add_parser("opcodes", help="Print the instruction set table")
    return parser


def _console_level(args) -> int:
    if args.quiet:
        return logging.ERROR
    if args.verbose >= 2:
        return logging.DEBUG
    if args.verbose == 1:
        return logging.INFO
    return logging.WARNING


def cmd_check(args, console: Console) -> int:
    result = SyntaxValidator(report_last_error=args.last_error).validate_file(args.source)

    if result.status == IO_ERROR_STATUS:
        console.print(f"[bold red]{escape(result.error_text())}[/]", highlight=False)
        return EXIT_IO

    if result.ok:
        if not args.quiet:
            console.print(f"[green]{escape(args.source)}: OK[/]", highlight=False)
        return EXIT_OK

    for diag in result.diagnostics:
        console.print(f"[red]{escape(str(diag))}[/]", highlight=False)
    console.print(f"[bold]{len(result.diagnostics)} error(s), status {result.status}[/]",
                  highlight=False)
    return EXIT_SYNTAX


def cmd_opcodes(args, console: Console) -> int:
    table = Table(title="Pippin instruction set")
    table.add_column("Mnemonic")
    table.add_column("Group", justify="right")
    table.add_column("Legal forms (opcode byte)")

    for group in OperationGroup:
        forms = []
        for mode in sorted(LEGAL_MODES[group]):
            instr = encode(group, mode)
            operand = "" if group.name in NO_ARGUMENT_MNEMONICS else f" {MODE_PREFIX[mode]}n"
            forms.append(f"{group.name}{operand} = {instr.opcode:08b}")
        table.add_row(group.name, str(group.value), "\n".join(forms))

    console.print(table)
    return EXIT_OK


COMMANDS = {
    "check": cmd_check,
    "opcodes": cmd_opcodes,
}


def main(argv: Optional[List[str]] = None, console: Optional[Console] = None) -> int:
    args = build_parser().parse_args(argv)
    reset_logging()
    setup_logging(console_level=_console_level(args), log_file=args.log_file)
    console = console or Console()
    return COMMANDS[args.command](args, console)


if __name__ == "__main__":
    sys.exit(main())
