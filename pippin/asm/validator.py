"""
Pippin Assembly Source Validator.

Checks a Pippin source program line by line before it is handed to the
code generator. Every problem is reported in one pass; validation never
stops at the first error.

Source layout:

    LOD  #1A        code section, one statement per line
    ADD  @10
    STO  20
    HALT
    DATA            separator (upper case)
    10 2A           data section: <address> <value>, both hex
    2A -5

Rules:
  - At most one blank line, and only trailing. The first non-blank line
    after it (DATA included) is an error, reported once, against the
    blank line's number.
  - No leading space or tab.
  - A line reading DATA (any case) switches to the data section. Only one
    is allowed and it must be upper case.
  - Code lines: an upper-case mnemonic; NOP/NOT/HALT stand alone, every
    other mnemonic takes exactly one operand. The operand is a hex word
    with at most one addressing prefix:  # immediate, @ indirect,
    & absolute (jumps).
  - Data lines: exactly two hex words.

Summary status: 0 when clean, otherwise a line number with an error
(first error by default, last error with report_last_error=True), or -1
when the source could not be read.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, List, Union
import logging
import re

from ..cpu.alu import fits_word
from ..cpu.instruction import NO_ARGUMENT_MNEMONICS, OPCODES

__all__ = ['Diagnostic', 'ValidationResult', 'SyntaxValidator', 'SourceSyntaxError',
           'validate', 'validate_file', 'parse_hex_word', 'split_lines',
           'IO_ERROR_STATUS']

log = logging.getLogger(__name__)

IO_ERROR_STATUS = -1
DATA_SEPARATOR = "DATA"
ADDRESSING_PREFIXES = ('#', '@', '&')

_HEX_RE = re.compile(r'[+-]?[0-9A-Fa-f]+')

# Line breaks are CR, LF or CRLF only; form feed and vertical tab stay
# inside the line. Tokens split on ASCII white space, never on NBSP.
_LINE_BREAK_RE = re.compile(r'\r\n|\r|\n')
_TOKEN_SEP_RE = re.compile(r'[ \t\n\x0b\f\r]+')
# Trimmed from both ends of a line: control characters and space
_TRIM_CHARS = ''.join(chr(c) for c in range(0x21))


class SourceSyntaxError(Exception):
    """Raised by ValidationResult.raise_for_errors() on an invalid source."""
    def __init__(self, message: str, line_num: int = 0):
        self.line_num = line_num
        super().__init__(message)


def parse_hex_word(text: str) -> int:
    """Parse a base-16 word: optional sign, hex digits, signed 32-bit range.

    Raises ValueError otherwise ('0x' prefixes and underscores included).
    """
    if not _HEX_RE.fullmatch(text):
        raise ValueError(f"not a hex number: {text!r}")
    value = int(text, 16)
    if not fits_word(value):
        raise ValueError(f"hex number out of range: {text!r}")
    return value


def split_lines(text: str) -> List[str]:
    """Break source text into lines on CR, LF or CRLF.

    A final line break does not start an extra empty line.
    """
    lines = _LINE_BREAK_RE.split(text)
    if lines and lines[-1] == '':
        lines.pop()
    return lines


def _is_hex_word(text: str) -> bool:
    try:
        parse_hex_word(text)
    except ValueError:
        return False
    return True


# ──────────────────────────────────────────────
# Result types
# ──────────────────────────────────────────────

@dataclass(frozen=True)
class Diagnostic:
    """One grammar violation."""
    line: int
    message: str

    def __str__(self) -> str:
        if self.line == IO_ERROR_STATUS:
            return f"Error: {self.message}"
        return f"Error on line {self.line}: {self.message}"


@dataclass
class ValidationResult:
    diagnostics: List[Diagnostic] = field(default_factory=list)
    status: int = 0

    @property
    def ok(self) -> bool:
        return self.status == 0

    def error_text(self) -> str:
        return "\n".join(str(d) for d in self.diagnostics)

    def raise_for_errors(self):
        if not self.ok:
            raise SourceSyntaxError(self.error_text(), self.status)


# ──────────────────────────────────────────────
# Validator
# ──────────────────────────────────────────────

class SyntaxValidator:
    """Line-oriented grammar checker for Pippin assembly source.

    A validator object holds no state between calls; each validate*()
    call starts from code mode with an empty diagnostic list.
    """

    def __init__(self, report_last_error: bool = False):
        self.report_last_error = report_last_error

    def validate(self, text: str) -> ValidationResult:
        return self.validate_lines(split_lines(text))

    def validate_file(self, path: Union[str, Path]) -> ValidationResult:
        try:
            text = Path(path).read_text(encoding="utf-8-sig")
        except (OSError, UnicodeDecodeError) as e:
            log.error("Cannot read source %s: %s", path, e)
            return ValidationResult(
                [Diagnostic(IO_ERROR_STATUS, f"Unable to read the source file {path}")],
                IO_ERROR_STATUS)
        return self.validate(text)

    def validate_lines(self, lines: Iterable[str]) -> ValidationResult:
        result = ValidationResult()
        reading_code = True
        data_found = False
        blank_line_num = 0
        blank_line_reported = False

        def error(line_num: int, message: str):
            result.diagnostics.append(Diagnostic(line_num, message))
            if self.report_last_error or result.status == 0:
                result.status = line_num

        for line_num, line in enumerate(lines, start=1):
            stripped = line.strip(_TRIM_CHARS)

            if not stripped:
                if not blank_line_num:
                    blank_line_num = line_num
                continue

            if blank_line_num and not blank_line_reported:
                error(blank_line_num, "Illegal blank line in the source file")
                blank_line_reported = True
                continue

            if line[0] in ' \t':
                error(line_num, "Line starts with illegal white space")

            if stripped.upper() == DATA_SEPARATOR:
                if not reading_code:
                    error(line_num, "File contains more than one DATA separator")
                elif stripped != DATA_SEPARATOR:
                    error(line_num, "Line does not have DATA in upper case")
                reading_code = False

            parts = _TOKEN_SEP_RE.split(stripped)
            if reading_code:
                self._check_code_line(parts, line_num, error)
            elif data_found:
                self._check_data_line(parts, line_num, error)

            if not reading_code:
                data_found = True

        if result.diagnostics:
            log.debug("Validation found %d problem(s), status %d",
                      len(result.diagnostics), result.status)
        return result

    @staticmethod
    def _check_code_line(parts: List[str], line_num: int, error):
        mnem = parts[0]
        upper = mnem.upper()
        if upper not in OPCODES:
            error(line_num, "illegal mnemonic")
            return
        if mnem != upper:
            error(line_num, "mnemonic must be upper case")

        if upper in NO_ARGUMENT_MNEMONICS:
            if len(parts) != 1:
                error(line_num, "this mnemonic cannot take arguments")
        elif len(parts) > 2:
            error(line_num, "this mnemonic has too many arguments")
        elif len(parts) < 2:
            error(line_num, "this mnemonic is missing an argument")
        else:
            operand = parts[1]
            if operand.startswith(ADDRESSING_PREFIXES):
                operand = operand[1:]
            if not _is_hex_word(operand):
                error(line_num, "argument is not a hex number")

    @staticmethod
    def _check_data_line(parts: List[str], line_num: int, error):
        if len(parts) != 2:
            error(line_num, "data must have length 2")
        elif not (_is_hex_word(parts[0]) and _is_hex_word(parts[1])):
            error(line_num, "data has non-numeric memory address")


def validate(text: str, report_last_error: bool = False) -> ValidationResult:
    return SyntaxValidator(report_last_error).validate(text)


def validate_file(path: Union[str, Path], report_last_error: bool = False) -> ValidationResult:
    return SyntaxValidator(report_last_error).validate_file(path)
