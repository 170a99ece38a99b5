"""
Assembly source validator tests.
"""

import pytest

from pippin.asm.validator import (
    IO_ERROR_STATUS, Diagnostic, SourceSyntaxError, SyntaxValidator,
    parse_hex_word, split_lines, validate, validate_file,
)

GOOD_SOURCE = """\
LOD  #1A
ADD  @10
STO  20
JUMP &-3
JMPZ 2
HALT
DATA
10 2A
2A -5
"""


def messages(result):
    return [(d.line, d.message) for d in result.diagnostics]


class TestCleanSource:

    def test_good_program(self):
        result = validate(GOOD_SOURCE)
        assert result.ok
        assert result.status == 0
        assert result.diagnostics == []

    def test_empty_source(self):
        assert validate("").ok

    def test_trailing_blank_lines_allowed(self):
        assert validate("HALT\n\n\n").ok

    def test_code_only(self):
        assert validate("NOP\nNOT\nHALT\n").ok


class TestLayout:

    def test_leading_space(self):
        result = validate(" HALT\n")
        assert messages(result) == [(1, "Line starts with illegal white space")]
        assert result.status == 1

    def test_leading_tab(self):
        result = validate("NOP\n\tHALT\n")
        assert messages(result) == [(2, "Line starts with illegal white space")]

    def test_blank_line_inside_code(self):
        """Reported once against the blank line; the next line is skipped."""
        result = validate("LOD #1\nHALT\n\nXYZ\nNOP\n")
        assert messages(result) == [(3, "Illegal blank line in the source file")]
        assert result.status == 3

    def test_form_feed_stays_on_its_line(self):
        """Form feed is trimmed white space, not a line break."""
        assert validate("NOP\x0c\nHALT\n").ok

    def test_vertical_tab_separates_tokens_not_lines(self):
        result = validate("LOD #1\x0bx\nFOO\n")
        assert messages(result) == [
            (1, "this mnemonic has too many arguments"),
            (2, "illegal mnemonic"),
        ]

    def test_crlf_line_endings(self):
        assert validate("LOD #1\r\nHALT\r\nDATA\r\n10 2A\r\n").ok
        result = validate("NOP\r\n FOO\r\nHALT\r\n")
        assert [d.line for d in result.diagnostics] == [2, 2]

    def test_lone_carriage_return_breaks_lines(self):
        result = validate("NOP\rFOO\r")
        assert messages(result) == [(2, "illegal mnemonic")]

    def test_blank_line_before_data(self):
        """The skipped DATA line never switches modes, so data reads as code."""
        result = validate("HALT\n\nDATA\n10 2A\n")
        assert messages(result) == [
            (2, "Illegal blank line in the source file"),
            (4, "illegal mnemonic"),
        ]

    def test_first_vs_last_error_status(self):
        source = " LOD #1\nHALT\n\nXYZ\nFOO\n"
        first = validate(source)
        last = validate(source, report_last_error=True)
        assert [d.line for d in first.diagnostics] == [1, 3, 5]
        assert first.diagnostics == last.diagnostics
        assert first.status == 1
        assert last.status == 5


class TestDataSection:

    def test_data_line_wrong_length(self):
        result = validate("LOD #1\nHALT\nDATA\n1A\n")
        assert messages(result) == [(4, "data must have length 2")]
        assert result.status == 4

    def test_data_line_too_long(self):
        result = validate("HALT\nDATA\n1 2 3\n")
        assert messages(result) == [(3, "data must have length 2")]

    def test_data_non_hex(self):
        result = validate("HALT\nDATA\nZZ 1\n10 G\n")
        assert messages(result) == [
            (3, "data has non-numeric memory address"),
            (4, "data has non-numeric memory address"),
        ]

    def test_duplicate_separator(self):
        result = validate("HALT\nDATA\n10 2A\nDATA\n")
        assert (4, "File contains more than one DATA separator") in messages(result)
        assert result.status == 4

    def test_lower_case_separator(self):
        result = validate("HALT\ndata\n10 2A\n")
        assert messages(result) == [(2, "Line does not have DATA in upper case")]

    def test_data_lines_not_checked_as_code(self):
        assert validate("HALT\nDATA\n1FF 7FFFFFFF\n").ok


class TestCodeLines:

    def test_illegal_mnemonic(self):
        result = validate("JSR 10\n")
        assert messages(result) == [(1, "illegal mnemonic")]

    def test_lower_case_mnemonic(self):
        result = validate("lod #1\n")
        assert messages(result) == [(1, "mnemonic must be upper case")]

    def test_lower_case_reports_argument_errors_too(self):
        result = validate("lod\n")
        assert messages(result) == [
            (1, "mnemonic must be upper case"),
            (1, "this mnemonic is missing an argument"),
        ]

    @pytest.mark.parametrize("line, message", [
        ("HALT 1", "this mnemonic cannot take arguments"),
        ("NOP #0", "this mnemonic cannot take arguments"),
        ("LOD 1 2", "this mnemonic has too many arguments"),
        ("STO", "this mnemonic is missing an argument"),
    ])
    def test_argument_count(self, line, message):
        assert messages(validate(line)) == [(1, message)]

    @pytest.mark.parametrize("operand", ["0x1A", "#", "##1", "80000000", "#-80000001", "1_0", "G"])
    def test_bad_operand(self, operand):
        assert messages(validate(f"LOD {operand}\n")) == [(1, "argument is not a hex number")]

    @pytest.mark.parametrize("operand", ["1a", "#7FFFFFFF", "@-80000000", "&+10", "0"])
    def test_good_operand(self, operand):
        assert validate(f"JUMP {operand}\n").ok

    def test_nbsp_is_not_a_token_separator(self):
        assert messages(validate("LOD\xa01\n")) == [(1, "illegal mnemonic")]

    def test_every_error_is_collected(self):
        result = validate("FOO\nHALT 1\nLOD\nLOD zz\n")
        assert [d.line for d in result.diagnostics] == [1, 2, 3, 4]


class TestHexWord:

    @pytest.mark.parametrize("text, value", [
        ("1a", 0x1A), ("-1", -1), ("+10", 16), ("7FFFFFFF", 0x7FFFFFFF), ("-80000000", -(1 << 31)),
    ])
    def test_parse(self, text, value):
        assert parse_hex_word(text) == value

    @pytest.mark.parametrize("text", ["", "0x10", "1_0", "80000000", " 1", "--1"])
    def test_reject(self, text):
        with pytest.raises(ValueError):
            parse_hex_word(text)


class TestFilesAndResults:

    def test_validate_file(self, tmp_path):
        src = tmp_path / "prog.pasm"
        src.write_text(GOOD_SOURCE)
        assert validate_file(src).ok

    def test_validate_file_reports_errors(self, tmp_path):
        src = tmp_path / "bad.pasm"
        src.write_text("HALT\nDATA\n1A\n")
        result = SyntaxValidator().validate_file(str(src))
        assert result.status == 3

    def test_byte_order_mark_ignored(self, tmp_path):
        src = tmp_path / "bom.pasm"
        src.write_bytes(b"\xef\xbb\xbfLOD #1\nHALT\n")
        assert validate_file(src).ok

    def test_split_lines(self):
        assert split_lines("A\r\nB\rC\nD\x0cE\x0bF\x85G\n") == ["A", "B", "C", "D\x0cE\x0bF\x85G"]
        assert split_lines("") == []
        assert split_lines("A\n\n") == ["A", ""]

    def test_missing_file(self, tmp_path):
        path = tmp_path / "nope.pasm"
        result = validate_file(path)
        assert result.status == IO_ERROR_STATUS
        assert not result.ok
        assert result.error_text() == f"Error: Unable to read the source file {path}"

    def test_diagnostic_text(self):
        assert str(Diagnostic(7, "illegal mnemonic")) == "Error on line 7: illegal mnemonic"

    def test_error_text_joins_lines(self):
        result = validate("FOO\nBAR\n")
        assert result.error_text() == (
            "Error on line 1: illegal mnemonic\nError on line 2: illegal mnemonic")

    def test_raise_for_errors(self):
        validate(GOOD_SOURCE).raise_for_errors()
        with pytest.raises(SourceSyntaxError) as exc:
            validate("HALT\n FOO\n").raise_for_errors()
        assert exc.value.line_num == 2
        assert "illegal white space" in str(exc.value)
