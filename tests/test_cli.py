"""
Command-line front end tests: exit codes and printed output.
"""

import io

import pytest
from rich.console import Console

from pippin import __version__
from pippin.cli import EXIT_IO, EXIT_OK, EXIT_SYNTAX, main
from pippin.log_setup import reset_logging


@pytest.fixture(autouse=True)
def _clean_logging():
    yield
    reset_logging()


def _run(argv):
    """Run the CLI with a captured console; return (exit code, output text)."""
    out = io.StringIO()
    console = Console(file=out, width=200, color_system=None)
    code = main(argv, console=console)
    return code, out.getvalue()


def _write(tmp_path, text, name="prog.pasm"):
    path = tmp_path / name
    path.write_text(text)
    return str(path)


# ─── check ─────────────────────

class TestCheck:
    def test_clean_source(self, tmp_path):
        src = _write(tmp_path, "LOD #1\nHALT\nDATA\n10 2A\n")
        code, out = _run(["check", src])
        assert code == EXIT_OK
        assert "OK" in out

    def test_quiet_clean_source_prints_nothing(self, tmp_path):
        src = _write(tmp_path, "HALT\n")
        code, out = _run(["-q", "check", src])
        assert code == EXIT_OK
        assert out == ""

    def test_syntax_errors(self, tmp_path):
        src = _write(tmp_path, " HALT\nFOO\n")
        code, out = _run(["check", src])
        assert code == EXIT_SYNTAX
        assert "Error on line 1: Line starts with illegal white space" in out
        assert "Error on line 2: illegal mnemonic" in out
        assert "2 error(s), status 1" in out

    def test_last_error_flag(self, tmp_path):
        src = _write(tmp_path, " HALT\nFOO\n")
        code, out = _run(["check", "--last-error", src])
        assert code == EXIT_SYNTAX
        assert "status 2" in out

    def test_missing_file(self, tmp_path):
        code, out = _run(["check", str(tmp_path / "missing.pasm")])
        assert code == EXIT_IO
        assert "Unable to read the source file" in out

    def test_log_file(self, tmp_path):
        src = _write(tmp_path, "FOO\n")
        log_path = tmp_path / "logs" / "pippin.log"
        code, _ = _run(["--log-file", str(log_path), "check", src])
        assert code == EXIT_SYNTAX
        reset_logging()
        assert "Validation found 1 problem(s)" in log_path.read_text(encoding="utf-8")


# ─── opcodes ─────────────────────

class TestOpcodes:
    def test_table_lists_every_mnemonic(self):
        code, out = _run(["opcodes"])
        assert code == EXIT_OK
        for mnem in ("NOP", "HALT", "LOD", "STO", "JUMP", "JMPZ", "CMPL", "CMPZ"):
            assert mnem in out

    def test_table_shows_legal_forms_only(self):
        _, out = _run(["opcodes"])
        assert "LOD #n = 00011011" in out
        assert "JUMP &n = 01010110" in out
        assert "STO #n" not in out
        assert "HALT = 00010001" in out


# ─── argument parsing ─────────────────────

class TestArguments:
    def test_version(self, capsys):
        with pytest.raises(SystemExit) as exc:
            main(["--version"])
        assert exc.value.code == 0
        assert __version__ in capsys.readouterr().out

    def test_command_required(self):
        with pytest.raises(SystemExit) as exc:
            main([])
        assert exc.value.code == 2
