"""
Front-end tests: VMConfig parsing, the interactive session, and the CLI.
"""
import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import io
import logging

import pytest
import regvm_cli
from regvm.config import VMConfig, ErrorPolicy, EXAMPLE_PROGRAM, COMPLETED_MESSAGE
from regvm.errors import ConfigError
from regvm.log_setup import setup_logging, ROOT_LOGGER
from regvm.repl import Session


# ─── Config ─────────────────────────────

class TestConfig:
    def test_defaults(self):
        cfg = VMConfig()
        assert cfg.registers == ("R1", "R2", "R3")
        assert cfg.word_bits == 32
        assert cfg.on_error is ErrorPolicy.SKIP
        assert cfg.min_value == -2**31
        assert cfg.max_value == 2**31 - 1

    def test_wrap(self):
        cfg = VMConfig(word_bits=8)
        assert cfg.wrap(127) == 127
        assert cfg.wrap(128) == -128
        assert cfg.wrap(-129) == 127
        assert VMConfig(word_bits=None).wrap(2**40) == 2**40

    def test_in_range(self):
        cfg = VMConfig(word_bits=8)
        assert cfg.in_range(-128) and cfg.in_range(127)
        assert not cfg.in_range(128)
        unbounded = VMConfig(word_bits=None)
        assert unbounded.in_range(-(1 << 13999))
        assert not unbounded.in_range(1 << 14000)

    def test_from_mapping(self):
        cfg = VMConfig.from_mapping({"registers": "A, B ,C", "word_bits": "16",
                                     "on_error": "ABORT"})
        assert cfg.registers == ("A", "B", "C")
        assert cfg.word_bits == 16
        assert cfg.on_error is ErrorPolicy.ABORT

    def test_unbounded_from_mapping(self):
        assert VMConfig.from_mapping({"word_bits": 0}).word_bits is None

    @pytest.mark.parametrize("data", [
        {"registers": ""},
        {"registers": "R1,R1"},
        {"registers": ["R 1"]},
        {"word_bits": "wide"},
        {"word_bits": 1},
        {"on_error": "retry"},
        {"colour": "blue"},
    ])
    def test_invalid(self, data):
        with pytest.raises(ConfigError):
            VMConfig.from_mapping(data)


# ─── Interactive session ────────────────

def _session(script: str) -> tuple:
    out = io.StringIO()
    session = Session(stdin=io.StringIO(script), stdout=out)
    runs = session.loop()
    return session, runs, out.getvalue()


class TestSession:
    def test_run_buffer(self):
        session, runs, text = _session("LOAD R1 5\nPRINT R1\n:run\n:quit\n")
        assert runs == 1
        assert "Value in R1: 5" in text
        assert COMPLETED_MESSAGE in text

    def test_eof_quits(self):
        _, runs, _ = _session("LOAD R1 5\n")
        assert runs == 0

    def test_example_and_regs(self):
        session, _, text = _session(":example\n:run\n:regs\n")
        assert "Loaded example program (5 lines)." in text
        assert "R1 = 15" in text
        assert session.vm.registers.get("R2") == 10

    def test_reset_and_clear(self):
        session, _, text = _session("LOAD R1 5\n:run\n:reset\n:clear\n:list\n")
        assert session.vm.registers.get("R1") == 0
        assert session.buffer == []
        assert "VM reset. Ready for new instructions." in text
        assert "(empty)" in text

    def test_unknown_command(self):
        _, _, text = _session(":jump\n")
        assert "Unknown command: :jump" in text

    def test_list(self):
        _, _, text = _session("LOAD R1 5\nPRINT R1\n:list\n")
        assert "  1  LOAD R1 5" in text
        assert "  2  PRINT R1" in text


# ─── CLI ────────────────────────────────

@pytest.fixture
def program_file(tmp_path):
    path = tmp_path / "add.vm"
    path.write_text("LOAD R1 5\nLOAD R2 10\nADD R1 R2\nPRINT R1\n", encoding="utf-8")
    return path


class TestCLI:
    def test_run_file(self, program_file, capsys):
        assert regvm_cli.main([str(program_file)]) == 0
        out = capsys.readouterr().out
        assert "Value in R1: 15" in out
        assert out.rstrip().endswith(COMPLETED_MESSAGE)

    def test_regs_flag(self, program_file, capsys):
        assert regvm_cli.main([str(program_file), "--regs"]) == 0
        out = capsys.readouterr().out
        assert "R1 = 15" in out
        assert "R2 = 10" in out

    def test_output_file(self, program_file, tmp_path, capsys):
        dest = tmp_path / "trace.txt"
        assert regvm_cli.main([str(program_file), "-o", str(dest)]) == 0
        assert "Value in R1: 15" in dest.read_text(encoding="utf-8")
        assert capsys.readouterr().out == ""

    def test_errors_exit_one(self, tmp_path, capsys):
        path = tmp_path / "bad.vm"
        path.write_text("LOAD R1 x\nPRINT R1\n", encoding="utf-8")
        assert regvm_cli.main([str(path)]) == 1
        out = capsys.readouterr().out
        assert "Error on line 1:" in out
        assert "Value in R1: 0" in out

    def test_abort(self, tmp_path, capsys):
        path = tmp_path / "bad.vm"
        path.write_text("PRINT R7\nPRINT R1\n", encoding="utf-8")
        assert regvm_cli.main([str(path), "--on-error", "abort"]) == 1
        out = capsys.readouterr().out
        assert "Execution aborted on line 1." in out
        assert "Executing: PRINT R1" not in out

    def test_custom_registers(self, tmp_path, capsys):
        path = tmp_path / "ab.vm"
        path.write_text("LOAD A 1\nPRINT A\n", encoding="utf-8")
        assert regvm_cli.main([str(path), "--registers", "A,B"]) == 0
        assert "Value in A: 1" in capsys.readouterr().out

    def test_bad_config(self, program_file, capsys):
        assert regvm_cli.main([str(program_file), "--registers", "R1,R1"]) == 2
        assert "Config error" in capsys.readouterr().err

    def test_missing_file(self, tmp_path, capsys):
        assert regvm_cli.main([str(tmp_path / "nope.vm")]) == 2
        assert "File not found" in capsys.readouterr().err

    def test_no_program(self, capsys):
        assert regvm_cli.main([]) == 2

    def test_dump(self, program_file, capsys):
        assert regvm_cli.main([str(program_file), "--dump"]) == 0
        lines = capsys.readouterr().out.splitlines()
        assert lines[0] == "   1  LOAD R1 5"
        assert lines[2] == "   3  ADD R1 R2"

    def test_example(self, capsys):
        assert regvm_cli.main(["--example"]) == 0
        assert capsys.readouterr().out == EXAMPLE_PROGRAM

    def test_stdin(self, monkeypatch, capsys):
        monkeypatch.setattr("sys.stdin", io.StringIO("LOAD R2 -4\nPRINT R2\n"))
        assert regvm_cli.main(["-"]) == 0
        assert "Value in R2: -4" in capsys.readouterr().out


class TestLogging:
    def test_file_log(self, tmp_path):
        log_file = tmp_path / "logs" / "regvm.log"
        logger = setup_logging(log_file=log_file)
        logging.getLogger("regvm.runner").info("hello from the runner")
        for h in logger.handlers:
            h.flush()
        text = log_file.read_text(encoding="utf-8")
        assert "hello from the runner" in text
        assert "regvm.runner" in text
        setup_logging()

    def test_setup_replaces_handlers(self):
        setup_logging()
        setup_logging()
        assert len(logging.getLogger(ROOT_LOGGER).handlers) == 1
