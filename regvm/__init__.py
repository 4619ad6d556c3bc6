"""
regvm — Tiny Register Virtual Machine
=====================================
Runs small assembly-like programs against a fixed set of integer
registers (R1, R2, R3 by default) and produces a human-readable trace.

Instruction set:
    LOAD  <reg> <int>     reg = int
    ADD   <reg> <reg>     reg1 = reg1 + reg2
    PRINT <reg>           "Value in <reg>: <value>"

Architecture:
    ┌──────────┐    ┌──────────┐    ┌──────────┐    ┌───────────┐
    │ Program  │───>│  Runner  │───>│ Executor │───>│ OutputLog │
    │ (text)   │    │ (lines)  │    │ (1 line) │    │ (trace)   │
    └──────────┘    └──────────┘    └────┬─────┘    └───────────┘
                                         │
                                    ┌────┴─────┐
                                    │ Register │
                                    │   File   │
                                    └──────────┘

    - parser.py:    splits a line into opcode + operand tokens
    - registers.py: fixed named register set, rejects unknown names
    - executor.py:  LOAD/ADD/PRINT handlers, errors become report lines
    - runner.py:    reset + line-by-line run, skip/abort policy
"""

__version__ = "0.2.0"

from .config import VMConfig, ErrorPolicy, EXAMPLE_PROGRAM
from .errors import (VMError, ArityError, ParseError, UnknownRegisterError,
                     RegisterOverflowError, ConfigError)
from .registers import RegisterFile
from .parser import Instruction, parse_line, parse_program
from .executor import Executor, OutputLog, StepResult, StepStatus
from .runner import Runner, RunResult, VMState


def run_source(source: str, config: VMConfig = None) -> RunResult:
    """Run a program on a fresh VM and return the result.

    Args:
        source: Program text, one instruction per line.
        config: Register names, word size and error policy (defaults if None).

    Returns:
        RunResult with the trace lines, final registers and any errors.
    """
    return Runner(config).run(source)
