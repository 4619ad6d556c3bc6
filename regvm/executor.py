"""
regvm — Instruction Executor

Executes one source line against a RegisterFile and appends trace lines
to an OutputLog.

Trace format (one block per executed line, blank line after each block):

    Executing: LOAD R1 5
    Loaded value 5 into R1

    Executing: PRINT R1
    Value in R1: 5

Per-line outcome is returned as a StepResult instead of raised:
  OK              instruction ran
  BLANK           empty or comment-only line, nothing logged
  UNKNOWN_OPCODE  first token is not LOAD/ADD/PRINT, reported inline
  ERROR           ArityError / ParseError / UnknownRegisterError /
                  RegisterOverflowError,
                  reported inline as "Error on line N: <reason>"

Registers are only written after every operand of the instruction has
been validated, so a failing line never leaves a partial update.
"""

from __future__ import annotations
import enum
import logging
from dataclasses import dataclass
from typing import Callable, Dict, Iterable, Iterator, List, Optional, Tuple

from .config import VMConfig, UNBOUNDED_MAX_BITS
from .errors import VMError, RegisterOverflowError
from .parser import Instruction, OPCODES, parse_int, parse_line
from .registers import RegisterFile

__all__ = ['OutputLog', 'StepStatus', 'StepResult', 'Executor']

log = logging.getLogger(__name__)


class OutputLog:
    """Append-only list of text lines.  Knows nothing about rendering."""

    def __init__(self, lines: Iterable[str] = ()):
        self._lines: List[str] = list(lines)

    def append(self, line: str):
        self._lines.append(line)

    def clear(self):
        self._lines = []

    @property
    def lines(self) -> Tuple[str, ...]:
        return tuple(self._lines)

    def text(self) -> str:
        return "\n".join(self._lines)

    def __len__(self) -> int:
        return len(self._lines)

    def __iter__(self) -> Iterator[str]:
        return iter(self._lines)

    def __repr__(self):
        return f"OutputLog({len(self._lines)} lines)"


class StepStatus(enum.Enum):
    OK = 'OK'
    BLANK = 'BLANK'
    UNKNOWN_OPCODE = 'UNKNOWN_OPCODE'
    ERROR = 'ERROR'


@dataclass
class StepResult:
    status: StepStatus
    line: int = 0
    instruction: Optional[Instruction] = None
    error: Optional[VMError] = None

    @property
    def failed(self) -> bool:
        return self.status is StepStatus.ERROR


class Executor:
    """Dispatches parsed lines to LOAD / ADD / PRINT handlers.

    Usage:
        regs = RegisterFile()
        out = OutputLog()
        ex = Executor(regs, out)
        ex.execute("LOAD R1 5")
        ex.execute("PRINT R1")
        print(out.text())
    """

    def __init__(self, registers: RegisterFile, output: OutputLog,
                 config: Optional[VMConfig] = None):
        self.config = config or VMConfig()
        self.registers = registers
        self.output = output
        self._dispatch: Dict[str, Callable[[Instruction], None]] = {
            "LOAD": self._op_load,
            "ADD": self._op_add,
            "PRINT": self._op_print,
        }

    def execute(self, line: str, line_num: int = 0) -> StepResult:
        """Execute one source line.  Never raises for malformed input."""
        instr = parse_line(line, line_num, self.config.allow_comments)
        if instr is None:
            return StepResult(StepStatus.BLANK, line_num)
        return self.execute_instruction(instr)

    def execute_instruction(self, instr: Instruction) -> StepResult:
        self.output.append(f"Executing: {instr.text}")

        handler = self._dispatch.get(instr.opcode)
        if handler is None:
            self.output.append(f"Unknown instruction: {instr.opcode}")
            self.output.append("")
            log.debug("line %d: unknown opcode %r", instr.line, instr.opcode)
            return StepResult(StepStatus.UNKNOWN_OPCODE, instr.line, instr)

        try:
            handler(instr)
        except VMError as e:
            e.at(instr.line, instr.text)
            where = f" on line {instr.line}" if instr.line else ""
            self.output.append(f"Error{where}: {e.reason}")
            self.output.append("")
            log.warning("%s: %s", instr.text, e)
            return StepResult(StepStatus.ERROR, instr.line, instr, e)

        if instr.extra_operands:
            log.debug("line %d: ignoring extra operands %s",
                      instr.line, " ".join(instr.extra_operands))
        self.output.append("")
        return StepResult(StepStatus.OK, instr.line, instr)

    # ══════════════════════════════════════════════
    # Instruction handlers
    # ══════════════════════════════════════════════

    def _op_load(self, instr: Instruction):
        """LOAD reg value: overwrite reg with a decimal literal."""
        instr.require(OPCODES["LOAD"])
        reg = self.registers.check(instr.operand(0))
        token = instr.operand(1)
        value = parse_int(token, self.config.min_value, self.config.max_value)
        self.registers.set(reg, value)
        self.output.append(f"Loaded value {token} into {reg}")

    def _op_add(self, instr: Instruction):
        """ADD dst src: dst = dst + src, wrapped to the word size."""
        instr.require(OPCODES["ADD"])
        dst = self.registers.check(instr.operand(0))
        src = self.registers.check(instr.operand(1))
        total = self.config.wrap(self.registers.get(dst) + self.registers.get(src))
        if not self.config.in_range(total):
            raise RegisterOverflowError(dst, UNBOUNDED_MAX_BITS)
        self.registers.set(dst, total)
        self.output.append(f"Added value from {src} to {dst}")

    def _op_print(self, instr: Instruction):
        instr.require(OPCODES["PRINT"])
        reg = self.registers.check(instr.operand(0))
        self.output.append(f"Value in {reg}: {self.registers.get(reg)}")
