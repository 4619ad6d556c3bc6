"""
regvm — Program Runner

Owns one RegisterFile + OutputLog pair and runs whole programs:

  1. reset registers to 0, clear the log, write the reset banner
  2. split program text on newlines
  3. execute each line in source order, exactly once
  4. write the completion (or abort) status line

Runs are synchronous.  The VM is IDLE between runs and RUNNING during
one; there is no pause or cancel.  What happens after a failing line is
decided by VMConfig.on_error (SKIP continues, ABORT stops).
"""

from __future__ import annotations
import enum
import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from .config import (VMConfig, ErrorPolicy, RESET_MESSAGE, READY_MESSAGE,
                     COMPLETED_MESSAGE, ABORTED_MESSAGE, IDLE_MESSAGE)
from .errors import VMError
from .executor import Executor, OutputLog, StepResult, StepStatus
from .parser import split_lines
from .registers import RegisterFile

__all__ = ['VMState', 'RunResult', 'Runner']

log = logging.getLogger(__name__)


class VMState(enum.Enum):
    IDLE = 'IDLE'
    RUNNING = 'RUNNING'


@dataclass
class RunResult:
    lines: Tuple[str, ...]
    registers: Dict[str, int]
    steps: List[StepResult] = field(default_factory=list)
    errors: List[VMError] = field(default_factory=list)
    aborted: bool = False
    status: str = COMPLETED_MESSAGE

    @property
    def ok(self) -> bool:
        return not self.errors and not self.aborted

    @property
    def text(self) -> str:
        return "\n".join(self.lines)

    @property
    def unknown_opcodes(self) -> List[StepResult]:
        return [s for s in self.steps if s.status is StepStatus.UNKNOWN_OPCODE]


class Runner:
    """Register VM: reset + run programs line by line.

    Usage:
        vm = Runner()
        result = vm.run("LOAD R1 5\\nPRINT R1")
        print(result.text)
        vm.registers.get("R1")   # 5
    """

    def __init__(self, config: Optional[VMConfig] = None):
        self.config = config or VMConfig()
        self.registers = RegisterFile(self.config.registers)
        self.output = OutputLog()
        self.executor = Executor(self.registers, self.output, self.config)
        self.status = IDLE_MESSAGE
        self._state = VMState.IDLE

    @property
    def state(self) -> VMState:
        return self._state

    def reset(self):
        """Zero all registers and replace the log with the reset banner."""
        self.registers.reset()
        self.output.clear()
        self.output.append(RESET_MESSAGE)
        self.status = READY_MESSAGE
        log.debug("VM reset (%s)", ", ".join(self.registers.names))

    def run(self, program: str) -> RunResult:
        """Reset, then execute every line of `program` in order."""
        if self._state is VMState.RUNNING:
            raise RuntimeError("VM is already running a program")

        self._state = VMState.RUNNING
        try:
            self.reset()
            steps: List[StepResult] = []
            errors: List[VMError] = []
            aborted = False

            for num, text in enumerate(split_lines(program), start=1):
                step = self.executor.execute(text.strip(), num)
                if step.status is StepStatus.BLANK:
                    continue
                steps.append(step)
                if step.failed:
                    errors.append(step.error)
                    if self.config.on_error is ErrorPolicy.ABORT:
                        aborted = True
                        self.status = ABORTED_MESSAGE.format(line=num)
                        break
            else:
                self.status = COMPLETED_MESSAGE

            self.output.append(self.status)
            log.info("run finished: %d instructions, %d errors%s",
                     len(steps), len(errors), " (aborted)" if aborted else "")
            return RunResult(
                lines=self.output.lines,
                registers=self.registers.snapshot(),
                steps=steps,
                errors=errors,
                aborted=aborted,
                status=self.status,
            )
        finally:
            self._state = VMState.IDLE
