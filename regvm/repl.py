"""
Interactive regvm session.

Lines you type are collected into a program buffer.  Commands start with
a colon:

    :run      reset the VM and execute the buffer
    :reset    zero registers and clear the output
    :clear    empty the program buffer
    :list     show the program buffer
    :regs     show register values
    :example  replace the buffer with the example program
    :help     this text
    :quit     leave (EOF works too)
"""

from __future__ import annotations
import logging
import sys
from typing import List, Optional, TextIO

from .config import EXAMPLE_PROGRAM, VMConfig
from .runner import Runner

log = logging.getLogger(__name__)

PROMPT = "regvm> "
HELP_TEXT = __doc__.strip()


class Session:
    def __init__(self, config: Optional[VMConfig] = None,
                 stdin: Optional[TextIO] = None, stdout: Optional[TextIO] = None,
                 prompt: str = PROMPT):
        self.vm = Runner(config)
        self.stdin = stdin or sys.stdin
        self.stdout = stdout or sys.stdout
        self.prompt = prompt
        self.buffer: List[str] = []
        self._commands = {
            ":run": self.cmd_run,
            ":reset": self.cmd_reset,
            ":clear": self.cmd_clear,
            ":list": self.cmd_list,
            ":regs": self.cmd_regs,
            ":example": self.cmd_example,
            ":help": self.cmd_help,
        }

    def _write(self, text: str = ""):
        self.stdout.write(text + "\n")

    def loop(self) -> int:
        """Read until :quit or EOF.  Returns the number of runs performed."""
        runs = 0
        self._write(self.vm.status)
        self._write("Type :help for commands.")
        while True:
            self.stdout.write(self.prompt)
            self.stdout.flush()
            line = self.stdin.readline()
            if not line:
                self._write()
                break
            cmd = line.strip()
            if cmd in (":quit", ":q", ":exit"):
                break
            if cmd.startswith(":"):
                handler = self._commands.get(cmd.split()[0])
                if handler is None:
                    self._write(f"Unknown command: {cmd} (try :help)")
                    continue
                if handler():
                    runs += 1
                continue
            self.buffer.append(line.rstrip("\r\n"))
        log.debug("session ended after %d runs", runs)
        return runs

    # ── commands ─────────────────────────────

    def cmd_run(self) -> bool:
        result = self.vm.run("\n".join(self.buffer))
        self._write(result.text)
        return True

    def cmd_reset(self):
        self.vm.reset()
        self._write(self.vm.output.text())
        self._write(self.vm.status)

    def cmd_clear(self):
        self.buffer = []
        self._write("Program buffer cleared.")

    def cmd_list(self):
        if not self.buffer:
            self._write("(empty)")
            return
        for num, text in enumerate(self.buffer, start=1):
            self._write(f"{num:3d}  {text}")

    def cmd_regs(self):
        self._write(self.vm.registers.display())

    def cmd_example(self):
        self.buffer = EXAMPLE_PROGRAM.rstrip("\n").split("\n")
        self._write(f"Loaded example program ({len(self.buffer)} lines).")

    def cmd_help(self):
        self._write(HELP_TEXT)
