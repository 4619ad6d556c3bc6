"""
Error taxonomy for the regvm register machine.

Every failure a program line can cause is a ``VMError`` subclass.  The
executor catches them at its boundary and turns them into report lines,
so none of these escape a run.  An unrecognized opcode is not an error
at all; it is reported inline as ``Unknown instruction: <token>``.
"""

from __future__ import annotations

__all__ = ['VMError', 'ArityError', 'ParseError', 'UnknownRegisterError',
           'RegisterOverflowError', 'ConfigError']


class VMError(Exception):
    """Base class for errors raised while executing a program line."""
    def __init__(self, message: str, line_num: int = 0, line_text: str = ""):
        self.reason = message
        self.line_num = line_num
        self.line_text = line_text
        super().__init__(f"Line {line_num}: {message}" if line_num else message)

    def at(self, line_num: int, line_text: str) -> "VMError":
        """Attach source position (the executor knows it, handlers don't)."""
        self.line_num = line_num
        self.line_text = line_text
        self.args = (f"Line {line_num}: {self.reason}" if line_num else self.reason,)
        return self


class ArityError(VMError):
    """Instruction has fewer operands than it needs."""
    def __init__(self, opcode: str, expected: int, got: int, **kw):
        self.opcode = opcode
        self.expected = expected
        self.got = got
        plural = "operand" if expected == 1 else "operands"
        super().__init__(f"{opcode} expects {expected} {plural}, got {got}", **kw)


class ParseError(VMError):
    """Operand that should be a base-10 integer is not (or does not fit)."""
    def __init__(self, token: str, detail: str = "not a valid integer", **kw):
        self.token = token
        shown = token if len(token) <= 40 else f"{token[:20]}...({len(token)} chars)"
        super().__init__(f"{shown!r} is {detail}", **kw)


class UnknownRegisterError(VMError):
    def __init__(self, name: str, known=(), **kw):
        self.name = name
        self.known = tuple(known)
        msg = f"Unknown register {name!r}"
        if self.known:
            msg += f" (expected one of: {', '.join(self.known)})"
        super().__init__(msg, **kw)


class RegisterOverflowError(VMError):
    """Unbounded register grew past what can still be printed."""
    def __init__(self, name: str, bits: int, **kw):
        self.name = name
        self.bits = bits
        super().__init__(f"Result for {name} exceeds {bits} bits", **kw)


class ConfigError(Exception):
    """Invalid VM configuration (register set, word width, policy)."""
