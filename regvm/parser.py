"""
Line parser for regvm programs.

One instruction per line:

    LOAD  <register> <integer>
    ADD   <register> <register>
    PRINT <register>

Opcodes are case-sensitive.  Tokens are split on any run of whitespace.
Text after ``//`` or ``;`` is a comment when comments are enabled.
Blank (or comment-only) lines parse to None.

The parser only splits lines; it does not check operand counts or
register names.  That happens in the executor so that an unknown opcode
with odd operands is still just "Unknown instruction".
"""

from __future__ import annotations
import re
from dataclasses import dataclass
from typing import List, Optional, Tuple

from .errors import ArityError, ParseError

__all__ = ['Instruction', 'OPCODES', 'parse_line', 'parse_program', 'parse_int',
           'strip_comment', 'split_lines']


# opcode -> operand count
OPCODES = {
    "LOAD": 2,
    "ADD": 2,
    "PRINT": 1,
}

# Optional sign, ASCII 0-9 only.
_INT_RE = re.compile(r"[+-]?[0-9]+")
_COMMENT_RE = re.compile(r"//|;")

# Longest literal LOAD accepts, in significant digits.
MAX_LITERAL_DIGITS = 4000


@dataclass
class Instruction:
    opcode: str
    operands: Tuple[str, ...] = ()
    line: int = 0
    text: str = ""

    @property
    def known(self) -> bool:
        return self.opcode in OPCODES

    def operand(self, index: int) -> str:
        return self.operands[index]

    def require(self, count: int):
        """Raise ArityError unless at least `count` operands are present."""
        if len(self.operands) < count:
            raise ArityError(self.opcode, count, len(self.operands))

    @property
    def extra_operands(self) -> Tuple[str, ...]:
        if not self.known:
            return ()
        return self.operands[OPCODES[self.opcode]:]

    def __str__(self):
        return " ".join((self.opcode,) + self.operands)


def strip_comment(text: str) -> str:
    m = _COMMENT_RE.search(text)
    if m:
        return text[:m.start()]
    return text


def split_lines(source: str) -> List[str]:
    """Split program text into lines.  \\r\\n and lone \\r count as newlines."""
    return source.replace("\r\n", "\n").replace("\r", "\n").split("\n")


def parse_line(text: str, line_num: int = 0, allow_comments: bool = True) -> Optional[Instruction]:
    """Parse one source line; None for blank lines."""
    stripped = text.strip()
    code = strip_comment(stripped) if allow_comments else stripped
    tokens = code.split()
    if not tokens:
        return None
    return Instruction(opcode=tokens[0], operands=tuple(tokens[1:]),
                       line=line_num, text=stripped)


def parse_program(source: str, allow_comments: bool = True) -> List[Instruction]:
    """Parse every non-blank line.  Line numbers are 1-based."""
    program = []
    for num, text in enumerate(split_lines(source), start=1):
        instr = parse_line(text, num, allow_comments)
        if instr is not None:
            program.append(instr)
    return program


def parse_int(token: str, min_value: Optional[int] = None,
              max_value: Optional[int] = None) -> int:
    """Parse a base-10 signed integer operand.

    Rejects hex, underscores, embedded whitespace, non-ASCII digits and
    literals longer than MAX_LITERAL_DIGITS, plus values outside
    [min_value, max_value] when bounds are given.
    """
    if not _INT_RE.fullmatch(token):
        raise ParseError(token)
    if len(token.lstrip("+-").lstrip("0")) > MAX_LITERAL_DIGITS:
        raise ParseError(token, "too long")
    try:
        value = int(token)
    except ValueError:
        raise ParseError(token, "too long") from None
    if (min_value is not None and value < min_value) or \
            (max_value is not None and value > max_value):
        raise ParseError(token, f"out of range [{min_value}, {max_value}]")
    return value
