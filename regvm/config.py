"""
regvm — VM Configuration
========================

Defaults for the register machine plus the ``VMConfig`` dataclass that the
runner and CLI share.  The register name space is fixed when a VM is built;
nothing here changes it afterwards.
"""

from __future__ import annotations
import enum
import re
from dataclasses import dataclass
from typing import Any, Iterable, Mapping, Optional, Tuple

from .errors import ConfigError


# =============================================================================
#  REGISTERS
# =============================================================================
DEFAULT_REGISTERS: Tuple[str, ...] = ("R1", "R2", "R3")

# Registers hold a signed two's complement word of this many bits.
# None = unbounded Python int.
WORD_BITS = 32

# Unbounded registers still stop short of int<->str conversion limits
# (4300 digits by default) so every value can be printed.
UNBOUNDED_MAX_BITS = 14000

_REGISTER_NAME = re.compile(r"\S+")


# =============================================================================
#  STATUS MESSAGES
# =============================================================================
RESET_MESSAGE = "VM reset. Enter new instructions."
READY_MESSAGE = "VM reset. Ready for new instructions."
COMPLETED_MESSAGE = "Execution completed."
ABORTED_MESSAGE = "Execution aborted on line {line}."
IDLE_MESSAGE = "VM idle. Ready for instructions."


# =============================================================================
#  EXAMPLE PROGRAM
# =============================================================================
EXAMPLE_PROGRAM = """\
LOAD R1 5   // Load 5 into R1
LOAD R2 10  // Load 10 into R2
ADD R1 R2   // Add R2 to R1
PRINT R1    // Print the value in R1
PRINT R2    // Print the value in R2
"""


class ErrorPolicy(enum.Enum):
    """What the runner does after a line fails."""
    SKIP = "skip"     # report, continue with next line
    ABORT = "abort"   # report, stop the run


@dataclass(frozen=True)
class VMConfig:
    registers: Tuple[str, ...] = DEFAULT_REGISTERS
    word_bits: Optional[int] = WORD_BITS
    on_error: ErrorPolicy = ErrorPolicy.SKIP
    allow_comments: bool = True

    def __post_init__(self):
        regs = tuple(self.registers)
        if not regs:
            raise ConfigError("At least one register name is required")
        for name in regs:
            if not isinstance(name, str) or not _REGISTER_NAME.fullmatch(name):
                raise ConfigError(f"Invalid register name: {name!r}")
        if len(set(regs)) != len(regs):
            raise ConfigError(f"Duplicate register names: {', '.join(regs)}")
        object.__setattr__(self, "registers", regs)

        if self.word_bits is not None:
            if isinstance(self.word_bits, bool) or not isinstance(self.word_bits, int) \
                    or self.word_bits < 2:
                raise ConfigError(f"word_bits must be an int >= 2 or None, got {self.word_bits!r}")

        if not isinstance(self.on_error, ErrorPolicy):
            object.__setattr__(self, "on_error", parse_policy(self.on_error))

    # --- word range ---

    @property
    def min_value(self) -> Optional[int]:
        if self.word_bits is None:
            return None
        return -(1 << (self.word_bits - 1))

    @property
    def max_value(self) -> Optional[int]:
        if self.word_bits is None:
            return None
        return (1 << (self.word_bits - 1)) - 1

    def wrap(self, value: int) -> int:
        """Fold value into the signed word range (two's complement)."""
        if self.word_bits is None:
            return value
        mask = (1 << self.word_bits) - 1
        value &= mask
        if value > self.max_value:
            value -= 1 << self.word_bits
        return value

    def in_range(self, value: int) -> bool:
        if self.word_bits is None:
            return abs(value).bit_length() <= UNBOUNDED_MAX_BITS
        return self.min_value <= value <= self.max_value

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "VMConfig":
        """Build a config from plain values (CLI flags, JSON, etc).

        Accepted keys: registers (list or comma-separated string),
        word_bits (int, 0 or None for unbounded), on_error ('skip'/'abort'),
        allow_comments (bool).  Unknown keys raise ConfigError.
        """
        known = {"registers", "word_bits", "on_error", "allow_comments"}
        unknown = set(data) - known
        if unknown:
            raise ConfigError(f"Unknown config keys: {', '.join(sorted(unknown))}")

        kwargs = {}
        if data.get("registers") is not None:
            kwargs["registers"] = parse_register_list(data["registers"])
        if "word_bits" in data:
            bits = data["word_bits"]
            if bits in (None, 0, "0", ""):
                kwargs["word_bits"] = None
            else:
                try:
                    kwargs["word_bits"] = int(bits)
                except (TypeError, ValueError):
                    raise ConfigError(f"word_bits must be an integer, got {bits!r}") from None
        if data.get("on_error") is not None:
            kwargs["on_error"] = parse_policy(data["on_error"])
        if data.get("allow_comments") is not None:
            kwargs["allow_comments"] = bool(data["allow_comments"])
        return cls(**kwargs)


def parse_policy(value) -> ErrorPolicy:
    if isinstance(value, ErrorPolicy):
        return value
    try:
        return ErrorPolicy(str(value).strip().lower())
    except ValueError:
        choices = ", ".join(p.value for p in ErrorPolicy)
        raise ConfigError(f"Unknown error policy {value!r} (expected one of: {choices})") from None


def parse_register_list(value) -> Tuple[str, ...]:
    """'R1, R2,R3' or ['R1', 'R2'] -> ('R1', 'R2', 'R3')"""
    if isinstance(value, str):
        parts: Iterable[str] = value.split(",")
    else:
        parts = value
    names = tuple(str(p).strip() for p in parts if str(p).strip())
    if not names:
        raise ConfigError("Register list is empty")
    return names
